"""Analysis session endpoints - eligibility, batch upload and final decision in one workflow"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from credito_gateway.api.dependencies import (
    get_data_provider,
    get_request_id,
    get_session_store,
    get_settings,
)
from credito_gateway.api.v1.eligibility import evaluate_client
from credito_gateway.api.v1.schemas import (
    ChecklistItemSchema,
    ParecerRequest,
    SessionEligibilityRequest,
    SessionResponse,
)
from credito_gateway.api.v1.validation import run_validation
from credito_gateway.config import Settings
from credito_gateway.domain.decision import CHECKLIST_ITEMS, registrar_parecer
from credito_gateway.domain.exceptions import (
    DomainException,
    EmptyBatchError,
    IncompleteChecklistError,
    IneligibleClientError,
    MalformedInputError,
    MissingFieldError,
    SessionConflictError,
    SessionNotFoundError,
    UnsupportedFormatError,
    UpstreamFetchError,
    ValidationPendingError,
)
from credito_gateway.domain.extraction import extract_notes_from_files, infer_tipo_arquivo
from credito_gateway.domain.validation import BatchRequest
from credito_gateway.infrastructure.observability.logging import log_final_decision
from credito_gateway.infrastructure.observability.metrics import record_final_decision
from credito_gateway.infrastructure.providers.base import CreditDataProvider
from credito_gateway.infrastructure.session.store import SessionStore

router = APIRouter()

STATUS_BY_ERROR = {
    MissingFieldError: 400,
    EmptyBatchError: 400,
    MalformedInputError: 400,
    UnsupportedFormatError: 400,
    SessionNotFoundError: 404,
    IneligibleClientError: 409,
    ValidationPendingError: 409,
    IncompleteChecklistError: 409,
    SessionConflictError: 409,
    UpstreamFetchError: 503,
}


def to_http_error(error: DomainException, request_id: str) -> HTTPException:
    """Translate a domain failure into the client-visible response"""
    status_code = STATUS_BY_ERROR.get(type(error), 400)
    if status_code >= 500:
        logging.error(f"Session operation failed: {error}", extra={"request_id": request_id})
    else:
        logging.warning(f"Session operation rejected: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=status_code, detail=str(error))


@router.get("/checklist", response_model=List[ChecklistItemSchema])
def get_checklist():
    """Release checklist required before approving a loan"""
    return [ChecklistItemSchema(id=item_id, label=label) for item_id, label in CHECKLIST_ITEMS]


@router.post("/sessoes", response_model=SessionResponse, status_code=201)
def create_session(store: SessionStore = Depends(get_session_store)):
    """Start a new analysis session"""
    return SessionResponse.from_domain(store.create())


@router.get("/sessoes/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str,
    request: Request,
    store: SessionStore = Depends(get_session_store),
):
    try:
        session = store.get(session_id)
    except SessionNotFoundError as e:
        raise to_http_error(e, get_request_id(request))
    return SessionResponse.from_domain(session)


@router.delete("/sessoes/{session_id}", response_model=SessionResponse)
def reset_session(
    session_id: str,
    request: Request,
    store: SessionStore = Depends(get_session_store),
):
    """Discard eligibility, batch and decision; the audit trail remains"""
    try:
        session = store.reset(session_id)
    except SessionNotFoundError as e:
        raise to_http_error(e, get_request_id(request))
    return SessionResponse.from_domain(session)


@router.post("/sessoes/{session_id}/eligibility", response_model=SessionResponse)
async def fetch_session_eligibility(
    session_id: str,
    request_body: SessionEligibilityRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
    provider: CreditDataProvider = Depends(get_data_provider),
    app_settings: Settings = Depends(get_settings),
):
    """
    Look up a client and hold the result in the session.

    Any previous batch or decision of the session is discarded.
    """
    request_id = get_request_id(request)
    try:
        store.get(session_id)
        result = await evaluate_client(request_body.documento, provider, app_settings, request_id)
        session = store.store_eligibility(session_id, result)
    except DomainException as e:
        raise to_http_error(e, request_id)
    return SessionResponse.from_domain(session)


@router.post("/sessoes/{session_id}/lotes", response_model=SessionResponse)
async def upload_batch(
    session_id: str,
    request: Request,
    arquivos: List[UploadFile] = File(default=[]),
    nome_lote: Optional[str] = Form(default=None, alias="nomeLote"),
    valor_solicitado: Optional[int] = Form(default=None, alias="valorSolicitado"),
    store: SessionStore = Depends(get_session_store),
    app_settings: Settings = Depends(get_settings),
):
    """
    Upload XML/REM files for the session's approved client and validate them.

    Flow:
    1. Require an approved eligibility result in the session
    2. Read files concurrently, parse in submission order (fail-fast)
    3. Merge notes first-seen-wins and run the batch validation
    4. Replace the session's previous batch result, unless a new client
       lookup replaced the eligibility while the files were read (409)
    """
    request_id = get_request_id(request)
    try:
        session = store.get(session_id)
        eligibility = session.eligibility
        if eligibility is None or not eligibility.aprovado:
            raise IneligibleClientError("Cliente nao elegivel. Volte a pre-analise para revisar os criterios.")
        if not arquivos:
            raise MissingFieldError("Selecione ao menos um arquivo para processar o lote.")
        if valor_solicitado is None:
            valor_solicitado = app_settings.validation_default_valor_solicitado
        if not valor_solicitado:
            raise MissingFieldError("Informe o valor solicitado pelo cliente.")

        nomes = [arquivo.filename or "" for arquivo in arquivos]
        conteudos = await asyncio.gather(*(arquivo.read() for arquivo in arquivos))
        notas = extract_notes_from_files(list(zip(nomes, conteudos)))
        if not notas:
            raise EmptyBatchError("Nenhuma nota valida encontrada nos arquivos enviados.")

        batch = BatchRequest(
            cliente_id=eligibility.cliente_id,
            cliente_nome=eligibility.cliente_nome,
            nome_lote=nome_lote or None,
            tipo_arquivo=infer_tipo_arquivo(nomes),
            valor_solicitado=valor_solicitado,
            arquivos=nomes,
            notas=notas,
            eligibility=eligibility,
        )
        result = run_validation(batch, app_settings, request_id)
        session = store.store_validation(session_id, result, eligibility=eligibility)
    except DomainException as e:
        raise to_http_error(e, request_id)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return SessionResponse.from_domain(session)


@router.post("/sessoes/{session_id}/parecer", response_model=SessionResponse)
def register_final_decision(
    session_id: str,
    request_body: ParecerRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
):
    """
    Record the analyst's decision (aprovado / ajustes / reprovado).

    Approval requires the whole release checklist. The decision keeps
    snapshots of the eligibility and batch results it was based on.
    """
    request_id = get_request_id(request)
    try:
        session = store.get(session_id)
        parecer = registrar_parecer(
            validacao=session.validacao,
            eligibility=session.eligibility,
            decisao=request_body.decisao,
            observacoes=request_body.observacoes,
            checklist=request_body.checklist,
            agora=store.clock(),
        )
        session = store.store_parecer(session_id, parecer)
    except DomainException as e:
        raise to_http_error(e, request_id)

    record_final_decision(parecer.decisao)
    log_final_decision(request_id, session_id, parecer)
    return SessionResponse.from_domain(session)
