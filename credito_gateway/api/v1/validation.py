"""POST /v1/validacao - invoice batch validation endpoint"""

import logging
import time
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from credito_gateway.api.dependencies import get_request_id, get_settings
from credito_gateway.api.v1.schemas import ValidationRequest, ValidationResponse
from credito_gateway.config import Settings
from credito_gateway.domain.exceptions import EmptyBatchError, MissingFieldError
from credito_gateway.domain.models import ValidationResult
from credito_gateway.domain.validation import BatchRequest, validar_lote
from credito_gateway.infrastructure.observability.logging import log_validation
from credito_gateway.infrastructure.observability.metrics import record_validation

router = APIRouter()

SAMPLES_DIR = Path(__file__).resolve().parents[2] / "samples"

SAMPLE_FILES = {
    "nota-exemplo.xml": "application/xml",
    "lote-exemplo.rem": "text/plain",
}


def run_validation(batch: BatchRequest, app_settings: Settings, request_id: str) -> ValidationResult:
    """
    Validate a batch with the configured tolerance, recording metrics and logs.

    Raises:
        MissingFieldError, EmptyBatchError
    """
    start_time = time.time()
    result = validar_lote(
        batch,
        tolerancia=app_settings.validation_tolerance_percent,
        default_valor_solicitado=app_settings.validation_default_valor_solicitado,
    )

    duration_ms = (time.time() - start_time) * 1000
    record_validation(result.summary)
    log_validation(request_id, result, duration_ms)
    return result


@router.post("/validacao", response_model=ValidationResponse)
def validate_batch(
    request_body: ValidationRequest,
    request: Request,
    app_settings: Settings = Depends(get_settings),
):
    """
    Validate pre-extracted notes against the requested amount.

    Defaults: tipoArquivo MISTO, valorSolicitado 150000, nomeLote
    "Lote sem nome", arquivos one "<chave>.<tipo>" name per note.
    """
    request_id = get_request_id(request)
    batch = BatchRequest(
        cliente_id=request_body.cliente_id,
        cliente_nome=request_body.cliente_nome,
        nome_lote=request_body.nome_lote,
        tipo_arquivo=request_body.tipo_arquivo,
        valor_solicitado=request_body.valor_solicitado,
        arquivos=request_body.arquivos,
        notas=[nota.model_dump() if nota is not None else None for nota in request_body.notas],
        eligibility=request_body.eligibility.to_domain() if request_body.eligibility else None,
    )

    try:
        result = run_validation(batch, app_settings, request_id)
    except (MissingFieldError, EmptyBatchError) as e:
        logging.warning(f"Batch rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    return ValidationResponse.from_domain(result)


@router.get("/amostras/{nome}")
def get_sample_file(nome: str):
    """Download one of the bundled example upload files"""
    if nome not in SAMPLE_FILES:
        raise HTTPException(status_code=404, detail="Arquivo de exemplo nao encontrado.")

    content = (SAMPLES_DIR / nome).read_bytes()
    return Response(
        content=content,
        media_type=SAMPLE_FILES[nome],
        headers={"Content-Disposition": f'attachment; filename="{nome}"'},
    )
