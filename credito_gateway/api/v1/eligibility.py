"""Eligibility endpoints - client lookup and recommendation preview"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from credito_gateway.api.dependencies import get_data_provider, get_request_id, get_settings
from credito_gateway.api.v1.schemas import EligibilityResponse, PreviewRequest
from credito_gateway.config import Settings
from credito_gateway.domain.eligibility import evaluate_eligibility
from credito_gateway.domain.exceptions import MissingFieldError, UpstreamFetchError
from credito_gateway.domain.models import EligibilityResult
from credito_gateway.infrastructure.observability.logging import log_eligibility
from credito_gateway.infrastructure.observability.metrics import record_eligibility
from credito_gateway.infrastructure.providers.base import CreditDataProvider
from credito_gateway.utils.formatting import only_digits

router = APIRouter()


async def evaluate_client(
    documento: str,
    provider: CreditDataProvider,
    app_settings: Settings,
    request_id: str,
) -> EligibilityResult:
    """
    Fetch client data and run the eligibility engine.

    Raises:
        MissingFieldError: document has no digits
        UpstreamFetchError: data source unavailable
    """
    start_time = time.time()
    cliente_id = only_digits(documento)
    if not cliente_id:
        raise MissingFieldError("Informe um CPF ou CNPJ valido.")

    dados = await provider.fetch_all(cliente_id)
    result = evaluate_eligibility(
        cliente_id,
        dados.bureau,
        dados.faturamento,
        dados.bom_pagador,
        thresholds=app_settings.eligibility_thresholds(),
        cliente_nome=dados.cliente_nome,
    )

    duration_ms = (time.time() - start_time) * 1000
    record_eligibility(result)
    log_eligibility(request_id, result, duration_ms)
    return result


@router.get("/clientes/{cliente_id}/eligibility", response_model=EligibilityResponse)
async def get_eligibility(
    cliente_id: str,
    request: Request,
    provider: CreditDataProvider = Depends(get_data_provider),
    app_settings: Settings = Depends(get_settings),
):
    """
    Evaluate a client's eligibility for a loan tier.

    Flow:
    1. Strip non-digits from the identifier
    2. Fetch bureau, revenue, payment history and name concurrently
    3. Run the eligibility rules
    """
    request_id = get_request_id(request)

    try:
        result = await evaluate_client(cliente_id, provider, app_settings, request_id)
    except MissingFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamFetchError as e:
        logging.error(f"Upstream fetch failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return EligibilityResponse.from_domain(result)


@router.post("/eligibility/preview", response_model=EligibilityResponse)
def preview_eligibility(
    request_body: PreviewRequest,
    app_settings: Settings = Depends(get_settings),
):
    """
    Run the eligibility rules on caller-supplied data.

    Same engine and thresholds as the client lookup, so a recommendation
    preview can never disagree with the official result.
    """
    result = evaluate_eligibility(
        only_digits(request_body.cliente_id),
        request_body.bureau.to_domain(),
        request_body.faturamento.to_domain(),
        request_body.bom_pagador.to_domain(),
        thresholds=app_settings.eligibility_thresholds(),
    )
    return EligibilityResponse.from_domain(result)
