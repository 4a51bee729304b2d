"""Upstream HTTP client for bureau, revenue and payment-history data"""

import asyncio
import logging
from typing import Any, Dict

import httpx

from credito_gateway.config import settings
from credito_gateway.domain.exceptions import UpstreamFetchError
from credito_gateway.domain.models import BomPagadorData, BureauData, FaturamentoData, HistoricoMes
from credito_gateway.infrastructure.observability.metrics import (
    upstream_fetch_failures_counter,
    upstream_latency_histogram,
)
from credito_gateway.infrastructure.providers.base import CreditDataProvider

logger = logging.getLogger(__name__)


class HttpCreditDataProvider(CreditDataProvider):
    """Client for the external credit data API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.upstream_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.upstream_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.upstream_backoff_base
        self.transport = transport

    async def _get_json(self, documento: str, recurso: str) -> Dict[str, Any]:
        """
        GET {base_url}/clientes/{documento}/{recurso} with retries.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base... between attempts
        - Retries on 5xx errors and network failures, not on 4xx

        Raises:
            UpstreamFetchError: after the last failed attempt
        """
        url = f"{self.base_url}/clientes/{documento}/{recurso}"
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with upstream_latency_histogram.labels(recurso=recurso).time():
                        response = await client.get(url)
                        response.raise_for_status()
                    return response.json()

                except httpx.HTTPStatusError as e:
                    attempt += 1
                    status = e.response.status_code
                    if status < 500 or attempt >= self.max_retries:
                        upstream_fetch_failures_counter.labels(recurso=recurso).inc()
                        raise UpstreamFetchError(
                            f"Servico de {recurso} indisponivel (HTTP {status}). Tente novamente em instantes."
                        ) from e

                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt >= self.max_retries:
                        upstream_fetch_failures_counter.labels(recurso=recurso).inc()
                        raise UpstreamFetchError(
                            f"Servico de {recurso} nao respondeu em {self.timeout}s. Tente novamente em instantes."
                        ) from e

                except httpx.RequestError as e:
                    attempt += 1
                    if attempt >= self.max_retries:
                        upstream_fetch_failures_counter.labels(recurso=recurso).inc()
                        raise UpstreamFetchError(
                            f"Servico de {recurso} inacessivel. Tente novamente em instantes."
                        ) from e

                except ValueError as e:
                    upstream_fetch_failures_counter.labels(recurso=recurso).inc()
                    raise UpstreamFetchError(f"Resposta invalida do servico de {recurso}.") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning(
                    "Upstream fetch failed, retrying",
                    extra={"recurso": recurso, "attempt": attempt, "backoff_seconds": backoff},
                )
                await asyncio.sleep(backoff)

    async def get_bureau(self, documento: str) -> BureauData:
        data = await self._get_json(documento, "bureau")
        try:
            return BureauData(score=int(data["score"]), last_update=str(data["lastUpdate"]))
        except (KeyError, ValueError, TypeError) as e:
            raise UpstreamFetchError(f"Dados de bureau invalidos: {e}") from e

    async def get_faturamento(self, documento: str) -> FaturamentoData:
        data = await self._get_json(documento, "faturamento")
        try:
            return FaturamentoData(
                total_atual=int(data["totalAtual"]),
                media_6m=int(data["media6m"]),
                percentual_meta=int(data["percentualMeta"]),
                historico=tuple(
                    HistoricoMes(mes=str(item["mes"]), valor=int(item["valor"]))
                    for item in data.get("historico", [])
                ),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise UpstreamFetchError(f"Dados de faturamento invalidos: {e}") from e

    async def get_bom_pagador(self, documento: str) -> BomPagadorData:
        data = await self._get_json(documento, "bom-pagador")
        try:
            return BomPagadorData(
                divida_total=int(data["dividaTotal"]),
                valor_pago=int(data["valorPago"]),
                percentual_pago=float(data["percentualPago"]),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise UpstreamFetchError(f"Dados de bom pagador invalidos: {e}") from e

    async def get_cliente_nome(self, documento: str) -> str:
        data = await self._get_json(documento, "cadastro")
        try:
            return str(data["clienteNome"])
        except (KeyError, TypeError) as e:
            raise UpstreamFetchError(f"Dados cadastrais invalidos: {e}") from e
