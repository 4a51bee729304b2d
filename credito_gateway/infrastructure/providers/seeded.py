"""Deterministic fake credit data for development and tests"""

from datetime import datetime
from typing import Callable, List

from credito_gateway.domain.models import BomPagadorData, BureauData, FaturamentoData, HistoricoMes
from credito_gateway.infrastructure.providers.base import CreditDataProvider
from credito_gateway.utils.date_utils import days_before, last_month_labels, utc_now
from credito_gateway.utils.formatting import only_digits, round_half_up

DOCUMENTO_PADRAO = "00000000000000"
MODULUS = 2_147_483_647  # 2^31 - 1
MULTIPLIER = 16_807

RAZOES_SOCIAIS = [
    "Horizonte Logistica LTDA",
    "Aurora Comercio ME",
    "Vale Verde Servicos EIRELI",
    "Nimbus Tecnologia SA",
    "Litoral Industrial Ltda",
    "Delta Alimentos ME",
    "Serra Azul Engenharia LTDA",
    "Vita Farma Distribuidora",
    "Atlas Construcoes EIRELI",
    "Orion Educacional SA",
]

SEGMENTOS = [
    "Logistica",
    "Comercio",
    "Servicos",
    "Tecnologia",
    "Industrial",
    "Alimentos",
    "Engenharia",
    "Saude",
    "Construcao",
    "Educacao",
]


def normalize_documento(documento: str) -> str:
    return only_digits(documento) or DOCUMENTO_PADRAO


def hash_documento(value: str) -> int:
    """32-bit unsigned hash*31 + char string hash"""
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    return h


class SeededRandom:
    """Park-Miller minimal standard generator yielding floats in [0, 1)"""

    def __init__(self, seed: int):
        self.state = seed % MODULUS
        if self.state <= 0:
            self.state += MODULUS - 1

    def __call__(self) -> float:
        self.state = (self.state * MULTIPLIER) % MODULUS
        return (self.state - 1) / (MODULUS - 1)


class SeededCreditDataProvider(CreditDataProvider):
    """
    Plausible, reproducible client data derived from the document number.

    Each facet has its own seed ("{doc}:bureau", "{doc}:pagador", ...), so
    the same document always yields the same score, revenue and payment
    ratio. Only dates move with the injected clock.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def _random(self, documento: str, facet: str = "") -> SeededRandom:
        doc = normalize_documento(documento)
        return SeededRandom(hash_documento(f"{doc}:{facet}" if facet else doc))

    async def get_cliente_nome(self, documento: str) -> str:
        rand = self._random(documento)
        segmento = SEGMENTOS[int(rand() * len(SEGMENTOS))]
        razao_social = RAZOES_SOCIAIS[int(rand() * len(RAZOES_SOCIAIS))]
        return f"{razao_social} - {segmento}"

    async def get_bureau(self, documento: str) -> BureauData:
        rand = self._random(documento, "bureau")
        score = round_half_up(350 + rand() * 650)
        last_update = days_before(self.clock(), rand() * 15)
        return BureauData(score=score, last_update=last_update.isoformat())

    async def get_bom_pagador(self, documento: str) -> BomPagadorData:
        rand = self._random(documento, "pagador")
        divida_total = round_half_up(10_000 + rand() * 190_000)
        percentual_pago = round_half_up((0.25 + rand() * 0.7) * 100) / 100
        return BomPagadorData(
            divida_total=divida_total,
            valor_pago=round_half_up(divida_total * percentual_pago),
            percentual_pago=percentual_pago,
        )

    async def get_faturamento(self, documento: str) -> FaturamentoData:
        rand = self._random(documento, "faturamento")
        base = round_half_up(80_000 + rand() * 1_200_000)

        historico: List[HistoricoMes] = []
        for mes in last_month_labels(self.clock().date(), 6):
            fator_sazonal = 0.9 + rand() * 0.25
            variacao = 0.92 + rand() * 0.18
            historico.append(HistoricoMes(mes=mes, valor=round_half_up(base * fator_sazonal * variacao)))

        total_atual = historico[-1].valor
        media = round_half_up(sum(h.valor for h in historico) / len(historico))
        meta_alvo = base * 1.05
        percentual_meta = max(35, min(130, round_half_up(total_atual / meta_alvo * 100)))

        return FaturamentoData(
            total_atual=total_atual,
            media_6m=media,
            percentual_meta=percentual_meta,
            historico=tuple(historico),
        )
