"""Eligibility engine - bureau score, revenue and payment history to loan tier"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from credito_gateway.domain.models import (
    BomPagadorData,
    BureauData,
    EligibilityResult,
    Faixa,
    FaturamentoData,
)
from credito_gateway.utils.formatting import format_brl, format_number


@dataclass(frozen=True)
class TierThreshold:
    """Minimum score and monthly revenue for one tier"""

    score: int
    faturamento: int


@dataclass(frozen=True)
class EligibilityThresholds:
    """
    Credit policy parameters.

    Defaults are the production policy; Settings.eligibility_thresholds()
    builds an instance from environment overrides.
    """

    percentual_min: float = 50
    upgrade_high: float = 90
    upgrade_medium: float = 70
    faixa_p: TierThreshold = field(default_factory=lambda: TierThreshold(score=400, faturamento=10_000))
    faixa_m: TierThreshold = field(default_factory=lambda: TierThreshold(score=600, faturamento=100_000))
    faixa_g: TierThreshold = field(default_factory=lambda: TierThreshold(score=800, faturamento=1_000_000))

    def tiers(self) -> Tuple[Tuple[Faixa, TierThreshold], ...]:
        """Tiers from strictest to loosest, the order they are checked in"""
        return (("G", self.faixa_g), ("M", self.faixa_m), ("P", self.faixa_p))


DEFAULT_THRESHOLDS = EligibilityThresholds()

UPGRADE_PATH = {"P": "M", "M": "G"}


def qualifies_for(bureau: BureauData, faturamento: FaturamentoData, threshold: TierThreshold) -> bool:
    """Threshold values themselves qualify (>=)"""
    return bureau.score >= threshold.score and faturamento.total_atual >= threshold.faturamento


def match_tier(
    bureau: BureauData,
    faturamento: FaturamentoData,
    thresholds: EligibilityThresholds,
) -> Tuple[Optional[Faixa], Optional[TierThreshold]]:
    """First tier (G -> M -> P) whose own score and revenue pair is met"""
    for faixa, threshold in thresholds.tiers():
        if qualifies_for(bureau, faturamento, threshold):
            return faixa, threshold
    return None, None


def evaluate_eligibility(
    cliente_id: str,
    bureau: BureauData,
    faturamento: FaturamentoData,
    bom_pagador: BomPagadorData,
    thresholds: EligibilityThresholds = DEFAULT_THRESHOLDS,
    cliente_nome: Optional[str] = None,
) -> EligibilityResult:
    """
    Assign a loan tier (P/M/G) or reject the client.

    Order of checks:
    1. Paid ratio below percentual_min rejects regardless of score/revenue
    2. Tier match G -> M -> P, each requiring its own score and revenue
    3. No tier matched rejects
    4. Paid ratio >= upgrade_high promotes one step (never above G);
       otherwise >= upgrade_medium adds an informational reason

    Pure function: the same inputs always yield the same tier and the same
    reason order.
    """
    motivos: List[str] = []
    percentual_pago = bom_pagador.percentual_pago * 100

    def result(aprovado: bool, faixa: Faixa) -> EligibilityResult:
        return EligibilityResult(
            cliente_id=cliente_id,
            cliente_nome=cliente_nome,
            aprovado=aprovado,
            faixa_sugerida=faixa,
            motivos=tuple(motivos),
            bureau=bureau,
            faturamento=faturamento,
            bom_pagador=bom_pagador,
        )

    if percentual_pago < thresholds.percentual_min:
        motivos.append(
            f"Percentual de dividas pagas inferior a {format_number(thresholds.percentual_min)}% "
            "-> cliente recusado em qualquer operacao."
        )
        return result(False, "RECUSADO")

    faixa, threshold = match_tier(bureau, faturamento, thresholds)
    if faixa is None:
        motivos.append("Cliente nao atingiu os criterios minimos para faixa P.")
        return result(False, "RECUSADO")

    motivos.append(
        f"Score >= {threshold.score} e faturamento mensal >= {format_brl(threshold.faturamento)} -> faixa {faixa}."
    )

    if percentual_pago >= thresholds.upgrade_high and faixa != "G":
        motivos.append(
            f"Percentual de dividas pagas >= {format_number(thresholds.upgrade_high)}% "
            "-> cliente elegivel para emprestimo de nivel superior."
        )
        faixa = UPGRADE_PATH[faixa]
    elif percentual_pago >= thresholds.upgrade_medium:
        motivos.append(
            f"Percentual de dividas pagas >= {format_number(thresholds.upgrade_medium)}% "
            "-> cliente aprovado na politica de credito."
        )

    return result(True, faixa)
