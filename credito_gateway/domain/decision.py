"""Final decision (parecer) rules"""

from datetime import datetime
from typing import Dict, Mapping, Optional

from credito_gateway.domain.exceptions import (
    IncompleteChecklistError,
    MissingFieldError,
    ValidationPendingError,
)
from credito_gateway.domain.models import EligibilityResult, ParecerFinal, ValidationResult

DECISOES = ("aprovado", "ajustes", "reprovado")

CHECKLIST_ITEMS = (
    ("contrato", "Contrato revisado e enviado ao cliente"),
    ("documentos", "Documentos societarios conferidos"),
    ("cadastro", "Cadastro atualizado no core bancario"),
    ("compliance", "Consulta de compliance concluida"),
    ("assinaturas", "Assinaturas digitais coletadas"),
)


def normalize_checklist(checklist: Optional[Mapping[str, bool]]) -> Dict[str, bool]:
    """Known items only; an item not reported is open"""
    checklist = checklist or {}
    return {item_id: bool(checklist.get(item_id, False)) for item_id, _ in CHECKLIST_ITEMS}


def registrar_parecer(
    validacao: Optional[ValidationResult],
    eligibility: Optional[EligibilityResult],
    decisao: str,
    observacoes: Optional[str],
    checklist: Optional[Mapping[str, bool]],
    agora: datetime,
) -> ParecerFinal:
    """
    Record the analyst's decision on a validated batch.

    Adjustments and rejections can be recorded at any time after validation;
    approval additionally needs every release checklist item done.

    Raises:
        ValidationPendingError: no batch validated yet
        MissingFieldError: decisao not one of aprovado/ajustes/reprovado
        IncompleteChecklistError: approval with open checklist items
    """
    if validacao is None:
        raise ValidationPendingError("Processe o lote de notas na etapa 2 para habilitar o parecer final.")

    if decisao not in DECISOES:
        raise MissingFieldError("Informe a decisao: aprovado, ajustes ou reprovado.")

    itens = normalize_checklist(checklist)
    if decisao == "aprovado" and not all(itens.values()):
        raise IncompleteChecklistError("Conclua todos os itens do checklist de liberacao antes de aprovar.")

    return ParecerFinal(
        decisao=decisao,
        observacoes=(observacoes or "").strip(),
        checklist=itens,
        registrado_em=agora,
        validacao=validacao,
        eligibility=eligibility or validacao.eligibility,
    )
