"""Unit tests for final decision rules"""

import pytest
from datetime import datetime, timezone
from credito_gateway.domain.decision import CHECKLIST_ITEMS, normalize_checklist, registrar_parecer
from credito_gateway.domain.exceptions import (
    IncompleteChecklistError,
    MissingFieldError,
    ValidationPendingError,
)
from credito_gateway.domain.validation import BatchRequest, validar_lote


AGORA = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
CHECKLIST_COMPLETO = {item_id: True for item_id, _ in CHECKLIST_ITEMS}


@pytest.fixture
def validacao():
    return validar_lote(BatchRequest(cliente_id="123", notas=[{"chave": "1", "valor": 150_000}]), tolerancia=15)


def test_approval_with_complete_checklist(validacao):
    parecer = registrar_parecer(
        validacao=validacao,
        eligibility=None,
        decisao="aprovado",
        observacoes="  Liberar em duas parcelas  ",
        checklist=CHECKLIST_COMPLETO,
        agora=AGORA,
    )

    assert parecer.decisao == "aprovado"
    assert parecer.observacoes == "Liberar em duas parcelas"
    assert parecer.registrado_em == AGORA
    assert parecer.validacao is validacao


def test_approval_with_open_item_rejected(validacao):
    checklist = dict(CHECKLIST_COMPLETO, assinaturas=False)

    with pytest.raises(IncompleteChecklistError):
        registrar_parecer(validacao, None, "aprovado", None, checklist, AGORA)


@pytest.mark.parametrize("decisao", ["ajustes", "reprovado"])
def test_non_approval_ignores_checklist(validacao, decisao):
    parecer = registrar_parecer(validacao, None, decisao, None, None, AGORA)

    assert parecer.decisao == decisao
    assert parecer.observacoes == ""
    assert not any(parecer.checklist.values())


def test_decision_requires_validated_batch():
    with pytest.raises(ValidationPendingError):
        registrar_parecer(None, None, "reprovado", None, None, AGORA)


def test_unknown_decision_rejected(validacao):
    with pytest.raises(MissingFieldError):
        registrar_parecer(validacao, None, "talvez", None, CHECKLIST_COMPLETO, AGORA)


def test_normalize_checklist_keeps_known_items_only():
    itens = normalize_checklist({"contrato": True, "extra": True})

    assert list(itens) == [item_id for item_id, _ in CHECKLIST_ITEMS]
    assert itens["contrato"] is True
    assert "extra" not in itens
