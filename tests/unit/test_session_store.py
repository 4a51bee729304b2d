"""Unit tests for the in-memory analysis session store"""

import pytest
from credito_gateway.domain.decision import CHECKLIST_ITEMS, registrar_parecer
from credito_gateway.domain.eligibility import evaluate_eligibility
from credito_gateway.domain.exceptions import SessionConflictError, SessionNotFoundError
from credito_gateway.domain.models import BomPagadorData, BureauData, FaturamentoData
from credito_gateway.domain.validation import BatchRequest, validar_lote
from credito_gateway.infrastructure.session.store import SessionStore


@pytest.fixture
def eligibility():
    return evaluate_eligibility(
        "123",
        BureauData(score=650, last_update="2024-03-01"),
        FaturamentoData(total_atual=150_000, media_6m=150_000, percentual_meta=100),
        BomPagadorData(divida_total=100, valor_pago=95, percentual_pago=0.95),
    )


@pytest.fixture
def validacao(eligibility):
    return validar_lote(
        BatchRequest(cliente_id="123", notas=[{"chave": "1", "valor": 150_000}], eligibility=eligibility),
        tolerancia=15,
    )


def test_create_and_get(session_store):
    session = session_store.create()

    assert session_store.get(session.id) == session
    assert session.eligibility is None
    assert session.historico == ()


def test_unknown_session(session_store):
    with pytest.raises(SessionNotFoundError):
        session_store.get("nao-existe")


def test_operations_return_new_values(session_store, eligibility):
    created = session_store.create()
    updated = session_store.store_eligibility(created.id, eligibility)

    assert created.eligibility is None
    assert updated.eligibility == eligibility
    assert session_store.get(created.id) is updated
    assert [e.evento for e in updated.historico] == ["elegibilidade_consultada"]


def test_new_eligibility_clears_later_stages(session_store, eligibility, validacao):
    session = session_store.create()
    session_store.store_eligibility(session.id, eligibility)
    session_store.store_validation(session.id, validacao)

    refreshed = session_store.store_eligibility(session.id, eligibility)

    assert refreshed.validacao is None
    assert refreshed.parecer is None


def test_second_batch_replaces_first(session_store, eligibility, validacao):
    session = session_store.create()
    session_store.store_eligibility(session.id, eligibility)
    session_store.store_validation(session.id, validacao)

    segundo = validar_lote(BatchRequest(cliente_id="123", notas=[{"chave": "9", "valor": 1}]), tolerancia=15)
    updated = session_store.store_validation(session.id, segundo)

    assert updated.validacao is segundo
    assert updated.eligibility == eligibility


def test_parecer_clears_working_results(session_store, eligibility, validacao):
    session = session_store.create()
    session_store.store_eligibility(session.id, eligibility)
    session_store.store_validation(session.id, validacao)
    parecer = registrar_parecer(
        validacao,
        eligibility,
        "aprovado",
        "ok",
        {item_id: True for item_id, _ in CHECKLIST_ITEMS},
        session_store.clock(),
    )

    updated = session_store.store_parecer(session.id, parecer)

    assert updated.parecer.validacao == validacao
    assert updated.eligibility is None
    assert updated.validacao is None
    assert updated.historico[-1].detalhe == "decisao aprovado: ok"


def test_reset_keeps_audit_trail(session_store, eligibility):
    session = session_store.create()
    session_store.store_eligibility(session.id, eligibility)

    reset = session_store.reset(session.id)

    assert reset.eligibility is None
    assert [e.evento for e in reset.historico] == ["elegibilidade_consultada", "sessao_reiniciada"]


def test_batch_rejected_when_eligibility_replaced_meanwhile(session_store, eligibility, validacao):
    session = session_store.create()
    session_store.store_eligibility(session.id, eligibility)
    novo_cliente = evaluate_eligibility(
        "222",
        BureauData(score=450, last_update="2024-03-01"),
        FaturamentoData(total_atual=20_000, media_6m=20_000, percentual_meta=100),
        BomPagadorData(divida_total=100, valor_pago=60, percentual_pago=0.60),
    )
    session_store.store_eligibility(session.id, novo_cliente)

    with pytest.raises(SessionConflictError):
        session_store.store_validation(session.id, validacao, eligibility=eligibility)

    current = session_store.get(session.id)
    assert current.eligibility is novo_cliente
    assert current.validacao is None


def test_batch_accepted_for_current_eligibility(session_store, eligibility, validacao):
    session = session_store.create()
    session_store.store_eligibility(session.id, eligibility)

    updated = session_store.store_validation(session.id, validacao, eligibility=eligibility)

    assert updated.validacao is validacao


def test_oldest_session_evicted_beyond_capacity():
    store = SessionStore(max_sessions=2)
    primeira = store.create()
    segunda = store.create()

    terceira = store.create()

    assert len(store) == 2
    with pytest.raises(SessionNotFoundError):
        store.get(primeira.id)
    assert store.get(segunda.id) == segunda
    assert store.get(terceira.id) == terceira
