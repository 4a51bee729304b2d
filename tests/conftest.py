"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from credito_gateway.api.main import create_app
from credito_gateway.api.dependencies import get_data_provider, get_session_store
from credito_gateway.domain.models import BomPagadorData, BureauData, FaturamentoData, HistoricoMes
from credito_gateway.infrastructure.providers.base import CreditDataProvider
from credito_gateway.infrastructure.providers.seeded import SeededCreditDataProvider
from credito_gateway.infrastructure.session.store import SessionStore


FIXED_NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_faturamento(total_atual: int) -> FaturamentoData:
    return FaturamentoData(
        total_atual=total_atual,
        media_6m=total_atual,
        percentual_meta=100,
        historico=(HistoricoMes(mes="mar", valor=total_atual),),
    )


def make_bom_pagador(percentual_pago: float) -> BomPagadorData:
    return BomPagadorData(
        divida_total=100_000,
        valor_pago=round(100_000 * percentual_pago),
        percentual_pago=percentual_pago,
    )


class StaticCreditDataProvider(CreditDataProvider):
    """Returns the same canned data for every document"""

    def __init__(self, score: int, faturamento: int, percentual_pago: float, nome: str = "Empresa Teste LTDA"):
        self.bureau = BureauData(score=score, last_update="2024-03-01")
        self.faturamento = make_faturamento(faturamento)
        self.bom_pagador = make_bom_pagador(percentual_pago)
        self.nome = nome
        self.documentos: list[str] = []

    async def get_bureau(self, documento: str) -> BureauData:
        self.documentos.append(documento)
        return self.bureau

    async def get_faturamento(self, documento: str) -> FaturamentoData:
        return self.faturamento

    async def get_bom_pagador(self, documento: str) -> BomPagadorData:
        return self.bom_pagador

    async def get_cliente_nome(self, documento: str) -> str:
        return self.nome


@pytest.fixture
def seeded_provider() -> SeededCreditDataProvider:
    """Seeded provider pinned to a fixed date"""
    return SeededCreditDataProvider(clock=fixed_clock)


@pytest.fixture
def session_store() -> SessionStore:
    """Fresh, empty session store per test"""
    return SessionStore(clock=fixed_clock)


@pytest.fixture
def approved_provider() -> StaticCreditDataProvider:
    """Client landing in tier M, upgraded to G by a 95% paid ratio"""
    return StaticCreditDataProvider(score=650, faturamento=150_000, percentual_pago=0.95)


@pytest.fixture
def rejected_provider() -> StaticCreditDataProvider:
    """Client below every tier minimum"""
    return StaticCreditDataProvider(score=300, faturamento=5_000, percentual_pago=0.80)


def build_client(provider: CreditDataProvider, store: SessionStore) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_data_provider] = lambda: provider
    app.dependency_overrides[get_session_store] = lambda: store
    return TestClient(app)


@pytest.fixture
def client(approved_provider: StaticCreditDataProvider, session_store: SessionStore) -> TestClient:
    """Create FastAPI test client backed by an approved client and a fresh session store"""
    return build_client(approved_provider, session_store)


@pytest.fixture
def rejected_client(rejected_provider: StaticCreditDataProvider, session_store: SessionStore) -> TestClient:
    return build_client(rejected_provider, session_store)
