"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from credito_gateway.config import Settings, settings
from credito_gateway.infrastructure.providers.base import CreditDataProvider
from credito_gateway.infrastructure.providers.http import HttpCreditDataProvider
from credito_gateway.infrastructure.providers.seeded import SeededCreditDataProvider
from credito_gateway.infrastructure.session.store import SessionStore, session_store


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings() -> Settings:
    """Provide application settings"""
    return settings


def get_data_provider() -> CreditDataProvider:
    """Provide the credit data source selected by DATA_PROVIDER"""
    if settings.data_provider.lower() == "http":
        return HttpCreditDataProvider()
    return SeededCreditDataProvider()


def get_session_store() -> SessionStore:
    """Provide the process-wide analysis session store"""
    return session_store
