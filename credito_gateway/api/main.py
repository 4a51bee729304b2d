"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from credito_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from credito_gateway.api.v1 import eligibility, validation, sessions
from credito_gateway.infrastructure.observability.logging import setup_logging
from credito_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Credito Pre-Analise Gateway",
        description="Client eligibility tiers, invoice batch validation and final credit decision",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "dataProvider": settings.data_provider,
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(eligibility.router, prefix="/v1", tags=["eligibility"])
    app.include_router(validation.router, prefix="/v1", tags=["validation"])
    app.include_router(sessions.router, prefix="/v1", tags=["sessions"])

    return app


app = create_app()
