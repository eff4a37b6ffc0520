"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from allocation_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from allocation_gateway.api.v1 import installments, layaway, payments, splits
from allocation_gateway.infrastructure.observability.logging import setup_logging
from allocation_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Allocation Gateway",
        description="Payment split, installment schedule and layaway calculation service",
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
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(splits.router, prefix="/v1", tags=["splits"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(layaway.router, prefix="/v1", tags=["layaway"])

    return app


app = create_app()
