"""Warranty BFF Service - API composition for the warranty web frontend.

Serves the public QR code endpoints and the admin console endpoints, keeping
per-admin session state (filters, selection, expanded batches) between
requests and calling the external warranty backend for everything persistent.
"""

from __future__ import annotations

from dishka import make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.libs.warranty_service_libs.error_handling.fastapi import (
    register_error_handlers as register_fastapi_error_handlers,
)
from services.libs.warranty_service_libs.logging_utils import (
    configure_service_logging,
    create_service_logger,
)
from services.warranty_bff_service.api.health_routes import router as health_router
from services.warranty_bff_service.api.v1 import admin_router, public_router
from services.warranty_bff_service.config import settings
from services.warranty_bff_service.di import RequestContextProvider, WarrantyBFFProvider
from services.warranty_bff_service.middleware import CorrelationIDMiddleware

configure_service_logging(
    settings.SERVICE_NAME,
    environment=settings.ENVIRONMENT.value,
    log_level=settings.LOG_LEVEL,
)
logger = create_service_logger("warranty_bff_service")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.SERVICE_NAME,
        version="0.1.0",
        description="Warranty BFF Service - public QR flow and admin console API",
        docs_url="/docs" if settings.is_development() else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development() else None,
    )

    # Register error handlers
    register_fastapi_error_handlers(app)

    # Add Correlation ID Middleware
    app.add_middleware(CorrelationIDMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    app.include_router(health_router)

    # Routes: /bff/v1/public/codes/{serial}/route, /bff/v1/admin/batches, etc.
    app.include_router(public_router, prefix="/bff/v1/public", tags=["Public API"])
    app.include_router(admin_router, prefix="/bff/v1/admin", tags=["Admin API"])

    # Setup Dishka DI container
    container = make_async_container(
        WarrantyBFFProvider(),
        RequestContextProvider(),
        FastapiProvider(),
    )
    setup_dishka(container, app)
    app.state.di_container = container

    logger.info(
        "Warranty BFF configured",
        backend_url=settings.WARRANTY_BACKEND_URL,
        environment=settings.ENVIRONMENT.value,
    )
    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.warranty_bff_service.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )
