"""Health routes for Warranty BFF Service."""

from __future__ import annotations

from fastapi import APIRouter

from services.warranty_bff_service.config import settings

router = APIRouter()


@router.get("/healthz", tags=["Health"])
async def health_check() -> dict[str, str | dict]:
    """Liveness check; the warranty backend is not probed."""
    return {
        "service": "warranty_bff_service",
        "status": "healthy",
        "message": "Warranty BFF Service is healthy",
        "version": "0.1.0",
        "dependencies": {
            "warranty_backend": {
                "url": settings.WARRANTY_BACKEND_URL,
                "note": "Not probed by liveness check",
            }
        },
    }
