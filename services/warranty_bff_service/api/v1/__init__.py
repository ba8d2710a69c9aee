"""Warranty BFF Service API v1 module.

Contains v1 API routes for the public QR pages and the admin console.
"""

from services.warranty_bff_service.api.v1.admin_routes import router as admin_router
from services.warranty_bff_service.api.v1.public_routes import router as public_router

__all__ = ["admin_router", "public_router"]
