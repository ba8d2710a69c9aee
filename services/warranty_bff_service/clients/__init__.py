"""HTTP clients for the external warranty backend."""

from services.warranty_bff_service.clients.warranty_backend_client import WarrantyBackendClientImpl

__all__ = ["WarrantyBackendClientImpl"]
