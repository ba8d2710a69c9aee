"""Shared utilities for Warranty BFF Service HTTP clients."""

from __future__ import annotations

import re
from uuid import UUID

import httpx

from services.warranty_bff_service.config import settings
from services.warranty_bff_service.core.credentials import (
    AdminCredential,
    ShopActivationCredential,
)

_FILENAME_PATTERN = re.compile(r'filename="?([^";]+)"?')


def build_backend_headers(
    correlation_id: UUID,
    credential: AdminCredential | ShopActivationCredential | None = None,
) -> dict[str, str]:
    """Build headers for a backend call.

    Args:
        correlation_id: Request correlation ID for distributed tracing
        credential: Bearer credential for protected endpoints

    Returns:
        Headers dict with service id, correlation id and optional Authorization
    """
    headers = {
        "X-Service-ID": settings.SERVICE_NAME,
        "X-Correlation-ID": str(correlation_id),
    }
    if credential is not None:
        headers.update(credential.auth_headers())
    return headers


def attachment_filename(response: httpx.Response, default: str) -> str:
    """Filename from Content-Disposition, or ``default``."""
    disposition = response.headers.get("Content-Disposition", "")
    match = _FILENAME_PATTERN.search(disposition)
    return match.group(1) if match else default
