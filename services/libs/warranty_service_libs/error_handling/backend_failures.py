"""
Translation of httpx failures into WarrantyServiceError.

Every call to the external warranty backend passes through
``translate_backend_failure`` so callers only ever see one exception type,
classified into the NotFound / Unauthorized / ValidationFailure /
NetworkFailure taxonomy.
"""

from __future__ import annotations

from typing import NoReturn
from uuid import UUID

import httpx

from services.libs.warranty_service_libs.error_handling.factories import (
    raise_authentication_error,
    raise_connection_error,
    raise_external_service_error,
    raise_resource_not_found,
    raise_timeout_error,
    raise_validation_error,
)

NETWORK_FAILURE_MESSAGE = "Network error. Please try again."


def extract_backend_message(response: httpx.Response, default: str) -> str:
    """Return the backend's own ``message`` field, or ``default`` when absent."""
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("detail")
        if isinstance(message, str) and message:
            return message
    return default


def translate_backend_failure(
    exc: httpx.HTTPError,
    *,
    service: str,
    operation: str,
    correlation_id: UUID,
    resource_type: str = "resource",
    resource_id: str = "",
    default_message: str = "Request to warranty backend failed",
) -> NoReturn:
    """Re-raise an httpx failure as a classified WarrantyServiceError."""
    if isinstance(exc, httpx.TimeoutException):
        raise_timeout_error(
            service=service,
            operation=operation,
            timeout_seconds=None,
            message=NETWORK_FAILURE_MESSAGE,
            correlation_id=correlation_id,
            exception_type=type(exc).__name__,
        )

    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        status_code = response.status_code
        backend_message = extract_backend_message(response, "")
        message = backend_message or default_message

        if status_code == 404:
            raise_resource_not_found(
                service=service,
                operation=operation,
                resource_type=resource_type,
                resource_id=resource_id,
                correlation_id=correlation_id,
                message=backend_message or None,
            )
        if status_code in (401, 403):
            raise_authentication_error(
                service=service,
                operation=operation,
                message=message,
                correlation_id=correlation_id,
                status_code=status_code,
            )
        if status_code in (400, 422):
            raise_validation_error(
                service=service,
                operation=operation,
                field=resource_type,
                message=message,
                correlation_id=correlation_id,
                status_code=status_code,
            )
        raise_external_service_error(
            service=service,
            operation=operation,
            external_service="warranty_backend",
            message=message,
            correlation_id=correlation_id,
            status_code=status_code,
        )

    raise_connection_error(
        service=service,
        operation=operation,
        target="warranty_backend",
        message=NETWORK_FAILURE_MESSAGE,
        correlation_id=correlation_id,
        exception_type=type(exc).__name__,
    )
