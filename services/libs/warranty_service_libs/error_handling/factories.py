"""
Factory functions that build an ErrorDetail and raise WarrantyServiceError.

All factories share the keyword-only calling convention
``service=..., operation=..., correlation_id=...`` plus factory specific
fields; any extra keyword arguments end up in ``ErrorDetail.details``.
"""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any, NoReturn, Union
from uuid import UUID

from opentelemetry import trace

from services.libs.common_core.error_enums import ErrorCode, WarrantyErrorCode
from services.libs.common_core.models.error_models import ErrorDetail
from services.libs.warranty_service_libs.error_handling.warranty_error import (
    WarrantyServiceError,
)


def create_error_detail_with_context(
    error_code: Union[ErrorCode, WarrantyErrorCode],
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID,
    details: dict[str, Any] | None = None,
    capture_stack: bool = True,
) -> ErrorDetail:
    """Build an ErrorDetail enriched with trace ids from the current span."""
    trace_id: str | None = None
    span_id: str | None = None
    span = trace.get_current_span()
    if span is not None:
        span_context = span.get_span_context()
        if span_context.is_valid:
            trace_id = format(span_context.trace_id, "032x")
            span_id = format(span_context.span_id, "016x")

    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id,
        timestamp=datetime.now(timezone.utc),
        service=service,
        operation=operation,
        details=details or {},
        stack_trace="".join(traceback.format_stack(limit=10)) if capture_stack else None,
        trace_id=trace_id,
        span_id=span_id,
    )


def _raise(
    error_code: Union[ErrorCode, WarrantyErrorCode],
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID,
    details: dict[str, Any],
) -> NoReturn:
    raise WarrantyServiceError(
        create_error_detail_with_context(
            error_code=error_code,
            message=message,
            service=service,
            operation=operation,
            correlation_id=correlation_id,
            details=details,
        )
    )


# =============================================================================
# Generic factories
# =============================================================================


def raise_validation_error(
    service: str,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID,
    value: Any = None,
    **additional_context: Any,
) -> NoReturn:
    details: dict[str, Any] = {"field": field, **additional_context}
    if value is not None:
        details["value"] = value
    _raise(ErrorCode.VALIDATION_ERROR, message, service, operation, correlation_id, details)


def raise_resource_not_found(
    service: str,
    operation: str,
    resource_type: str,
    resource_id: str,
    correlation_id: UUID,
    message: str | None = None,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.RESOURCE_NOT_FOUND,
        message or f"{resource_type} with ID '{resource_id}' not found",
        service,
        operation,
        correlation_id,
        {"resource_type": resource_type, "resource_id": resource_id, **additional_context},
    )


def raise_authentication_error(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.AUTHENTICATION_ERROR,
        message,
        service,
        operation,
        correlation_id,
        additional_context,
    )


# =============================================================================
# External service factories
# =============================================================================


def raise_connection_error(
    service: str,
    operation: str,
    target: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.CONNECTION_ERROR,
        message,
        service,
        operation,
        correlation_id,
        {"target": target, **additional_context},
    )


def raise_timeout_error(
    service: str,
    operation: str,
    timeout_seconds: float | None,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.TIMEOUT,
        message,
        service,
        operation,
        correlation_id,
        {"timeout_seconds": timeout_seconds, **additional_context},
    )


def raise_external_service_error(
    service: str,
    operation: str,
    external_service: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.EXTERNAL_SERVICE_ERROR,
        message,
        service,
        operation,
        correlation_id,
        {"external_service": external_service, **additional_context},
    )


def raise_invalid_response(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.INVALID_RESPONSE,
        message,
        service,
        operation,
        correlation_id,
        additional_context,
    )


# =============================================================================
# Warranty domain factories
# =============================================================================


def raise_no_selection(
    service: str,
    operation: str,
    correlation_id: UUID,
    message: str = "Please select QR codes first",
    **additional_context: Any,
) -> NoReturn:
    _raise(
        WarrantyErrorCode.NO_SELECTION,
        message,
        service,
        operation,
        correlation_id,
        additional_context,
    )


def raise_shop_session_consumed(
    service: str,
    operation: str,
    correlation_id: UUID,
    serial_number: str,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        WarrantyErrorCode.SHOP_SESSION_CONSUMED,
        "Shop session already used, please log in again",
        service,
        operation,
        correlation_id,
        {"serial_number": serial_number, **additional_context},
    )


def raise_code_already_activated(
    service: str,
    operation: str,
    correlation_id: UUID,
    serial_number: str,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        WarrantyErrorCode.CODE_ALREADY_ACTIVATED,
        f"QR code '{serial_number}' is already activated",
        service,
        operation,
        correlation_id,
        {"serial_number": serial_number, **additional_context},
    )
