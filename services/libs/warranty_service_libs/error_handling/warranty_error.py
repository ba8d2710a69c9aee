"""
WarrantyServiceError - the single exception type raised across warranty services.

Wraps an immutable ErrorDetail and records itself on the active OpenTelemetry
span so failures show up in traces without extra instrumentation at call sites.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from services.libs.common_core.error_enums import ErrorCode, ErrorKind, WarrantyErrorCode
from services.libs.common_core.models.error_models import ErrorDetail

_KIND_BY_CODE: dict[str, ErrorKind] = {
    ErrorCode.RESOURCE_NOT_FOUND.value: ErrorKind.NOT_FOUND,
    ErrorCode.AUTHENTICATION_ERROR.value: ErrorKind.UNAUTHORIZED,
    ErrorCode.AUTHORIZATION_ERROR.value: ErrorKind.UNAUTHORIZED,
    WarrantyErrorCode.SHOP_SESSION_CONSUMED.value: ErrorKind.UNAUTHORIZED,
    ErrorCode.VALIDATION_ERROR.value: ErrorKind.VALIDATION_FAILURE,
    ErrorCode.MISSING_REQUIRED_FIELD.value: ErrorKind.VALIDATION_FAILURE,
    WarrantyErrorCode.NO_SELECTION.value: ErrorKind.VALIDATION_FAILURE,
    WarrantyErrorCode.CODE_ALREADY_ACTIVATED.value: ErrorKind.VALIDATION_FAILURE,
    ErrorCode.CONNECTION_ERROR.value: ErrorKind.NETWORK_FAILURE,
    ErrorCode.TIMEOUT.value: ErrorKind.NETWORK_FAILURE,
    ErrorCode.SERVICE_UNAVAILABLE.value: ErrorKind.NETWORK_FAILURE,
}


class WarrantyServiceError(Exception):
    """Structured exception carrying an ErrorDetail."""

    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(f"[{error_detail.error_code.value}] {error_detail.message}")
        self.error_detail = error_detail
        self._record_to_span()

    def _record_to_span(self) -> None:
        span = trace.get_current_span()
        if span is None or not span.is_recording():
            return

        span.record_exception(self)
        span.set_status(Status(StatusCode.ERROR, self.error_detail.message))
        span.set_attribute("error", True)
        span.set_attribute("error.code", self.error_code)
        span.set_attribute("error.message", self.error_detail.message)
        span.set_attribute("error.service", self.service)
        span.set_attribute("error.operation", self.operation)
        span.set_attribute("correlation_id", self.correlation_id)
        for key, value in self.error_detail.details.items():
            if isinstance(value, (str, bool, int, float)):
                span.set_attribute(f"error.details.{key}", value)
            else:
                span.set_attribute(f"error.details.{key}", str(value))

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    @property
    def message(self) -> str:
        return self.error_detail.message

    @property
    def kind(self) -> ErrorKind:
        """User-facing classification used by the frontend to decide what to show."""
        return _KIND_BY_CODE.get(self.error_code, ErrorKind.BACKEND_REJECTED)

    def add_detail(self, key: str, value: Any) -> WarrantyServiceError:
        """Return a new error with an extra detail entry; the original is unchanged."""
        details = {**self.error_detail.details, key: value}
        return WarrantyServiceError(self.error_detail.model_copy(update={"details": details}))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": str(self),
            "error_detail": self.error_detail.model_dump(mode="json"),
        }
