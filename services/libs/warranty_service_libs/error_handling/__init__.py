"""Error handling utilities for warranty services."""

from services.libs.warranty_service_libs.error_handling.backend_failures import (
    NETWORK_FAILURE_MESSAGE,
    extract_backend_message,
    translate_backend_failure,
)
from services.libs.warranty_service_libs.error_handling.factories import (
    create_error_detail_with_context,
    raise_authentication_error,
    raise_code_already_activated,
    raise_connection_error,
    raise_external_service_error,
    raise_invalid_response,
    raise_no_selection,
    raise_resource_not_found,
    raise_shop_session_consumed,
    raise_timeout_error,
    raise_validation_error,
)
from services.libs.warranty_service_libs.error_handling.warranty_error import (
    WarrantyServiceError,
)

__all__ = [
    "NETWORK_FAILURE_MESSAGE",
    "WarrantyServiceError",
    "create_error_detail_with_context",
    "extract_backend_message",
    "raise_authentication_error",
    "raise_code_already_activated",
    "raise_connection_error",
    "raise_external_service_error",
    "raise_invalid_response",
    "raise_no_selection",
    "raise_resource_not_found",
    "raise_shop_session_consumed",
    "raise_timeout_error",
    "raise_validation_error",
    "translate_backend_failure",
]
