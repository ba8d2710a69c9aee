"""
common_core.error_enums - Centralized error code definitions.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"  # For APIs

    # Generic external service errors (can be used by any service)
    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"  # Access denied / permission denied
    INVALID_RESPONSE = "INVALID_RESPONSE"


class WarrantyErrorCode(str, Enum):
    """
    Warranty domain error codes.

    Generic failures (timeouts, connection errors, backend rejections) use the
    base ErrorCode enum.
    """

    NO_SELECTION = "WARRANTY_NO_SELECTION"  # Bulk action issued with empty selection
    CODE_ALREADY_ACTIVATED = "WARRANTY_CODE_ALREADY_ACTIVATED"
    SHOP_SESSION_CONSUMED = "WARRANTY_SHOP_SESSION_CONSUMED"


class ErrorKind(str, Enum):
    """User-facing classification of a failure.

    Every failure crossing an async boundary is reported as one of these kinds so
    the frontend knows whether to show a banner, route to a login step, or offer
    a retry.
    """

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    VALIDATION_FAILURE = "validation_failure"
    NETWORK_FAILURE = "network_failure"
    BACKEND_REJECTED = "backend_rejected"
