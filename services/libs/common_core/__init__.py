"""
Warranty Common Core Package.

Enums and pure data models shared by the warranty services.
"""

from .config_enums import Environment
from .error_enums import ErrorCode, ErrorKind, WarrantyErrorCode
from .models.error_models import ErrorDetail

__all__ = [
    "Environment",
    "ErrorCode",
    "ErrorDetail",
    "ErrorKind",
    "WarrantyErrorCode",
]
