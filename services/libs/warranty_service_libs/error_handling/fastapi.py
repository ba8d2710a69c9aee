"""FastAPI exception handlers for WarrantyServiceError."""

from __future__ import annotations

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from services.libs.common_core.error_enums import ErrorCode, WarrantyErrorCode
from services.libs.warranty_service_libs.error_handling.warranty_error import (
    WarrantyServiceError,
)
from services.libs.warranty_service_libs.logging_utils import create_service_logger

logger = create_service_logger("error_handling.fastapi")

STATUS_BY_ERROR_CODE: dict[str, int] = {
    ErrorCode.VALIDATION_ERROR.value: 400,
    ErrorCode.MISSING_REQUIRED_FIELD.value: 400,
    WarrantyErrorCode.NO_SELECTION.value: 400,
    WarrantyErrorCode.CODE_ALREADY_ACTIVATED.value: 409,
    ErrorCode.AUTHENTICATION_ERROR.value: 401,
    WarrantyErrorCode.SHOP_SESSION_CONSUMED.value: 401,
    ErrorCode.AUTHORIZATION_ERROR.value: 403,
    ErrorCode.RESOURCE_NOT_FOUND.value: 404,
    ErrorCode.EXTERNAL_SERVICE_ERROR.value: 502,
    ErrorCode.INVALID_RESPONSE.value: 502,
    ErrorCode.CONNECTION_ERROR.value: 503,
    ErrorCode.SERVICE_UNAVAILABLE.value: 503,
    ErrorCode.TIMEOUT.value: 504,
}


def error_response(error: WarrantyServiceError) -> JSONResponse:
    """Render an error as the JSON body the frontend displays."""
    status_code = STATUS_BY_ERROR_CODE.get(error.error_code, 500)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": error.error_code,
                "kind": error.kind.value,
                "message": error.message,
                "correlation_id": error.correlation_id,
                "service": error.service,
                "operation": error.operation,
                "details": error.error_detail.model_dump(mode="json")["details"],
            },
            "message": error.message,
        },
        headers={"X-Correlation-ID": error.correlation_id},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach handlers converting service errors into JSON responses."""

    @app.exception_handler(WarrantyServiceError)
    async def handle_warranty_error(request: Request, exc: WarrantyServiceError) -> JSONResponse:
        logger.warning(
            "Request failed",
            error_code=exc.error_code,
            operation=exc.operation,
            correlation_id=exc.correlation_id,
            path=request.url.path,
        )
        return error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = str(getattr(request.state, "correlation_id", uuid4()))
        logger.exception(
            "Unhandled error", path=request.url.path, correlation_id=correlation_id
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.UNKNOWN_ERROR.value,
                    "kind": "backend_rejected",
                    "message": "Internal server error",
                    "correlation_id": correlation_id,
                },
                "message": "Internal server error",
            },
        )
