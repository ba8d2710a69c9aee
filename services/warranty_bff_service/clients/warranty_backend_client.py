"""Warranty backend HTTP client."""

from __future__ import annotations

from typing import Any, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from services.libs.warranty_service_libs.error_handling import (
    raise_invalid_response,
    translate_backend_failure,
)
from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.clients._utils import (
    attachment_filename,
    build_backend_headers,
)
from services.warranty_bff_service.config import settings
from services.warranty_bff_service.core.credentials import (
    AdminCredential,
    ShopActivationCredential,
)
from services.warranty_bff_service.dto.backend_v1 import (
    Batch,
    Code,
    CodeRecord,
    CustomerDetails,
    DashboardStats,
    ExportArtifact,
    Product,
    Shop,
    TokenResponse,
)

logger = create_service_logger("warranty_bff.backend_client")

SERVICE = "warranty_bff_service"
PDF_MEDIA_TYPE = "application/pdf"

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class WarrantyBackendClientImpl:
    """HTTP client for the external warranty backend API."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str | None = None) -> None:
        """Initialize with shared HTTP client.

        Args:
            http_client: Shared httpx AsyncClient instance
            base_url: Backend base URL, defaults to WARRANTY_BACKEND_URL
        """
        self._client = http_client
        self._base_url = (base_url or settings.WARRANTY_BACKEND_URL).rstrip("/")

    async def _send(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        correlation_id: UUID,
        credential: AdminCredential | ShopActivationCredential | None = None,
        json: Any = None,
        resource_type: str = "resource",
        resource_id: str = "",
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        headers = build_backend_headers(correlation_id, credential)

        logger.debug(
            "Calling warranty backend",
            method=method,
            path=path,
            operation=operation,
            correlation_id=str(correlation_id),
        )

        try:
            response = await self._client.request(method, url, headers=headers, json=json)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Warranty backend call failed",
                operation=operation,
                exception_type=type(exc).__name__,
                correlation_id=str(correlation_id),
            )
            translate_backend_failure(
                exc,
                service=SERVICE,
                operation=operation,
                correlation_id=correlation_id,
                resource_type=resource_type,
                resource_id=resource_id,
            )
        return response

    def _parse(
        self,
        response: httpx.Response,
        adapter: TypeAdapter[T],
        *,
        operation: str,
        correlation_id: UUID,
    ) -> T:
        try:
            return adapter.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise_invalid_response(
                service=SERVICE,
                operation=operation,
                message="Warranty backend returned an unexpected payload",
                correlation_id=correlation_id,
                reason=str(exc)[:200],
            )

    async def _get_list(
        self,
        path: str,
        model: type[M],
        *,
        operation: str,
        credential: AdminCredential,
        correlation_id: UUID,
        resource_type: str,
        resource_id: str = "",
    ) -> list[M]:
        response = await self._send(
            "GET",
            path,
            operation=operation,
            correlation_id=correlation_id,
            credential=credential,
            resource_type=resource_type,
            resource_id=resource_id,
        )
        items = self._parse(
            response,
            TypeAdapter(list[model]),  # type: ignore[valid-type]
            operation=operation,
            correlation_id=correlation_id,
        )
        logger.info(
            "Fetched from warranty backend",
            operation=operation,
            count=len(items),
            correlation_id=str(correlation_id),
        )
        return items

    # --- Public endpoints ---

    async def get_code_record(self, serial_number: str, correlation_id: UUID) -> CodeRecord:
        response = await self._send(
            "GET",
            f"/api/public/qr/{serial_number}",
            operation="get_code_record",
            correlation_id=correlation_id,
            resource_type="QR code",
            resource_id=serial_number,
        )
        return self._parse(
            response,
            TypeAdapter(CodeRecord),
            operation="get_code_record",
            correlation_id=correlation_id,
        )

    async def shop_login(self, shop_id: str, password: str, correlation_id: UUID) -> str:
        response = await self._send(
            "POST",
            "/api/public/shop/login",
            operation="shop_login",
            correlation_id=correlation_id,
            json={"shopId": shop_id, "password": password},
            resource_type="Shop",
            resource_id=shop_id,
        )
        token = self._parse(
            response,
            TypeAdapter(TokenResponse),
            operation="shop_login",
            correlation_id=correlation_id,
        )
        return token.token

    async def activate_code(
        self,
        serial_number: str,
        credential: ShopActivationCredential,
        customer: CustomerDetails,
        correlation_id: UUID,
    ) -> None:
        await self._send(
            "POST",
            f"/api/public/qr/{serial_number}/activate",
            operation="activate_code",
            correlation_id=correlation_id,
            credential=credential,
            json=customer.model_dump(by_alias=True),
            resource_type="QR code",
            resource_id=serial_number,
        )
        logger.info(
            "Activated code", serial_number=serial_number, correlation_id=str(correlation_id)
        )

    # --- Admin endpoints ---

    async def admin_login(self, username: str, password: str, correlation_id: UUID) -> str:
        response = await self._send(
            "POST",
            "/api/admin/login",
            operation="admin_login",
            correlation_id=correlation_id,
            json={"username": username, "password": password},
            resource_type="Admin",
            resource_id=username,
        )
        token = self._parse(
            response,
            TypeAdapter(TokenResponse),
            operation="admin_login",
            correlation_id=correlation_id,
        )
        return token.token

    async def get_dashboard_stats(
        self, credential: AdminCredential, correlation_id: UUID
    ) -> DashboardStats:
        response = await self._send(
            "GET",
            "/api/admin/dashboard",
            operation="get_dashboard_stats",
            correlation_id=correlation_id,
            credential=credential,
        )
        return self._parse(
            response,
            TypeAdapter(DashboardStats),
            operation="get_dashboard_stats",
            correlation_id=correlation_id,
        )

    async def list_batches(self, credential: AdminCredential, correlation_id: UUID) -> list[Batch]:
        return await self._get_list(
            "/api/admin/qrcodes/batches",
            Batch,
            operation="list_batches",
            credential=credential,
            correlation_id=correlation_id,
            resource_type="Batch",
        )

    async def list_batch_codes(
        self, batch_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> list[Code]:
        return await self._get_list(
            f"/api/admin/qrcodes/batch/{batch_id}",
            Code,
            operation="list_batch_codes",
            credential=credential,
            correlation_id=correlation_id,
            resource_type="Batch",
            resource_id=batch_id,
        )

    async def list_products(
        self, credential: AdminCredential, correlation_id: UUID
    ) -> list[Product]:
        return await self._get_list(
            "/api/admin/products",
            Product,
            operation="list_products",
            credential=credential,
            correlation_id=correlation_id,
            resource_type="Product",
        )

    async def list_shops(self, credential: AdminCredential, correlation_id: UUID) -> list[Shop]:
        return await self._get_list(
            "/api/admin/shops",
            Shop,
            operation="list_shops",
            credential=credential,
            correlation_id=correlation_id,
            resource_type="Shop",
        )

    async def list_shop_codes(
        self, shop_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> list[Code]:
        return await self._get_list(
            f"/api/admin/shops/{shop_id}/qrcodes",
            Code,
            operation="list_shop_codes",
            credential=credential,
            correlation_id=correlation_id,
            resource_type="Shop",
            resource_id=shop_id,
        )

    async def generate_codes(
        self, product_id: str, quantity: int, credential: AdminCredential, correlation_id: UUID
    ) -> None:
        await self._send(
            "POST",
            "/api/admin/qrcodes/generate",
            operation="generate_codes",
            correlation_id=correlation_id,
            credential=credential,
            json={"productId": product_id, "quantity": quantity},
            resource_type="Product",
            resource_id=product_id,
        )

    async def assign_codes(
        self,
        code_ids: list[str],
        shop_id: str,
        credential: AdminCredential,
        correlation_id: UUID,
    ) -> None:
        await self._send(
            "POST",
            "/api/admin/qrcodes/assign",
            operation="assign_codes",
            correlation_id=correlation_id,
            credential=credential,
            json={"qrIds": code_ids, "shopId": shop_id},
            resource_type="Shop",
            resource_id=shop_id,
        )

    async def delete_batch(
        self, batch_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> None:
        await self._send(
            "DELETE",
            f"/api/admin/qrcodes/batch/{batch_id}",
            operation="delete_batch",
            correlation_id=correlation_id,
            credential=credential,
            resource_type="Batch",
            resource_id=batch_id,
        )

    async def delete_codes(
        self, code_ids: list[str], credential: AdminCredential, correlation_id: UUID
    ) -> None:
        await self._send(
            "DELETE",
            "/api/admin/qrcodes",
            operation="delete_codes",
            correlation_id=correlation_id,
            credential=credential,
            json={"qrIds": code_ids},
            resource_type="QR code",
        )

    async def _download(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        credential: AdminCredential,
        correlation_id: UUID,
        default_filename: str,
        json: Any = None,
        resource_type: str = "QR code",
        resource_id: str = "",
    ) -> ExportArtifact:
        response = await self._send(
            method,
            path,
            operation=operation,
            correlation_id=correlation_id,
            credential=credential,
            json=json,
            resource_type=resource_type,
            resource_id=resource_id,
        )
        return ExportArtifact(
            filename=attachment_filename(response, default_filename),
            media_type=response.headers.get("Content-Type", PDF_MEDIA_TYPE),
            content=response.content,
        )

    async def download_selected_pdf(
        self, code_ids: list[str], credential: AdminCredential, correlation_id: UUID
    ) -> ExportArtifact:
        return await self._download(
            "POST",
            "/api/admin/qrcodes/download-selected-pdf",
            operation="download_selected_pdf",
            credential=credential,
            correlation_id=correlation_id,
            default_filename=f"Selected-QRCodes-{len(code_ids)}-items.pdf",
            json={"qrIds": code_ids},
        )

    async def download_sticker_sheet(
        self,
        code_ids: list[str],
        credential: AdminCredential,
        correlation_id: UUID,
        *,
        vertical_spacing: float,
        horizontal_spacing: float,
    ) -> ExportArtifact:
        return await self._download(
            "POST",
            "/api/admin/qrcodes/sticker-sheet",
            operation="download_sticker_sheet",
            credential=credential,
            correlation_id=correlation_id,
            default_filename=f"StickerSheet-{len(code_ids)}-items.pdf",
            json={
                "qrIds": code_ids,
                "verticalSpacing": vertical_spacing,
                "horizontalSpacing": horizontal_spacing,
            },
        )

    async def download_product_pdf(
        self, product_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> ExportArtifact:
        return await self._download(
            "GET",
            f"/api/admin/qrcodes/download-pdf/{product_id}",
            operation="download_product_pdf",
            credential=credential,
            correlation_id=correlation_id,
            default_filename=f"QRCodes-{product_id}.pdf",
            resource_type="Product",
            resource_id=product_id,
        )
