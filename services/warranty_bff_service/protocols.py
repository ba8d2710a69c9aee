"""Protocol definitions for Warranty BFF Service.

Defines the interface of the external warranty backend client used in
dependency injection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

if TYPE_CHECKING:
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
    )


class WarrantyBackendClientProtocol(Protocol):
    """Protocol for the warranty backend HTTP client.

    Every method raises WarrantyServiceError (never raw httpx errors) on failure.
    """

    # --- Public endpoints ---

    async def get_code_record(self, serial_number: str, correlation_id: UUID) -> CodeRecord:
        """Fetch a single code with its product and optional shop."""
        ...

    async def shop_login(self, shop_id: str, password: str, correlation_id: UUID) -> str:
        """Exchange shop id + password for an ephemeral shop token."""
        ...

    async def activate_code(
        self,
        serial_number: str,
        credential: ShopActivationCredential,
        customer: CustomerDetails,
        correlation_id: UUID,
    ) -> None:
        """Activate a code on behalf of a customer."""
        ...

    # --- Admin endpoints ---

    async def admin_login(self, username: str, password: str, correlation_id: UUID) -> str:
        """Exchange admin username + password for the admin token."""
        ...

    async def get_dashboard_stats(
        self, credential: AdminCredential, correlation_id: UUID
    ) -> DashboardStats: ...

    async def list_batches(
        self, credential: AdminCredential, correlation_id: UUID
    ) -> list[Batch]: ...

    async def list_batch_codes(
        self, batch_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> list[Code]: ...

    async def list_products(
        self, credential: AdminCredential, correlation_id: UUID
    ) -> list[Product]: ...

    async def list_shops(self, credential: AdminCredential, correlation_id: UUID) -> list[Shop]: ...

    async def list_shop_codes(
        self, shop_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> list[Code]: ...

    async def generate_codes(
        self, product_id: str, quantity: int, credential: AdminCredential, correlation_id: UUID
    ) -> None:
        """Create one new batch of ``quantity`` codes for a product."""
        ...

    async def assign_codes(
        self,
        code_ids: list[str],
        shop_id: str,
        credential: AdminCredential,
        correlation_id: UUID,
    ) -> None: ...

    async def delete_batch(
        self, batch_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> None: ...

    async def delete_codes(
        self, code_ids: list[str], credential: AdminCredential, correlation_id: UUID
    ) -> None: ...

    async def download_selected_pdf(
        self, code_ids: list[str], credential: AdminCredential, correlation_id: UUID
    ) -> ExportArtifact: ...

    async def download_sticker_sheet(
        self,
        code_ids: list[str],
        credential: AdminCredential,
        correlation_id: UUID,
        *,
        vertical_spacing: float,
        horizontal_spacing: float,
    ) -> ExportArtifact: ...

    async def download_product_pdf(
        self, product_id: str, credential: AdminCredential, correlation_id: UUID
    ) -> ExportArtifact: ...
