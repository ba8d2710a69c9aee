"""Bulk actions over the admin's current selection.

Each action turns the whole selection into one aggregate backend request. On
success the expanded batches are reloaded so counts and states match the
backend. Assign and delete also drop every other cached code list. On failure
the backend's message is surfaced and nothing local moves.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from services.libs.warranty_service_libs.error_handling import (
    WarrantyServiceError,
    raise_no_selection,
)
from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.core.batch_expansion_cache import BatchExpansionCache
from services.warranty_bff_service.core.credentials import AdminCredential
from services.warranty_bff_service.core.selection_store import SelectionStore
from services.warranty_bff_service.dto.backend_v1 import ExportArtifact
from services.warranty_bff_service.protocols import WarrantyBackendClientProtocol

logger = create_service_logger("warranty_bff.bulk_actions")

SERVICE = "warranty_bff_service"


class BulkActionKind(str, Enum):
    ASSIGN = "assign"
    DELETE = "delete"
    EXPORT_PDF = "export_pdf"
    STICKER_SHEET = "sticker_sheet"


@dataclass(frozen=True)
class BulkActionOutcome:
    action: BulkActionKind
    succeeded: bool
    affected_count: int = 0
    error: WarrantyServiceError | None = None
    artifact: ExportArtifact | None = None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error is not None else None


class BulkActionCoordinator:
    """Runs one bulk action at a time against a workspace's selection."""

    def __init__(
        self,
        backend: WarrantyBackendClientProtocol,
        credential: AdminCredential,
        selection: SelectionStore,
        cache: BatchExpansionCache,
        expanded_batches: Callable[[], list[str]],
        shop_cache: BatchExpansionCache | None = None,
    ) -> None:
        self._backend = backend
        self._credential = credential
        self._selection = selection
        self._cache = cache
        self._expanded_batches = expanded_batches
        self._shop_cache = shop_cache
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _require_selection(self, action: BulkActionKind, correlation_id: UUID) -> list[str]:
        code_ids = self._selection.snapshot()
        if not code_ids:
            raise_no_selection(
                service=SERVICE,
                operation=f"bulk_{action.value}",
                correlation_id=correlation_id,
            )
        return code_ids

    def _drop_changed_codes(self) -> None:
        """Forget code lists the last mutation may have changed, outside the expanded batches."""
        expanded = set(self._expanded_batches())
        for batch_id in self._cache.known_keys:
            if batch_id not in expanded:
                self._cache.invalidate(batch_id)
        if self._shop_cache is not None:
            self._shop_cache.invalidate_all()

    async def _reload_expanded(self) -> None:
        results = await self._cache.reload(self._expanded_batches())
        failed = [
            key for key, result in results.items() if isinstance(result, WarrantyServiceError)
        ]
        if failed:
            logger.warning("Some batches failed to reload after bulk action", batch_ids=failed)

    async def assign(self, shop_id: str, correlation_id: UUID) -> BulkActionOutcome:
        """Assign every selected code to ``shop_id``; clears the selection on success."""
        action = BulkActionKind.ASSIGN
        async with self._lock:
            try:
                code_ids = self._require_selection(action, correlation_id)
                await self._backend.assign_codes(
                    code_ids, shop_id, self._credential, correlation_id
                )
            except WarrantyServiceError as error:
                return self._failed(action, error)

            self._selection.clear()
            self._drop_changed_codes()
            await self._reload_expanded()
            logger.info("Assigned codes", shop_id=shop_id, count=len(code_ids))
            return BulkActionOutcome(action=action, succeeded=True, affected_count=len(code_ids))

    async def delete(self, correlation_id: UUID) -> BulkActionOutcome:
        """Delete every selected code, then reconcile the selection with the reloaded cache."""
        action = BulkActionKind.DELETE
        async with self._lock:
            try:
                code_ids = self._require_selection(action, correlation_id)
                await self._backend.delete_codes(code_ids, self._credential, correlation_id)
            except WarrantyServiceError as error:
                return self._failed(action, error)

            self._selection.clear()
            self._drop_changed_codes()
            await self._reload_expanded()
            # Ids toggled while the reload was in flight may name deleted codes
            self._selection.prune(self._cache.all_code_ids())
            logger.info("Deleted codes", count=len(code_ids))
            return BulkActionOutcome(action=action, succeeded=True, affected_count=len(code_ids))

    async def export_pdf(self, correlation_id: UUID) -> BulkActionOutcome:
        """Download a PDF of the selected codes; the selection is kept."""
        action = BulkActionKind.EXPORT_PDF
        async with self._lock:
            try:
                code_ids = self._require_selection(action, correlation_id)
                artifact = await self._backend.download_selected_pdf(
                    code_ids, self._credential, correlation_id
                )
            except WarrantyServiceError as error:
                return self._failed(action, error)

            await self._reload_expanded()
            return BulkActionOutcome(
                action=action, succeeded=True, affected_count=len(code_ids), artifact=artifact
            )

    async def export_sticker_sheet(
        self,
        correlation_id: UUID,
        *,
        vertical_spacing: float,
        horizontal_spacing: float,
    ) -> BulkActionOutcome:
        """Download a printable sticker sheet of the selected codes; the selection is kept."""
        action = BulkActionKind.STICKER_SHEET
        async with self._lock:
            try:
                code_ids = self._require_selection(action, correlation_id)
                artifact = await self._backend.download_sticker_sheet(
                    code_ids,
                    self._credential,
                    correlation_id,
                    vertical_spacing=vertical_spacing,
                    horizontal_spacing=horizontal_spacing,
                )
            except WarrantyServiceError as error:
                return self._failed(action, error)

            await self._reload_expanded()
            return BulkActionOutcome(
                action=action, succeeded=True, affected_count=len(code_ids), artifact=artifact
            )

    def _failed(self, action: BulkActionKind, error: WarrantyServiceError) -> BulkActionOutcome:
        logger.warning(
            "Bulk action failed",
            action=action.value,
            error_code=error.error_code,
            error_message=error.message,
        )
        return BulkActionOutcome(action=action, succeeded=False, error=error)
