"""Per-admin console state.

An ``AdminWorkspace`` holds everything the admin console's batch screen works
on between requests: reference data, filters, the selection, which batches are
expanded and their lazily loaded codes. ``WorkspaceRegistry`` hands out one
workspace per admin token and throws it away on logout.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Sequence
from uuid import UUID, uuid4

from services.libs.warranty_service_libs.error_handling import (
    raise_authentication_error,
    raise_resource_not_found,
    raise_validation_error,
)
from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.core import filter_engine
from services.warranty_bff_service.core.batch_expansion_cache import BatchExpansionCache
from services.warranty_bff_service.core.bulk_action_coordinator import BulkActionCoordinator
from services.warranty_bff_service.core.credentials import AdminCredential
from services.warranty_bff_service.core.filter_engine import FilterCriteria
from services.warranty_bff_service.core.selection_store import SelectionStore
from services.warranty_bff_service.dto.backend_v1 import Batch, Code, Product, Shop
from services.warranty_bff_service.protocols import WarrantyBackendClientProtocol

logger = create_service_logger("warranty_bff.admin_workspace")

SERVICE = "warranty_bff_service"
UNASSIGNED_SHOP_LABEL = "Unassigned"
UNKNOWN_SHOP_LABEL = "Unknown Shop"
DEFAULT_MAX_REVOKED_TOKENS = 10_000


class AdminWorkspace:
    def __init__(self, backend: WarrantyBackendClientProtocol, credential: AdminCredential) -> None:
        self._backend = backend
        self.credential = credential

        self.batches: list[Batch] = []
        self.products: dict[str, Product] = {}
        self.shops: dict[str, Shop] = {}
        self._reference_loaded = False

        self.filters = FilterCriteria()
        self.selection = SelectionStore()
        self._expanded: dict[str, None] = {}

        self.batch_codes = BatchExpansionCache(self._load_batch_codes, name="batch")
        self.shop_code_cache = BatchExpansionCache(self._load_shop_codes, name="shop")
        self.bulk = BulkActionCoordinator(
            backend=backend,
            credential=credential,
            selection=self.selection,
            cache=self.batch_codes,
            expanded_batches=self.expanded_batches,
            shop_cache=self.shop_code_cache,
        )

    # Loaders run inside cache tasks, so they get their own correlation id
    async def _load_batch_codes(self, batch_id: str) -> list[Code]:
        return await self._backend.list_batch_codes(batch_id, self.credential, uuid4())

    async def _load_shop_codes(self, shop_id: str) -> list[Code]:
        return await self._backend.list_shop_codes(shop_id, self.credential, uuid4())

    # --- Reference data ---

    async def refresh_reference_data(self, correlation_id: UUID) -> None:
        """Reload batches, products and shops.

        Expansions of batches that vanished are dropped and shop listings are
        refetched on their next view.
        """
        batches, products, shops = await asyncio.gather(
            self._backend.list_batches(self.credential, correlation_id),
            self._backend.list_products(self.credential, correlation_id),
            self._backend.list_shops(self.credential, correlation_id),
        )

        self.batches = batches
        self.products = {p.product_id: p for p in products if p.product_id is not None}
        self.shops = {s.shop_id: s for s in shops if s.shop_id is not None}
        self._reference_loaded = True
        self.shop_code_cache.invalidate_all()

        known = {batch.batch_id for batch in batches}
        for batch_id in [b for b in self._expanded if b not in known]:
            self.collapse_batch(batch_id)

        logger.info(
            "Refreshed reference data",
            batches=len(batches),
            products=len(self.products),
            shops=len(self.shops),
        )

    @property
    def reference_loaded(self) -> bool:
        return self._reference_loaded

    async def ensure_reference_data(self, correlation_id: UUID) -> None:
        """Load reference data once per workspace."""
        if not self._reference_loaded:
            await self.refresh_reference_data(correlation_id)

    def shop_display_name(self, shop_id: str | None) -> str:
        if shop_id is None:
            return UNASSIGNED_SHOP_LABEL
        shop = self.shops.get(shop_id)
        return shop.shop_name if shop is not None else UNKNOWN_SHOP_LABEL

    # --- Expansion ---

    def expanded_batches(self) -> list[str]:
        return list(self._expanded)

    def is_expanded(self, batch_id: str) -> bool:
        return batch_id in self._expanded

    async def expand_batch(self, batch_id: str) -> list[Code]:
        """Mark ``batch_id`` expanded and return its visible codes.

        Raises:
            WarrantyServiceError: If the codes could not be loaded; the batch
                stays expanded and the error is kept by the cache.
        """
        self._expanded.setdefault(batch_id, None)
        await self.batch_codes.ensure_loaded(batch_id)
        return self.visible_codes(batch_id)

    def collapse_batch(self, batch_id: str) -> None:
        """Collapse a batch; its codes stay cached for the next expansion."""
        self._expanded.pop(batch_id, None)

    # --- Filtering ---

    def set_filters(self, criteria: FilterCriteria) -> None:
        self.filters = criteria

    def clear_filters(self) -> None:
        self.filters = self.filters.cleared()

    def visible_batches(self) -> list[Batch]:
        return filter_engine.apply_to_batches(self.batches, self.products, self.filters)

    def visible_codes(self, batch_id: str) -> list[Code]:
        """Codes of one loaded batch that pass the current filters; empty if not loaded."""
        codes = self.batch_codes.get(batch_id) or []
        return filter_engine.apply(codes, self.filters)

    def all_visible_code_ids(self) -> list[str]:
        """Ids of every filtered code across expanded, loaded batches, in display order."""
        ids: list[str] = []
        for batch_id in self._expanded:
            ids.extend(_code_ids(self.visible_codes(batch_id)))
        return ids

    # --- Selection ---

    def toggle_code(self, code_id: str, correlation_id: UUID) -> bool:
        """Flip one code's selection; only codes of loaded batches can be selected."""
        if code_id not in self.selection and code_id not in self.batch_codes.all_code_ids():
            raise_validation_error(
                service=SERVICE,
                operation="toggle_code",
                field="code_id",
                message="QR code is not in any loaded batch",
                correlation_id=correlation_id,
                value=code_id,
            )
        return self.selection.toggle(code_id)

    def select_batch(self, batch_id: str, correlation_id: UUID) -> None:
        """Group-toggle the visible codes of one loaded batch."""
        codes = self.batch_codes.get(batch_id)
        if codes is None:
            raise_validation_error(
                service=SERVICE,
                operation="select_batch",
                field="batch_id",
                message="Batch codes are not loaded; expand the batch first",
                correlation_id=correlation_id,
                value=batch_id,
            )
        visible = set(_code_ids(self.visible_codes(batch_id)))
        self.selection.select_batch(_code_ids(codes), visible)

    def select_all_visible(self) -> None:
        self.selection.select_all_visible(self.all_visible_code_ids())

    # --- Batch level actions ---

    async def generate_codes(self, product_id: str, quantity: int, correlation_id: UUID) -> None:
        if quantity <= 0:
            raise_validation_error(
                service=SERVICE,
                operation="generate_codes",
                field="quantity",
                message="Quantity must be positive",
                correlation_id=correlation_id,
                value=quantity,
            )
        await self._backend.generate_codes(product_id, quantity, self.credential, correlation_id)
        await self.refresh_reference_data(correlation_id)

    async def delete_batch(self, batch_id: str, correlation_id: UUID) -> None:
        """Delete a whole batch and forget its cached codes and selected ids."""
        await self._backend.delete_batch(batch_id, self.credential, correlation_id)

        removed = set(_code_ids(self.batch_codes.get(batch_id) or []))
        self.collapse_batch(batch_id)
        self.batch_codes.invalidate(batch_id)
        self.shop_code_cache.invalidate_all()
        if removed:
            self.selection.prune({cid for cid in self.selection if cid not in removed})
        await self.refresh_reference_data(correlation_id)

    async def shop_codes(self, shop_id: str, correlation_id: UUID) -> list[Code]:
        if self.shops and shop_id not in self.shops:
            raise_resource_not_found(
                service=SERVICE,
                operation="shop_codes",
                resource_type="Shop",
                resource_id=shop_id,
                correlation_id=correlation_id,
            )
        return await self.shop_code_cache.ensure_loaded(shop_id)

    def reset(self) -> None:
        """Forget all session state; late fetch results are discarded."""
        self.batch_codes.invalidate_all()
        self.shop_code_cache.invalidate_all()
        self.selection.clear()
        self._expanded.clear()
        self.filters = FilterCriteria()


def _code_ids(codes: Sequence[Code]) -> list[str]:
    return [code.code_id for code in codes if code.code_id is not None]


class WorkspaceRegistry:
    """One workspace per admin token; revoked tokens are refused until they log in again.

    Workspaces exist only for tokens issued through login or accepted by the
    backend. The revoked set keeps the most recent ``max_revoked`` tokens.
    """

    def __init__(
        self,
        backend: WarrantyBackendClientProtocol,
        *,
        max_revoked: int = DEFAULT_MAX_REVOKED_TOKENS,
    ) -> None:
        self._backend = backend
        self._workspaces: dict[str, AdminWorkspace] = {}
        self._revoked: OrderedDict[str, None] = OrderedDict()
        self._max_revoked = max_revoked

    def __len__(self) -> int:
        return len(self._workspaces)

    def is_revoked(self, token: str) -> bool:
        return token in self._revoked

    def register(self, credential: AdminCredential) -> AdminWorkspace:
        """Start a fresh workspace for a newly issued token."""
        self._revoked.pop(credential.token, None)
        previous = self._workspaces.pop(credential.token, None)
        if previous is not None:
            previous.reset()
        workspace = AdminWorkspace(self._backend, credential)
        self._workspaces[credential.token] = workspace
        return workspace

    def _ensure_not_revoked(self, credential: AdminCredential, correlation_id: UUID) -> None:
        if credential.token in self._revoked:
            raise_authentication_error(
                service=SERVICE,
                operation="get_workspace",
                message="Session ended, please log in again",
                correlation_id=correlation_id,
            )

    async def acquire(
        self, credential: AdminCredential, correlation_id: UUID, *, refresh: bool = False
    ) -> AdminWorkspace:
        """Return the workspace for ``credential`` with its reference data loaded.

        A token this process has not seen (for example after a restart) gets a
        workspace only once the backend accepts it for the reference data load.

        Raises:
            WarrantyServiceError: AUTHENTICATION_ERROR for revoked tokens or
                tokens the backend rejects.
        """
        self._ensure_not_revoked(credential, correlation_id)
        workspace = self._workspaces.get(credential.token)
        if workspace is not None:
            if refresh:
                await workspace.refresh_reference_data(correlation_id)
            else:
                await workspace.ensure_reference_data(correlation_id)
            return workspace

        candidate = AdminWorkspace(self._backend, credential)
        await candidate.refresh_reference_data(correlation_id)

        # Logout or a concurrent first request may have happened during the load
        self._ensure_not_revoked(credential, correlation_id)
        workspace = self._workspaces.setdefault(credential.token, candidate)
        if workspace is not candidate:
            candidate.reset()
        else:
            logger.info("Created admin workspace for existing token")
        return workspace

    def discard(self, credential: AdminCredential) -> None:
        """End the session for ``credential``: revoke it and drop its state."""
        self._revoked.pop(credential.token, None)
        self._revoked[credential.token] = None
        while len(self._revoked) > self._max_revoked:
            self._revoked.popitem(last=False)
        workspace = self._workspaces.pop(credential.token, None)
        if workspace is not None:
            workspace.reset()
            logger.info("Discarded admin workspace")
