"""Unit tests for bulk actions over the selection."""

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from services.libs.common_core.error_enums import WarrantyErrorCode
from services.warranty_bff_service.core.batch_expansion_cache import BatchExpansionCache
from services.warranty_bff_service.core.bulk_action_coordinator import (
    BulkActionCoordinator,
    BulkActionKind,
)
from services.warranty_bff_service.core.selection_store import SelectionStore
from services.warranty_bff_service.tests.fakes import (
    ADMIN,
    FakeWarrantyBackend,
    backend_rejection,
)

CORRELATION_ID = uuid4()


class Harness:
    def __init__(self) -> None:
        self.backend = FakeWarrantyBackend()
        self.backend.add_batch("X", ["A", "B"])
        self.backend.add_batch("Y", ["C", "D"])
        self.selection = SelectionStore()
        self.cache = BatchExpansionCache(
            lambda batch_id: self.backend.list_batch_codes(batch_id, ADMIN, CORRELATION_ID)
        )
        self.shop_cache = BatchExpansionCache(
            lambda shop_id: self.backend.list_shop_codes(shop_id, ADMIN, CORRELATION_ID),
            name="shop",
        )
        self.expanded = ["X", "Y"]
        self.coordinator = BulkActionCoordinator(
            backend=self.backend,
            credential=ADMIN,
            selection=self.selection,
            cache=self.cache,
            expanded_batches=lambda: list(self.expanded),
            shop_cache=self.shop_cache,
        )

    async def expand_all(self) -> None:
        for batch_id in self.expanded:
            await self.cache.ensure_loaded(batch_id)
        self.backend.calls.clear()


@pytest.fixture
async def harness() -> Harness:
    h = Harness()
    await h.expand_all()
    return h


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "action",
    [
        BulkActionKind.ASSIGN,
        BulkActionKind.DELETE,
        BulkActionKind.EXPORT_PDF,
        BulkActionKind.STICKER_SHEET,
    ],
)
async def test_empty_selection_fails_without_request(
    harness: Harness, action: BulkActionKind
) -> None:
    if action == BulkActionKind.ASSIGN:
        outcome = await harness.coordinator.assign("S1", CORRELATION_ID)
    elif action == BulkActionKind.DELETE:
        outcome = await harness.coordinator.delete(CORRELATION_ID)
    elif action == BulkActionKind.EXPORT_PDF:
        outcome = await harness.coordinator.export_pdf(CORRELATION_ID)
    else:
        outcome = await harness.coordinator.export_sticker_sheet(
            CORRELATION_ID, vertical_spacing=0.05, horizontal_spacing=0.0
        )

    assert not outcome.succeeded
    assert outcome.error is not None
    assert outcome.error.error_code == WarrantyErrorCode.NO_SELECTION.value
    assert outcome.message == "Please select QR codes first"
    assert harness.backend.calls == []


@pytest.mark.asyncio
async def test_assign_sends_one_request_clears_selection_and_reloads(harness: Harness) -> None:
    for code_id in ("A", "C"):
        harness.selection.toggle(code_id)

    outcome = await harness.coordinator.assign("S1", CORRELATION_ID)

    assert outcome.succeeded
    assert outcome.affected_count == 2
    assert harness.backend.calls_to("assign_codes") == [(["A", "C"], "S1")]
    assert len(harness.selection) == 0
    assert sorted(harness.backend.calls_to("list_batch_codes")) == ["X", "Y"]
    reloaded = {code.code_id: code for code in harness.cache.get("X") or []}
    assert reloaded["A"].assigned_shop_id == "S1"
    assert reloaded["B"].assigned_shop_id is None


@pytest.mark.asyncio
async def test_failure_surfaces_backend_message_and_keeps_selection(harness: Harness) -> None:
    harness.selection.toggle("A")
    harness.backend.failures["assign_codes"] = backend_rejection("Shop is inactive")

    outcome = await harness.coordinator.assign("S1", CORRELATION_ID)

    assert not outcome.succeeded
    assert outcome.message == "Shop is inactive"
    assert harness.selection.snapshot() == ["A"]
    assert harness.backend.calls_to("list_batch_codes") == []


@pytest.mark.asyncio
async def test_delete_removes_deleted_ids_but_keeps_codes_selected_meanwhile(
    harness: Harness,
) -> None:
    harness.selection.toggle("A")
    harness.selection.toggle("B")
    gate = asyncio.Event()
    harness.backend.gates["Y"] = gate

    delete = asyncio.create_task(harness.coordinator.delete(CORRELATION_ID))
    for _ in range(5):
        await asyncio.sleep(0)
    # The admin ticks C (still present) and A (already deleted) while Y reloads
    harness.selection.toggle("C")
    harness.selection.toggle("A")
    gate.set()
    outcome = await delete

    assert outcome.succeeded
    assert harness.backend.calls_to("delete_codes") == [["A", "B"]]
    assert harness.selection.snapshot() == ["C"]
    assert harness.cache.all_code_ids() == {"C", "D"}


@pytest.mark.asyncio
async def test_export_preserves_selection_and_returns_artifact(harness: Harness) -> None:
    harness.selection.toggle("B")
    harness.selection.toggle("D")

    outcome = await harness.coordinator.export_pdf(CORRELATION_ID)

    assert outcome.succeeded
    assert outcome.artifact is not None
    assert outcome.artifact.filename == "Selected-QRCodes-2-items.pdf"
    assert harness.selection.snapshot() == ["B", "D"]


@pytest.mark.asyncio
async def test_sticker_sheet_forwards_spacing(harness: Harness) -> None:
    harness.selection.toggle("A")

    outcome = await harness.coordinator.export_sticker_sheet(
        CORRELATION_ID, vertical_spacing=0.05, horizontal_spacing=0.0
    )

    assert outcome.succeeded
    assert harness.backend.calls_to("download_sticker_sheet") == [(["A"], 0.05, 0.0)]
    assert harness.selection.snapshot() == ["A"]


@pytest.mark.asyncio
async def test_reload_failure_of_one_batch_does_not_fail_action(harness: Harness) -> None:
    harness.selection.toggle("A")
    harness.backend.failures["list_batch_codes:Y"] = backend_rejection("Y unavailable")

    outcome = await harness.coordinator.assign("S1", CORRELATION_ID)

    assert outcome.succeeded
    assert harness.cache.get("X") is not None
    assert harness.cache.error_for("Y") is not None


@pytest.mark.asyncio
async def test_actions_are_serialized(harness: Harness) -> None:
    harness.selection.toggle("A")
    gate = asyncio.Event()
    harness.backend.gates["X"] = gate

    first = asyncio.create_task(harness.coordinator.export_pdf(CORRELATION_ID))
    for _ in range(5):
        await asyncio.sleep(0)
    assert harness.coordinator.busy

    second = asyncio.create_task(harness.coordinator.assign("S1", CORRELATION_ID))
    for _ in range(5):
        await asyncio.sleep(0)
    assert harness.backend.calls_to("assign_codes") == []

    gate.set()
    await asyncio.gather(first, second)

    assert harness.backend.calls_to("assign_codes") == [(["A"], "S1")]


@pytest.mark.asyncio
async def test_delete_drops_collapsed_batch_so_next_expand_refetches(harness: Harness) -> None:
    harness.selection.toggle("C")
    harness.expanded = ["X"]

    outcome = await harness.coordinator.delete(CORRELATION_ID)

    assert outcome.succeeded
    assert harness.cache.get("Y") is None
    codes = await harness.cache.ensure_loaded("Y")
    assert [code.code_id for code in codes] == ["D"]


@pytest.mark.asyncio
async def test_assign_drops_collapsed_batch_and_shop_listings(harness: Harness) -> None:
    assert await harness.shop_cache.ensure_loaded("S1") == []
    harness.selection.toggle("C")
    harness.expanded = ["X"]

    outcome = await harness.coordinator.assign("S1", CORRELATION_ID)

    assert outcome.succeeded
    assert harness.cache.get("Y") is None
    assert harness.shop_cache.get("S1") is None
    codes = {code.code_id: code for code in await harness.cache.ensure_loaded("Y")}
    assert codes["C"].assigned_shop_id == "S1"
    shop_codes = await harness.shop_cache.ensure_loaded("S1")
    assert [code.code_id for code in shop_codes] == ["C"]


@pytest.mark.asyncio
async def test_exports_keep_collapsed_batches_cached(harness: Harness) -> None:
    harness.selection.toggle("C")
    harness.expanded = ["X"]

    await harness.coordinator.export_pdf(CORRELATION_ID)

    assert harness.cache.get("Y") is not None
    assert harness.backend.calls_to("list_batch_codes") == ["X"]
