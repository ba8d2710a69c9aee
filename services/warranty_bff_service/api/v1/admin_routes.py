"""Admin console API v1 routes.

Screen-specific endpoints for the admin batch screen. Filters, selection and
expanded batches live in the caller's workspace on the BFF, so every mutating
endpoint answers with the state the screen needs to re-render.
"""

from __future__ import annotations

from uuid import UUID

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Response

from services.libs.warranty_service_libs.error_handling import raise_invalid_response
from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.config import WarrantyBFFSettings
from services.warranty_bff_service.core.admin_workspace import AdminWorkspace, WorkspaceRegistry
from services.warranty_bff_service.core.bulk_action_coordinator import (
    BulkActionKind,
    BulkActionOutcome,
)
from services.warranty_bff_service.core.credentials import AdminCredential
from services.warranty_bff_service.core.filter_engine import FilterCriteria
from services.warranty_bff_service.dto.backend_v1 import Batch, Code, DashboardStats, ExportArtifact
from services.warranty_bff_service.dto.warranty_v1 import (
    AdminLoginRequestV1,
    AdminLoginResponseV1,
    AssignRequestV1,
    BatchCodesResponseV1,
    BatchItemV1,
    BatchListResponseV1,
    BulkActionResponseV1,
    CodeItemV1,
    FilterCriteriaV1,
    GenerateCodesRequestV1,
    SelectionStateV1,
    ShopCodesResponseV1,
    StickerSheetRequestV1,
    ToggleCodeRequestV1,
)
from services.warranty_bff_service.protocols import WarrantyBackendClientProtocol

router = APIRouter()
logger = create_service_logger("warranty_bff.admin_routes")

SUCCESS_MESSAGES: dict[BulkActionKind, str] = {
    BulkActionKind.ASSIGN: "QR codes assigned successfully",
    BulkActionKind.DELETE: "QR codes deleted successfully",
    BulkActionKind.EXPORT_PDF: "PDF downloaded successfully",
    BulkActionKind.STICKER_SHEET: "Sticker sheet downloaded successfully",
}


# --- View helpers ---


def _selection_state(workspace: AdminWorkspace) -> SelectionStateV1:
    selected = workspace.selection.snapshot()
    return SelectionStateV1(selected_ids=selected, selected_count=len(selected))


def _code_item(workspace: AdminWorkspace, code: Code) -> CodeItemV1:
    return CodeItemV1(
        code_id=code.code_id,
        serial_number=code.serial_number,
        batch_id=code.batch_id,
        is_activated=code.is_activated,
        activation_date=code.activation_date,
        assigned_shop_id=code.assigned_shop_id,
        shop_name=workspace.shop_display_name(code.assigned_shop_id),
        selected=code.code_id is not None and code.code_id in workspace.selection,
    )


def _batch_item(workspace: AdminWorkspace, batch: Batch) -> BatchItemV1:
    product = workspace.products.get(batch.product_id)
    error = workspace.batch_codes.error_for(batch.batch_id)
    return BatchItemV1(
        batch_id=batch.batch_id,
        product_id=batch.product_id,
        product_name=product.product_name if product else "Unknown Product",
        count=batch.count,
        activated_count=batch.activated_count,
        assigned_count=batch.assigned_count,
        created_at=batch.created_at,
        expanded=workspace.is_expanded(batch.batch_id),
        loading=workspace.batch_codes.is_loading(batch.batch_id),
        error=error.message if error else None,
    )


def _batch_list(workspace: AdminWorkspace) -> BatchListResponseV1:
    batches = workspace.visible_batches()
    return BatchListResponseV1(
        batches=[_batch_item(workspace, batch) for batch in batches],
        total_count=len(batches),
        filters=FilterCriteriaV1(**workspace.filters.model_dump()),
        has_active_filters=workspace.filters.has_active_filters,
        selection=_selection_state(workspace),
    )


def _batch_codes(workspace: AdminWorkspace, batch_id: str) -> BatchCodesResponseV1:
    visible = workspace.visible_codes(batch_id)
    return BatchCodesResponseV1(
        batch_id=batch_id,
        codes=[_code_item(workspace, code) for code in visible],
        total_loaded=len(workspace.batch_codes.get(batch_id) or []),
        visible_count=len(visible),
    )


def _artifact_response(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


def _download_response(outcome: BulkActionOutcome, correlation_id: UUID) -> Response:
    if outcome.error is not None:
        raise outcome.error
    if outcome.artifact is None:
        raise_invalid_response(
            service="warranty_bff_service",
            operation=f"bulk_{outcome.action.value}",
            message="Export finished without a document",
            correlation_id=correlation_id,
        )
    return _artifact_response(outcome.artifact)


def _bulk_response(workspace: AdminWorkspace, outcome: BulkActionOutcome) -> BulkActionResponseV1:
    if outcome.error is not None:
        raise outcome.error
    return BulkActionResponseV1(
        action=outcome.action,
        affected_count=outcome.affected_count,
        message=SUCCESS_MESSAGES[outcome.action],
        selection=_selection_state(workspace),
    )


# --- Session ---


@router.post("/login", response_model=AdminLoginResponseV1)
@inject
async def admin_login(
    body: AdminLoginRequestV1,
    backend: FromDishka[WarrantyBackendClientProtocol],
    registry: FromDishka[WorkspaceRegistry],
    correlation_id: FromDishka[UUID],
) -> AdminLoginResponseV1:
    token = await backend.admin_login(body.username, body.password, correlation_id)
    registry.register(AdminCredential(token=token))
    logger.info("Admin logged in", username=body.username)
    return AdminLoginResponseV1(token=token)


@router.post("/logout", status_code=204, response_class=Response, response_model=None)
@inject
async def admin_logout(
    credential: FromDishka[AdminCredential],
    registry: FromDishka[WorkspaceRegistry],
) -> Response:
    """End the admin session; the token is refused from now on."""
    registry.discard(credential)
    return Response(status_code=204)


@router.get("/dashboard", response_model=DashboardStats, response_model_by_alias=False)
@inject
async def get_dashboard(
    backend: FromDishka[WarrantyBackendClientProtocol],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> DashboardStats:
    return await backend.get_dashboard_stats(credential, correlation_id)


# --- Batch screen ---


@router.get("/batches", response_model=BatchListResponseV1)
@inject
async def list_batches(
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchListResponseV1:
    """Batch list under the current filters; always refetches reference data."""
    workspace = await registry.acquire(credential, correlation_id, refresh=True)
    return _batch_list(workspace)


@router.post("/batches/{batch_id}/expand", response_model=BatchCodesResponseV1)
@inject
async def expand_batch(
    batch_id: str,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchCodesResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    await workspace.expand_batch(batch_id)
    return _batch_codes(workspace, batch_id)


@router.post("/batches/{batch_id}/collapse", response_model=BatchListResponseV1)
@inject
async def collapse_batch(
    batch_id: str,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchListResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    workspace.collapse_batch(batch_id)
    return _batch_list(workspace)


@router.get("/batches/{batch_id}/codes", response_model=BatchCodesResponseV1)
@inject
async def get_batch_codes(
    batch_id: str,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchCodesResponseV1:
    """Filtered codes of a batch, loading them if this is the first look."""
    workspace = await registry.acquire(credential, correlation_id)
    await workspace.batch_codes.ensure_loaded(batch_id)
    return _batch_codes(workspace, batch_id)


@router.delete("/batches/{batch_id}", response_model=BatchListResponseV1)
@inject
async def delete_batch(
    batch_id: str,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchListResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    await workspace.delete_batch(batch_id, correlation_id)
    return _batch_list(workspace)


@router.post("/codes/generate", response_model=BatchListResponseV1, status_code=201)
@inject
async def generate_codes(
    body: GenerateCodesRequestV1,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchListResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    await workspace.generate_codes(body.product_id, body.quantity, correlation_id)
    return _batch_list(workspace)


# --- Filters ---


@router.put("/filters", response_model=BatchListResponseV1)
@inject
async def set_filters(
    body: FilterCriteriaV1,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchListResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    workspace.set_filters(FilterCriteria(**body.model_dump()))
    return _batch_list(workspace)


@router.delete("/filters", response_model=BatchListResponseV1)
@inject
async def clear_filters(
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BatchListResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    workspace.clear_filters()
    return _batch_list(workspace)


# --- Selection ---


@router.post("/selection/toggle", response_model=SelectionStateV1)
@inject
async def toggle_code(
    body: ToggleCodeRequestV1,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> SelectionStateV1:
    workspace = await registry.acquire(credential, correlation_id)
    workspace.toggle_code(body.code_id, correlation_id)
    return _selection_state(workspace)


@router.post("/selection/batch/{batch_id}", response_model=SelectionStateV1)
@inject
async def select_batch(
    batch_id: str,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> SelectionStateV1:
    workspace = await registry.acquire(credential, correlation_id)
    workspace.select_batch(batch_id, correlation_id)
    return _selection_state(workspace)


@router.post("/selection/visible", response_model=SelectionStateV1)
@inject
async def select_all_visible(
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> SelectionStateV1:
    workspace = await registry.acquire(credential, correlation_id)
    workspace.select_all_visible()
    return _selection_state(workspace)


@router.delete("/selection", response_model=SelectionStateV1)
@inject
async def clear_selection(
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> SelectionStateV1:
    workspace = await registry.acquire(credential, correlation_id)
    workspace.selection.clear()
    return _selection_state(workspace)


# --- Bulk actions ---


@router.post("/bulk/assign", response_model=BulkActionResponseV1)
@inject
async def bulk_assign(
    body: AssignRequestV1,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BulkActionResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    outcome = await workspace.bulk.assign(body.shop_id, correlation_id)
    return _bulk_response(workspace, outcome)


@router.post("/bulk/delete", response_model=BulkActionResponseV1)
@inject
async def bulk_delete(
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> BulkActionResponseV1:
    workspace = await registry.acquire(credential, correlation_id)
    outcome = await workspace.bulk.delete(correlation_id)
    return _bulk_response(workspace, outcome)


@router.post("/bulk/export", response_model=None)
@inject
async def bulk_export(
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> Response:
    """Selected codes as one PDF document."""
    workspace = await registry.acquire(credential, correlation_id)
    outcome = await workspace.bulk.export_pdf(correlation_id)
    return _download_response(outcome, correlation_id)


@router.post("/bulk/sticker-sheet", response_model=None)
@inject
async def bulk_sticker_sheet(
    config: FromDishka[WarrantyBFFSettings],
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
    body: StickerSheetRequestV1 | None = None,
) -> Response:
    """Selected codes laid out as a printable sticker sheet."""
    body = body or StickerSheetRequestV1()
    vertical = (
        body.vertical_spacing
        if body.vertical_spacing is not None
        else config.STICKER_VERTICAL_SPACING_INCHES
    )
    horizontal = (
        body.horizontal_spacing
        if body.horizontal_spacing is not None
        else config.STICKER_HORIZONTAL_SPACING_INCHES
    )

    workspace = await registry.acquire(credential, correlation_id)
    outcome = await workspace.bulk.export_sticker_sheet(
        correlation_id, vertical_spacing=vertical, horizontal_spacing=horizontal
    )
    return _download_response(outcome, correlation_id)


# --- Other downloads and listings ---


@router.get("/products/{product_id}/pdf", response_model=None)
@inject
async def download_product_pdf(
    product_id: str,
    backend: FromDishka[WarrantyBackendClientProtocol],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> Response:
    artifact = await backend.download_product_pdf(product_id, credential, correlation_id)
    return _artifact_response(artifact)


@router.get("/shops/{shop_id}/codes", response_model=ShopCodesResponseV1)
@inject
async def get_shop_codes(
    shop_id: str,
    registry: FromDishka[WorkspaceRegistry],
    credential: FromDishka[AdminCredential],
    correlation_id: FromDishka[UUID],
) -> ShopCodesResponseV1:
    """Codes assigned to one shop, loaded lazily and cached per workspace."""
    workspace = await registry.acquire(credential, correlation_id)
    codes = await workspace.shop_codes(shop_id, correlation_id)
    return ShopCodesResponseV1(
        shop_id=shop_id,
        shop_name=workspace.shop_display_name(shop_id),
        codes=[_code_item(workspace, code) for code in codes],
    )
