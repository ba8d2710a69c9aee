"""Warranty BFF v1 DTOs.

Screen-specific request and response models for the warranty frontend: the
public QR landing pages and the admin console batch screen. Responses are view
models built from backend data plus the BFF's own state (selection, filters,
expansion).
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from services.warranty_bff_service.core.bulk_action_coordinator import BulkActionKind
from services.warranty_bff_service.core.filter_engine import ALL, StatusFilter
from services.warranty_bff_service.core.lifecycle_resolver import RouteKind
from services.warranty_bff_service.core.warranty_calculator import WarrantyStatus

# --- Public flow ---


class RouteDecisionResponseV1(BaseModel):
    """Next screen for a scanned serial."""

    kind: RouteKind
    serial_number: str
    route: str | None = None
    message: str | None = None


class ShopLoginRequestV1(BaseModel):
    serial_number: str = Field(min_length=1, description="Code the shop is about to activate")
    shop_id: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ShopLoginResponseV1(BaseModel):
    """Shop session token; send it back in X-Shop-Session when activating."""

    shop_session: str
    serial_number: str
    next: RouteDecisionResponseV1


class ActivationRequestV1(BaseModel):
    customer_name: str = ""
    customer_address: str = ""
    customer_phone: str = ""


class WarrantyInfoResponseV1(BaseModel):
    """Warranty screen view."""

    serial_number: str
    product_name: str
    manufacturer: str = ""
    category: str = ""
    image_url: str = ""
    shop_name: str | None = None
    customer_name: str | None = None
    activation_date: datetime
    warranty_duration_days: int
    end_date: date
    remaining_days: int = Field(description="Days left, clamped at zero")
    status: WarrantyStatus


# --- Admin console ---


class AdminLoginRequestV1(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AdminLoginResponseV1(BaseModel):
    token: str


class FilterCriteriaV1(BaseModel):
    search: str = ""
    status: StatusFilter = StatusFilter.ALL
    product: str = ALL
    shop: str = ALL


class CodeItemV1(BaseModel):
    code_id: str | None
    serial_number: str
    batch_id: str | None = None
    is_activated: bool
    activation_date: datetime | None = None
    assigned_shop_id: str | None = None
    shop_name: str
    selected: bool = False


class BatchItemV1(BaseModel):
    batch_id: str
    product_id: str
    product_name: str = "Unknown Product"
    count: int
    activated_count: int
    assigned_count: int
    created_at: datetime | None = None
    expanded: bool = False
    loading: bool = False
    error: str | None = Field(default=None, description="Last load failure for this batch")


class SelectionStateV1(BaseModel):
    selected_ids: list[str] = Field(default_factory=list)
    selected_count: int = 0


class BatchListResponseV1(BaseModel):
    """Batch screen: filtered batches plus current filters and selection."""

    batches: list[BatchItemV1] = Field(default_factory=list)
    total_count: int = 0
    filters: FilterCriteriaV1
    has_active_filters: bool = False
    selection: SelectionStateV1


class BatchCodesResponseV1(BaseModel):
    batch_id: str
    codes: list[CodeItemV1] = Field(default_factory=list)
    total_loaded: int = 0
    visible_count: int = 0


class ToggleCodeRequestV1(BaseModel):
    code_id: str = Field(min_length=1)


class GenerateCodesRequestV1(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class AssignRequestV1(BaseModel):
    shop_id: str = Field(min_length=1)


class StickerSheetRequestV1(BaseModel):
    vertical_spacing: float | None = Field(default=None, ge=0.0)
    horizontal_spacing: float | None = Field(default=None, ge=0.0)


class BulkActionResponseV1(BaseModel):
    action: BulkActionKind
    affected_count: int
    message: str
    selection: SelectionStateV1


class ShopCodesResponseV1(BaseModel):
    shop_id: str
    shop_name: str
    codes: list[CodeItemV1] = Field(default_factory=list)
