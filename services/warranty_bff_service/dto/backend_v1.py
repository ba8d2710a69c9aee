"""Warranty backend v1 wire models.

Deserialization models for the external warranty backend. The backend speaks
camelCase JSON with Mongo-style ``_id`` fields; every model also accepts the
snake_case field names so tests and internal callers can build them directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class BackendModel(BaseModel):
    """Base for all backend models: camelCase aliases, immutable instances."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Code(BackendModel):
    """A single serialized warranty unit (a QR code)."""

    code_id: str | None = Field(default=None, alias="_id")
    serial_number: str
    product_id: str | None = None
    batch_id: str | None = None
    assigned_shop_id: str | None = None
    is_activated: bool = False
    activation_date: datetime | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    created_at: datetime | None = None


class Batch(BackendModel):
    """A set of codes generated together for one product."""

    batch_id: str = Field(alias="_id")
    product_id: str
    count: int = Field(ge=0)
    activated_count: int = Field(default=0, ge=0)
    assigned_count: int = Field(default=0, ge=0)
    created_at: datetime | None = None

    @model_validator(mode="after")
    def _counts_within_total(self) -> Batch:
        if self.activated_count > self.count:
            raise ValueError("activated_count cannot exceed count")
        if self.assigned_count > self.count:
            raise ValueError("assigned_count cannot exceed count")
        return self


class Product(BackendModel):
    """Read-only product reference data."""

    product_id: str | None = None
    product_name: str
    manufacturer: str = ""
    category: str = ""
    image_url: str = ""
    warranty_duration: int | None = Field(default=None, gt=0, description="Days")


class Shop(BackendModel):
    """Read-only shop reference data."""

    shop_id: str | None = None
    shop_name: str
    owner_name: str = ""
    phone_number: str = ""
    is_active: bool = True


class CodeRecord(BackendModel):
    """Public code lookup: the code plus its product and (optional) shop."""

    status: str | None = None
    code: Code = Field(alias="qrcode")
    product: Product
    shop: Shop | None = None


class TokenResponse(BackendModel):
    """Login response carrying an opaque bearer token."""

    token: str


class TopProduct(BackendModel):
    product_name: str
    activation_count: int = 0
    image_url: str = ""


class DailyActivations(BackendModel):
    date: str
    count: int = 0


class DashboardStats(BackendModel):
    """Admin dashboard counters."""

    total_shops: int = 0
    total_products: int = 0
    total_qr_codes: int = Field(default=0, alias="totalQRCodes")
    activated_qr_codes: int = Field(default=0, alias="activatedQRCodes")
    today_activations: int = 0
    top_products: list[TopProduct] = Field(default_factory=list)
    weekly_activations: list[DailyActivations] = Field(default_factory=list)


class CustomerDetails(BackendModel):
    """Optional customer fields recorded at activation."""

    customer_name: str = ""
    customer_address: str = ""
    customer_phone: str = ""


@dataclass(frozen=True)
class ExportArtifact:
    """Opaque downloadable document produced by the backend.

    The bytes are passed through untouched.
    """

    filename: str
    media_type: str
    content: bytes
