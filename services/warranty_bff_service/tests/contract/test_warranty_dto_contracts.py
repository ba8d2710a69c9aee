"""
Warranty BFF DTO Contract Testing.

Validates the backend wire models against the camelCase / ``_id`` shapes the
warranty backend sends, and the frontend-facing view models against the field
names the frontend reads.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from services.warranty_bff_service.core.bulk_action_coordinator import BulkActionKind
from services.warranty_bff_service.core.lifecycle_resolver import RouteKind
from services.warranty_bff_service.dto.backend_v1 import (
    Batch,
    Code,
    CodeRecord,
    CustomerDetails,
    DashboardStats,
    Product,
)
from services.warranty_bff_service.dto.warranty_v1 import (
    BulkActionResponseV1,
    GenerateCodesRequestV1,
    RouteDecisionResponseV1,
    SelectionStateV1,
    StickerSheetRequestV1,
)


class TestBackendCodeContract:
    """Contract tests for the backend Code model."""

    def test_backend_field_names_contract(self) -> None:
        """Contract: Code must read ``_id`` and camelCase fields."""
        # Act
        code = Code.model_validate(
            {
                "_id": "65f0c0ffee",
                "serialNumber": "SN-001",
                "productId": "P1",
                "batchId": "B1",
                "assignedShopId": "S1",
                "isActivated": True,
                "activationDate": "2024-03-01T08:30:00Z",
                "unknownField": "ignored",
            }
        )

        # Assert
        assert code.code_id == "65f0c0ffee"
        assert code.assigned_shop_id == "S1"
        assert code.activation_date == datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)

    def test_defaults_contract(self) -> None:
        """Contract: Only the serial number is required."""
        code = Code.model_validate({"serialNumber": "SN-002"})

        assert code.code_id is None
        assert code.is_activated is False
        assert code.assigned_shop_id is None

    def test_codes_are_immutable(self) -> None:
        code = Code(serial_number="SN-003")

        with pytest.raises(ValidationError):
            code.is_activated = True  # type: ignore[misc]


class TestBackendBatchContract:
    """Contract tests for the backend Batch model."""

    def test_counts_contract(self) -> None:
        batch = Batch.model_validate(
            {"_id": "B1", "productId": "P1", "count": 10, "activatedCount": 4, "assignedCount": 6}
        )

        assert batch.batch_id == "B1"
        assert batch.activated_count == 4
        assert batch.assigned_count == 6

    @pytest.mark.parametrize(
        "counts",
        [
            {"count": 2, "activatedCount": 3},
            {"count": 2, "assignedCount": 3},
            {"count": -1},
        ],
    )
    def test_inconsistent_counts_rejected(self, counts: dict[str, int]) -> None:
        with pytest.raises(ValidationError):
            Batch.model_validate({"_id": "B1", "productId": "P1", **counts})


class TestBackendRecordContract:
    def test_code_record_reads_qrcode_key(self) -> None:
        record = CodeRecord.model_validate(
            {
                "qrcode": {"serialNumber": "SN-001"},
                "product": {"productName": "Kettle", "warrantyDuration": 365},
            }
        )

        assert record.code.serial_number == "SN-001"
        assert record.product.warranty_duration == 365
        assert record.shop is None

    def test_warranty_duration_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Product.model_validate({"productName": "Kettle", "warrantyDuration": 0})

    def test_dashboard_qr_code_aliases(self) -> None:
        stats = DashboardStats.model_validate(
            {
                "totalQRCodes": 12,
                "activatedQRCodes": 5,
                "topProducts": [{"productName": "Kettle", "activationCount": 3}],
                "weeklyActivations": [{"date": "2024-03-01", "count": 2}],
            }
        )

        assert stats.total_qr_codes == 12
        assert stats.activated_qr_codes == 5
        assert stats.top_products[0].activation_count == 3
        assert stats.weekly_activations[0].count == 2

    def test_customer_details_serialize_camel_case(self) -> None:
        customer = CustomerDetails(customer_name="Jane", customer_phone="0123")

        assert customer.model_dump(by_alias=True) == {
            "customerName": "Jane",
            "customerAddress": "",
            "customerPhone": "0123",
        }


class TestFrontendViewContract:
    """Contract tests for the view models the frontend consumes."""

    def test_route_decision_serialization_contract(self) -> None:
        response = RouteDecisionResponseV1(
            kind=RouteKind.NEEDS_SHOP_AUTHENTICATION,
            serial_number="SN-001",
            route="/shop/login/SN-001",
        )

        assert response.model_dump(mode="json") == {
            "kind": "needs_shop_authentication",
            "serial_number": "SN-001",
            "route": "/shop/login/SN-001",
            "message": None,
        }

    def test_bulk_action_response_contract(self) -> None:
        response = BulkActionResponseV1(
            action=BulkActionKind.STICKER_SHEET,
            affected_count=2,
            message="Sticker sheet downloaded successfully",
            selection=SelectionStateV1(selected_ids=["A", "B"], selected_count=2),
        )

        data = response.model_dump(mode="json")
        assert data["action"] == "sticker_sheet"
        assert data["selection"]["selected_ids"] == ["A", "B"]

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_generate_requires_positive_quantity(self, quantity: int) -> None:
        with pytest.raises(ValidationError):
            GenerateCodesRequestV1(product_id="P1", quantity=quantity)

    def test_sticker_spacing_cannot_be_negative(self) -> None:
        with pytest.raises(ValidationError):
            StickerSheetRequestV1(vertical_spacing=-0.1)
