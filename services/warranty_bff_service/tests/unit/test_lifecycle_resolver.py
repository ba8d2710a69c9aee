"""Unit tests for code route resolution and the CodeVisit state machine."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from transitions import MachineError

from services.warranty_bff_service.core.credentials import ShopActivationCredential
from services.warranty_bff_service.core.lifecycle_resolver import (
    DEFAULT_NOT_FOUND_MESSAGE,
    CodeVisit,
    RouteDecision,
    RouteKind,
    not_found,
    resolve,
)
from services.warranty_bff_service.dto.backend_v1 import CodeRecord
from services.warranty_bff_service.tests.fakes import make_code, make_product, make_shop

SERIAL = "SN-001"


def _record(*, activated: bool = False, assigned_shop_id: str | None = None) -> CodeRecord:
    return CodeRecord(
        code=make_code(
            "c1",
            serial_number=SERIAL,
            is_activated=activated,
            assigned_shop_id=assigned_shop_id,
            activation_date=datetime(2024, 1, 1, tzinfo=timezone.utc) if activated else None,
        ),
        product=make_product(),
        shop=make_shop() if assigned_shop_id else None,
    )


class TestResolve:
    def test_unactivated_without_credential_needs_shop_login(self) -> None:
        decision = resolve(SERIAL, _record(), None)

        assert decision.kind == RouteKind.NEEDS_SHOP_AUTHENTICATION
        assert decision.route == "/shop/login/SN-001"

    def test_unactivated_with_credential_needs_activation_details(self) -> None:
        credential = ShopActivationCredential(token="t", serial_number=SERIAL)

        decision = resolve(SERIAL, _record(), credential)

        assert decision.kind == RouteKind.NEEDS_ACTIVATION_DETAILS
        assert decision.route == "/activate/SN-001"

    def test_credential_for_another_serial_is_ignored(self) -> None:
        credential = ShopActivationCredential(token="t", serial_number="SN-999")

        decision = resolve(SERIAL, _record(), credential)

        assert decision.kind == RouteKind.NEEDS_SHOP_AUTHENTICATION

    @pytest.mark.parametrize("with_credential", [False, True])
    def test_activated_code_shows_warranty_regardless_of_credential(
        self, with_credential: bool
    ) -> None:
        credential = (
            ShopActivationCredential(token="t", serial_number=SERIAL) if with_credential else None
        )

        decision = resolve(SERIAL, _record(activated=True), credential)

        assert decision.kind == RouteKind.SHOW_WARRANTY_INFO
        assert decision.route == "/warranty/SN-001"

    def test_assignment_is_not_checked(self) -> None:
        unassigned = resolve(SERIAL, _record(assigned_shop_id=None), None)
        assigned = resolve(SERIAL, _record(assigned_shop_id="S1"), None)

        assert unassigned.kind == assigned.kind == RouteKind.NEEDS_SHOP_AUTHENTICATION

    def test_missing_record_is_terminal_not_found(self) -> None:
        decision = resolve(SERIAL, None, None)

        assert decision.kind == RouteKind.NOT_FOUND
        assert decision.message == DEFAULT_NOT_FOUND_MESSAGE
        assert decision.route is None
        assert decision.is_terminal

    def test_not_found_keeps_backend_message(self) -> None:
        decision = resolve(SERIAL, None, not_found_message="Invalid QR code")

        assert decision.message == "Invalid QR code"


class TestCodeVisit:
    def test_starts_unresolved(self) -> None:
        assert CodeVisit(SERIAL).current == RouteKind.UNRESOLVED

    def test_full_activation_walk(self) -> None:
        visit = CodeVisit(SERIAL)
        credential = ShopActivationCredential(token="t", serial_number=SERIAL)

        visit.apply(resolve(SERIAL, _record(), None))
        visit.apply(resolve(SERIAL, _record(), credential))
        visit.apply(resolve(SERIAL, _record(activated=True), None))

        assert visit.current == RouteKind.SHOW_WARRANTY_INFO
        assert [d.kind for d in visit.decisions] == [
            RouteKind.NEEDS_SHOP_AUTHENTICATION,
            RouteKind.NEEDS_ACTIVATION_DETAILS,
            RouteKind.SHOW_WARRANTY_INFO,
        ]

    def test_warranty_screen_cannot_go_back_to_login(self) -> None:
        visit = CodeVisit(SERIAL)
        visit.apply(resolve(SERIAL, _record(activated=True), None))

        with pytest.raises(MachineError):
            visit.apply(resolve(SERIAL, _record(), None))

    def test_not_found_is_terminal(self) -> None:
        visit = CodeVisit(SERIAL)
        visit.apply(not_found(SERIAL))

        with pytest.raises(MachineError):
            visit.apply(
                RouteDecision(kind=RouteKind.NEEDS_SHOP_AUTHENTICATION, serial_number=SERIAL)
            )
        assert visit.current == RouteKind.NOT_FOUND

    def test_repeated_warranty_decisions_are_allowed(self) -> None:
        visit = CodeVisit(SERIAL)
        decision = resolve(SERIAL, _record(activated=True), None)

        visit.apply(decision)
        visit.apply(decision)

        assert visit.current == RouteKind.SHOW_WARRANTY_INFO
