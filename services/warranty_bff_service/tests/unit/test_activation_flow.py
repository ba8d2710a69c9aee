"""Unit tests for the public activation flow."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from services.libs.common_core.error_enums import ErrorCode, WarrantyErrorCode
from services.libs.warranty_service_libs.error_handling import WarrantyServiceError
from services.warranty_bff_service.core.activation_flow import CodeActivationFlow
from services.warranty_bff_service.core.credentials import ShopCredentialLedger
from services.warranty_bff_service.core.lifecycle_resolver import RouteKind
from services.warranty_bff_service.core.warranty_calculator import WarrantyStatus
from services.warranty_bff_service.dto.backend_v1 import CustomerDetails
from services.warranty_bff_service.tests.fakes import FakeWarrantyBackend, backend_rejection

CORRELATION_ID = uuid4()
SERIAL = "SN-001"
CUSTOMER = CustomerDetails(customer_name="Jane", customer_phone="0123")


@pytest.fixture
def backend() -> FakeWarrantyBackend:
    fake = FakeWarrantyBackend()
    fake.add_record(SERIAL)
    return fake


@pytest.fixture
def ledger() -> ShopCredentialLedger:
    return ShopCredentialLedger()


@pytest.fixture
def flow(backend: FakeWarrantyBackend, ledger: ShopCredentialLedger) -> CodeActivationFlow:
    return CodeActivationFlow(backend, ledger)


@pytest.mark.asyncio
async def test_unactivated_code_without_session_needs_shop_login(
    flow: CodeActivationFlow,
) -> None:
    decision = await flow.resolve_route(SERIAL, None, CORRELATION_ID)

    assert decision.kind == RouteKind.NEEDS_SHOP_AUTHENTICATION


@pytest.mark.asyncio
async def test_unknown_serial_resolves_to_not_found(flow: CodeActivationFlow) -> None:
    decision = await flow.resolve_route("SN-404", None, CORRELATION_ID)

    assert decision.kind == RouteKind.NOT_FOUND
    assert decision.message == "QR code not found"


@pytest.mark.asyncio
async def test_network_failure_propagates(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend
) -> None:
    backend.failures["get_code_record"] = backend_rejection("Backend down")

    with pytest.raises(WarrantyServiceError):
        await flow.resolve_route(SERIAL, None, CORRELATION_ID)


@pytest.mark.asyncio
async def test_full_activation_scenario(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend, ledger: ShopCredentialLedger
) -> None:
    credential = await flow.shop_login(SERIAL, "S1", "secret", CORRELATION_ID)

    before = await flow.resolve_route(SERIAL, credential.token, CORRELATION_ID)
    after = await flow.activate(SERIAL, credential.token, CUSTOMER, CORRELATION_ID)

    assert before.kind == RouteKind.NEEDS_ACTIVATION_DETAILS
    assert after.kind == RouteKind.SHOW_WARRANTY_INFO
    assert backend.calls_to("activate_code") == [(SERIAL, credential.token)]
    assert ledger.is_consumed(credential.token)
    assert backend.records[SERIAL].code.customer_name == "Jane"


@pytest.mark.asyncio
async def test_consumed_session_cannot_activate_again(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend
) -> None:
    backend.add_record("SN-002")
    credential = await flow.shop_login(SERIAL, "S1", "secret", CORRELATION_ID)
    await flow.activate(SERIAL, credential.token, CUSTOMER, CORRELATION_ID)

    # Same token, a different code: the session was single use
    with pytest.raises(WarrantyServiceError) as exc_info:
        await flow.activate("SN-002", credential.token, CUSTOMER, CORRELATION_ID)

    assert exc_info.value.error_code == WarrantyErrorCode.SHOP_SESSION_CONSUMED.value
    assert len(backend.calls_to("activate_code")) == 1


@pytest.mark.asyncio
async def test_session_is_scoped_to_its_serial(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend
) -> None:
    backend.add_record("SN-002")
    credential = await flow.shop_login(SERIAL, "S1", "secret", CORRELATION_ID)

    decision = await flow.resolve_route("SN-002", credential.token, CORRELATION_ID)

    assert decision.kind == RouteKind.NEEDS_SHOP_AUTHENTICATION


@pytest.mark.asyncio
async def test_activate_without_session_is_unauthenticated(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend
) -> None:
    with pytest.raises(WarrantyServiceError) as exc_info:
        await flow.activate(SERIAL, None, CUSTOMER, CORRELATION_ID)

    assert exc_info.value.error_code == ErrorCode.AUTHENTICATION_ERROR.value
    assert backend.calls_to("activate_code") == []


@pytest.mark.asyncio
async def test_activate_already_activated_code_is_rejected(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend
) -> None:
    backend.add_record("SN-ACT", is_activated=True, activation_date=datetime.now(timezone.utc))
    credential = await flow.shop_login("SN-ACT", "S1", "secret", CORRELATION_ID)

    with pytest.raises(WarrantyServiceError) as exc_info:
        await flow.activate("SN-ACT", credential.token, CUSTOMER, CORRELATION_ID)

    assert exc_info.value.error_code == WarrantyErrorCode.CODE_ALREADY_ACTIVATED.value


@pytest.mark.asyncio
async def test_activate_unknown_serial_is_not_found(flow: CodeActivationFlow) -> None:
    with pytest.raises(WarrantyServiceError) as exc_info:
        await flow.activate("SN-404", "whatever", CUSTOMER, CORRELATION_ID)

    assert exc_info.value.error_code == ErrorCode.RESOURCE_NOT_FOUND.value


@pytest.mark.asyncio
async def test_failed_activation_keeps_session_usable(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend, ledger: ShopCredentialLedger
) -> None:
    credential = await flow.shop_login(SERIAL, "S1", "secret", CORRELATION_ID)
    backend.failures["activate_code"] = backend_rejection("QR code not assigned to this shop")

    with pytest.raises(WarrantyServiceError) as exc_info:
        await flow.activate(SERIAL, credential.token, CUSTOMER, CORRELATION_ID)

    assert exc_info.value.message == "QR code not assigned to this shop"
    assert not ledger.is_consumed(credential.token)


@pytest.mark.asyncio
async def test_wrong_shop_password_is_unauthenticated(flow: CodeActivationFlow) -> None:
    with pytest.raises(WarrantyServiceError) as exc_info:
        await flow.shop_login(SERIAL, "S1", "wrong", CORRELATION_ID)

    assert exc_info.value.error_code == ErrorCode.AUTHENTICATION_ERROR.value


@pytest.mark.asyncio
async def test_warranty_info_computes_coverage(
    flow: CodeActivationFlow, backend: FakeWarrantyBackend
) -> None:
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    backend.add_record("SN-ACT", is_activated=True, activation_date=now - timedelta(days=350))

    view = await flow.warranty_info("SN-ACT", now, CORRELATION_ID)

    assert view.computation.remaining_days == 15
    assert view.computation.status == WarrantyStatus.NEAR_EXPIRY


@pytest.mark.asyncio
async def test_warranty_info_for_pending_code_is_rejected(flow: CodeActivationFlow) -> None:
    with pytest.raises(WarrantyServiceError) as exc_info:
        await flow.warranty_info(SERIAL, datetime.now(timezone.utc), CORRELATION_ID)

    assert exc_info.value.error_code == ErrorCode.VALIDATION_ERROR.value
