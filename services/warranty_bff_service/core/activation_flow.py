"""Public QR code flow: route resolution, shop login, activation, warranty lookup."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from services.libs.common_core.error_enums import ErrorCode
from services.libs.warranty_service_libs.error_handling import (
    WarrantyServiceError,
    raise_authentication_error,
    raise_code_already_activated,
    raise_resource_not_found,
    raise_shop_session_consumed,
    raise_validation_error,
)
from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.core import warranty_calculator
from services.warranty_bff_service.core.credentials import (
    ShopActivationCredential,
    ShopCredentialLedger,
)
from services.warranty_bff_service.core.lifecycle_resolver import (
    CodeVisit,
    RouteDecision,
    RouteKind,
    resolve,
)
from services.warranty_bff_service.core.warranty_calculator import WarrantyComputation
from services.warranty_bff_service.dto.backend_v1 import CodeRecord, CustomerDetails
from services.warranty_bff_service.protocols import WarrantyBackendClientProtocol

logger = create_service_logger("warranty_bff.activation_flow")

SERVICE = "warranty_bff_service"


@dataclass(frozen=True)
class WarrantyView:
    record: CodeRecord
    computation: WarrantyComputation


class CodeActivationFlow:
    """Drives a public visitor from a scanned serial to the warranty screen."""

    def __init__(
        self, backend: WarrantyBackendClientProtocol, ledger: ShopCredentialLedger
    ) -> None:
        self._backend = backend
        self._ledger = ledger

    async def _resolve(
        self,
        serial_number: str,
        shop_token: str | None,
        correlation_id: UUID,
        visit: CodeVisit,
    ) -> tuple[RouteDecision, ShopActivationCredential | None]:
        try:
            record = await self._backend.get_code_record(serial_number, correlation_id)
        except WarrantyServiceError as error:
            if error.error_code != ErrorCode.RESOURCE_NOT_FOUND.value:
                raise
            logger.info("Code not found", serial_number=serial_number)
            return visit.apply(resolve(serial_number, None, not_found_message=error.message)), None

        credential = self._ledger.lookup(shop_token, serial_number)
        decision = visit.apply(resolve(serial_number, record, credential))
        logger.debug("Resolved code route", serial_number=serial_number, kind=decision.kind.value)
        return decision, credential

    async def resolve_route(
        self,
        serial_number: str,
        shop_token: str | None,
        correlation_id: UUID,
    ) -> RouteDecision:
        """Fetch the code and decide the next screen.

        A not-found answer from the backend becomes a NOT_FOUND decision;
        every other failure propagates.
        """
        decision, _ = await self._resolve(
            serial_number, shop_token, correlation_id, CodeVisit(serial_number)
        )
        return decision

    async def shop_login(
        self, serial_number: str, shop_id: str, password: str, correlation_id: UUID
    ) -> ShopActivationCredential:
        """Authenticate a shop for activating ``serial_number``."""
        token = await self._backend.shop_login(shop_id, password, correlation_id)
        credential = self._ledger.issue(token, serial_number)
        logger.info("Shop authenticated", shop_id=shop_id, serial_number=serial_number)
        return credential

    async def activate(
        self,
        serial_number: str,
        shop_token: str | None,
        customer: CustomerDetails,
        correlation_id: UUID,
    ) -> RouteDecision:
        """Activate a code and return the follow-up decision (the warranty screen).

        Raises:
            WarrantyServiceError: RESOURCE_NOT_FOUND for unknown serials,
                SHOP_SESSION_CONSUMED when the token was already spent, an
                authentication error when no live shop credential is held and
                CODE_ALREADY_ACTIVATED when the code is active.
        """
        visit = CodeVisit(serial_number)
        decision, credential = await self._resolve(
            serial_number, shop_token, correlation_id, visit
        )

        if decision.kind == RouteKind.NOT_FOUND:
            raise_resource_not_found(
                service=SERVICE,
                operation="activate",
                resource_type="QR code",
                resource_id=serial_number,
                correlation_id=correlation_id,
                message=decision.message,
            )
        if decision.kind == RouteKind.SHOW_WARRANTY_INFO:
            raise_code_already_activated(
                service=SERVICE,
                operation="activate",
                correlation_id=correlation_id,
                serial_number=serial_number,
            )
        if credential is None:
            if shop_token and self._ledger.is_consumed(shop_token):
                raise_shop_session_consumed(
                    service=SERVICE,
                    operation="activate",
                    correlation_id=correlation_id,
                    serial_number=serial_number,
                )
            raise_authentication_error(
                service=SERVICE,
                operation="activate",
                message="Shop login required to activate this code",
                correlation_id=correlation_id,
                serial_number=serial_number,
            )

        await self._backend.activate_code(serial_number, credential, customer, correlation_id)
        self._ledger.consume(credential)

        decision, _ = await self._resolve(serial_number, None, correlation_id, visit)
        return decision

    async def warranty_info(
        self, serial_number: str, now: datetime, correlation_id: UUID
    ) -> WarrantyView:
        """Compute remaining coverage for an activated code."""
        record = await self._backend.get_code_record(serial_number, correlation_id)
        code = record.code
        if not code.is_activated or code.activation_date is None:
            raise_validation_error(
                service=SERVICE,
                operation="warranty_info",
                field="serial_number",
                message="QR code is not activated yet",
                correlation_id=correlation_id,
                value=serial_number,
            )
        duration = record.product.warranty_duration
        if duration is None:
            raise_validation_error(
                service=SERVICE,
                operation="warranty_info",
                field="warranty_duration",
                message="Product has no warranty duration",
                correlation_id=correlation_id,
                value=record.product.product_id,
            )

        computation = warranty_calculator.compute(code.activation_date, duration, now)
        return WarrantyView(record=record, computation=computation)
