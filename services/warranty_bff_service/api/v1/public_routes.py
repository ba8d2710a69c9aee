"""Public QR code routes.

Endpoints behind the printed QR codes: resolve which screen a scanned serial
leads to, log a shop in for one activation, activate, and show warranty info.
No admin credential is involved; the shop session travels in X-Shop-Session.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter

from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.core.activation_flow import CodeActivationFlow
from services.warranty_bff_service.core.lifecycle_resolver import RouteDecision
from services.warranty_bff_service.di import ShopSessionToken
from services.warranty_bff_service.dto.backend_v1 import CustomerDetails
from services.warranty_bff_service.dto.warranty_v1 import (
    ActivationRequestV1,
    RouteDecisionResponseV1,
    ShopLoginRequestV1,
    ShopLoginResponseV1,
    WarrantyInfoResponseV1,
)

router = APIRouter()
logger = create_service_logger("warranty_bff.public_routes")


def _decision_response(decision: RouteDecision) -> RouteDecisionResponseV1:
    return RouteDecisionResponseV1(
        kind=decision.kind,
        serial_number=decision.serial_number,
        route=decision.route,
        message=decision.message,
    )


@router.get("/codes/{serial_number}/route", response_model=RouteDecisionResponseV1)
@inject
async def resolve_code_route(
    serial_number: str,
    flow: FromDishka[CodeActivationFlow],
    shop_session: FromDishka[ShopSessionToken],
    correlation_id: FromDishka[UUID],
) -> RouteDecisionResponseV1:
    """Decide the next screen for a scanned code.

    Unknown serials answer 200 with kind ``not_found`` so every entry point
    renders the same decision shape.
    """
    decision = await flow.resolve_route(serial_number, shop_session.value, correlation_id)
    return _decision_response(decision)


@router.post("/shop/login", response_model=ShopLoginResponseV1)
@inject
async def shop_login(
    body: ShopLoginRequestV1,
    flow: FromDishka[CodeActivationFlow],
    correlation_id: FromDishka[UUID],
) -> ShopLoginResponseV1:
    """Authenticate a shop for activating one serial."""
    credential = await flow.shop_login(
        body.serial_number, body.shop_id, body.password, correlation_id
    )
    decision = await flow.resolve_route(body.serial_number, credential.token, correlation_id)
    return ShopLoginResponseV1(
        shop_session=credential.token,
        serial_number=credential.serial_number,
        next=_decision_response(decision),
    )


@router.post("/codes/{serial_number}/activate", response_model=RouteDecisionResponseV1)
@inject
async def activate_code(
    serial_number: str,
    body: ActivationRequestV1,
    flow: FromDishka[CodeActivationFlow],
    shop_session: FromDishka[ShopSessionToken],
    correlation_id: FromDishka[UUID],
) -> RouteDecisionResponseV1:
    """Activate a code with the shop session; answers with the warranty route."""
    customer = CustomerDetails(
        customer_name=body.customer_name,
        customer_address=body.customer_address,
        customer_phone=body.customer_phone,
    )
    decision = await flow.activate(serial_number, shop_session.value, customer, correlation_id)
    logger.info("Code activation completed", serial_number=serial_number)
    return _decision_response(decision)


@router.get("/codes/{serial_number}/warranty", response_model=WarrantyInfoResponseV1)
@inject
async def get_warranty_info(
    serial_number: str,
    flow: FromDishka[CodeActivationFlow],
    correlation_id: FromDishka[UUID],
) -> WarrantyInfoResponseV1:
    view = await flow.warranty_info(serial_number, datetime.now(timezone.utc), correlation_id)
    code, product = view.record.code, view.record.product
    computation = view.computation

    return WarrantyInfoResponseV1(
        serial_number=code.serial_number,
        product_name=product.product_name,
        manufacturer=product.manufacturer,
        category=product.category,
        image_url=product.image_url,
        shop_name=view.record.shop.shop_name if view.record.shop else None,
        customer_name=code.customer_name,
        activation_date=code.activation_date,
        warranty_duration_days=product.warranty_duration,
        end_date=computation.end_date,
        remaining_days=computation.display_remaining_days,
        status=computation.status,
    )
