"""Code lifecycle resolution.

One resolver decides which screen a visitor of ``/qr/{serial}`` must see next,
and a small state machine (``CodeVisit``) guards the order in which a single
visit may move through those screens. Activation is irreversible, so once a
visit reaches the warranty screen it can never be routed back to a login or
activation step.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from transitions import Machine

from services.warranty_bff_service.core.credentials import ShopActivationCredential
from services.warranty_bff_service.dto.backend_v1 import CodeRecord

DEFAULT_NOT_FOUND_MESSAGE = "QR code not found"


class RouteKind(str, Enum):
    UNRESOLVED = "unresolved"
    NEEDS_SHOP_AUTHENTICATION = "needs_shop_authentication"
    NEEDS_ACTIVATION_DETAILS = "needs_activation_details"
    SHOW_WARRANTY_INFO = "show_warranty_info"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RouteDecision:
    """Tagged result consumed uniformly by every code entry point."""

    kind: RouteKind
    serial_number: str
    route: str | None = None
    message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in (RouteKind.SHOW_WARRANTY_INFO, RouteKind.NOT_FOUND)


def shop_login_route(serial_number: str) -> str:
    return f"/shop/login/{serial_number}"


def activation_route(serial_number: str) -> str:
    return f"/activate/{serial_number}"


def warranty_route(serial_number: str) -> str:
    return f"/warranty/{serial_number}"


def not_found(serial_number: str, message: str | None = None) -> RouteDecision:
    return RouteDecision(
        kind=RouteKind.NOT_FOUND,
        serial_number=serial_number,
        message=message or DEFAULT_NOT_FOUND_MESSAGE,
    )


def resolve(
    serial_number: str,
    record: CodeRecord | None,
    shop_credential: ShopActivationCredential | None = None,
    *,
    not_found_message: str | None = None,
) -> RouteDecision:
    """Decide the next route for a code.

    Assignment is not checked here: the backend decides which
    shop may authenticate, the resolver only looks at activation and at whether
    the caller holds a live shop credential for this serial.
    """
    if record is None:
        return not_found(serial_number, not_found_message)

    if record.code.is_activated:
        return RouteDecision(
            kind=RouteKind.SHOW_WARRANTY_INFO,
            serial_number=serial_number,
            route=warranty_route(serial_number),
        )

    if shop_credential is not None and shop_credential.serial_number == serial_number:
        return RouteDecision(
            kind=RouteKind.NEEDS_ACTIVATION_DETAILS,
            serial_number=serial_number,
            route=activation_route(serial_number),
        )

    return RouteDecision(
        kind=RouteKind.NEEDS_SHOP_AUTHENTICATION,
        serial_number=serial_number,
        route=shop_login_route(serial_number),
    )


# Triggers
REQUIRE_SHOP_LOGIN = "require_shop_login"
COLLECT_ACTIVATION_DETAILS = "collect_activation_details"
SHOW_WARRANTY = "show_warranty"
MARK_NOT_FOUND = "mark_not_found"

TRIGGER_BY_KIND: dict[RouteKind, str] = {
    RouteKind.NEEDS_SHOP_AUTHENTICATION: REQUIRE_SHOP_LOGIN,
    RouteKind.NEEDS_ACTIVATION_DETAILS: COLLECT_ACTIVATION_DETAILS,
    RouteKind.SHOW_WARRANTY_INFO: SHOW_WARRANTY,
    RouteKind.NOT_FOUND: MARK_NOT_FOUND,
}


class CodeVisit:
    """State machine for one visitor's walk through a code's screens.

    Raises ``transitions.MachineError`` when a decision would move the visit
    backwards out of a terminal state.
    """

    def __init__(self, serial_number: str) -> None:
        self.serial_number = serial_number
        self.decisions: list[RouteDecision] = []

        unresolved = RouteKind.UNRESOLVED.value
        needs_auth = RouteKind.NEEDS_SHOP_AUTHENTICATION.value
        needs_details = RouteKind.NEEDS_ACTIVATION_DETAILS.value
        warranty = RouteKind.SHOW_WARRANTY_INFO.value

        transitions = [
            {
                "trigger": REQUIRE_SHOP_LOGIN,
                "source": [unresolved, needs_auth, needs_details],
                "dest": needs_auth,
            },
            {
                "trigger": COLLECT_ACTIVATION_DETAILS,
                "source": [unresolved, needs_auth, needs_details],
                "dest": needs_details,
            },
            # A code may also be activated by another session between two lookups
            {
                "trigger": SHOW_WARRANTY,
                "source": [unresolved, needs_auth, needs_details, warranty],
                "dest": warranty,
            },
            {
                "trigger": MARK_NOT_FOUND,
                "source": unresolved,
                "dest": RouteKind.NOT_FOUND.value,
            },
        ]

        self.machine = Machine(
            model=self,
            states=[kind.value for kind in RouteKind],
            transitions=transitions,
            initial=unresolved,
            auto_transitions=False,
        )

    @property
    def current(self) -> RouteKind:
        return RouteKind(self.state)

    def apply(self, decision: RouteDecision) -> RouteDecision:
        """Advance the visit to ``decision`` and return it."""
        self.trigger(TRIGGER_BY_KIND[decision.kind])
        self.decisions.append(decision)
        return decision
