"""Dependency Injection providers for Warranty BFF Service.

Provides Dishka DI container setup with APP-scoped infrastructure and
REQUEST-scoped context providers.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from uuid import UUID, uuid4

import httpx
from dishka import Provider, Scope, from_context, provide
from fastapi import Request

from services.libs.warranty_service_libs.error_handling import raise_authentication_error
from services.libs.warranty_service_libs.logging_utils import create_service_logger
from services.warranty_bff_service.clients.warranty_backend_client import (
    WarrantyBackendClientImpl,
)
from services.warranty_bff_service.config import WarrantyBFFSettings, settings
from services.warranty_bff_service.core.activation_flow import CodeActivationFlow
from services.warranty_bff_service.core.admin_workspace import WorkspaceRegistry
from services.warranty_bff_service.core.credentials import AdminCredential, ShopCredentialLedger
from services.warranty_bff_service.protocols import WarrantyBackendClientProtocol

logger = create_service_logger("warranty_bff.di")

SHOP_SESSION_HEADER = "X-Shop-Session"


@dataclass(frozen=True)
class ShopSessionToken:
    """Raw X-Shop-Session header value; validated against the ledger per serial."""

    value: str | None


class WarrantyBFFProvider(Provider):
    """Infrastructure provider for Warranty BFF Service.

    Provides APP-scoped dependencies: config, HTTP client, backend client and
    the in-memory session state (shop ledger, admin workspaces).
    """

    scope = Scope.APP

    @provide
    def get_config(self) -> WarrantyBFFSettings:
        """Provide settings singleton."""
        return settings

    @provide(scope=Scope.APP)
    async def get_http_client(
        self, config: WarrantyBFFSettings
    ) -> AsyncIterator[httpx.AsyncClient]:
        """Provide shared HTTP client with connection pooling."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.HTTP_CLIENT_TIMEOUT_SECONDS,
                connect=config.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
            )
        ) as client:
            yield client

    @provide(scope=Scope.APP)
    def provide_backend_client(
        self, http_client: httpx.AsyncClient, config: WarrantyBFFSettings
    ) -> WarrantyBackendClientProtocol:
        """Provide warranty backend client singleton."""
        return WarrantyBackendClientImpl(http_client, config.WARRANTY_BACKEND_URL)

    @provide(scope=Scope.APP)
    def provide_shop_ledger(self, config: WarrantyBFFSettings) -> ShopCredentialLedger:
        return ShopCredentialLedger(
            ttl_seconds=config.SHOP_SESSION_TTL_SECONDS,
            max_entries=config.SHOP_SESSION_MAX_ENTRIES,
        )

    @provide(scope=Scope.APP)
    def provide_workspace_registry(
        self, backend: WarrantyBackendClientProtocol, config: WarrantyBFFSettings
    ) -> WorkspaceRegistry:
        return WorkspaceRegistry(backend, max_revoked=config.ADMIN_REVOKED_TOKENS_MAX)

    @provide(scope=Scope.APP)
    def provide_activation_flow(
        self, backend: WarrantyBackendClientProtocol, ledger: ShopCredentialLedger
    ) -> CodeActivationFlow:
        return CodeActivationFlow(backend, ledger)


class RequestContextProvider(Provider):
    """Request-scoped provider for correlation and credential context.

    Correlation id comes from request state (set by CorrelationIDMiddleware);
    the admin credential from the ``Authorization: Bearer`` header and the shop
    session from ``X-Shop-Session``.
    """

    request = from_context(provides=Request, scope=Scope.REQUEST)

    @provide(scope=Scope.REQUEST)
    def provide_correlation_id(self, request: Request) -> UUID:
        """Provide correlation ID from request state."""
        return getattr(request.state, "correlation_id", uuid4())

    @provide(scope=Scope.REQUEST)
    def provide_admin_credential(
        self, request: Request, registry: WorkspaceRegistry
    ) -> AdminCredential:
        """Provide the admin credential from the bearer header.

        Requests without a bearer token, or with a token ended by logout, are
        rejected as unauthenticated.
        """
        correlation_id = getattr(request.state, "correlation_id", uuid4())
        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            logger.warning("Missing admin bearer token")
            raise_authentication_error(
                service="warranty_bff_service",
                operation="provide_admin_credential",
                message="Admin login required",
                correlation_id=correlation_id,
            )
        if registry.is_revoked(token):
            raise_authentication_error(
                service="warranty_bff_service",
                operation="provide_admin_credential",
                message="Session ended, please log in again",
                correlation_id=correlation_id,
            )
        return AdminCredential(token=token)

    @provide(scope=Scope.REQUEST)
    def provide_shop_session(self, request: Request) -> ShopSessionToken:
        return ShopSessionToken(value=request.headers.get(SHOP_SESSION_HEADER) or None)
