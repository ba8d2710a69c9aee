"""Configuration for Warranty BFF Service.

Uses Pydantic settings for environment-based configuration.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from services.libs.common_core.config_enums import Environment


class WarrantyBFFSettings(BaseSettings):
    """Configuration settings for Warranty BFF Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WARRANTY_BFF_SERVICE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Service identity
    SERVICE_NAME: str = "warranty-bff-service"

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",
        description="Runtime environment for the service",
    )

    # HTTP server configuration
    HOST: str = Field(default="0.0.0.0", description="HTTP server host")
    PORT: int = Field(default=4201, description="HTTP server port")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # CORS configuration for frontend development
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:4173", "http://localhost:3000"],
        description="Allowed CORS origins for the warranty frontend",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=True, description="Allow credentials in CORS requests"
    )
    CORS_ALLOW_METHODS: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods for CORS",
    )
    CORS_ALLOW_HEADERS: list[str] = Field(
        default=["*"], description="Allowed headers for CORS requests"
    )

    # External warranty backend
    WARRANTY_BACKEND_URL: str = Field(
        default="http://warranty_backend:5000",
        description="Warranty backend base URL (owns persistence, tokens and PDF rendering)",
    )

    # HTTP client configuration
    HTTP_CLIENT_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="HTTP client request timeout in seconds",
    )
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="HTTP client connection timeout in seconds",
    )

    # Sticker sheet layout forwarded to the backend renderer
    STICKER_VERTICAL_SPACING_INCHES: float = Field(
        default=0.05, ge=0.0, description="Vertical gap between stickers"
    )
    STICKER_HORIZONTAL_SPACING_INCHES: float = Field(
        default=0.0, ge=0.0, description="Horizontal gap between stickers (0 = touching)"
    )

    # In-memory session state
    SHOP_SESSION_TTL_SECONDS: float = Field(
        default=3600.0, gt=0.0, description="Lifetime of an unused shop activation session"
    )
    SHOP_SESSION_MAX_ENTRIES: int = Field(
        default=10_000, ge=1, description="Shop sessions kept before the oldest are evicted"
    )
    ADMIN_REVOKED_TOKENS_MAX: int = Field(
        default=10_000, ge=1, description="Logged-out admin tokens remembered as revoked"
    )

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT


# Global settings instance
settings = WarrantyBFFSettings()
