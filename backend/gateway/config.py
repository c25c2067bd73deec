"""
Event Gateway: Application Configuration
=========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Passed into every collaborator client and action. The module-level
       singleton is only the default used when nothing else is injected.
When:  Loaded once at module import time; mandatory values are validated
       during app startup (lifespan) and abort startup when missing.

Collaborators configured here:
    - Identity store (GraphQL endpoint, admin secret)
    - Token signing (JWT secret, issuer, expiry)
    - Object storage (Cloudinary credentials)
    - Payment provider (Chapa API key and checkout defaults)
    - Mail relay (SMTP host and app credentials)
"""

from typing import List

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only the identity store URL and the token signing secret are mandatory
    for the process to start. Vendor credentials are checked per request by
    the action that needs them, so a missing payment key fails payments only.
    """

    # ── Identity Store (GraphQL) ──────────────────────────────────────────
    graphql_url: str = Field(
        default="http://graphql-engine:8080/v1/graphql",
        description="GraphQL endpoint of the identity store",
    )
    hasura_admin_secret: SecretStr = Field(
        default=SecretStr(""),
        description="Sent as X-Hasura-Admin-Secret when non-empty",
    )
    graphql_timeout: float = Field(default=10.0, gt=0, le=120)

    # ── Bearer Tokens ─────────────────────────────────────────────────────
    jwt_secret: SecretStr = Field(default=SecretStr(""))
    jwt_issuer: str = Field(default="Event")
    # Tokens are stateless; expiry is the only revocation mechanism
    jwt_expiry_hours: int = Field(default=24, ge=1, le=24 * 30)
    jwt_claims_namespace: str = Field(default="https://hasura.io/jwt/claims")
    default_role: str = Field(default="user")

    # ── Password Hashing ──────────────────────────────────────────────────
    # bcrypt cost factor; 12 is the library default
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)

    # ── Object Storage (Cloudinary) ───────────────────────────────────────
    cloudinary_cloud_name: str = Field(default="")
    cloudinary_api_key: str = Field(default="")
    cloudinary_api_secret: SecretStr = Field(default=SecretStr(""))
    cloudinary_folder: str = Field(default="images")
    # Decoded size limit per image: 10MB
    max_image_size: int = Field(default=10_485_760, ge=1024, le=104_857_600)

    # ── Payment Provider (Chapa) ──────────────────────────────────────────
    chapa_api_key: SecretStr = Field(default=SecretStr(""))
    chapa_base_url: str = Field(default="https://api.chapa.co/v1")
    payment_currency: str = Field(default="ETB")
    payment_tx_prefix: str = Field(default="event")
    payment_callback_url: str = Field(default="")
    payment_return_url: str = Field(default="http://localhost:3000/successfullpay")
    payment_default_email: str = Field(default="")
    payment_default_first_name: str = Field(default="")
    payment_default_last_name: str = Field(default="")
    payment_title: str = Field(default="Event ticket payment")
    payment_description: str = Field(default="Payment for event booking")
    payment_timeout: float = Field(default=15.0, gt=0, le=120)

    # ── Mail Relay (SMTP) ─────────────────────────────────────────────────
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_username: str = Field(default="")
    smtp_password: SecretStr = Field(default=SecretStr(""))
    smtp_from: str = Field(default="")
    smtp_use_tls: bool = Field(default=True)
    smtp_timeout: float = Field(default=30.0, gt=0, le=300)
    welcome_subject: str = Field(default="Welcome to Event Management")
    app_display_name: str = Field(default="The Event Management Team")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list of origins
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    slow_request_ms: float = Field(default=3000.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting (credential endpoints) ──────────────────────────────
    rate_limit_requests: int = Field(default=20, ge=1, le=10000)
    rate_limit_window: int = Field(default=60, ge=1, le=86400)  # seconds

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Per-collaborator readiness ────────────────────────────────────────

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret.get_secret_value()
        )

    @property
    def payment_configured(self) -> bool:
        return bool(self.chapa_api_key.get_secret_value())

    @property
    def smtp_configured(self) -> bool:
        return bool(
            self.smtp_username
            and self.smtp_password.get_secret_value()
            and self.smtp_from
        )

    def validate_required_for_production(self) -> None:
        """
        Validates that the values every action depends on are configured.

        When:    Called during app startup (lifespan).
        Raises:  ValueError listing every missing value; startup is aborted.
        """
        errors = []
        if not self.graphql_url:
            errors.append("GRAPHQL_URL is not set.")
        secret = self.jwt_secret.get_secret_value()
        if not secret:
            errors.append("JWT_SECRET is not set. Tokens cannot be signed without it.")
        elif len(secret) < 32:
            errors.append("JWT_SECRET must be at least 32 characters for HS256.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, used as the default for injected settings
settings = Settings()
