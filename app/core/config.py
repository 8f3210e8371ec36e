# app/core/config.py
# All application settings loaded from environment variables / .env file
# In production: values come from the deployment's secret store via env injection
# In development: loaded from .env file

from decimal import Decimal
from functools import lru_cache
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all TutorHub configuration.
    pydantic-settings automatically reads from environment variables.
    Variable names are case-insensitive.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: str = "development"
    app_name: str = "TutorHub"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    auto_migrate_on_startup: bool = False

    # Server
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Database
    database_url: str

    # JWT -- tokens are issued by the identity provider, we only verify them
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Webhooks
    auth_webhook_secret: str = ""       # identity provider -> /auth/identity-events
    payment_webhook_secret: str = ""    # payment collaborator -> /transactions/webhook

    # Ledger
    commission_rate: Decimal = Decimal("0.10")

    @field_validator("commission_rate")
    @classmethod
    def valid_commission_rate(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 1:
            raise ValueError("COMMISSION_RATE must be between 0 and 1")
        return v

    @model_validator(mode="after")
    def webhook_secrets_required_in_production(self) -> "Settings":
        if self.is_production:
            missing = [
                name.upper()
                for name in ("auth_webhook_secret", "payment_webhook_secret")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"{', '.join(missing)} must be set when APP_ENV=production")
        return self

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cors_origins(self) -> List[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached Settings instance.
    Use as a FastAPI dependency: settings = Depends(get_settings)
    Or import directly:         from app.core.config import settings
    """
    return Settings()


# Module-level singleton -- import this directly in most places
settings = get_settings()
