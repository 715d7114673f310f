"""
Application settings read from the environment (and an optional ``.env``).

Database connection settings live in furniture_api.db.config so migration
tooling can load them without the web stack.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class AppSettings(BaseSettings):
    APP_NAME: str = "Furniture Shop API"
    APP_DESCRIPTION: str = (
        "Catalog, cart and checkout for a furniture workshop, with bill-of-materials "
        "stock deduction, GCash/Maya payments and production tracking."
    )
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = Field(default="INFO", description="Root log level name")

    # Comma separated; "*" allows any origin.
    CORS_ORIGINS: str = "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default=True, description="alembic upgrade head on startup")
    AUTO_SEED: bool = Field(default=False, description="Load raw materials and sample products on startup")
    SEED_EMPLOYEE_EMAIL: Optional[str] = Field(default=None, description="Staff account created by seeding")
    SEED_EMPLOYEE_PASSWORD: Optional[str] = None

    JWT_SECRET_KEY: str = Field(default="change-me", description="HMAC key for signing tokens")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Redirect targets handed to payment providers.
    APP_URL: str = Field(default="http://localhost:8000", description="Public base URL of this API")
    FRONTEND_URL: str = Field(default="http://localhost:3000", description="Public base URL of the web client")

    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = Field(default=None, description="whsec_... used to verify webhooks")
    MAYA_PUBLIC_KEY: Optional[str] = Field(default=None, description="Maya Checkout public API key")
    MAYA_BASE_URL: str = "https://pg-sandbox.paymaya.com"
    PAYMENT_TIMEOUT_SECONDS: float = 15.0
    PAYMENT_CURRENCY: str = "PHP"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.CORS_ORIGINS) or ["*"]


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Build AppSettings from the current environment.

    Not cached: tests monkeypatch environment variables between calls.
    """
    return AppSettings()
