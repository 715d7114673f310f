from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

ASYNC_DRIVER = "postgresql+asyncpg"
SYNC_DRIVER = "postgresql"


class Settings(BaseSettings):
    """
    Database connection settings.

    A full URL (DATABASE_URL or POSTGRES_URL) wins; otherwise the URL is built
    from POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB, POSTGRES_HOST and
    POSTGRES_PORT. Hosted-Postgres style ``postgres://`` URLs are accepted.
    """

    POSTGRES_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL"),
        description="Full connection URL",
    )
    POSTGRES_USER: Optional[str] = Field(default=None)
    POSTGRES_PASSWORD: Optional[str] = Field(default=None)
    POSTGRES_DB: Optional[str] = Field(default=None)
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)

    SQL_ECHO: bool = Field(default=False, description="Log every SQL statement")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    def _url(self) -> URL:
        if self.POSTGRES_URL:
            return make_url(self.POSTGRES_URL)
        missing = [
            name
            for name in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                "Database configuration missing: set DATABASE_URL/POSTGRES_URL or " + ", ".join(missing)
            )
        return URL.create(
            SYNC_DRIVER,
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )

    def _with_driver(self, drivername: str) -> str:
        url = self._url()
        if url.get_backend_name() in ("postgres", "postgresql"):
            url = url.set(drivername=drivername)
        return url.render_as_string(hide_password=False)

    @property
    def async_database_url(self) -> str:
        """URL for the runtime AsyncEngine (asyncpg driver)."""
        return self._with_driver(ASYNC_DRIVER)

    @property
    def sync_database_url(self) -> str:
        """Driver-less postgresql:// URL used by Alembic offline mode."""
        return self._with_driver(SYNC_DRIVER)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Read database settings from the environment."""
    return Settings()
