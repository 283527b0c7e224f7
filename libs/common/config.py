from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse
import os

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralised configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=("env.example", ".env"), env_file_encoding="utf-8", extra="ignore")

    app_env: Literal["local", "dev", "prod"] = "local"
    log_level: str = "INFO"

    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    postgres_db: str = Field(default="storefront", alias="POSTGRES_DB")
    postgres_user: str = Field(default="storefront", alias="POSTGRES_USER")
    postgres_password: str = Field(default="storefront", alias="POSTGRES_PASSWORD")
    postgres_ssl_mode: str = Field(default="prefer", alias="POSTGRES_SSL_MODE")

    @model_validator(mode="after")
    def parse_database_url(self):
        """Split DATABASE_URL into the postgres components if provided."""
        db_url = os.getenv("DATABASE_URL")
        if db_url and db_url.startswith("postgres"):
            parsed = urlparse(db_url)
            self.postgres_user = parsed.username or self.postgres_user
            self.postgres_password = parsed.password or self.postgres_password
            self.postgres_host = parsed.hostname or self.postgres_host
            self.postgres_port = parsed.port or self.postgres_port
            self.postgres_db = parsed.path.lstrip("/") if parsed.path else self.postgres_db

        return self

    # "atomic" swaps both keys in one transaction, "two_step" issues two independent writes
    catalog_reorder_mode: Literal["atomic", "two_step"] = Field(default="atomic", alias="CATALOG_REORDER_MODE")
    catalog_verify_revision: bool = Field(default=True, alias="CATALOG_VERIFY_REVISION")

    order_search_limit: int = Field(default=200, alias="ORDER_SEARCH_LIMIT")
    notification_history: int = Field(default=50, alias="NOTIFICATION_HISTORY")

    @property
    def database_url(self) -> str:
        """Get database URL, preferring DATABASE_URL if available."""
        db_url = os.getenv("DATABASE_URL")
        if db_url:
            # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy
            return db_url.replace("postgres://", "postgresql+asyncpg://", 1)
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()  # type: ignore[arg-type]
