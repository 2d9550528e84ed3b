"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - page_limit_default never exceeds page_limit_max

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults work out-of-the-box with the in-memory backend; sql needs DATABASE_URL
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Storage
    storage_backend: Literal["sql", "memory"] = "memory"

    # Database
    database_url: str = "postgresql+asyncpg://vtn:vtn@db:5432/vtn"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgres:// URLs; asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str):
            for prefix in ("postgresql://", "postgres://"):
                if v.startswith(prefix):
                    return v.replace(prefix, "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    # create missing tables on startup (SQLite/dev); PostgreSQL deployments run Alembic
    database_auto_create: bool = False

    # Pagination
    page_limit_default: int = 50
    page_limit_max: int = 50

    @model_validator(mode="after")
    def check_page_limits(self) -> "Settings":
        if not 1 <= self.page_limit_default <= self.page_limit_max:
            raise ValueError("page_limit_default must be within 1..page_limit_max")
        return self

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
