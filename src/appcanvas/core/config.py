"""Configuration management for AppCanvas.

Settings come from ``APPCANVAS_*`` environment variables and an optional
``.env`` file, validated once by pydantic-settings and cached for the life
of the process.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SQLITE_MEMORY = ":memory:"


class Settings(BaseSettings):
    """Service configuration.

    Two stores are configured separately: the metadata database
    (``database_url``) that holds databases, tables and columns, and the
    tenant storage (``storage_driver`` and ``namespace_root``) that holds
    one namespace of records per logical database.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="APPCANVAS_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "AppCanvas"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    host: str = "0.0.0.0"
    port: int = 8000

    # Metadata store
    database_url: str = "sqlite+aiosqlite:///./ac_data/appcanvas.db"
    db_echo: bool = False

    # Tenant storage
    storage_driver: Literal["sqlite", "memory"] = "sqlite"
    namespace_root: Path = Path("./ac_data/namespaces")

    owner_header: str = Field(
        default="X-Owner-Id",
        description="Header carrying the authenticated owner id set by the auth gateway",
    )

    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://localhost:5173"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated origin list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("storage_driver", "log_format", mode="before")
    @classmethod
    def lower_choice(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("owner_header")
    @classmethod
    def require_header_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("owner_header must name a header")
        return v.strip()

    @property
    def metadata_sqlite_path(self) -> Path | None:
        """File backing a SQLite metadata database, or None for other engines and in-memory SQLite."""
        if not self.database_url.startswith("sqlite"):
            return None
        location = self.database_url.split(":///", 1)[-1]
        if not location or location == SQLITE_MEMORY:
            return None
        return Path(location)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
