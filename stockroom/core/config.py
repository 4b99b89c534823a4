from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, Iterable, Literal
from zoneinfo import ZoneInfo

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Stockroom"
    # Zone used to render stored date-times. Empty means the host's local zone.
    APP_TZ: str = ""

    DB_URL: str = Field(
        default="sqlite+aiosqlite:///./stockroom.db",
        validation_alias=AliasChoices("DATABASE_URL", "DB_URL"),
    )
    DB_POOL_SIZE: int = Field(default=5, ge=1)
    DB_ECHO: bool = False

    STORAGE_BACKEND: Literal["sql", "memory"] = "sql"
    SEED_DEMO_DATA: bool = False

    JWT_SECRET: str = "change-me"
    JWT_TTL_SECONDS: int = 60 * 60 * 24
    BCRYPT_ROUNDS: int = Field(default=8, ge=4, le=31)
    REQUIRE_AUTH: bool = False

    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])
    METRICS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    SERIAL_ALLOCATION_ATTEMPTS: int = Field(default=10, ge=1)

    HOST: str = "0.0.0.0"
    PORT: int = 8080

    @property
    def local_zone(self) -> ZoneInfo | None:
        return ZoneInfo(self.APP_TZ) if self.APP_TZ else None

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
