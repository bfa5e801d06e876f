from functools import lru_cache

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Enum Behavior API")
    environment: Literal["dev", "test", "staging", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO", description="Level of the enum_behavior package logger")
    database_url: str = Field(default="sqlite+pysqlite:///:memory:")

    run_startup_ddl: bool = Field(default=True)

    default_locale: str = Field(default="en", min_length=2, description="Locale used when translating enum labels")
    i18n_preload_enabled: bool = Field(default=True, description="Preload message catalogs at startup to avoid disk I/O per lookup")

    enum_model_id_strategy: Literal["class_name", "table_name"] = Field(
        default="class_name",
        description="How EnumMixin derives the registry key of a model",
    )

    # Database connection pooling settings
    db_pool_size: int = Field(default=5, ge=1, le=50, description="Number of connections to keep in the pool")
    db_max_overflow: int = Field(default=10, ge=0, le=100, description="Max connections to create beyond pool_size")
    db_pool_timeout: int = Field(default=30, ge=1, le=300, description="Seconds to wait for connection from pool")
    db_pool_recycle: int = Field(default=3600, ge=300, description="Seconds before recycling a connection")
    db_pool_pre_ping: bool = Field(default=True, description="Enable connection health checks before use")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value in (None, "", b""):
            return "INFO"
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            return value.strip().upper()
        raise TypeError("LOG_LEVEL must be a logging level name")

    @field_validator("default_locale", mode="before")
    @classmethod
    def _normalize_locale(cls, value: object) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        raise TypeError("DEFAULT_LOCALE must be a locale code string")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
