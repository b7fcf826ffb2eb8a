from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuración centralizada del backend con validación de tipos."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
    )

    # Current RMS (unset credentials mean the dashboard runs on demo data)
    current_rms_subdomain: str | None = Field(default=None)
    current_rms_auth_token: str | None = Field(default=None)
    current_rms_base_url: str = Field(default="https://api.current-rms.com/api/v1")
    rms_timeout_seconds: float = Field(default=30.0, gt=0, le=600)

    # Pagination
    rms_page_size: int = Field(default=50, ge=1, le=100)
    rms_max_pages: int = Field(default=1000, ge=1, le=1000)

    # Dashboard
    demo_fallback_enabled: bool = True
    dashboard_timezone: str = Field(default="UTC")

    # View memoization
    view_cache_ttl_seconds: int = Field(default=300, ge=10, le=86400)
    view_cache_max_size: int = Field(default=100, ge=1, le=10000)

    @field_validator("dashboard_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def rms_configured(self) -> bool:
        return bool(self.current_rms_subdomain and self.current_rms_auth_token)

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.dashboard_timezone)


@lru_cache
def get_settings() -> Settings:
    """Singleton cacheado para evitar recargar .env en cada request."""
    return Settings()


settings = get_settings()
