"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "stockledger.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    """Stock ledger write-path configuration."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    # "reject" fails outbound movements that exceed stock,
    # "clamp" truncates them to zero and reports a warning
    negative_stock_policy: Literal["reject", "clamp"] = "reject"

    # Optimistic lock retry settings
    max_retries: int = 25
    retry_wait_min: float = 0.001
    retry_wait_max: float = 0.05

    enforce_reorder_le_max: bool = True


class ForecastSettings(BaseSettings):
    """Forecast engine configuration."""

    model_config = SettingsConfigDict(env_prefix="FORECAST_")

    lookback_months: int = 6
    default_lead_time_days: int = 14
    validity_months: int = 3
    days_per_month: float = 30.0
    actionable_days: int = 30
    min_data_points: int = 3


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stock Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
