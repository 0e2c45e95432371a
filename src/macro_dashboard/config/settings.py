"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from macro_dashboard.core.timezone import parse_wall_clock

DATABASE_FILENAME = "market_cache.db"


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".macro_dashboard"


class Settings(BaseSettings):
    """
    Market cache configuration loaded from environment variables or `.env`.

    Interval and timeout fields must be positive; the market close time and
    timezone are checked when settings are built, not on the first refresh.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Macro Dashboard"
    app_version: str = "0.1.0"

    # SQLite database and log file live here unless overridden
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None

    log_level: str = "INFO"
    log_file: Optional[str] = None  # relative paths resolve under data_dir/logs

    # Staleness classes
    spot_price_interval_minutes: int = Field(default=15, gt=0)
    treasury_interval_minutes: int = Field(default=60, gt=0)
    inflation_interval_minutes: int = Field(default=60, gt=0)
    market_close_time: str = "15:30"
    market_timezone: str = "US/Central"

    # Adapters
    provider_mode: str = "live"  # "live" or "stub"
    fetch_timeout_seconds: float = Field(default=20.0, gt=0)
    http_user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    bls_api_key: Optional[str] = None

    # Quarterly upserts within this difference are treated as unchanged
    quarterly_update_epsilon: float = Field(default=0.001, ge=0)

    # Background refresh
    scheduler_enabled: bool = True
    scheduler_tick_seconds: int = Field(default=60, gt=0)

    @field_validator("market_close_time")
    @classmethod
    def check_close_time(cls, v: str) -> str:
        try:
            parse_wall_clock(v)
        except ValueError:
            raise ValueError(f"market_close_time must be HH:MM, got {v!r}")
        return v.strip()

    @field_validator("market_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v!r}")
        return v

    @field_validator("provider_mode")
    @classmethod
    def check_provider_mode(cls, v: str) -> str:
        mode = v.strip().lower()
        if mode not in ("live", "stub"):
            raise ValueError(f"provider_mode must be 'live' or 'stub', got {v!r}")
        return mode

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving a SQLite file in data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / DATABASE_FILENAME
        return f"sqlite:///{db_path}"

    def get_log_path(self) -> Optional[Path]:
        """Resolve log_file, or None to log to stdout only."""
        if not self.log_file:
            return None
        path = Path(self.log_file)
        if not path.is_absolute():
            log_dir = self.get_data_dir() / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            path = log_dir / path
        return path


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
