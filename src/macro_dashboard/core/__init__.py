"""Core utilities and shared functionality."""

from macro_dashboard.core.timezone import (
    now_utc,
    to_utc,
    parse_datetime_utc,
    get_market_timezone,
    parse_wall_clock,
    most_recent_close,
    UTC,
)
from macro_dashboard.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    SourceUnavailableError,
    InsufficientDataError,
    PersistenceError,
)

__all__ = [
    "now_utc",
    "to_utc",
    "parse_datetime_utc",
    "get_market_timezone",
    "parse_wall_clock",
    "most_recent_close",
    "UTC",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "SourceUnavailableError",
    "InsufficientDataError",
    "PersistenceError",
]
