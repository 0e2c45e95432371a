"""Timezone utilities for UTC storage and market-local wall-clock time."""

from datetime import datetime, time, timedelta
from typing import Optional

import pytz
from dateutil import parser as date_parser

UTC = pytz.utc
DEFAULT_MARKET_TZ = pytz.timezone("US/Central")


def now_utc() -> datetime:
    """Return current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert a datetime to UTC."""
    if dt.tzinfo is None:
        # Naive datetimes are stored as UTC
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def parse_datetime_utc(value: str) -> datetime:
    """
    Parse a datetime string and return it in UTC.

    If no timezone is provided in the string, assumes UTC.
    """
    return to_utc(date_parser.parse(value))


def get_market_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    """Return the pytz timezone for a market, defaulting to US/Central."""
    if not name:
        return DEFAULT_MARKET_TZ
    return pytz.timezone(name)


def parse_wall_clock(value: str) -> time:
    """Parse an HH:MM wall-clock string."""
    hour, minute = value.strip().split(":")
    return time(int(hour), int(minute))


def most_recent_close(
    now: datetime,
    close_time: time,
    market_tz: pytz.BaseTzInfo,
) -> Optional[datetime]:
    """
    Return the most recent weekday market-close instant at or before now, in UTC.

    Walks back at most a week; returns None only if no weekday was found,
    which cannot happen for a real calendar.
    """
    local_now = to_utc(now).astimezone(market_tz)
    day = local_now.date()
    for _ in range(8):
        if day.weekday() < 5:
            candidate = market_tz.localize(datetime.combine(day, close_time))
            if candidate <= local_now:
                return candidate.astimezone(UTC)
        day -= timedelta(days=1)
    return None
