"""Staleness policy deciding which data sources are due for a refresh."""

from datetime import datetime, time, timedelta
from typing import Optional

import pytz

from macro_dashboard.config.settings import Settings
from macro_dashboard.core.timezone import (
    DEFAULT_MARKET_TZ,
    get_market_timezone,
    most_recent_close,
    parse_wall_clock,
    to_utc,
)
from macro_dashboard.domain.models import DataSource, MarketCache


class StalenessPolicy:
    """
    Per-source refresh rules.

    Spot price, treasury and inflation use fixed intervals. Fundamentals are
    refreshed once per trading day (Mon-Fri) after the market close wall-clock
    time. A source that never succeeded is always due.
    """

    def __init__(
        self,
        spot_price_interval: timedelta = timedelta(minutes=15),
        treasury_interval: timedelta = timedelta(hours=1),
        inflation_interval: timedelta = timedelta(hours=1),
        close_time: time = time(15, 30),
        market_tz: pytz.BaseTzInfo = DEFAULT_MARKET_TZ,
    ):
        self._intervals = {
            DataSource.SPOT_PRICE: spot_price_interval,
            DataSource.TREASURY: treasury_interval,
            DataSource.INFLATION: inflation_interval,
        }
        self._close_time = close_time
        self._market_tz = market_tz

    @classmethod
    def from_settings(cls, settings: Settings) -> "StalenessPolicy":
        return cls(
            spot_price_interval=timedelta(minutes=settings.spot_price_interval_minutes),
            treasury_interval=timedelta(minutes=settings.treasury_interval_minutes),
            inflation_interval=timedelta(minutes=settings.inflation_interval_minutes),
            close_time=parse_wall_clock(settings.market_close_time),
            market_tz=get_market_timezone(settings.market_timezone),
        )

    def is_due(self, source: DataSource, last: Optional[datetime], now: datetime) -> bool:
        """Return True if a source should be fetched at `now` given its last success."""
        if last is None:
            return True

        now = to_utc(now)
        last = to_utc(last)

        if source == DataSource.FUNDAMENTALS:
            close = most_recent_close(now, self._close_time, self._market_tz)
            return close is not None and last < close

        return now - last >= self._intervals[source]

    def due_sources(self, cache: MarketCache, now: datetime) -> list[DataSource]:
        """Return the sources due for a refresh, in enum order."""
        return [
            source
            for source in DataSource
            if self.is_due(source, cache.timestamps.get(source), now)
        ]
