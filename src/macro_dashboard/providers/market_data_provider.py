"""Market data provider protocol."""

from typing import Protocol

from macro_dashboard.domain.views import FundamentalsBatch


class MarketDataProvider(Protocol):
    """
    Protocol for external market data sources.

    Every fetch either returns a value or raises. Callers treat any exception
    (and a timeout) as a failed fetch and keep their cached value.
    """

    def fetch_spot_price(self) -> float:
        """Fetch the current S&P 500 index level."""
        ...

    def fetch_fundamentals(self) -> FundamentalsBatch:
        """
        Fetch the fundamentals batch.

        Individual observations that could not be obtained are None; the call
        raises only if nothing could be attempted at all.
        """
        ...

    def fetch_treasury_20y_nominal(self) -> float:
        """Fetch the 20-year nominal treasury yield (percent)."""
        ...

    def fetch_treasury_20y_tips(self) -> float:
        """Fetch the 20-year TIPS real yield (percent)."""
        ...

    def fetch_treasury_4w_bill(self) -> float:
        """Fetch the 4-week T-bill rate (percent)."""
        ...

    def fetch_inflation_rate(self) -> float:
        """Fetch the latest year-over-year inflation rate (percent)."""
        ...
