"""Market cache snapshot model."""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from macro_dashboard.domain.models.enums import DataSource
from macro_dashboard.domain.models.periods import Month


@dataclass
class SourceTimestamps:
    """Last successful fetch per data source (None = never succeeded)."""

    spot_price: Optional[datetime] = None
    fundamentals: Optional[datetime] = None
    treasury: Optional[datetime] = None
    inflation: Optional[datetime] = None

    def get(self, source: DataSource) -> Optional[datetime]:
        """Return the timestamp for a source."""
        return getattr(self, _TIMESTAMP_ATTRS[source])

    def mark(self, source: DataSource, when: datetime) -> None:
        """Record a successful fetch for a source."""
        setattr(self, _TIMESTAMP_ATTRS[source], when)


_TIMESTAMP_ATTRS = {
    DataSource.SPOT_PRICE: "spot_price",
    DataSource.FUNDAMENTALS: "fundamentals",
    DataSource.TREASURY: "treasury",
    DataSource.INFLATION: "inflation",
}


@dataclass
class MarketCache:
    """
    Current snapshot of cached market indicators.

    Zero values and empty labels mean "never fetched". A failed fetch never
    overwrites a value nor advances its source timestamp.
    """

    spot_price: float = 0.0
    daily_close_price: float = 0.0
    daily_close_at: Optional[datetime] = None
    cape: float = 0.0
    cape_period: str = ""
    latest_month: Optional[Month] = None
    latest_monthly_return: float = 0.0
    bond_yield_20y: float = 0.0
    tips_yield_20y: float = 0.0
    tbill_yield: float = 0.0
    inflation_rate: float = 0.0
    timestamps: SourceTimestamps = field(default_factory=SourceTimestamps)

    def copy(self) -> "MarketCache":
        """Return an independent copy of this snapshot."""
        return copy.deepcopy(self)

    def is_unset(self, source: DataSource) -> bool:
        """Return True if a source's values are still at their unset sentinel."""
        if source == DataSource.SPOT_PRICE:
            return self.spot_price == 0.0
        if source == DataSource.FUNDAMENTALS:
            return self.cape == 0.0 and not self.cape_period
        if source == DataSource.TREASURY:
            return (
                self.bond_yield_20y == 0.0
                or self.tips_yield_20y == 0.0
                or self.tbill_yield == 0.0
            )
        if source == DataSource.INFLATION:
            return self.inflation_rate == 0.0
        return False
