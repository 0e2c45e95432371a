"""View models for adapter outputs and service results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from macro_dashboard.domain.models import DataSource, Month, Quarter


@dataclass
class FundamentalsBatch:
    """
    Result of one fundamentals fetch.

    Each observation is independently optional; None means it was not
    obtained this time.
    """

    dividend: Optional[tuple[Quarter, float]] = None
    eps_actual: Optional[tuple[Quarter, float]] = None
    eps_estimated: Optional[tuple[Quarter, float]] = None
    cape: Optional[tuple[float, str]] = None  # (value, period label)
    monthly_return: Optional[tuple[Month, float]] = None

    @property
    def is_empty(self) -> bool:
        return all(
            obs is None
            for obs in (
                self.dividend,
                self.eps_actual,
                self.eps_estimated,
                self.cape,
                self.monthly_return,
            )
        )


@dataclass
class QuarterlyValue:
    """A value derived from quarterly data, tagged with the quarter it reaches."""

    final_quarter: Quarter
    value: float


@dataclass
class MarketSnapshot:
    """Result of a synchronize cycle."""

    spot_price: float
    daily_close_price: float
    cape: float
    cape_period: str
    bond_yield_20y: float
    tips_yield_20y: float
    tbill_yield: float
    inflation_rate: float
    ttm_dividend: Optional[QuarterlyValue] = None
    latest_eps_actual: Optional[QuarterlyValue] = None
    estimated_eps_sum: Optional[QuarterlyValue] = None
    last_update: Optional[datetime] = None
    refreshed: list[DataSource] = field(default_factory=list)
    unavailable: list[DataSource] = field(default_factory=list)


@dataclass
class MarketMetrics:
    """Long-run growth statistics over the annual series."""

    avg_dividend_yield: float = 0.0
    past_inflation_cagr: float = 0.0
    current_inflation_cagr: float = 0.0
    past_earnings_cagr: float = 0.0
    current_earnings_cagr: float = 0.0
    past_cape_cagr: float = 0.0
    current_cape_cagr: float = 0.0
    past_returns_cagr: float = 0.0
    current_returns_cagr: float = 0.0


@dataclass
class LongTermRates:
    """Long-term treasury yields and the real T-bill yield."""

    bond_yield: float
    tips_yield: float
    real_tbill: float


@dataclass
class ImportSummary:
    """Summary of an annual history CSV import."""

    imported_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)
