"""Quarterly, monthly and annual time-series records."""

from dataclasses import dataclass
from typing import Optional

from macro_dashboard.domain.models.enums import QuarterlyField
from macro_dashboard.domain.models.periods import Month, Quarter


@dataclass
class QuarterlyRecord:
    """
    Quarter-indexed fundamentals.

    Fields are set independently and never cleared once set.
    """

    quarter: Quarter
    dividend: Optional[float] = None
    eps_actual: Optional[float] = None
    eps_estimated: Optional[float] = None

    def get(self, field_name: QuarterlyField) -> Optional[float]:
        return getattr(self, field_name.value)

    def set(self, field_name: QuarterlyField, value: float) -> None:
        setattr(self, field_name.value, value)


@dataclass
class MonthlyRecord:
    """Monthly total return as a decimal fraction (0.012 = 1.2%)."""

    month: Month
    total_return: float


@dataclass
class AnnualRecord:
    """
    One calendar year of historical market data.

    cumulative_return is a growth index (value of 1.0 invested at series start).
    """

    year: int
    price: float = 0.0
    dividend: float = 0.0
    dividend_yield: float = 0.0
    eps: float = 0.0
    cape: float = 0.0
    inflation: float = 0.0
    total_return: float = 0.0
    cumulative_return: float = 0.0
