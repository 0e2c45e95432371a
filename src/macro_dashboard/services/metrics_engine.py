"""Metrics engine computing CAGR statistics over the annual series."""

import logging
from typing import Callable

from macro_dashboard.core.exceptions import InsufficientDataError
from macro_dashboard.domain.models import AnnualRecord
from macro_dashboard.domain.views import MarketMetrics

logger = logging.getLogger(__name__)

TRAILING_YEARS = 10


def calculate_cagr(start_value: float, end_value: float, years: float) -> float:
    """
    Compound annual growth rate: (end / start) ** (1 / years) - 1.

    Returns 0.0 when any input is non-positive.
    """
    if start_value <= 0 or end_value <= 0 or years <= 0:
        return 0.0
    return (end_value / start_value) ** (1.0 / years) - 1.0


def _indicator_cagrs(
    series: list[AnnualRecord],
    name: str,
    value_of: Callable[[AnnualRecord], float],
) -> tuple[float, float]:
    """Return (whole-period, trailing-10-year) CAGR for one indicator."""
    valid = [r for r in series if value_of(r) > 0]
    if len(valid) < 2:
        logger.warning(f"Not enough {name} data for CAGR ({len(valid)} valid years)")
        return 0.0, 0.0

    first, last = valid[0], valid[-1]
    whole = calculate_cagr(value_of(first), value_of(last), last.year - first.year)

    target_year = last.year - TRAILING_YEARS
    candidates = [r for r in valid if r.year <= target_year]
    if not candidates:
        logger.warning(f"No {name} data at or before {target_year} for trailing CAGR")
        return whole, 0.0

    start = candidates[-1]
    trailing = calculate_cagr(value_of(start), value_of(last), last.year - start.year)
    return whole, trailing


def compute_metrics(series: list[AnnualRecord]) -> MarketMetrics:
    """
    Compute long-run growth metrics over an annual series.

    Raises InsufficientDataError only for an empty series; indicators without
    enough positive readings report 0.
    """
    if not series:
        raise InsufficientDataError()

    ordered = sorted(series, key=lambda r: r.year)

    yields = [r.dividend_yield for r in ordered if r.dividend_yield > 0]
    avg_dividend_yield = sum(yields) / len(yields) if yields else 0.0

    past_inflation, current_inflation = _indicator_cagrs(ordered, "inflation", lambda r: r.inflation)
    past_earnings, current_earnings = _indicator_cagrs(ordered, "earnings", lambda r: r.eps)
    past_cape, current_cape = _indicator_cagrs(ordered, "CAPE", lambda r: r.cape)
    past_returns, current_returns = _indicator_cagrs(
        ordered, "cumulative return", lambda r: r.cumulative_return
    )

    return MarketMetrics(
        avg_dividend_yield=avg_dividend_yield,
        past_inflation_cagr=past_inflation,
        current_inflation_cagr=current_inflation,
        past_earnings_cagr=past_earnings,
        current_earnings_cagr=current_earnings,
        past_cape_cagr=past_cape,
        current_cape_cagr=current_cape,
        past_returns_cagr=past_returns,
        current_returns_cagr=current_returns,
    )
