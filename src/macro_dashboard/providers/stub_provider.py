"""Stub market data provider for offline/testing use."""

import random

from macro_dashboard.core.timezone import now_utc
from macro_dashboard.domain.models import Month, Quarter
from macro_dashboard.domain.views import FundamentalsBatch


# Deterministic baseline values
_STUB_SPOT_PRICE = 5870.25
_STUB_DIVIDEND = 19.20
_STUB_EPS_ACTUAL = 56.45
_STUB_EPS_ESTIMATED = 61.80
_STUB_CAPE = 37.1
_STUB_MONTHLY_RETURN = 0.0115
_STUB_BOND_20Y = 4.62
_STUB_TIPS_20Y = 2.21
_STUB_TBILL_4W = 4.28
_STUB_INFLATION = 2.9


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Periods are derived from the current date: the latest completed quarter
    and month, and the next quarter for the forward estimate.
    """

    def __init__(self, seed: int = 42, jitter: bool = False):
        """Initialize with optional random seed; jitter adds small price noise."""
        self._rng = random.Random(seed)
        self._jitter = jitter

    def fetch_spot_price(self) -> float:
        if not self._jitter:
            return _STUB_SPOT_PRICE
        return round(_STUB_SPOT_PRICE * (1 + (self._rng.random() - 0.5) * 0.01), 2)

    def fetch_fundamentals(self) -> FundamentalsBatch:
        today = now_utc()
        current_quarter = Quarter(today.year, (today.month - 1) // 3 + 1)
        last_quarter = current_quarter.previous()
        if today.month == 1:
            last_month = Month(today.year - 1, 12)
        else:
            last_month = Month(today.year, today.month - 1)

        return FundamentalsBatch(
            dividend=(last_quarter, _STUB_DIVIDEND),
            eps_actual=(last_quarter, _STUB_EPS_ACTUAL),
            eps_estimated=(current_quarter.next(), _STUB_EPS_ESTIMATED),
            cape=(_STUB_CAPE, last_month.label),
            monthly_return=(last_month, _STUB_MONTHLY_RETURN),
        )

    def fetch_treasury_20y_nominal(self) -> float:
        return _STUB_BOND_20Y

    def fetch_treasury_20y_tips(self) -> float:
        return _STUB_TIPS_20Y

    def fetch_treasury_4w_bill(self) -> float:
        return _STUB_TBILL_4W

    def fetch_inflation_rate(self) -> float:
        return _STUB_INFLATION
