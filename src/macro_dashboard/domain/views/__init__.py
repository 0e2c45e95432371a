"""View models for service outputs."""

from macro_dashboard.domain.views.market import (
    FundamentalsBatch,
    QuarterlyValue,
    MarketSnapshot,
    MarketMetrics,
    LongTermRates,
    ImportSummary,
)

__all__ = [
    "FundamentalsBatch",
    "QuarterlyValue",
    "MarketSnapshot",
    "MarketMetrics",
    "LongTermRates",
    "ImportSummary",
]
