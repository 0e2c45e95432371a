"""Domain layer - pure business models with no external dependencies."""

from macro_dashboard.domain.models import (
    DataSource,
    QuarterlyField,
    Quarter,
    Month,
    MarketCache,
    SourceTimestamps,
    QuarterlyRecord,
    MonthlyRecord,
    AnnualRecord,
)

__all__ = [
    "DataSource",
    "QuarterlyField",
    "Quarter",
    "Month",
    "MarketCache",
    "SourceTimestamps",
    "QuarterlyRecord",
    "MonthlyRecord",
    "AnnualRecord",
]
