"""Domain models package."""

from macro_dashboard.domain.models.enums import DataSource, QuarterlyField
from macro_dashboard.domain.models.periods import Quarter, Month
from macro_dashboard.domain.models.cache import MarketCache, SourceTimestamps
from macro_dashboard.domain.models.series import QuarterlyRecord, MonthlyRecord, AnnualRecord

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
