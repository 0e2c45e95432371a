"""API request/response schemas."""

from macro_dashboard.api.schemas.market import (
    QuarterlyValueResponse,
    EquitySnapshotResponse,
)
from macro_dashboard.api.schemas.history import (
    AnnualRecordResponse,
    MarketMetricsResponse,
)
from macro_dashboard.api.schemas.rates import LongTermRatesResponse

__all__ = [
    "QuarterlyValueResponse",
    "EquitySnapshotResponse",
    "AnnualRecordResponse",
    "MarketMetricsResponse",
    "LongTermRatesResponse",
]
