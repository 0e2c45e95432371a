"""Cache store protocol for the market snapshot and time-series tables."""

from typing import ContextManager, Protocol, Optional

from macro_dashboard.domain.models import (
    MarketCache,
    QuarterlyRecord,
    MonthlyRecord,
    AnnualRecord,
)


class CacheStore(Protocol):
    """
    Interface for durable market data.

    Implementations raise PersistenceError on any read/write failure.
    get_snapshot followed by put_snapshot is a read-modify-write; callers
    must serialize refresh cycles.
    """

    def transaction(self) -> ContextManager[None]:
        """Commit the writes made inside the block together, or none of them."""
        ...

    # Snapshot operations
    def get_snapshot(self) -> MarketCache:
        """Get the current snapshot (an empty one if none was stored)."""
        ...

    def put_snapshot(self, cache: MarketCache) -> None:
        """Replace the stored snapshot."""
        ...

    # Quarterly operations
    def get_quarterly_records(self) -> list[QuarterlyRecord]:
        """Get all quarterly records, oldest first."""
        ...

    def upsert_quarterly_records(self, records: list[QuarterlyRecord]) -> None:
        """Insert or update quarterly records by quarter key."""
        ...

    # Monthly operations
    def get_monthly_records(self) -> list[MonthlyRecord]:
        """Get all monthly records, oldest first."""
        ...

    def upsert_monthly_records(self, records: list[MonthlyRecord]) -> None:
        """Insert or update monthly records by month key."""
        ...

    # Annual operations
    def get_annual_records(self) -> list[AnnualRecord]:
        """Get all annual records, ascending by year."""
        ...

    def get_annual_record(self, year: int) -> Optional[AnnualRecord]:
        """Get the annual record for a year."""
        ...

    def upsert_annual_record(self, record: AnnualRecord) -> AnnualRecord:
        """Insert or update an annual record by year."""
        ...
