"""History service for the annual series and its growth metrics."""

from typing import Optional

from macro_dashboard.core.exceptions import NotFoundError, ValidationError
from macro_dashboard.domain.models import AnnualRecord
from macro_dashboard.domain.views import MarketMetrics
from macro_dashboard.repositories.protocols import CacheStore
from macro_dashboard.services.metrics_engine import compute_metrics


class HistoryService:
    """Read access to the annual historical series."""

    def __init__(self, store: CacheStore):
        self._store = store

    def get_annual_series(
        self,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ) -> list[AnnualRecord]:
        """
        Get annual records within an inclusive year range, ascending.

        Either bound may be omitted.
        """
        if start_year is not None and end_year is not None and start_year > end_year:
            raise ValidationError(f"start_year {start_year} is after end_year {end_year}")

        return [
            record
            for record in self._store.get_annual_records()
            if (start_year is None or record.year >= start_year)
            and (end_year is None or record.year <= end_year)
        ]

    def get_annual_record(self, year: int) -> AnnualRecord:
        """Get one year's record, raising NotFoundError if it is not stored."""
        record = self._store.get_annual_record(year)
        if record is None:
            raise NotFoundError("Annual record", str(year))
        return record

    def compute_metrics(self) -> MarketMetrics:
        """Compute growth metrics over the full annual series."""
        return compute_metrics(self._store.get_annual_records())
