"""Annual backfill engine rolling completed sub-annual data into annual records."""

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Optional

from macro_dashboard.core.timezone import to_utc
from macro_dashboard.domain.models import (
    AnnualRecord,
    MarketCache,
    MonthlyRecord,
    Quarter,
    QuarterlyRecord,
)
from macro_dashboard.repositories.protocols import CacheStore

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


class AnnualBackfillEngine:
    """
    Completes the previous calendar year's AnnualRecord.

    Each field is only written from a complete set of inputs (all four
    quarters, all twelve months, the December CAPE reading), so a record is
    never invalidated by later partial data.
    """

    def __init__(self, store: CacheStore):
        self._store = store

    def backfill(self, snapshot: MarketCache, now: datetime) -> Optional[AnnualRecord]:
        """
        Update the record for the year before `now`.

        Returns the stored record if anything changed, else None.
        """
        year = to_utc(now).year - 1
        existing = self._store.get_annual_record(year)
        record = replace(existing) if existing else AnnualRecord(year=year)

        quarterly = self._store.get_quarterly_records()
        monthly = self._store.get_monthly_records()

        changed = False
        changed |= self._apply_quarterly_sums(record, quarterly)
        changed |= self._apply_year_end_price(record, snapshot)
        changed |= self._apply_total_return(record, monthly)
        changed |= self._apply_cape(record, snapshot)

        if not changed:
            return None

        if record.dividend != 0.0 and record.price != 0.0:
            record.dividend_yield = record.dividend / record.price
        else:
            record.dividend_yield = 0.0

        logger.info(
            f"Updating annual record {year}: price={record.price}, eps={record.eps}, "
            f"dividend={record.dividend}, total_return={record.total_return}, cape={record.cape}"
        )
        return self._store.upsert_annual_record(record)

    @staticmethod
    def _apply_quarterly_sums(record: AnnualRecord, quarterly: list[QuarterlyRecord]) -> bool:
        """Set EPS and dividend sums when all four quarters carry them."""
        by_quarter = {r.quarter: r for r in quarterly if r.quarter.year == record.year}
        quarters = [by_quarter.get(Quarter(record.year, q)) for q in range(1, 5)]
        changed = False

        eps_values = [q.eps_actual if q else None for q in quarters]
        if all(v is not None for v in eps_values):
            eps = sum(eps_values)
            if eps != record.eps:
                record.eps = eps
                changed = True

        dividend_values = [q.dividend if q else None for q in quarters]
        if all(v is not None for v in dividend_values):
            dividend = sum(dividend_values)
            if dividend != record.dividend:
                record.dividend = dividend
                changed = True

        return changed

    @staticmethod
    def _apply_year_end_price(record: AnnualRecord, snapshot: MarketCache) -> bool:
        """Capture the last daily close once spot prices from a later year flow in."""
        last_spot = snapshot.timestamps.spot_price
        if last_spot is None or to_utc(last_spot).year <= record.year:
            return False
        if snapshot.daily_close_price == 0.0:
            return False
        # A close captured in the new year is not the year-end close
        if snapshot.daily_close_at is not None and to_utc(snapshot.daily_close_at).year > record.year:
            return False
        if snapshot.daily_close_price == record.price:
            return False

        record.price = snapshot.daily_close_price
        return True

    def _apply_total_return(self, record: AnnualRecord, monthly: list[MonthlyRecord]) -> bool:
        """Compound twelve monthly returns into the annual total return."""
        months = [m for m in monthly if m.month.year == record.year]
        if len(months) < MONTHS_PER_YEAR:
            return False
        if len(months) > MONTHS_PER_YEAR:
            logger.error(
                f"Found {len(months)} monthly records for {record.year}; "
                f"expected {MONTHS_PER_YEAR}. Annual total return left unchanged"
            )
            return False

        total_return = math.prod(1.0 + m.total_return for m in months) - 1.0
        if total_return == record.total_return and record.cumulative_return != 0.0:
            return False

        record.total_return = total_return
        prior = self._store.get_annual_record(record.year - 1)
        if prior is not None and prior.cumulative_return > 0.0:
            record.cumulative_return = prior.cumulative_return * (1.0 + total_return)
        else:
            record.cumulative_return = 1.0 + total_return
        return True

    @staticmethod
    def _apply_cape(record: AnnualRecord, snapshot: MarketCache) -> bool:
        """Take the December CAPE reading as the year-end CAPE."""
        if snapshot.cape_period != f"Dec {record.year}":
            return False
        if snapshot.cape == record.cape:
            return False
        record.cape = snapshot.cape
        return True
