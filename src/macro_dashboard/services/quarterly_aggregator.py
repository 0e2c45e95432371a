"""Quarterly and monthly series maintenance and derived quarterly values."""

import logging
from typing import Optional

from macro_dashboard.domain.models import (
    Month,
    MonthlyRecord,
    Quarter,
    QuarterlyField,
    QuarterlyRecord,
)
from macro_dashboard.domain.views import QuarterlyValue

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 0.001


def upsert_quarterly(
    records: list[QuarterlyRecord],
    quarter: Quarter,
    field: QuarterlyField,
    value: float,
    epsilon: float = DEFAULT_EPSILON,
) -> bool:
    """
    Set one field of a quarter's record, creating the record if needed.

    A difference within epsilon of the stored value is a no-op. Records are
    kept sorted by quarter. Returns True if anything changed.
    """
    record = next((r for r in records if r.quarter == quarter), None)
    if record is None:
        record = QuarterlyRecord(quarter=quarter)
        record.set(field, value)
        records.append(record)
        records.sort(key=lambda r: r.quarter)
        logger.info(f"New quarterly record {quarter}: {field.value}={value}")
        return True

    current = record.get(field)
    if current is not None and abs(current - value) <= epsilon:
        return False

    if current is not None:
        logger.info(f"Updating {field.value} for {quarter} from {current} to {value}")
    record.set(field, value)
    return True


def compute_ttm_dividend(records: list[QuarterlyRecord]) -> Optional[QuarterlyValue]:
    """
    Sum the four most recent quarterly dividends.

    Quarters without a dividend are skipped. The result is tagged with the
    oldest quarter included in the sum.
    """
    included = [
        r for r in sorted(records, key=lambda r: r.quarter, reverse=True)
        if r.dividend is not None
    ][:4]
    if len(included) < 4:
        return None
    return QuarterlyValue(
        final_quarter=included[-1].quarter,
        value=sum(r.dividend for r in included),
    )


def latest_actual_eps(records: list[QuarterlyRecord]) -> Optional[QuarterlyValue]:
    """Return the actual EPS of the newest quarter that has one."""
    for record in sorted(records, key=lambda r: r.quarter, reverse=True):
        if record.eps_actual is not None:
            return QuarterlyValue(final_quarter=record.quarter, value=record.eps_actual)
    return None


def forward_eps_sum(records: list[QuarterlyRecord]) -> Optional[QuarterlyValue]:
    """
    Sum four consecutive quarterly EPS estimates.

    Starts at the earliest quarter with an estimate; every one of the next
    three calendar quarters must also carry an estimate. Tagged with the
    fourth quarter.
    """
    estimates = {r.quarter: r.eps_estimated for r in records if r.eps_estimated is not None}
    if not estimates:
        return None

    quarter = min(estimates)
    total = 0.0
    for i in range(4):
        if i > 0:
            quarter = quarter.next()
        if quarter not in estimates:
            return None
        total += estimates[quarter]

    return QuarterlyValue(final_quarter=quarter, value=total)


def upsert_monthly(records: list[MonthlyRecord], month: Month, total_return: float) -> bool:
    """
    Insert a monthly total return if the month is not recorded yet.

    Existing months are never overwritten. Returns True if inserted.
    """
    if any(r.month == month for r in records):
        return False
    records.append(MonthlyRecord(month=month, total_return=total_return))
    records.sort(key=lambda r: r.month)
    logger.info(f"New monthly total return {month}: {total_return}")
    return True
