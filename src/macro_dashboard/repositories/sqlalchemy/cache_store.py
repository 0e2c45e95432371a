"""SQLAlchemy implementation of CacheStore."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from macro_dashboard.core.exceptions import PersistenceError
from macro_dashboard.core.timezone import to_utc
from macro_dashboard.domain.models import (
    MarketCache,
    SourceTimestamps,
    QuarterlyRecord,
    MonthlyRecord,
    AnnualRecord,
    Quarter,
    Month,
)
from macro_dashboard.repositories.sqlalchemy.orm_models import (
    MarketCacheORM,
    QuarterlyDataORM,
    MonthlyDataORM,
    HistoricalDataORM,
)

logger = logging.getLogger(__name__)

# The snapshot is a single row
_SNAPSHOT_ID = 1


def _to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Store datetimes as naive UTC (SQLite has no timezone support)."""
    if value is None:
        return None
    return to_utc(value).replace(tzinfo=None)


def _from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return to_utc(value)


class SqlAlchemyCacheStore:
    """SQLAlchemy-backed store for the market snapshot and series tables."""

    def __init__(self, db: Session):
        self._db = db
        self._in_transaction = False

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Roll back and raise PersistenceError on any database failure."""
        try:
            yield
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"Cache store {operation} failed: {e}")
            raise PersistenceError(operation, str(e)) from e

    def _commit(self) -> None:
        """Commit now, or only flush while a transaction() block is open."""
        if self._in_transaction:
            self._db.flush()
        else:
            self._db.commit()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Group writes into one commit.

        Writes inside the block are flushed, and committed together when the
        block exits. Any exception rolls every one of them back.
        """
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            yield
        except Exception:
            self._db.rollback()
            raise
        else:
            with self._guard("commit"):
                self._db.commit()
        finally:
            self._in_transaction = False

    # Snapshot operations

    def get_snapshot(self) -> MarketCache:
        """Get the current snapshot (an empty one if none was stored)."""
        with self._guard("get_snapshot"):
            orm_cache = self._db.get(MarketCacheORM, _SNAPSHOT_ID)
            return self._cache_to_domain(orm_cache) if orm_cache else MarketCache()

    def put_snapshot(self, cache: MarketCache) -> None:
        """Replace the stored snapshot."""
        with self._guard("put_snapshot"):
            orm_cache = self._db.get(MarketCacheORM, _SNAPSHOT_ID)
            if orm_cache is None:
                orm_cache = MarketCacheORM(id=_SNAPSHOT_ID)
                self._db.add(orm_cache)

            orm_cache.spot_price = cache.spot_price
            orm_cache.daily_close_price = cache.daily_close_price
            orm_cache.daily_close_at = _to_db_datetime(cache.daily_close_at)
            orm_cache.cape = cache.cape
            orm_cache.cape_period = cache.cape_period
            orm_cache.latest_month = str(cache.latest_month) if cache.latest_month else None
            orm_cache.latest_monthly_return = cache.latest_monthly_return
            orm_cache.bond_yield_20y = cache.bond_yield_20y
            orm_cache.tips_yield_20y = cache.tips_yield_20y
            orm_cache.tbill_yield = cache.tbill_yield
            orm_cache.inflation_rate = cache.inflation_rate
            orm_cache.spot_price_updated_at = _to_db_datetime(cache.timestamps.spot_price)
            orm_cache.fundamentals_updated_at = _to_db_datetime(cache.timestamps.fundamentals)
            orm_cache.treasury_updated_at = _to_db_datetime(cache.timestamps.treasury)
            orm_cache.inflation_updated_at = _to_db_datetime(cache.timestamps.inflation)

            self._commit()

    # Quarterly operations

    def get_quarterly_records(self) -> list[QuarterlyRecord]:
        """Get all quarterly records, oldest first."""
        with self._guard("get_quarterly_records"):
            orm_rows = (
                self._db.query(QuarterlyDataORM)
                .order_by(QuarterlyDataORM.year, QuarterlyDataORM.quarter_number)
                .all()
            )
            return [self._quarterly_to_domain(row) for row in orm_rows]

    def upsert_quarterly_records(self, records: list[QuarterlyRecord]) -> None:
        """Insert or update quarterly records by quarter key."""
        with self._guard("upsert_quarterly_records"):
            for record in records:
                key = str(record.quarter)
                orm_row = self._db.get(QuarterlyDataORM, key)
                if orm_row is None:
                    orm_row = QuarterlyDataORM(
                        quarter=key,
                        year=record.quarter.year,
                        quarter_number=record.quarter.quarter,
                    )
                    self._db.add(orm_row)
                orm_row.dividend = record.dividend
                orm_row.eps_actual = record.eps_actual
                orm_row.eps_estimated = record.eps_estimated

            self._commit()

    # Monthly operations

    def get_monthly_records(self) -> list[MonthlyRecord]:
        """Get all monthly records, oldest first."""
        with self._guard("get_monthly_records"):
            orm_rows = self._db.query(MonthlyDataORM).order_by(MonthlyDataORM.month).all()
            return [self._monthly_to_domain(row) for row in orm_rows]

    def upsert_monthly_records(self, records: list[MonthlyRecord]) -> None:
        """Insert or update monthly records by month key."""
        with self._guard("upsert_monthly_records"):
            for record in records:
                key = str(record.month)
                orm_row = self._db.get(MonthlyDataORM, key)
                if orm_row is None:
                    self._db.add(MonthlyDataORM(month=key, total_return=record.total_return))
                else:
                    orm_row.total_return = record.total_return

            self._commit()

    # Annual operations

    def get_annual_records(self) -> list[AnnualRecord]:
        """Get all annual records, ascending by year."""
        with self._guard("get_annual_records"):
            orm_rows = self._db.query(HistoricalDataORM).order_by(HistoricalDataORM.year).all()
            return [self._annual_to_domain(row) for row in orm_rows]

    def get_annual_record(self, year: int) -> Optional[AnnualRecord]:
        """Get the annual record for a year."""
        with self._guard("get_annual_record"):
            orm_row = self._db.get(HistoricalDataORM, year)
            return self._annual_to_domain(orm_row) if orm_row else None

    def upsert_annual_record(self, record: AnnualRecord) -> AnnualRecord:
        """Insert or update an annual record by year."""
        with self._guard("upsert_annual_record"):
            orm_row = self._db.get(HistoricalDataORM, record.year)
            if orm_row is None:
                orm_row = HistoricalDataORM(year=record.year)
                self._db.add(orm_row)

            orm_row.price = record.price
            orm_row.dividend = record.dividend
            orm_row.dividend_yield = record.dividend_yield
            orm_row.eps = record.eps
            orm_row.cape = record.cape
            orm_row.inflation = record.inflation
            orm_row.total_return = record.total_return
            orm_row.cumulative_return = record.cumulative_return

            self._commit()
            self._db.refresh(orm_row)
            return self._annual_to_domain(orm_row)

    @staticmethod
    def _cache_to_domain(orm: MarketCacheORM) -> MarketCache:
        """Convert ORM snapshot row to domain model."""
        return MarketCache(
            spot_price=orm.spot_price,
            daily_close_price=orm.daily_close_price,
            daily_close_at=_from_db_datetime(orm.daily_close_at),
            cape=orm.cape,
            cape_period=orm.cape_period or "",
            latest_month=Month.parse(orm.latest_month) if orm.latest_month else None,
            latest_monthly_return=orm.latest_monthly_return,
            bond_yield_20y=orm.bond_yield_20y,
            tips_yield_20y=orm.tips_yield_20y,
            tbill_yield=orm.tbill_yield,
            inflation_rate=orm.inflation_rate,
            timestamps=SourceTimestamps(
                spot_price=_from_db_datetime(orm.spot_price_updated_at),
                fundamentals=_from_db_datetime(orm.fundamentals_updated_at),
                treasury=_from_db_datetime(orm.treasury_updated_at),
                inflation=_from_db_datetime(orm.inflation_updated_at),
            ),
        )

    @staticmethod
    def _quarterly_to_domain(orm: QuarterlyDataORM) -> QuarterlyRecord:
        """Convert ORM quarterly row to domain model."""
        return QuarterlyRecord(
            quarter=Quarter(orm.year, orm.quarter_number),
            dividend=orm.dividend,
            eps_actual=orm.eps_actual,
            eps_estimated=orm.eps_estimated,
        )

    @staticmethod
    def _monthly_to_domain(orm: MonthlyDataORM) -> MonthlyRecord:
        """Convert ORM monthly row to domain model."""
        return MonthlyRecord(month=Month.parse(orm.month), total_return=orm.total_return)

    @staticmethod
    def _annual_to_domain(orm: HistoricalDataORM) -> AnnualRecord:
        """Convert ORM annual row to domain model."""
        return AnnualRecord(
            year=orm.year,
            price=orm.price,
            dividend=orm.dividend,
            dividend_yield=orm.dividend_yield,
            eps=orm.eps,
            cape=orm.cape,
            inflation=orm.inflation,
            total_return=orm.total_return,
            cumulative_return=orm.cumulative_return,
        )
