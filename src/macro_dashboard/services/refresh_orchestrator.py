"""Refresh orchestrator synchronizing the market cache with external sources."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from typing import Any, Callable, Optional

from macro_dashboard.core.timezone import now_utc, to_utc
from macro_dashboard.domain.models import (
    DataSource,
    MarketCache,
    MonthlyRecord,
    QuarterlyField,
    QuarterlyRecord,
)
from macro_dashboard.domain.views import FundamentalsBatch, MarketSnapshot
from macro_dashboard.providers.market_data_provider import MarketDataProvider
from macro_dashboard.repositories.protocols import CacheStore
from macro_dashboard.services import quarterly_aggregator
from macro_dashboard.services.annual_backfill import AnnualBackfillEngine
from macro_dashboard.services.merge import merge_observed
from macro_dashboard.services.staleness import StalenessPolicy

logger = logging.getLogger(__name__)

# Fetch job keys
_SPOT = "spot_price"
_FUNDAMENTALS = "fundamentals"
_BOND_20Y = "bond_yield_20y"
_TIPS_20Y = "tips_yield_20y"
_TBILL_4W = "tbill_yield"
_INFLATION = "inflation_rate"

_TREASURY_JOBS = (_BOND_20Y, _TIPS_20Y, _TBILL_4W)


class RefreshOrchestrator:
    """
    Runs one synchronization cycle over the market cache.

    Reads the stored snapshot, fetches every due source concurrently, merges
    whatever succeeded and writes the series tables and snapshot back. A failed
    or timed-out fetch leaves that source's values and timestamp untouched and
    never aborts the other sources.

    Cycles must not overlap: the snapshot write replaces the stored row whole,
    so concurrent cycles lose updates. RefreshScheduler serializes callers.
    """

    def __init__(
        self,
        store: CacheStore,
        provider: MarketDataProvider,
        policy: Optional[StalenessPolicy] = None,
        fetch_timeout_seconds: float = 20.0,
        quarterly_epsilon: float = quarterly_aggregator.DEFAULT_EPSILON,
        backfill_engine: Optional[AnnualBackfillEngine] = None,
    ):
        self._store = store
        self._provider = provider
        self._policy = policy or StalenessPolicy()
        self._timeout = fetch_timeout_seconds
        self._epsilon = quarterly_epsilon
        self._backfill = backfill_engine or AnnualBackfillEngine(store)

    def synchronize(self, now: Optional[datetime] = None) -> MarketSnapshot:
        """
        Refresh every due source and return the resulting snapshot.

        Raises PersistenceError if the store cannot be read or written; the
        snapshot and series tables are then left as they were before the cycle.
        """
        now = to_utc(now) if now else now_utc()

        cache = self._store.get_snapshot()
        quarterly = self._store.get_quarterly_records()
        monthly = self._store.get_monthly_records()

        due = self._policy.due_sources(cache, now)
        merged = cache.copy()
        refreshed: list[DataSource] = []
        quarterly_changed = False
        monthly_changed = False
        value_merged = False

        if due:
            logger.info(f"Refreshing sources: {', '.join(s.value for s in due)}")
            results = self._fetch(self._build_jobs(due))

            # Spot price (also fetched whenever fundamentals are due)
            if _SPOT in results:
                merged.spot_price = merge_observed(merged.spot_price, results[_SPOT])
                merged.timestamps.mark(DataSource.SPOT_PRICE, now)
                refreshed.append(DataSource.SPOT_PRICE)
                value_merged = True

            if DataSource.FUNDAMENTALS in due:
                if _SPOT in results:
                    merged.daily_close_price = results[_SPOT]
                    merged.daily_close_at = now
                    value_merged = True

                batch = results.get(_FUNDAMENTALS)
                if batch is not None and not batch.is_empty:
                    quarterly_changed, monthly_changed = self._merge_fundamentals(
                        merged, quarterly, monthly, batch
                    )
                    merged.timestamps.mark(DataSource.FUNDAMENTALS, now)
                    refreshed.append(DataSource.FUNDAMENTALS)
                    value_merged = True
                elif batch is not None:
                    logger.warning("Fundamentals fetch returned no observations")

            if DataSource.TREASURY in due:
                merged.bond_yield_20y = merge_observed(merged.bond_yield_20y, results.get(_BOND_20Y))
                merged.tips_yield_20y = merge_observed(merged.tips_yield_20y, results.get(_TIPS_20Y))
                merged.tbill_yield = merge_observed(merged.tbill_yield, results.get(_TBILL_4W))
                treasury_hits = [job for job in _TREASURY_JOBS if job in results]
                if treasury_hits:
                    value_merged = True
                # The timestamp only advances when the whole source succeeded
                if len(treasury_hits) == len(_TREASURY_JOBS):
                    merged.timestamps.mark(DataSource.TREASURY, now)
                    refreshed.append(DataSource.TREASURY)

            if _INFLATION in results:
                merged.inflation_rate = merge_observed(merged.inflation_rate, results[_INFLATION])
                merged.timestamps.mark(DataSource.INFLATION, now)
                refreshed.append(DataSource.INFLATION)
                value_merged = True

        if value_merged:
            # Series tables, snapshot and backfill commit together or not at all
            with self._store.transaction():
                if quarterly_changed:
                    self._store.upsert_quarterly_records(quarterly)
                if monthly_changed:
                    self._store.upsert_monthly_records(monthly)
                self._store.put_snapshot(merged)
                self._backfill.backfill(merged, now)

        unavailable = [source for source in DataSource if merged.is_unset(source)]
        if unavailable:
            logger.warning(f"Sources still unavailable: {', '.join(s.value for s in unavailable)}")

        return self._build_snapshot(merged, quarterly, refreshed, unavailable)

    def _build_jobs(self, due: list[DataSource]) -> dict[str, Callable[[], Any]]:
        """Map each fetch needed for the due sources to its provider call."""
        jobs: dict[str, Callable[[], Any]] = {}
        if DataSource.SPOT_PRICE in due or DataSource.FUNDAMENTALS in due:
            jobs[_SPOT] = self._provider.fetch_spot_price
        if DataSource.FUNDAMENTALS in due:
            jobs[_FUNDAMENTALS] = self._provider.fetch_fundamentals
        if DataSource.TREASURY in due:
            jobs[_BOND_20Y] = self._provider.fetch_treasury_20y_nominal
            jobs[_TIPS_20Y] = self._provider.fetch_treasury_20y_tips
            jobs[_TBILL_4W] = self._provider.fetch_treasury_4w_bill
        if DataSource.INFLATION in due:
            jobs[_INFLATION] = self._provider.fetch_inflation_rate
        return jobs

    def _fetch(self, jobs: dict[str, Callable[[], Any]]) -> dict[str, Any]:
        """
        Run fetch jobs concurrently and return the successful results.

        Jobs that raise or do not finish within the timeout are logged and
        left out of the result. Unfinished calls are not interrupted.
        """
        if not jobs:
            return {}

        executor = ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="fetch")
        try:
            futures = {name: executor.submit(job) for name, job in jobs.items()}
            wait(futures.values(), timeout=self._timeout)

            results: dict[str, Any] = {}
            for name, future in futures.items():
                if not future.done():
                    logger.warning(f"Fetch {name} timed out after {self._timeout}s")
                    continue
                error = future.exception()
                if error is not None:
                    logger.warning(f"Fetch {name} failed: {error}")
                    continue
                results[name] = future.result()
            return results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _merge_fundamentals(
        self,
        merged: MarketCache,
        quarterly: list[QuarterlyRecord],
        monthly: list[MonthlyRecord],
        batch: FundamentalsBatch,
    ) -> tuple[bool, bool]:
        """Merge each observation of a fundamentals batch independently."""
        quarterly_changed = False
        for field, observation in (
            (QuarterlyField.DIVIDEND, batch.dividend),
            (QuarterlyField.EPS_ACTUAL, batch.eps_actual),
            (QuarterlyField.EPS_ESTIMATED, batch.eps_estimated),
        ):
            if observation is None:
                continue
            quarter, value = observation
            if quarterly_aggregator.upsert_quarterly(quarterly, quarter, field, value, self._epsilon):
                quarterly_changed = True

        merged.cape, merged.cape_period = merge_observed(
            (merged.cape, merged.cape_period), batch.cape
        )
        merged.latest_month, merged.latest_monthly_return = merge_observed(
            (merged.latest_month, merged.latest_monthly_return), batch.monthly_return
        )

        monthly_changed = False
        if batch.monthly_return is not None:
            month, total_return = batch.monthly_return
            monthly_changed = quarterly_aggregator.upsert_monthly(monthly, month, total_return)

        return quarterly_changed, monthly_changed

    @staticmethod
    def _build_snapshot(
        merged: MarketCache,
        quarterly: list[QuarterlyRecord],
        refreshed: list[DataSource],
        unavailable: list[DataSource],
    ) -> MarketSnapshot:
        return MarketSnapshot(
            spot_price=merged.spot_price,
            daily_close_price=merged.daily_close_price,
            cape=merged.cape,
            cape_period=merged.cape_period,
            bond_yield_20y=merged.bond_yield_20y,
            tips_yield_20y=merged.tips_yield_20y,
            tbill_yield=merged.tbill_yield,
            inflation_rate=merged.inflation_rate,
            ttm_dividend=quarterly_aggregator.compute_ttm_dividend(quarterly),
            latest_eps_actual=quarterly_aggregator.latest_actual_eps(quarterly),
            estimated_eps_sum=quarterly_aggregator.forward_eps_sum(quarterly),
            last_update=merged.timestamps.fundamentals,
            refreshed=refreshed,
            unavailable=unavailable,
        )
