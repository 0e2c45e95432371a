"""Rates service exposing cached treasury and inflation readings."""

import logging

from macro_dashboard.core.exceptions import SourceUnavailableError
from macro_dashboard.domain.models import DataSource, MarketCache
from macro_dashboard.domain.views import LongTermRates
from macro_dashboard.repositories.protocols import CacheStore

logger = logging.getLogger(__name__)


class RatesService:
    """
    Service for rate readings taken from the cached snapshot.

    Values are served as last stored; a value still at its unset sentinel
    raises SourceUnavailableError.
    """

    def __init__(self, store: CacheStore):
        self._store = store

    def inflation(self) -> float:
        """Latest year-over-year inflation rate (percent)."""
        cache = self._store.get_snapshot()
        return self._require(cache.inflation_rate, DataSource.INFLATION)

    def tbill(self) -> float:
        """Latest 4-week T-bill rate (percent)."""
        cache = self._store.get_snapshot()
        return self._require(cache.tbill_yield, DataSource.TREASURY)

    def real_yield(self) -> float:
        """T-bill rate minus inflation (percent)."""
        cache = self._store.get_snapshot()
        return self._real_tbill(cache)

    def long_term_rates(self) -> LongTermRates:
        """20-year nominal and TIPS yields plus the real T-bill yield."""
        cache = self._store.get_snapshot()
        return LongTermRates(
            bond_yield=self._require(cache.bond_yield_20y, DataSource.TREASURY),
            tips_yield=self._require(cache.tips_yield_20y, DataSource.TREASURY),
            real_tbill=self._real_tbill(cache),
        )

    def _real_tbill(self, cache: MarketCache) -> float:
        tbill = self._require(cache.tbill_yield, DataSource.TREASURY)
        inflation = self._require(cache.inflation_rate, DataSource.INFLATION)
        real = tbill - inflation
        logger.debug(f"Real yield: {tbill} - {inflation} = {real}")
        return real

    @staticmethod
    def _require(value: float, source: DataSource) -> float:
        if value == 0.0:
            raise SourceUnavailableError(source.value, "no cached value")
        return value
