"""Dependency injection for FastAPI."""

from fastapi import Depends
from sqlalchemy.orm import Session

from macro_dashboard.app_context import build_orchestrator, get_app_context
from macro_dashboard.config.settings import get_settings
from macro_dashboard.providers import MarketDataProvider
from macro_dashboard.repositories.sqlalchemy.database import get_db
from macro_dashboard.repositories.sqlalchemy import SqlAlchemyCacheStore
from macro_dashboard.services import (
    RefreshOrchestrator,
    HistoryService,
    RatesService,
    RefreshScheduler,
    get_scheduler,
)


def get_cache_store(db: Session = Depends(get_db)) -> SqlAlchemyCacheStore:
    """Provide CacheStore instance."""
    return SqlAlchemyCacheStore(db)


def get_market_provider() -> MarketDataProvider:
    """Provide the shared MarketDataProvider (live or stub per settings)."""
    return get_app_context().provider


def get_refresh_orchestrator(
    store: SqlAlchemyCacheStore = Depends(get_cache_store),
    provider: MarketDataProvider = Depends(get_market_provider),
) -> RefreshOrchestrator:
    """Provide RefreshOrchestrator instance."""
    return build_orchestrator(store, provider, get_settings())


def get_refresh_scheduler() -> RefreshScheduler:
    """Provide the shared RefreshScheduler serializing refresh cycles."""
    return get_scheduler()


def get_history_service(
    store: SqlAlchemyCacheStore = Depends(get_cache_store),
) -> HistoryService:
    """Provide HistoryService instance."""
    return HistoryService(store)


def get_rates_service(
    store: SqlAlchemyCacheStore = Depends(get_cache_store),
) -> RatesService:
    """Provide RatesService instance."""
    return RatesService(store)
