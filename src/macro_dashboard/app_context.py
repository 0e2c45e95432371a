"""Application context for in-process service management.

Wires the cache store, market data provider and services together for
scripts and the background scheduler, without going through HTTP.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from macro_dashboard.config.settings import (
    DATABASE_FILENAME,
    Settings,
    set_settings,
    get_settings,
)
from macro_dashboard.repositories.sqlalchemy.database import (
    init_db,
    init_db_with_path,
    reset_database,
    get_session,
)
from macro_dashboard.repositories.sqlalchemy import SqlAlchemyCacheStore
from macro_dashboard.providers import (
    LiveMarketDataProvider,
    MarketDataProvider,
    build_market_data_provider,
)
from macro_dashboard.services import (
    StalenessPolicy,
    RefreshOrchestrator,
    HistoryService,
    RatesService,
    RefreshScheduler,
)
from macro_dashboard.domain.views import MarketSnapshot
from macro_dashboard.csv import AnnualCsvImporter, AnnualCsvExporter


def build_orchestrator(
    store: SqlAlchemyCacheStore,
    provider: MarketDataProvider,
    settings: Settings,
) -> RefreshOrchestrator:
    """Build a RefreshOrchestrator configured from settings."""
    return RefreshOrchestrator(
        store=store,
        provider=provider,
        policy=StalenessPolicy.from_settings(settings),
        fetch_timeout_seconds=settings.fetch_timeout_seconds,
        quarterly_epsilon=settings.quarterly_update_epsilon,
    )


class AppContext:
    """
    Application context providing in-process access to all services.

    Services share one long-lived session. Refresh cycles run by the
    scheduler open a session of their own, since they run on another thread.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize application context.

        Args:
            data_dir: Optional data directory. If not provided, uses default.
        """
        self._data_dir = data_dir
        self._session: Optional[Session] = None
        self._initialized = False

        # Lazily created
        self._provider: Optional[MarketDataProvider] = None
        self._scheduler: Optional[RefreshScheduler] = None

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """
        Initialize or reinitialize the application with a data directory.

        Args:
            data_dir: Data directory path. Uses default if not provided.
        """
        if data_dir:
            self._data_dir = data_dir

        settings = get_settings()
        if self._data_dir:
            settings = settings.model_copy(update={"data_dir": self._data_dir})
            set_settings(settings)

        # Reset and reinitialize database
        self.close()
        if self._data_dir and not settings.database_url:
            init_db_with_path(settings.get_data_dir() / DATABASE_FILENAME)
        else:
            reset_database()
            init_db()

        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        """Check if context is initialized."""
        return self._initialized

    @property
    def data_dir(self) -> Path:
        """Get the current data directory."""
        return get_settings().get_data_dir()

    def _get_session(self) -> Session:
        """Get or create database session."""
        if self._session is None:
            self._session = get_session()
        return self._session

    @property
    def store(self) -> SqlAlchemyCacheStore:
        """Get a cache store bound to the context session."""
        return SqlAlchemyCacheStore(self._get_session())

    @property
    def provider(self) -> MarketDataProvider:
        """Get the configured market data provider."""
        if self._provider is None:
            self._provider = build_market_data_provider(get_settings())
        return self._provider

    @property
    def orchestrator(self) -> RefreshOrchestrator:
        return build_orchestrator(self.store, self.provider, get_settings())

    @property
    def history(self) -> HistoryService:
        return HistoryService(self.store)

    @property
    def rates(self) -> RatesService:
        return RatesService(self.store)

    @property
    def csv_importer(self) -> AnnualCsvImporter:
        return AnnualCsvImporter(self.store)

    @property
    def csv_exporter(self) -> AnnualCsvExporter:
        return AnnualCsvExporter(self.history)

    @property
    def scheduler(self) -> RefreshScheduler:
        """Get the refresh scheduler running cycles on their own session."""
        if self._scheduler is None:
            self._scheduler = RefreshScheduler(
                cycle=self.run_refresh_cycle,
                tick_seconds=get_settings().scheduler_tick_seconds,
            )
        return self._scheduler

    def run_refresh_cycle(self, now: Optional[datetime] = None) -> MarketSnapshot:
        """Run one synchronize cycle on a dedicated session."""
        session = get_session()
        try:
            orchestrator = build_orchestrator(
                SqlAlchemyCacheStore(session),
                self.provider,
                get_settings(),
            )
            return orchestrator.synchronize(now)
        finally:
            session.close()

    def close(self) -> None:
        """Clean up resources."""
        if self._scheduler is not None:
            self._scheduler.stop()
        if isinstance(self._provider, LiveMarketDataProvider):
            self._provider.close()
        self._provider = None
        if self._session:
            self._session.close()
            self._session = None


# Global application context
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
