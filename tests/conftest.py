"""
Pytest configuration and fixtures for market cache tests.

This module provides:
- In-memory SQLite database fixtures
- Deterministic, failing and slow market data providers
- Time helpers for UTC and US/Central
- Service and repository fixtures
- Factory helpers for quarterly, monthly and annual records
"""

import os
import tempfile
import threading
import time
from datetime import datetime
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from macro_dashboard.main import app
from macro_dashboard.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from macro_dashboard.repositories.sqlalchemy import orm_models  # noqa: F401
from macro_dashboard.repositories.sqlalchemy import SqlAlchemyCacheStore
from macro_dashboard.providers.stub_provider import StubMarketDataProvider
from macro_dashboard.services import (
    AnnualBackfillEngine,
    HistoryService,
    RatesService,
    RefreshOrchestrator,
    StalenessPolicy,
    set_scheduler,
)
from macro_dashboard.csv import AnnualCsvImporter, AnnualCsvExporter
from macro_dashboard.domain.models import (
    AnnualRecord,
    Month,
    MonthlyRecord,
    Quarter,
    QuarterlyRecord,
)
from macro_dashboard.domain.views import FundamentalsBatch
from macro_dashboard.core.timezone import UTC, DEFAULT_MARKET_TZ
from macro_dashboard.config.settings import Settings, set_settings, reset_settings


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def utc_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 12,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create an aware datetime in UTC."""
    return UTC.localize(datetime(year, month, day, hour, minute, second))


def central_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
) -> datetime:
    """Create a localized datetime in US/Central, converted to UTC."""
    local = DEFAULT_MARKET_TZ.localize(datetime(year, month, day, hour, minute))
    return local.astimezone(UTC)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now': Friday 2024-06-14 16:00 US/Central, after the close."""
    return central_datetime(2024, 6, 14, 16, 0)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def store(test_session) -> SqlAlchemyCacheStore:
    """Provide test CacheStore."""
    return SqlAlchemyCacheStore(test_session)


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


ALL_FETCHES = (
    "fetch_spot_price",
    "fetch_fundamentals",
    "fetch_treasury_20y_nominal",
    "fetch_treasury_20y_tips",
    "fetch_treasury_4w_bill",
    "fetch_inflation_rate",
)


class DeterministicMarketDataProvider:
    """
    Deterministic market data provider for testing.

    Returns fixed values, records every call, and raises ConnectionError for
    any fetch named in `failing`.
    """

    SPOT_PRICE = 5431.60
    BOND_20Y = 4.55
    TIPS_20Y = 2.18
    TBILL_4W = 5.27
    INFLATION = 3.3

    def __init__(
        self,
        failing: tuple[str, ...] = (),
        fundamentals: Optional[FundamentalsBatch] = None,
        spot_price: Optional[float] = None,
    ):
        self.failing = set(failing)
        self.calls: list[str] = []
        self.spot_price = spot_price or self.SPOT_PRICE
        self.fundamentals = fundamentals or FundamentalsBatch(
            dividend=(Quarter(2024, 1), 1.80),
            eps_actual=(Quarter(2024, 1), 47.37),
            eps_estimated=(Quarter(2024, 3), 58.10),
            cape=(34.2, "May 2024"),
            monthly_return=(Month(2024, 5), 0.0496),
        )
        self._lock = threading.Lock()

    def _call(self, name: str, value):
        with self._lock:
            self.calls.append(name)
        if name in self.failing:
            raise ConnectionError(f"{name}: network unavailable")
        return value

    def fetch_spot_price(self) -> float:
        return self._call("fetch_spot_price", self.spot_price)

    def fetch_fundamentals(self) -> FundamentalsBatch:
        return self._call("fetch_fundamentals", self.fundamentals)

    def fetch_treasury_20y_nominal(self) -> float:
        return self._call("fetch_treasury_20y_nominal", self.BOND_20Y)

    def fetch_treasury_20y_tips(self) -> float:
        return self._call("fetch_treasury_20y_tips", self.TIPS_20Y)

    def fetch_treasury_4w_bill(self) -> float:
        return self._call("fetch_treasury_4w_bill", self.TBILL_4W)

    def fetch_inflation_rate(self) -> float:
        return self._call("fetch_inflation_rate", self.INFLATION)


class FailingMarketDataProvider(DeterministicMarketDataProvider):
    """Market provider whose every fetch raises."""

    def __init__(self):
        super().__init__(failing=ALL_FETCHES)


class SlowMarketDataProvider(DeterministicMarketDataProvider):
    """Market provider whose named fetches block longer than any test timeout."""

    def __init__(self, slow: tuple[str, ...], delay_seconds: float = 2.0):
        super().__init__()
        self.slow = set(slow)
        self.delay_seconds = delay_seconds

    def _call(self, name: str, value):
        if name in self.slow:
            time.sleep(self.delay_seconds)
        return super()._call(name, value)


@pytest.fixture
def deterministic_provider() -> DeterministicMarketDataProvider:
    """Provide deterministic market data provider."""
    return DeterministicMarketDataProvider()


@pytest.fixture
def failing_provider() -> FailingMarketDataProvider:
    """Provide a market provider that always fails."""
    return FailingMarketDataProvider()


@pytest.fixture
def market_provider() -> StubMarketDataProvider:
    """Provide test MarketDataProvider with fixed seed."""
    return StubMarketDataProvider(seed=42)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def staleness_policy() -> StalenessPolicy:
    """Provide the default staleness policy (15m/1h/1h, 15:30 US/Central)."""
    return StalenessPolicy()


@pytest.fixture
def orchestrator_factory(store, staleness_policy) -> Callable[..., RefreshOrchestrator]:
    """Factory for orchestrators over the test store with a given provider."""

    def _create(provider, fetch_timeout_seconds: float = 5.0) -> RefreshOrchestrator:
        return RefreshOrchestrator(
            store=store,
            provider=provider,
            policy=staleness_policy,
            fetch_timeout_seconds=fetch_timeout_seconds,
        )

    return _create


@pytest.fixture
def orchestrator(orchestrator_factory, deterministic_provider) -> RefreshOrchestrator:
    """Provide test RefreshOrchestrator with deterministic provider."""
    return orchestrator_factory(deterministic_provider)


@pytest.fixture
def backfill_engine(store) -> AnnualBackfillEngine:
    """Provide test AnnualBackfillEngine."""
    return AnnualBackfillEngine(store)


@pytest.fixture
def history_service(store) -> HistoryService:
    """Provide test HistoryService."""
    return HistoryService(store)


@pytest.fixture
def rates_service(store) -> RatesService:
    """Provide test RatesService."""
    return RatesService(store)


@pytest.fixture
def csv_importer(store) -> AnnualCsvImporter:
    """Provide test AnnualCsvImporter."""
    return AnnualCsvImporter(store)


@pytest.fixture
def csv_exporter(history_service) -> AnnualCsvExporter:
    """Provide test AnnualCsvExporter."""
    return AnnualCsvExporter(history_service)


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def seed_quarters(store) -> Callable[..., list[QuarterlyRecord]]:
    """Factory storing quarterly records for one year."""

    def _seed(
        year: int,
        eps: Optional[list[Optional[float]]] = None,
        dividends: Optional[list[Optional[float]]] = None,
        estimates: Optional[list[Optional[float]]] = None,
    ) -> list[QuarterlyRecord]:
        records = [
            QuarterlyRecord(
                quarter=Quarter(year, q + 1),
                eps_actual=eps[q] if eps else None,
                dividend=dividends[q] if dividends else None,
                eps_estimated=estimates[q] if estimates else None,
            )
            for q in range(4)
        ]
        store.upsert_quarterly_records(records)
        return records

    return _seed


@pytest.fixture
def seed_months(store) -> Callable[..., list[MonthlyRecord]]:
    """Factory storing monthly total returns for the first N months of a year."""

    def _seed(year: int, returns: list[float]) -> list[MonthlyRecord]:
        records = [
            MonthlyRecord(month=Month(year, i + 1), total_return=r)
            for i, r in enumerate(returns)
        ]
        store.upsert_monthly_records(records)
        return records

    return _seed


def annual_series(
    start_year: int,
    years: int,
    eps_growth: float = 0.05,
    cape_growth: float = 0.02,
    inflation_growth: float = 0.03,
    return_growth: float = 0.08,
) -> list[AnnualRecord]:
    """Build an annual series with constant growth rates per indicator."""
    return [
        AnnualRecord(
            year=start_year + i,
            price=1000.0 * (1 + return_growth) ** i,
            dividend=20.0,
            dividend_yield=0.02,
            eps=50.0 * (1 + eps_growth) ** i,
            cape=20.0 * (1 + cape_growth) ** i,
            inflation=100.0 * (1 + inflation_growth) ** i,
            total_return=return_growth,
            cumulative_return=(1 + return_growth) ** (i + 1),
        )
        for i in range(years)
    ]


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(test_engine) -> TestClient:
    """Provide FastAPI test client with test database and stub provider."""
    set_settings(
        Settings(
            database_url="sqlite:///:memory:",
            provider_mode="stub",
            scheduler_enabled=False,
        )
    )
    reset_database()
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    set_scheduler(None)
    reset_database()
    reset_settings()


@pytest.fixture
def api_store(test_engine) -> SqlAlchemyCacheStore:
    """Provide a store on the API test database for seeding data."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield SqlAlchemyCacheStore(session)
    finally:
        session.close()


# =============================================================================
# TEMP FILE FIXTURES
# =============================================================================


@pytest.fixture
def temp_csv_file():
    """Provide a temporary CSV file path that is cleaned up after test."""
    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".csv",
        delete=False,
        encoding="utf-8",
    ) as f:
        tmp_path = f.name

    yield tmp_path

    # Cleanup
    if os.path.exists(tmp_path):
        os.unlink(tmp_path)


@pytest.fixture
def sample_csv_content() -> str:
    """Sample valid annual history CSV content."""
    return """year,price,dividend,dividend_yield,eps,cape,inflation,total_return,cumulative_return
2021,4766.18,60.40,0.0127,197.87,38.3,7.0,0.2871,1.2871
2022,3839.50,66.92,0.0174,172.75,28.3,6.5,-0.1811,1.0540
2023,4769.83,70.30,0.0147,192.43,31.2,3.4,0.2629,1.3311
"""


@pytest.fixture
def invalid_csv_content() -> str:
    """Annual history CSV content with bad rows."""
    return """year,price,dividend,dividend_yield,eps,cape,inflation,total_return,cumulative_return
2021,4766.18,60.40,0.0127,197.87,38.3,7.0,0.2871,1.2871
,3839.50,66.92,0.0174,172.75,28.3,6.5,-0.1811,1.0540
2023,not_a_number,70.30,0.0147,192.43,31.2,3.4,0.2629,1.3311
"""
