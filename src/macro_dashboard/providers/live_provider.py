"""Live provider composed from the individual external sources."""

from typing import Optional

import requests

from macro_dashboard.config.settings import Settings
from macro_dashboard.domain.views import FundamentalsBatch
from macro_dashboard.providers.bls import BlsInflationSource
from macro_dashboard.providers.market_data_provider import MarketDataProvider
from macro_dashboard.providers.stub_provider import StubMarketDataProvider
from macro_dashboard.providers.treasury import TreasuryCsvSource
from macro_dashboard.providers.yahoo import YahooSpotPriceSource
from macro_dashboard.providers.ycharts import YChartsFundamentalsSource


def build_session(user_agent: str) -> requests.Session:
    """Create an HTTP session with browser-like headers."""
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": user_agent,
            "Accept": "application/json,text/csv,text/html;q=0.9,*/*;q=0.8",
        }
    )
    return session


class LiveMarketDataProvider:
    """MarketDataProvider backed by Yahoo, YCharts, Treasury and BLS."""

    def __init__(
        self,
        spot: YahooSpotPriceSource,
        fundamentals: YChartsFundamentalsSource,
        treasury: TreasuryCsvSource,
        inflation: BlsInflationSource,
        session: Optional[requests.Session] = None,
    ):
        self._spot = spot
        self._fundamentals = fundamentals
        self._treasury = treasury
        self._inflation = inflation
        self._session = session

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: Optional[requests.Session] = None,
    ) -> "LiveMarketDataProvider":
        session = session or build_session(settings.http_user_agent)
        timeout = settings.fetch_timeout_seconds
        return cls(
            spot=YahooSpotPriceSource(),
            fundamentals=YChartsFundamentalsSource(session=session, timeout_seconds=timeout),
            treasury=TreasuryCsvSource(session=session, timeout_seconds=timeout),
            inflation=BlsInflationSource(
                session=session,
                timeout_seconds=timeout,
                api_key=settings.bls_api_key,
            ),
            session=session,
        )

    def close(self) -> None:
        """Close the shared HTTP session."""
        if self._session is not None:
            self._session.close()

    def fetch_spot_price(self) -> float:
        return self._spot.fetch_spot_price()

    def fetch_fundamentals(self) -> FundamentalsBatch:
        return self._fundamentals.fetch_fundamentals()

    def fetch_treasury_20y_nominal(self) -> float:
        return self._treasury.fetch_treasury_20y_nominal()

    def fetch_treasury_20y_tips(self) -> float:
        return self._treasury.fetch_treasury_20y_tips()

    def fetch_treasury_4w_bill(self) -> float:
        return self._treasury.fetch_treasury_4w_bill()

    def fetch_inflation_rate(self) -> float:
        return self._inflation.fetch_inflation_rate()


def build_market_data_provider(settings: Settings) -> MarketDataProvider:
    """Return the stub provider in "stub" mode, the live provider otherwise."""
    if settings.provider_mode == "stub":
        return StubMarketDataProvider()
    return LiveMarketDataProvider.from_settings(settings)
