"""External market data providers."""

from macro_dashboard.providers.market_data_provider import MarketDataProvider
from macro_dashboard.providers.stub_provider import StubMarketDataProvider
from macro_dashboard.providers.live_provider import (
    LiveMarketDataProvider,
    build_market_data_provider,
)

__all__ = [
    "MarketDataProvider",
    "StubMarketDataProvider",
    "LiveMarketDataProvider",
    "build_market_data_provider",
]
