"""API routers package."""

from macro_dashboard.api.routers.market import router as market_router
from macro_dashboard.api.routers.history import router as history_router
from macro_dashboard.api.routers.rates import router as rates_router

__all__ = [
    "market_router",
    "history_router",
    "rates_router",
]
