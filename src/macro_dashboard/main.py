"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from macro_dashboard import __version__
from macro_dashboard.app_context import get_app_context
from macro_dashboard.config.settings import get_settings
from macro_dashboard.config.logging_config import setup_logging
from macro_dashboard.repositories.sqlalchemy.database import init_db
from macro_dashboard.api.routers import market_router, history_router, rates_router
from macro_dashboard.core.exceptions import (
    AppError,
    InsufficientDataError,
    NotFoundError,
    PersistenceError,
    SourceUnavailableError,
    ValidationError,
)
from macro_dashboard.services import set_scheduler

logger = logging.getLogger(__name__)

# Most specific class first
_STATUS_CODES: list[tuple[type[AppError], int]] = [
    (InsufficientDataError, 404),
    (NotFoundError, 404),
    (SourceUnavailableError, 502),
    (PersistenceError, 500),
    (ValidationError, 400),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()

    settings = get_settings()
    scheduler = get_app_context().scheduler
    set_scheduler(scheduler)
    if settings.scheduler_enabled:
        scheduler.start()
    yield
    # Shutdown
    scheduler.stop()
    set_scheduler(None)
    get_app_context().close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Cached market indicators and long-run S&P 500 growth statistics",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(market_router)
app.include_router(history_router)
app.include_router(rates_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = next(
        (code for error_type, code in _STATUS_CODES if isinstance(exc, error_type)),
        400,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
