"""Treasury rate and inflation endpoints.

Each request first runs a refresh cycle, so stale readings are refetched
before they are served.
"""

from fastapi import APIRouter, Depends

from macro_dashboard.api.deps import (
    get_rates_service,
    get_refresh_orchestrator,
    get_refresh_scheduler,
)
from macro_dashboard.api.schemas import LongTermRatesResponse
from macro_dashboard.services import RatesService, RefreshOrchestrator, RefreshScheduler

router = APIRouter(prefix="/api/v1", tags=["rates"])


def _refresh(orchestrator: RefreshOrchestrator, scheduler: RefreshScheduler) -> None:
    scheduler.run_once(orchestrator.synchronize)


@router.get("/inflation", response_model=float)
def get_inflation(
    orchestrator: RefreshOrchestrator = Depends(get_refresh_orchestrator),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
    rates: RatesService = Depends(get_rates_service),
) -> float:
    """Latest year-over-year inflation rate (percent)."""
    _refresh(orchestrator, scheduler)
    return rates.inflation()


@router.get("/tbill", response_model=float)
def get_tbill(
    orchestrator: RefreshOrchestrator = Depends(get_refresh_orchestrator),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
    rates: RatesService = Depends(get_rates_service),
) -> float:
    """Latest 4-week T-bill rate (percent)."""
    _refresh(orchestrator, scheduler)
    return rates.tbill()


@router.get("/real_yield", response_model=float)
def get_real_yield(
    orchestrator: RefreshOrchestrator = Depends(get_refresh_orchestrator),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
    rates: RatesService = Depends(get_rates_service),
) -> float:
    """T-bill rate minus inflation (percent)."""
    _refresh(orchestrator, scheduler)
    return rates.real_yield()


@router.get("/long_term_rates", response_model=LongTermRatesResponse)
def get_long_term_rates(
    orchestrator: RefreshOrchestrator = Depends(get_refresh_orchestrator),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
    rates: RatesService = Depends(get_rates_service),
) -> LongTermRatesResponse:
    """20-year nominal and TIPS yields with the real T-bill yield."""
    _refresh(orchestrator, scheduler)
    result = rates.long_term_rates()

    return LongTermRatesResponse(
        bond_yield=result.bond_yield,
        tips_yield=result.tips_yield,
        real_tbill=result.real_tbill,
    )
