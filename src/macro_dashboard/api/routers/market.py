"""Equity snapshot endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from macro_dashboard.api.deps import get_refresh_orchestrator, get_refresh_scheduler
from macro_dashboard.api.schemas import EquitySnapshotResponse, QuarterlyValueResponse
from macro_dashboard.domain.views import QuarterlyValue
from macro_dashboard.services import RefreshOrchestrator, RefreshScheduler

router = APIRouter(prefix="/api/v1", tags=["equity"])


def _quarterly_value(value: Optional[QuarterlyValue]) -> Optional[QuarterlyValueResponse]:
    if value is None:
        return None
    return QuarterlyValueResponse(final_quarter=str(value.final_quarter), value=value.value)


@router.get("/equity", response_model=EquitySnapshotResponse)
def get_equity(
    orchestrator: RefreshOrchestrator = Depends(get_refresh_orchestrator),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
) -> EquitySnapshotResponse:
    """Synchronize due sources and return the current equity snapshot."""
    snapshot = scheduler.run_once(orchestrator.synchronize)

    return EquitySnapshotResponse(
        spot_price=snapshot.spot_price,
        daily_close_price=snapshot.daily_close_price,
        cape=snapshot.cape,
        cape_period=snapshot.cape_period,
        bond_yield_20y=snapshot.bond_yield_20y,
        tips_yield_20y=snapshot.tips_yield_20y,
        tbill_yield=snapshot.tbill_yield,
        inflation_rate=snapshot.inflation_rate,
        ttm_dividend=_quarterly_value(snapshot.ttm_dividend),
        latest_eps_actual=_quarterly_value(snapshot.latest_eps_actual),
        estimated_eps_sum=_quarterly_value(snapshot.estimated_eps_sum),
        last_update=snapshot.last_update,
        refreshed=[source.value for source in snapshot.refreshed],
        unavailable=[source.value for source in snapshot.unavailable],
    )
