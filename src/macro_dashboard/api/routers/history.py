"""Historical series and metrics endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from macro_dashboard.api.deps import get_history_service
from macro_dashboard.api.schemas import AnnualRecordResponse, MarketMetricsResponse
from macro_dashboard.domain.models import AnnualRecord
from macro_dashboard.services import HistoryService

router = APIRouter(prefix="/api/v1/equity", tags=["history"])


def _to_response(record: AnnualRecord) -> AnnualRecordResponse:
    return AnnualRecordResponse(
        year=record.year,
        price=record.price,
        dividend=record.dividend,
        dividend_yield=record.dividend_yield,
        eps=record.eps,
        cape=record.cape,
        inflation=record.inflation,
        total_return=record.total_return,
        cumulative_return=record.cumulative_return,
    )


@router.get("/history", response_model=list[AnnualRecordResponse])
def get_history(
    start_year: Optional[int] = Query(None, description="First year (inclusive)"),
    end_year: Optional[int] = Query(None, description="Last year (inclusive)"),
    history: HistoryService = Depends(get_history_service),
) -> list[AnnualRecordResponse]:
    """Get the annual historical series, optionally filtered by year."""
    return [_to_response(r) for r in history.get_annual_series(start_year, end_year)]


@router.get("/history/{year}", response_model=AnnualRecordResponse)
def get_history_year(
    year: int,
    history: HistoryService = Depends(get_history_service),
) -> AnnualRecordResponse:
    """Get the annual record for one year."""
    return _to_response(history.get_annual_record(year))


@router.get("/history/{start_year}/{end_year}", response_model=list[AnnualRecordResponse])
def get_history_range(
    start_year: int,
    end_year: int,
    history: HistoryService = Depends(get_history_service),
) -> list[AnnualRecordResponse]:
    """Get the annual historical series for an inclusive year range."""
    return [_to_response(r) for r in history.get_annual_series(start_year, end_year)]


@router.get("/metrics", response_model=MarketMetricsResponse)
def get_metrics(
    history: HistoryService = Depends(get_history_service),
) -> MarketMetricsResponse:
    """Compute CAGR metrics over the annual series."""
    metrics = history.compute_metrics()

    return MarketMetricsResponse(
        avg_dividend_yield=metrics.avg_dividend_yield,
        past_inflation_cagr=metrics.past_inflation_cagr,
        current_inflation_cagr=metrics.current_inflation_cagr,
        past_earnings_cagr=metrics.past_earnings_cagr,
        current_earnings_cagr=metrics.current_earnings_cagr,
        past_cape_cagr=metrics.past_cape_cagr,
        current_cape_cagr=metrics.current_cape_cagr,
        past_returns_cagr=metrics.past_returns_cagr,
        current_returns_cagr=metrics.current_returns_cagr,
    )
