"""Pydantic schemas for historical series endpoints."""

from pydantic import BaseModel


class AnnualRecordResponse(BaseModel):
    """Response schema for one annual record."""

    year: int
    price: float
    dividend: float
    dividend_yield: float
    eps: float
    cape: float
    inflation: float
    total_return: float
    cumulative_return: float


class MarketMetricsResponse(BaseModel):
    """Response schema for growth metrics over the annual series."""

    avg_dividend_yield: float
    past_inflation_cagr: float
    current_inflation_cagr: float
    past_earnings_cagr: float
    current_earnings_cagr: float
    past_cape_cagr: float
    current_cape_cagr: float
    past_returns_cagr: float
    current_returns_cagr: float
