"""Pydantic schemas for equity snapshot endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class QuarterlyValueResponse(BaseModel):
    """Response schema for a value derived from quarterly data."""

    final_quarter: str
    value: float


class EquitySnapshotResponse(BaseModel):
    """Response schema for the synchronized equity snapshot."""

    spot_price: float
    daily_close_price: float
    cape: float
    cape_period: str
    bond_yield_20y: float
    tips_yield_20y: float
    tbill_yield: float
    inflation_rate: float
    ttm_dividend: Optional[QuarterlyValueResponse] = None
    latest_eps_actual: Optional[QuarterlyValueResponse] = None
    estimated_eps_sum: Optional[QuarterlyValueResponse] = None
    last_update: Optional[datetime] = None
    refreshed: list[str]
    unavailable: list[str]
