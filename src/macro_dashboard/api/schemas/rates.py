"""Pydantic schemas for rate endpoints."""

from pydantic import BaseModel


class LongTermRatesResponse(BaseModel):
    """Response schema for long-term treasury rates (percent)."""

    bond_yield: float
    tips_yield: float
    real_tbill: float
