"""SQLAlchemy ORM model definitions."""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Float, Integer

from macro_dashboard.repositories.sqlalchemy.database import Base


class MarketCacheORM(Base):
    """SQLAlchemy model for the MarketCache singleton row."""

    __tablename__ = "market_cache"

    id = Column(Integer, primary_key=True)
    spot_price = Column(Float, nullable=False, default=0.0)
    daily_close_price = Column(Float, nullable=False, default=0.0)
    daily_close_at = Column(DateTime, nullable=True)
    cape = Column(Float, nullable=False, default=0.0)
    cape_period = Column(String(20), nullable=False, default="")  # e.g. "Dec 2024"
    latest_month = Column(String(7), nullable=True)  # e.g. "2024-12"
    latest_monthly_return = Column(Float, nullable=False, default=0.0)
    bond_yield_20y = Column(Float, nullable=False, default=0.0)
    tips_yield_20y = Column(Float, nullable=False, default=0.0)
    tbill_yield = Column(Float, nullable=False, default=0.0)
    inflation_rate = Column(Float, nullable=False, default=0.0)
    spot_price_updated_at = Column(DateTime, nullable=True)
    fundamentals_updated_at = Column(DateTime, nullable=True)
    treasury_updated_at = Column(DateTime, nullable=True)
    inflation_updated_at = Column(DateTime, nullable=True)


class QuarterlyDataORM(Base):
    """SQLAlchemy model for QuarterlyRecord."""

    __tablename__ = "quarterly_data"

    quarter = Column(String(6), primary_key=True)  # e.g. "2024Q1"
    year = Column(Integer, nullable=False)
    quarter_number = Column(Integer, nullable=False)
    dividend = Column(Float, nullable=True)
    eps_actual = Column(Float, nullable=True)
    eps_estimated = Column(Float, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class MonthlyDataORM(Base):
    """SQLAlchemy model for MonthlyRecord."""

    __tablename__ = "monthly_data"

    month = Column(String(7), primary_key=True)  # e.g. "2024-03"
    total_return = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class HistoricalDataORM(Base):
    """SQLAlchemy model for AnnualRecord."""

    __tablename__ = "historical_data"

    year = Column(Integer, primary_key=True)
    price = Column(Float, nullable=False, default=0.0)
    dividend = Column(Float, nullable=False, default=0.0)
    dividend_yield = Column(Float, nullable=False, default=0.0)
    eps = Column(Float, nullable=False, default=0.0)
    cape = Column(Float, nullable=False, default=0.0)
    inflation = Column(Float, nullable=False, default=0.0)
    total_return = Column(Float, nullable=False, default=0.0)
    cumulative_return = Column(Float, nullable=False, default=0.0)
    last_updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
