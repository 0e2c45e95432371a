"""Enumerations for domain models."""

from enum import Enum


class DataSource(str, Enum):
    """External data sources, each with its own staleness class."""

    SPOT_PRICE = "SPOT_PRICE"
    FUNDAMENTALS = "FUNDAMENTALS"  # daily batch: dividend, EPS, CAPE, monthly return
    TREASURY = "TREASURY"
    INFLATION = "INFLATION"


class QuarterlyField(str, Enum):
    """Independently updated fields of a quarterly record."""

    DIVIDEND = "dividend"
    EPS_ACTUAL = "eps_actual"
    EPS_ESTIMATED = "eps_estimated"
