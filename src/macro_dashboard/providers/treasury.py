"""Treasury yields from the home.treasury.gov daily rates CSV."""

import csv
import logging
from typing import Optional

import requests

from macro_dashboard.core.timezone import now_utc

logger = logging.getLogger(__name__)

TREASURY_CSV_URL = (
    "https://home.treasury.gov/resource-center/data-chart-center/interest-rates/"
    "daily-treasury-rates.csv/{year}/all"
)
NOMINAL_CURVE = "daily_treasury_yield_curve"
REAL_CURVE = "daily_treasury_real_yield_curve"
BILL_RATES = "daily_treasury_bill_rates"


def parse_latest_rate(csv_text: str, column: str) -> float:
    """
    Return the value of a column in the first data row.

    The Treasury CSV lists the most recent date first.
    """
    reader = csv.reader(csv_text.splitlines())
    try:
        headers = [h.strip() for h in next(reader)]
    except StopIteration:
        raise ValueError("Empty treasury CSV")
    if column not in headers:
        raise ValueError(f"No '{column}' column in treasury CSV")
    idx = headers.index(column)

    for row in reader:
        if not row:
            continue
        if idx >= len(row) or not row[idx].strip():
            raise ValueError(f"Missing '{column}' field in latest row")
        return float(row[idx].strip())

    raise ValueError("No data rows in treasury CSV")


class TreasuryCsvSource:
    """Fetches 20y nominal, 20y TIPS and 4-week bill rates."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 20.0,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout_seconds

    def fetch_treasury_20y_nominal(self) -> float:
        return self._fetch(NOMINAL_CURVE, "20 Yr")

    def fetch_treasury_20y_tips(self) -> float:
        return self._fetch(REAL_CURVE, "20 Yr")

    def fetch_treasury_4w_bill(self) -> float:
        return self._fetch(BILL_RATES, "4 Wk")

    def _fetch(self, curve: str, column: str) -> float:
        year = now_utc().year
        url = TREASURY_CSV_URL.format(year=year)
        params = {"type": curve, "field_tdr_date_value": str(year), "_format": "csv"}
        logger.info(f"Fetching treasury {curve} CSV for {year}")
        response = self._session.get(url, params=params, timeout=self._timeout)
        response.raise_for_status()
        rate = parse_latest_rate(response.text, column)
        logger.info(f"Found treasury {curve} '{column}': {rate}")
        return rate
