"""Year-over-year CPI inflation from the BLS public data API."""

import logging
from typing import Any, Optional

import requests

from macro_dashboard.core.timezone import now_utc

logger = logging.getLogger(__name__)

BLS_API_URL = "https://api.bls.gov/publicAPI/v2/timeseries/data/"
CPI_SERIES_ID = "CUUR0000SA0"  # CPI-U, all items, not seasonally adjusted


def parse_inflation_rate(payload: dict[str, Any]) -> float:
    """
    Return the 12-month percent change of the latest monthly observation.

    Uses the API's own calculation when present, otherwise derives it from the
    same period one year earlier.
    """
    if payload.get("status") != "REQUEST_SUCCEEDED":
        raise ValueError(f"BLS request failed: {payload.get('message')}")

    series = payload.get("Results", {}).get("series", [])
    if not series:
        raise ValueError("BLS response contains no series")
    observations = [
        obs for obs in series[0].get("data", [])
        if str(obs.get("period", "")).startswith("M") and obs.get("period") != "M13"
    ]
    if not observations:
        raise ValueError("BLS response contains no monthly observations")

    latest = max(observations, key=lambda obs: (int(obs["year"]), obs["period"]))
    pct = latest.get("calculations", {}).get("pct_changes", {}).get("12")
    if pct not in (None, "", "-"):
        return float(pct)

    prior_year = str(int(latest["year"]) - 1)
    for obs in observations:
        if obs["year"] == prior_year and obs["period"] == latest["period"]:
            previous = float(obs["value"])
            if previous <= 0:
                break
            return round((float(latest["value"]) / previous - 1.0) * 100.0, 1)

    raise ValueError(f"No year-ago observation for {latest['year']} {latest['period']}")


class BlsInflationSource:
    """Fetches CPI-U and reports year-over-year inflation in percent."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 20.0,
        api_key: Optional[str] = None,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout_seconds
        self._api_key = api_key

    def fetch_inflation_rate(self) -> float:
        year = now_utc().year
        body: dict[str, Any] = {
            "seriesid": [CPI_SERIES_ID],
            "startyear": str(year - 1),
            "endyear": str(year),
            "calculations": True,
        }
        if self._api_key:
            body["registrationkey"] = self._api_key

        response = self._session.post(BLS_API_URL, json=body, timeout=self._timeout)
        response.raise_for_status()
        rate = parse_inflation_rate(response.json())
        logger.info(f"Fetched inflation rate: {rate}")
        return rate
