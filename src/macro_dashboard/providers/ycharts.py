"""Fundamentals batch scraped from YCharts indicator pages."""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup

from macro_dashboard.domain.models import Month, Quarter
from macro_dashboard.domain.models.periods import MONTH_ABBREVIATIONS
from macro_dashboard.domain.views import FundamentalsBatch

logger = logging.getLogger(__name__)

YCHARTS_BASE_URL = "https://ycharts.com/indicators"
DIVIDEND_INDICATOR = "sp_500_dividends_per_share"
EPS_ACTUAL_INDICATOR = "sp_500_eps"
EPS_ESTIMATED_INDICATOR = "sp_500_earnings_per_share_forward_estimate"
CAPE_INDICATOR = "cyclically_adjusted_pe_ratio"
MONTHLY_RETURN_INDICATOR = "sp_500_monthly_total_return"

_MONTHS = "|".join(MONTH_ABBREVIATIONS)
_KEY_STAT_RE = re.compile(
    r"([-+]?\d*\.?\d+)(%?)\s*(?:USD)?\s*(?:for)?\s+"
    rf"(?:Q([1-4])\s+(\d{{4}})|({_MONTHS})\s+(\d{{4}}))"
)


@dataclass
class KeyStat:
    """Value and period parsed from an indicator's key-stat line."""

    value: float
    quarter: Optional[Quarter] = None
    month: Optional[Month] = None

    @property
    def period_label(self) -> str:
        if self.month is not None:
            return self.month.label
        return str(self.quarter) if self.quarter else ""


def parse_key_stat(text: str) -> KeyStat:
    """
    Parse a key-stat line such as "52.35 USD for Q3 2024" or "1.23% for Dec 2024".

    Percent values are converted to decimal fractions.
    """
    match = _KEY_STAT_RE.search(text or "")
    if not match:
        raise ValueError(f"Unrecognized key stat: {text!r}")

    value = float(match.group(1))
    if match.group(2) == "%":
        value /= 100.0

    if match.group(3):
        return KeyStat(value=value, quarter=Quarter(int(match.group(4)), int(match.group(3))))
    month_number = MONTH_ABBREVIATIONS.index(match.group(5)) + 1
    return KeyStat(value=value, month=Month(int(match.group(6)), month_number))


def extract_key_stat_text(html: str) -> str:
    """Return the text of the first key-stat element on an indicator page."""
    soup = BeautifulSoup(html, "html.parser")
    element = soup.select_one("div.key-stat-title")
    if element is None:
        raise ValueError("Key stat element not found")
    return element.get_text(" ", strip=True)


class YChartsFundamentalsSource:
    """
    Fetches the five fundamentals indicators.

    Each indicator is fetched independently; a failure leaves that
    observation empty in the returned batch.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 20.0,
        base_url: str = YCHARTS_BASE_URL,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout_seconds
        self._base_url = base_url.rstrip("/")

    def fetch_fundamentals(self) -> FundamentalsBatch:
        batch = FundamentalsBatch()

        dividend = self._fetch_stat(DIVIDEND_INDICATOR)
        if dividend and dividend.quarter:
            batch.dividend = (dividend.quarter, dividend.value)

        eps_actual = self._fetch_stat(EPS_ACTUAL_INDICATOR)
        if eps_actual and eps_actual.quarter:
            batch.eps_actual = (eps_actual.quarter, eps_actual.value)

        eps_estimated = self._fetch_stat(EPS_ESTIMATED_INDICATOR)
        if eps_estimated and eps_estimated.quarter:
            batch.eps_estimated = (eps_estimated.quarter, eps_estimated.value)

        cape = self._fetch_stat(CAPE_INDICATOR)
        if cape and cape.month:
            batch.cape = (cape.value, cape.period_label)

        monthly_return = self._fetch_stat(MONTHLY_RETURN_INDICATOR)
        if monthly_return and monthly_return.month:
            batch.monthly_return = (monthly_return.month, monthly_return.value)

        return batch

    def _fetch_stat(self, indicator: str) -> Optional[KeyStat]:
        url = f"{self._base_url}/{indicator}"
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
            stat = parse_key_stat(extract_key_stat_text(response.text))
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Failed to fetch {indicator}: {e}")
            return None
        logger.info(f"Fetched {indicator}: {stat.value} for {stat.period_label}")
        return stat
