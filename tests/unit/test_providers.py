"""
Unit tests for market data providers.

Tests cover:
- YCharts key-stat parsing and the fundamentals batch
- Treasury CSV parsing and the treasury source
- BLS inflation parsing
- Yahoo spot price via a patched yfinance
- Stub provider and provider selection
- One shared provider per application context, closed on shutdown
Uses mocks to avoid hitting external services.
"""

from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

from macro_dashboard.api.deps import get_market_provider
from macro_dashboard.app_context import AppContext, set_app_context
from macro_dashboard.config.settings import Settings, reset_settings, set_settings
from macro_dashboard.domain.models import Month, Quarter
from macro_dashboard.providers import (
    LiveMarketDataProvider,
    StubMarketDataProvider,
    build_market_data_provider,
)
from macro_dashboard.providers.bls import BlsInflationSource, parse_inflation_rate
from macro_dashboard.providers.treasury import TreasuryCsvSource, parse_latest_rate
from macro_dashboard.providers.yahoo import YahooSpotPriceSource
from macro_dashboard.providers.ycharts import (
    YChartsFundamentalsSource,
    extract_key_stat_text,
    parse_key_stat,
)


def _response(text: str = "", payload=None, status_error: Exception = None) -> MagicMock:
    response = MagicMock()
    response.text = text
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


def _key_stat_page(stat: str) -> str:
    return f"""
    <html><body>
      <div class="key-stats">
        <div class="key-stat-title">
          {stat}
        </div>
      </div>
    </body></html>
    """


# -----------------------------------------------------------------------------
# YCharts
# -----------------------------------------------------------------------------


class TestParseKeyStat:
    """parse_key_stat reads value and period from a key-stat line."""

    def test_quarterly_usd_value(self):
        stat = parse_key_stat("52.35 USD for Q3 2024")
        assert stat.value == 52.35
        assert stat.quarter == Quarter(2024, 3)
        assert stat.month is None

    def test_monthly_value(self):
        stat = parse_key_stat("34.21 for Dec 2023")
        assert stat.value == 34.21
        assert stat.month == Month(2023, 12)
        assert stat.period_label == "Dec 2023"

    def test_percent_is_converted_to_fraction(self):
        stat = parse_key_stat("4.96% for May 2024")
        assert stat.value == pytest.approx(0.0496)
        assert stat.month == Month(2024, 5)

    def test_negative_percent(self):
        stat = parse_key_stat("-2.37% for Apr 2024")
        assert stat.value == pytest.approx(-0.0237)

    def test_unrecognized_text_raises(self):
        with pytest.raises(ValueError, match="Unrecognized key stat"):
            parse_key_stat("No data available")


class TestExtractKeyStatText:
    """extract_key_stat_text finds the key-stat element."""

    def test_extracts_text(self):
        assert extract_key_stat_text(_key_stat_page("18.50 USD for Q1 2024")) == "18.50 USD for Q1 2024"

    def test_missing_element_raises(self):
        with pytest.raises(ValueError, match="Key stat element not found"):
            extract_key_stat_text("<html><body><p>nothing</p></body></html>")


class TestYChartsFundamentalsSource:
    """YChartsFundamentalsSource builds a batch from five indicator pages."""

    PAGES = {
        "sp_500_dividends_per_share": "18.50 USD for Q1 2024",
        "sp_500_eps": "47.37 USD for Q1 2024",
        "sp_500_earnings_per_share_forward_estimate": "58.10 USD for Q3 2024",
        "cyclically_adjusted_pe_ratio": "34.20 for May 2024",
        "sp_500_monthly_total_return": "4.96% for May 2024",
    }

    def _session(self, failing: tuple[str, ...] = ()) -> MagicMock:
        def get(url, timeout=None):
            indicator = url.rsplit("/", 1)[-1]
            if indicator in failing:
                raise requests.ConnectionError("boom")
            return _response(text=_key_stat_page(self.PAGES[indicator]))

        session = MagicMock()
        session.get.side_effect = get
        return session

    def test_full_batch(self):
        source = YChartsFundamentalsSource(session=self._session())

        batch = source.fetch_fundamentals()

        assert batch.dividend == (Quarter(2024, 1), 18.50)
        assert batch.eps_actual == (Quarter(2024, 1), 47.37)
        assert batch.eps_estimated == (Quarter(2024, 3), 58.10)
        assert batch.cape == (34.20, "May 2024")
        assert batch.monthly_return[0] == Month(2024, 5)
        assert batch.monthly_return[1] == pytest.approx(0.0496)

    def test_failed_indicator_leaves_observation_empty(self):
        source = YChartsFundamentalsSource(
            session=self._session(failing=("cyclically_adjusted_pe_ratio",))
        )

        batch = source.fetch_fundamentals()

        assert batch.cape is None
        assert batch.dividend is not None
        assert not batch.is_empty

    def test_all_indicators_failing_gives_empty_batch(self):
        source = YChartsFundamentalsSource(session=self._session(failing=tuple(self.PAGES)))

        assert source.fetch_fundamentals().is_empty


# -----------------------------------------------------------------------------
# Treasury
# -----------------------------------------------------------------------------


NOMINAL_CSV = """Date,1 Mo,2 Mo,3 Mo,1 Yr,10 Yr,20 Yr,30 Yr
06/14/2024,5.51,5.49,5.47,5.10,4.22,4.55,4.36
06/13/2024,5.50,5.49,5.46,5.11,4.25,4.58,4.40
"""


class TestParseLatestRate:
    """parse_latest_rate reads a column of the newest row."""

    def test_reads_first_data_row(self):
        assert parse_latest_rate(NOMINAL_CSV, "20 Yr") == 4.55

    def test_missing_column_raises(self):
        with pytest.raises(ValueError, match="No '4 Wk' column"):
            parse_latest_rate(NOMINAL_CSV, "4 Wk")

    def test_blank_field_raises(self):
        csv_text = "Date,20 Yr\n06/14/2024,\n"
        with pytest.raises(ValueError, match="Missing '20 Yr' field"):
            parse_latest_rate(csv_text, "20 Yr")

    def test_header_only_raises(self):
        with pytest.raises(ValueError, match="No data rows"):
            parse_latest_rate("Date,20 Yr\n", "20 Yr")

    def test_empty_text_raises(self):
        with pytest.raises(ValueError, match="Empty treasury CSV"):
            parse_latest_rate("", "20 Yr")


class TestTreasuryCsvSource:
    """TreasuryCsvSource requests the right curve and column."""

    def test_bill_rate(self):
        session = MagicMock()
        session.get.return_value = _response(text="Date,4 Wk,8 Wk\n06/14/2024,5.27,5.28\n")
        source = TreasuryCsvSource(session=session, timeout_seconds=3.0)

        assert source.fetch_treasury_4w_bill() == 5.27
        _, kwargs = session.get.call_args
        assert kwargs["params"]["type"] == "daily_treasury_bill_rates"
        assert kwargs["timeout"] == 3.0

    def test_http_error_propagates(self):
        session = MagicMock()
        session.get.return_value = _response(status_error=requests.HTTPError("503"))
        source = TreasuryCsvSource(session=session)

        with pytest.raises(requests.HTTPError):
            source.fetch_treasury_20y_nominal()


# -----------------------------------------------------------------------------
# BLS
# -----------------------------------------------------------------------------


def _bls_payload(data: list[dict]) -> dict:
    return {
        "status": "REQUEST_SUCCEEDED",
        "Results": {"series": [{"seriesID": "CUUR0000SA0", "data": data}]},
    }


class TestParseInflationRate:
    """parse_inflation_rate returns the latest 12-month change."""

    def test_uses_calculated_pct_change(self):
        payload = _bls_payload([
            {"year": "2024", "period": "M05", "value": "314.069",
             "calculations": {"pct_changes": {"1": "0.0", "12": "3.3"}}},
            {"year": "2024", "period": "M04", "value": "313.548",
             "calculations": {"pct_changes": {"12": "3.4"}}},
        ])
        assert parse_inflation_rate(payload) == 3.3

    def test_derives_from_year_ago_value(self):
        payload = _bls_payload([
            {"year": "2024", "period": "M05", "value": "103.0"},
            {"year": "2023", "period": "M05", "value": "100.0"},
        ])
        assert parse_inflation_rate(payload) == 3.0

    def test_ignores_annual_average_period(self):
        payload = _bls_payload([
            {"year": "2024", "period": "M13", "value": "999.0"},
            {"year": "2024", "period": "M01", "value": "102.0"},
            {"year": "2023", "period": "M01", "value": "100.0"},
        ])
        assert parse_inflation_rate(payload) == 2.0

    def test_failed_request_raises(self):
        with pytest.raises(ValueError, match="BLS request failed"):
            parse_inflation_rate({"status": "REQUEST_NOT_PROCESSED", "message": ["limit"]})

    def test_missing_year_ago_raises(self):
        payload = _bls_payload([{"year": "2024", "period": "M05", "value": "103.0"}])
        with pytest.raises(ValueError, match="No year-ago observation"):
            parse_inflation_rate(payload)


class TestBlsInflationSource:
    def test_posts_series_request(self):
        session = MagicMock()
        session.post.return_value = _response(payload=_bls_payload([
            {"year": "2024", "period": "M05", "value": "314.069",
             "calculations": {"pct_changes": {"12": "3.3"}}},
        ]))
        source = BlsInflationSource(session=session, api_key="secret")

        assert source.fetch_inflation_rate() == 3.3
        _, kwargs = session.post.call_args
        assert kwargs["json"]["seriesid"] == ["CUUR0000SA0"]
        assert kwargs["json"]["registrationkey"] == "secret"


# -----------------------------------------------------------------------------
# Yahoo
# -----------------------------------------------------------------------------


class TestYahooSpotPriceSource:
    """YahooSpotPriceSource reads the last close from yfinance history."""

    def _patched_yf(self, history):
        yf = MagicMock()
        yf.Ticker.return_value.history.return_value = history
        return patch("macro_dashboard.providers.yahoo._get_yf", return_value=yf)

    def test_returns_last_close(self):
        history = pd.DataFrame({"Close": [5400.10, 5421.03, 5431.60]})
        with self._patched_yf(history):
            assert YahooSpotPriceSource().fetch_spot_price() == 5431.60

    def test_skips_trailing_nan(self):
        history = pd.DataFrame({"Close": [5421.03, float("nan")]})
        with self._patched_yf(history):
            assert YahooSpotPriceSource().fetch_spot_price() == 5421.03

    def test_empty_history_raises(self):
        with self._patched_yf(pd.DataFrame()):
            with pytest.raises(ValueError, match="No price history"):
                YahooSpotPriceSource().fetch_spot_price()


# -----------------------------------------------------------------------------
# Stub provider and selection
# -----------------------------------------------------------------------------


class TestStubProvider:
    def test_fundamentals_batch_is_complete(self, market_provider: StubMarketDataProvider):
        batch = market_provider.fetch_fundamentals()

        assert not batch.is_empty
        assert batch.dividend[0] == batch.eps_actual[0]
        assert batch.eps_estimated[0] > batch.eps_actual[0]
        assert batch.cape[1] == batch.monthly_return[0].label

    def test_values_are_nonzero(self, market_provider: StubMarketDataProvider):
        assert market_provider.fetch_spot_price() > 0
        assert market_provider.fetch_treasury_20y_nominal() > 0
        assert market_provider.fetch_treasury_20y_tips() > 0
        assert market_provider.fetch_treasury_4w_bill() > 0
        assert market_provider.fetch_inflation_rate() > 0


class TestBuildMarketDataProvider:
    def test_stub_mode(self):
        provider = build_market_data_provider(Settings(provider_mode="stub"))
        assert isinstance(provider, StubMarketDataProvider)

    def test_live_mode(self):
        provider = build_market_data_provider(Settings(provider_mode="live"))
        assert isinstance(provider, LiveMarketDataProvider)

    def test_live_provider_closes_its_session(self):
        session = MagicMock(spec=requests.Session)
        provider = LiveMarketDataProvider.from_settings(Settings(provider_mode="live"), session=session)

        provider.close()

        session.close.assert_called_once()


class TestSharedProvider:
    """The API and the scheduler share one provider per application context."""

    @pytest.fixture
    def live_context(self):
        set_settings(Settings(provider_mode="live"))
        context = AppContext()
        set_app_context(context)
        yield context
        set_app_context(None)
        reset_settings()

    def test_dependency_reuses_provider(self, live_context: AppContext):
        """
        GIVEN the live provider mode
        WHEN the provider dependency is resolved for two requests
        THEN both requests get the same provider
        """
        first = get_market_provider()

        assert isinstance(first, LiveMarketDataProvider)
        assert get_market_provider() is first

    def test_close_releases_http_session(self, live_context: AppContext):
        session = MagicMock(spec=requests.Session)
        with patch(
            "macro_dashboard.providers.live_provider.build_session",
            return_value=session,
        ):
            provider = live_context.provider

        live_context.close()

        session.close.assert_called_once()
        assert live_context.provider is not provider
