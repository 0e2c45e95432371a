"""S&P 500 spot price from Yahoo Finance via yfinance."""

import logging

logger = logging.getLogger(__name__)

SP500_SYMBOL = "^GSPC"


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


class YahooSpotPriceSource:
    """Reads the latest index level from a short intraday history window."""

    def __init__(self, symbol: str = SP500_SYMBOL):
        self._symbol = symbol

    def fetch_spot_price(self) -> float:
        yf = _get_yf()
        history = yf.Ticker(self._symbol).history(period="5d")
        if history is None or history.empty or "Close" not in history:
            raise ValueError(f"No price history returned for {self._symbol}")
        closes = history["Close"].dropna()
        if closes.empty:
            raise ValueError(f"No close prices returned for {self._symbol}")
        price = float(closes.iloc[-1])
        if price <= 0:
            raise ValueError(f"Non-positive price for {self._symbol}: {price}")
        logger.info(f"Fetched {self._symbol} price: {price}")
        return price
