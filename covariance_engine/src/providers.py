"""
Price Providers Module
======================
Thin I/O adapters that turn provider responses into a price table
({security: {ISO date: adjusted close}}) for the returns engine.

Supported sources:
    - Tiingo daily prices (JSON array of bars, ``adjClose``)
    - Alpha Vantage TIME_SERIES_DAILY_ADJUSTED (``5. adjusted close``)
    - Yahoo Finance via yfinance (auto-adjusted ``Close``)
    - Cached wide CSV (date index, one column per ticker)

Failure policy:
    A ticker whose request fails, returns a non-200 status, or carries an
    unparseable payload is logged and left out of the table. Individual
    malformed records are skipped. Only unusable configuration (e.g. a
    missing API key) raises.
"""

import logging
import time
import pandas as pd
import requests
import yfinance as yf
from typing import Any, Dict, List, Mapping, Optional

from src.returns import price_table_from_frame, price_table_to_frame

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
TIINGO_BASE_URL: str = "https://api.tiingo.com/tiingo/daily/"
ALPHAVANTAGE_BASE_URL: str = "https://www.alphavantage.co/query?"
ALPHAVANTAGE_SERIES_KEY: str = "Time Series (Daily)"
ALPHAVANTAGE_PRICE_FIELD: str = "5. adjusted close"

REQUEST_TIMEOUT: float = 30.0
# Tiingo free tier allows roughly one request per second.
DEFAULT_PAUSE: float = 0.25


class ProviderError(Exception):
    """Raised when a provider cannot be used at all."""


# ─────────────────────────────────────────────────────────────
# Tiingo
# ─────────────────────────────────────────────────────────────

def build_tiingo_url(ticker: str, start_date: str, end_date: str) -> str:
    """Daily-prices endpoint for one ticker over [start_date, end_date]."""
    return (
        f"{TIINGO_BASE_URL}{ticker}/prices"
        f"?startDate={start_date}&endDate={end_date}&format=json"
    )


def parse_tiingo_bars(bars: List[Dict[str, Any]], ticker: str = "") -> Dict[str, float]:
    """
    Extract {date: adjClose} from a Tiingo bar list.

    Dates are truncated to the calendar day (``2024-01-02T00:00:00.000Z``
    becomes ``2024-01-02``). Bars missing either field, or carrying a
    non-numeric price, are skipped.
    """
    series: Dict[str, float] = {}
    for bar in bars:
        try:
            date = str(bar["date"])[:10]
            series[date] = float(bar["adjClose"])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed bar for {ticker}: {bar!r}")
    return series


def fetch_tiingo_prices(
    tickers: List[str],
    api_key: Optional[str],
    start_date: str,
    end_date: str,
    pause: float = DEFAULT_PAUSE,
) -> Dict[str, Dict[str, float]]:
    """
    Fetch adjusted close prices from Tiingo, one request per ticker.

    Parameters
    ----------
    tickers : list of str
        Ticker symbols.
    api_key : str
        Tiingo API token, sent in the Authorization header.
    start_date, end_date : str
        Inclusive window in YYYY-MM-DD format.
    pause : float
        Seconds to sleep after each successful ticker.

    Returns
    -------
    dict
        Price table containing only the tickers that returned data.

    Raises
    ------
    ProviderError
        If no API key is supplied.
    """
    if not api_key:
        raise ProviderError("Tiingo API key not configured (TIINGO_API_KEY)")

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Token {api_key}",
    }
    table: Dict[str, Dict[str, float]] = {}

    for ticker in tickers:
        url = build_tiingo_url(ticker, start_date, end_date)
        logger.info(f"Fetching Tiingo prices for {ticker}")

        try:
            response = requests.get(url, headers=headers, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            logger.warning(f"Tiingo request failed for {ticker}: {e}")
            continue

        if response.status_code != 200:
            logger.warning(f"Tiingo request failed ({response.status_code}) for {ticker}")
            continue

        try:
            bars = response.json()
        except ValueError as e:
            logger.warning(f"JSON parse error for {ticker}: {e}")
            continue

        if not isinstance(bars, list) or not bars:
            logger.warning(f"No price data returned for {ticker}")
            continue

        series = parse_tiingo_bars(bars, ticker)
        if series:
            table[ticker] = series
        else:
            logger.warning(f"No usable bars returned for {ticker}")

        if pause > 0:
            time.sleep(pause)

    return table


# ─────────────────────────────────────────────────────────────
# Alpha Vantage
# ─────────────────────────────────────────────────────────────

def build_alphavantage_url(symbol: str, api_key: str, output_size: str = "compact") -> str:
    """TIME_SERIES_DAILY_ADJUSTED query URL (``compact`` or ``full``)."""
    return (
        f"{ALPHAVANTAGE_BASE_URL}function=TIME_SERIES_DAILY_ADJUSTED"
        f"&symbol={symbol}&outputsize={output_size}&apikey={api_key}"
    )


def parse_alphavantage_series(payload: Mapping[str, Any], ticker: str = "") -> Dict[str, float]:
    """
    Extract {date: adjusted close} from an Alpha Vantage daily payload.

    Returns an empty series when the payload has no time-series block
    (error messages and rate-limit notes come back that way).
    """
    block = payload.get(ALPHAVANTAGE_SERIES_KEY)
    if not isinstance(block, Mapping):
        note = payload.get("Note") or payload.get("Error Message") or payload.get("Information")
        logger.warning(f"No daily series in Alpha Vantage payload for {ticker}: {note}")
        return {}

    series: Dict[str, float] = {}
    for date, fields in block.items():
        try:
            series[str(date)[:10]] = float(fields[ALPHAVANTAGE_PRICE_FIELD])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed record for {ticker} on {date}")
    return series


def fetch_alphavantage_prices(
    tickers: List[str],
    api_key: Optional[str],
    output_size: str = "compact",
    pause: float = DEFAULT_PAUSE,
) -> Dict[str, Dict[str, float]]:
    """
    Fetch adjusted close prices from Alpha Vantage, one request per ticker.

    Same skip policy as ``fetch_tiingo_prices``; the API key travels in
    the query string.
    """
    if not api_key:
        raise ProviderError("Alpha Vantage API key not configured (ALPHAVANTAGE_API_KEY)")

    table: Dict[str, Dict[str, float]] = {}

    for ticker in tickers:
        logger.info(f"Fetching Alpha Vantage prices for {ticker}")
        try:
            response = requests.get(
                build_alphavantage_url(ticker, api_key, output_size),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning(f"Alpha Vantage request failed for {ticker}: {e}")
            continue

        if response.status_code != 200:
            logger.warning(f"Alpha Vantage request failed ({response.status_code}) for {ticker}")
            continue

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"JSON parse error for {ticker}: {e}")
            continue

        if not isinstance(payload, Mapping):
            logger.warning(f"Unexpected Alpha Vantage payload for {ticker}")
            continue

        series = parse_alphavantage_series(payload, ticker)
        if series:
            table[ticker] = series

        if pause > 0:
            time.sleep(pause)

    return table


# ─────────────────────────────────────────────────────────────
# Yahoo Finance
# ─────────────────────────────────────────────────────────────

def fetch_yfinance_prices(
    tickers: List[str],
    start: str,
    end: str,
) -> Dict[str, Dict[str, float]]:
    """
    Download adjusted close prices from Yahoo Finance.

    Parameters
    ----------
    tickers : list of str
        Ticker symbols to download.
    start, end : str
        Window in YYYY-MM-DD format (``end`` exclusive, as in yfinance).

    Returns
    -------
    dict
        Price table; tickers with no rows are left out.
    """
    raw = yf.download(tickers, start=start, end=end, auto_adjust=True, progress=False)

    if raw is None or raw.empty:
        logger.warning(f"yfinance returned no data for {tickers}")
        return {}

    # Handle multi-level columns from yfinance
    if isinstance(raw.columns, pd.MultiIndex):
        prices = raw["Close"].copy()
    else:
        prices = raw[["Close"]].copy()
        prices.columns = tickers[:1]

    table = price_table_from_frame(prices)
    for ticker in [t for t, series in table.items() if not series]:
        logger.warning(f"No price data returned for {ticker}")
        del table[ticker]
    return table


# ─────────────────────────────────────────────────────────────
# CSV cache
# ─────────────────────────────────────────────────────────────

def load_price_csv(path: str) -> Dict[str, Dict[str, float]]:
    """
    Load a price table from a wide CSV file.

    Parameters
    ----------
    path : str
        CSV with a date index column and one column per ticker.
    """
    df = pd.read_csv(path, index_col=0, parse_dates=True)
    return price_table_from_frame(df)


def save_price_csv(price_table: Mapping[str, Mapping[str, float]], path: str) -> str:
    """Write a price table as a wide CSV and return the path."""
    price_table_to_frame(price_table).to_csv(path, index_label="Date")
    return str(path)
