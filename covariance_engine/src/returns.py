"""
Returns Module
==============
Converts per-security price series into simple daily returns, plus the
pandas adapters used at the boundary with the fetch layer.

Mathematical Foundation:
    Simple return: r_t = (P_t - P_{t-1}) / P_{t-1}

Data shapes:
    PriceTable:   {security: {date: price}}
    ReturnsTable: {security: (r_1, ..., r_{n-1})}

Dates are walked in ascending key order, so ISO-8601 strings and
``datetime.date`` keys both sort chronologically.
"""

import logging
import numpy as np
import pandas as pd
from typing import Dict, Hashable, List, Mapping, Tuple

from src.exceptions import DivisionError

logger = logging.getLogger(__name__)

PriceSeries = Mapping[Hashable, float]
PriceTable = Mapping[str, PriceSeries]
ReturnSeries = Tuple[float, ...]
ReturnsTable = Dict[str, ReturnSeries]


# ─────────────────────────────────────────────────────────────
# Return computation
# ─────────────────────────────────────────────────────────────

def compute_return_series(prices: PriceSeries, security: str = "") -> ReturnSeries:
    """
    Compute simple daily returns for a single price series.

    Parameters
    ----------
    prices : mapping
        Date -> adjusted close price. Not modified.
    security : str
        Identifier used in error messages.

    Returns
    -------
    tuple of float
        Returns of length ``len(prices) - 1``; empty for fewer than
        two observations.

    Raises
    ------
    DivisionError
        If any price used as a denominator is exactly zero.
    """
    if len(prices) < 2:
        return ()

    dates = sorted(prices)
    values = np.array([prices[d] for d in dates], dtype=np.float64)

    denominators = values[:-1]
    zero_idx = np.flatnonzero(denominators == 0.0)
    if zero_idx.size:
        bad_date = dates[int(zero_idx[0])]
        raise DivisionError(
            f"Zero price for {security or 'series'} on {bad_date}; "
            f"cannot compute the following return"
        )

    returns = (values[1:] - denominators) / denominators
    return tuple(float(r) for r in returns)


def compute_daily_returns(price_table: PriceTable) -> ReturnsTable:
    """
    Compute simple daily returns for every security in a price table.

    Parameters
    ----------
    price_table : mapping
        Security -> {date -> price}.

    Returns
    -------
    dict
        Security -> tuple of daily returns, in the table's security order.

    Raises
    ------
    DivisionError
        On the first zero denominator found; no partial table is returned.
    """
    returns_table: ReturnsTable = {}

    for security, prices in price_table.items():
        if len(prices) == 0:
            logger.warning(f"No price observations for {security}")
        returns_table[security] = compute_return_series(prices, security)
        logger.debug(
            f"{security}: {len(prices)} prices -> "
            f"{len(returns_table[security])} returns"
        )

    return returns_table


def align_price_table(price_table: PriceTable) -> Dict[str, Dict[Hashable, float]]:
    """
    Restrict every series to the dates present for all securities.

    Providers return calendars that can differ per ticker (listings,
    halts, missing bars). Aligning before computing returns keeps all
    return series the same length, which covariance requires.

    Parameters
    ----------
    price_table : mapping
        Security -> {date -> price}.

    Returns
    -------
    dict
        New price table sharing a single date set.
    """
    if not price_table:
        return {}

    common = set.intersection(*(set(series) for series in price_table.values()))

    aligned = {}
    for security, series in price_table.items():
        dropped = len(series) - len(common)
        if dropped:
            logger.info(f"Dropping {dropped} unaligned dates for {security}")
        aligned[security] = {d: series[d] for d in sorted(common)}

    return aligned


# ─────────────────────────────────────────────────────────────
# pandas adapters
# ─────────────────────────────────────────────────────────────

def _date_key(label) -> Hashable:
    # Timestamps become ISO strings so keys sort the same way as the
    # providers' own date strings.
    if isinstance(label, pd.Timestamp):
        return label.strftime("%Y-%m-%d")
    return label


def price_table_from_frame(prices: pd.DataFrame) -> Dict[str, Dict[Hashable, float]]:
    """
    Convert a wide price DataFrame (dates x tickers) into a price table.

    Missing values are dropped per column, so each security keeps only
    the dates it actually traded.

    Parameters
    ----------
    prices : pd.DataFrame
        Adjusted close prices indexed by date.

    Returns
    -------
    dict
        Security -> {ISO date -> price}.
    """
    table = {}
    for column in prices.columns:
        series = prices[column].dropna()
        table[str(column)] = {
            _date_key(idx): float(value) for idx, value in series.items()
        }
    return table


def price_table_to_frame(price_table: PriceTable) -> pd.DataFrame:
    """Convert a price table into a wide DataFrame sorted by date."""
    frame = pd.DataFrame({s: pd.Series(dict(p), dtype=float) for s, p in price_table.items()})
    return frame.sort_index()


def returns_table_lengths(returns_table: ReturnsTable) -> List[int]:
    """Distinct return-series lengths present in a returns table."""
    return sorted({len(r) for r in returns_table.values()})
