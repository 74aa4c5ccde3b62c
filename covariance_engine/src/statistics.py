"""
Statistical Estimation Module
==============================
First and second moments of daily return series.

Mathematical Foundation:
    Mean:        μ = (1/n) Σ r_i
    Variance:    σ² = Σ (r_i - μ)² / d
    Covariance:  σ_xy = Σ (x_i - μ_x)(y_i - μ_y) / d

    d = n - 1 (sample, unbiased) or n (population).

Numerics:
    Float64 throughout. NaN/Inf inputs are not sanitised and propagate
    through the result. Deviation products are summed in input order, so
    covariance(x, y) == covariance(y, x) and covariance(x, x) ==
    variance(x) bit-for-bit.
"""

from enum import Enum
from typing import Sequence

import numpy as np

from src.exceptions import DimensionMismatchError, InsufficientDataError


class DenominatorMode(Enum):
    """Divisor convention for second-moment estimates."""

    SAMPLE = "sample"
    POPULATION = "population"

    def divisor(self, n: int) -> int:
        return n - 1 if self is DenominatorMode.SAMPLE else n

    @classmethod
    def parse(cls, value) -> "DenominatorMode":
        """Accept a member or its case-insensitive name/value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown denominator mode {value!r}; "
                f"expected one of {[m.value for m in cls]}"
            ) from None


DEFAULT_MODE: DenominatorMode = DenominatorMode.POPULATION

MIN_OBSERVATIONS: int = 2


def _deviations(returns: Sequence[float]) -> np.ndarray:
    r = np.asarray(returns, dtype=np.float64)
    return r - r.mean()


def compute_mean(returns: Sequence[float]) -> float:
    """
    Arithmetic mean of a return series.

    Raises
    ------
    InsufficientDataError
        If the series is empty.
    """
    if len(returns) == 0:
        raise InsufficientDataError("mean needs at least one observation")
    return float(np.asarray(returns, dtype=np.float64).mean())


def variance(
    returns: Sequence[float],
    mode: DenominatorMode = DEFAULT_MODE,
) -> float:
    """
    Variance of a return series.

    Parameters
    ----------
    returns : sequence of float
        Daily returns.
    mode : DenominatorMode
        SAMPLE divides by n - 1, POPULATION by n.

    Returns
    -------
    float
        Second central moment under the chosen convention.

    Raises
    ------
    InsufficientDataError
        If fewer than two observations are supplied.
    """
    n = len(returns)
    if n < MIN_OBSERVATIONS:
        raise InsufficientDataError(
            f"variance needs at least {MIN_OBSERVATIONS} observations, got {n}"
        )

    dev = _deviations(returns)
    return float(np.sum(dev * dev) / mode.divisor(n))


def covariance(
    r1: Sequence[float],
    r2: Sequence[float],
    mode: DenominatorMode = DEFAULT_MODE,
) -> float:
    """
    Covariance of two aligned return series.

    Each series is centred on its own mean; the cross-deviation products
    are summed and divided with the same convention as ``variance``.

    Parameters
    ----------
    r1, r2 : sequence of float
        Daily returns, element i of each observed on the same date.
    mode : DenominatorMode
        SAMPLE divides by n - 1, POPULATION by n.

    Returns
    -------
    float
        Covariance under the chosen convention.

    Raises
    ------
    DimensionMismatchError
        If the series lengths differ.
    InsufficientDataError
        If the common length is below two.
    """
    n = len(r1)
    if n != len(r2):
        raise DimensionMismatchError(
            f"covariance needs series of equal length, got {n} and {len(r2)}"
        )
    if n < MIN_OBSERVATIONS:
        raise InsufficientDataError(
            f"covariance needs at least {MIN_OBSERVATIONS} observations, got {n}"
        )

    return float(np.sum(_deviations(r1) * _deviations(r2)) / mode.divisor(n))


def standard_deviation(
    returns: Sequence[float],
    mode: DenominatorMode = DEFAULT_MODE,
) -> float:
    """Square root of ``variance`` under the same convention."""
    return float(np.sqrt(variance(returns, mode)))
