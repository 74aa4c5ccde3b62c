"""
Covariance Matrix Module
========================
Builds the security x security variance-covariance matrix from a
returns table, and the helpers used to inspect and report it.

Construction:
    Securities are visited once in upper-triangular order. The diagonal
    holds variance(r_a); every off-diagonal value is computed once and
    written to both M[a][b] and M[b][a], so the matrix is exactly
    symmetric regardless of floating-point summation order.

Complexity: O(S² · T) for S securities and T returns per security.
"""

import logging
import numpy as np
import pandas as pd
from typing import Dict, List, Mapping, Optional, Sequence

from src.statistics import DEFAULT_MODE, DenominatorMode, covariance, variance

logger = logging.getLogger(__name__)

CovarianceMatrix = Dict[str, Dict[str, float]]


def build_covariance_matrix(
    returns_table: Mapping[str, Sequence[float]],
    mode: DenominatorMode = DEFAULT_MODE,
) -> CovarianceMatrix:
    """
    Compute the variance-covariance matrix of a returns table.

    Parameters
    ----------
    returns_table : mapping
        Security -> daily return series. All series must share a length
        of at least two.
    mode : DenominatorMode
        Divisor convention applied to every cell.

    Returns
    -------
    dict
        M[a][b] for every pair of securities, rows and columns in the
        table's security order. Empty input gives an empty matrix.

    Raises
    ------
    InsufficientDataError, DimensionMismatchError
        Propagated from the moment estimators. A single bad pair aborts
        the whole build.
    """
    securities: List[str] = list(returns_table)
    matrix: CovarianceMatrix = {s: {} for s in securities}

    for i, a in enumerate(securities):
        matrix[a][a] = variance(returns_table[a], mode)
        for b in securities[i + 1:]:
            value = covariance(returns_table[a], returns_table[b], mode)
            matrix[a][b] = value
            matrix[b][a] = value

    logger.debug(f"Built {len(securities)}x{len(securities)} covariance matrix ({mode.value})")
    return matrix


def matrix_to_frame(
    matrix: CovarianceMatrix,
    labels: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Convert a nested-dict matrix into a labelled square DataFrame.

    Parameters
    ----------
    matrix : dict
        Nested mapping M[row][column].
    labels : list of str, optional
        Row/column order. Defaults to the matrix's own row order.

    Returns
    -------
    pd.DataFrame
        Square frame with identical index and columns.
    """
    if labels is None:
        labels = list(matrix)
    return pd.DataFrame(
        [[matrix[a][b] for b in labels] for a in labels],
        index=labels,
        columns=labels,
        dtype=float,
    )


def covariance_to_correlation(matrix: CovarianceMatrix) -> CovarianceMatrix:
    """
    Derive the Pearson correlation matrix from a covariance matrix.

    ρ_ab = σ_ab / (σ_a · σ_b). Securities with zero variance get NaN
    off the diagonal and 1.0 on it.
    """
    labels = list(matrix)
    std = {s: float(np.sqrt(matrix[s][s])) for s in labels}

    corr: CovarianceMatrix = {}
    for a in labels:
        corr[a] = {}
        for b in labels:
            if a == b:
                corr[a][b] = 1.0
                continue
            scale = std[a] * std[b]
            corr[a][b] = matrix[a][b] / scale if scale > 0 else float("nan")
    return corr


def is_symmetric(matrix: CovarianceMatrix) -> bool:
    """Exact (bit-for-bit) symmetry check."""
    return all(
        matrix[a][b] == matrix[b][a]
        for a in matrix
        for b in matrix[a]
    )


def validate_covariance_matrix(matrix: CovarianceMatrix, tol: float = 1e-10) -> bool:
    """
    Check that a covariance matrix is symmetric and positive semi-definite.

    Parameters
    ----------
    matrix : dict
        Covariance matrix to validate.
    tol : float
        Smallest eigenvalue allowed below zero (round-off).

    Returns
    -------
    bool
        True if valid, False otherwise.
    """
    if not matrix:
        return True

    # Symmetry check
    if not is_symmetric(matrix):
        return False

    # Positive semi-definiteness: all eigenvalues >= 0
    eigenvalues = np.linalg.eigvalsh(matrix_to_frame(matrix).values)
    return bool(np.all(eigenvalues >= -tol))
