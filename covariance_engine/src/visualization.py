"""
Visualization Module
====================
Static charts for the covariance report.

Generated Figures:
    1. Covariance Heatmap
    2. Correlation Heatmap
    3. Daily Returns by Security
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.ticker as mtick
import seaborn as sns
from typing import List, Mapping, Optional, Sequence
from pathlib import Path

from src.covariance import CovarianceMatrix, matrix_to_frame


# ─────────────────────────────────────────────────────────────
# Style Configuration
# ─────────────────────────────────────────────────────────────
STYLE = {
    "figure.figsize": (12, 7),
    "figure.dpi": 150,
    "font.size": 11,
    "font.family": "serif",
    "axes.grid": True,
    "grid.alpha": 0.3,
    "axes.spines.top": False,
    "axes.spines.right": False,
}

COLORS = {
    "zero_line": "#444444",
}


def save_figure(fig: plt.Figure, name: str, output_dir: str = "results/figures") -> str:
    """Save figure to disk and return the path."""
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    filepath = path / f"{name}.png"
    fig.savefig(filepath, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return str(filepath)


def plot_covariance_heatmap(
    matrix: CovarianceMatrix,
    labels: Optional[List[str]] = None,
    output_dir: str = "results/figures",
) -> str:
    """
    Plot the covariance matrix as an annotated heatmap.

    Only the lower triangle is drawn since the matrix is symmetric.

    Parameters
    ----------
    matrix : dict
        Covariance matrix M[a][b].
    labels : list of str, optional
        Display order; defaults to the matrix row order.
    output_dir : str
        Output directory.

    Returns
    -------
    str
        Path to saved figure.
    """
    frame = matrix_to_frame(matrix, labels)

    with plt.rc_context(STYLE):
        fig, ax = plt.subplots(figsize=(9, 7))
        mask = np.triu(np.ones_like(frame.values, dtype=bool), k=1)

        sns.heatmap(
            frame,
            mask=mask,
            annot=True,
            fmt=".2e",
            cmap="viridis",
            square=True,
            linewidths=0.5,
            ax=ax,
            cbar_kws={"shrink": 0.8, "label": "Covariance"},
        )
        ax.set_title("Daily Return Covariance Matrix", fontsize=14, fontweight="bold")

    return save_figure(fig, "covariance_heatmap", output_dir)


def plot_correlation_heatmap(
    corr_matrix: CovarianceMatrix,
    labels: Optional[List[str]] = None,
    output_dir: str = "results/figures",
) -> str:
    """
    Plot correlation matrix as an annotated heatmap.

    Parameters
    ----------
    corr_matrix : dict
        Correlation matrix (from ``covariance_to_correlation``).
    labels : list of str, optional
        Display order.
    output_dir : str
        Output directory.

    Returns
    -------
    str
        Path to saved figure.
    """
    frame = matrix_to_frame(corr_matrix, labels)

    with plt.rc_context(STYLE):
        fig, ax = plt.subplots(figsize=(9, 7))
        mask = np.triu(np.ones_like(frame.values, dtype=bool), k=1)

        sns.heatmap(
            frame,
            mask=mask,
            annot=True,
            fmt=".3f",
            cmap="RdYlBu_r",
            center=0,
            vmin=-1,
            vmax=1,
            square=True,
            linewidths=0.5,
            ax=ax,
            cbar_kws={"shrink": 0.8, "label": "Correlation"},
        )
        ax.set_title("Asset Correlation Matrix", fontsize=14, fontweight="bold")

    return save_figure(fig, "correlation_heatmap", output_dir)


def plot_daily_returns(
    returns_table: Mapping[str, Sequence[float]],
    output_dir: str = "results/figures",
) -> str:
    """
    Line chart of each security's daily simple returns.

    Parameters
    ----------
    returns_table : mapping
        Security -> daily returns.
    output_dir : str
        Output directory.

    Returns
    -------
    str
        Path to saved figure.
    """
    with plt.rc_context(STYLE):
        fig, ax = plt.subplots()

        for security, returns in returns_table.items():
            ax.plot(np.arange(1, len(returns) + 1), returns,
                    linewidth=0.9, alpha=0.8, label=security)

        ax.axhline(0.0, color=COLORS["zero_line"], linewidth=0.8)
        ax.set_xlabel("Observation", fontsize=12)
        ax.set_ylabel("Daily Return", fontsize=12)
        ax.set_title("Daily Simple Returns", fontsize=14, fontweight="bold")
        ax.yaxis.set_major_formatter(mtick.PercentFormatter(1.0))
        if returns_table:
            ax.legend(fontsize=10)

    return save_figure(fig, "daily_returns", output_dir)
