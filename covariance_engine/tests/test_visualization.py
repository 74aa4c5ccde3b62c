"""
Smoke tests for the report figures.
"""

from pathlib import Path

from src.covariance import build_covariance_matrix, covariance_to_correlation
from src.returns import compute_daily_returns
from src.statistics import DenominatorMode
from src.visualization import (
    plot_correlation_heatmap,
    plot_covariance_heatmap,
    plot_daily_returns,
)


def test_figures_written(tmp_path, price_table):
    returns = compute_daily_returns(price_table)
    cov = build_covariance_matrix(returns, DenominatorMode.SAMPLE)
    out = str(tmp_path / "figures")

    paths = [
        plot_covariance_heatmap(cov, output_dir=out),
        plot_correlation_heatmap(covariance_to_correlation(cov), output_dir=out),
        plot_daily_returns(returns, output_dir=out),
    ]

    assert [Path(p).name for p in paths] == [
        "covariance_heatmap.png",
        "correlation_heatmap.png",
        "daily_returns.png",
    ]
    for p in paths:
        assert Path(p).stat().st_size > 0
