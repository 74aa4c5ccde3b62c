"""
Daily Returns Covariance Engine — Main Orchestrator
===================================================
Entry point for the covariance report.

Execution Flow:
    1. Fetch / load price data
    2. Align dates and compute simple daily returns
    3. Variance-covariance matrix
    4. Validation and correlation
    5. Visualization
    6. Results export
"""

import os
import sys
import json
import logging
from pathlib import Path

# ─────────────────────────────────────────────────────────────
# Add project root to path
# ─────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.providers import (
    fetch_alphavantage_prices,
    fetch_tiingo_prices,
    fetch_yfinance_prices,
    load_price_csv,
    save_price_csv,
)
from src.returns import align_price_table, compute_daily_returns, returns_table_lengths
from src.statistics import DenominatorMode, compute_mean, standard_deviation
from src.covariance import (
    build_covariance_matrix,
    covariance_to_correlation,
    matrix_to_frame,
    validate_covariance_matrix,
)
from src.visualization import (
    plot_correlation_heatmap,
    plot_covariance_heatmap,
    plot_daily_returns,
)

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────
DEFAULT_TICKERS = ["SPY", "QQQ", "JPM", "TLT", "GLD"]
START_DATE = "2024-01-01"
END_DATE = "2025-01-01"

PROVIDER = os.environ.get("PRICE_PROVIDER", "yfinance")
DENOMINATOR_MODE = DenominatorMode.parse(os.environ.get("COVARIANCE_MODE", "sample"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

DATA_PATH = PROJECT_ROOT / "data" / "raw_prices.csv"
RESULTS_DIR = PROJECT_ROOT / "results"
FIGURES_DIR = RESULTS_DIR / "figures"
TABLES_DIR = RESULTS_DIR / "tables"


def print_header(text: str) -> None:
    """Print formatted section header."""
    width = 60
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width)


def print_metrics(metrics: dict, indent: int = 4) -> None:
    """Print dictionary of metrics with formatting."""
    prefix = " " * indent
    for key, val in metrics.items():
        if isinstance(val, float):
            print(f"{prefix}{key:.<35} {val:>12.6f}")
        else:
            print(f"{prefix}{key:.<35} {str(val):>12}")


def fetch_prices(tickers, provider: str = PROVIDER) -> dict:
    """Fetch a price table from the configured provider."""
    if provider == "tiingo":
        return fetch_tiingo_prices(
            tickers, os.environ.get("TIINGO_API_KEY"), START_DATE, END_DATE
        )
    if provider == "alphavantage":
        return fetch_alphavantage_prices(
            tickers, os.environ.get("ALPHAVANTAGE_API_KEY"), output_size="full"
        )
    if provider == "yfinance":
        return fetch_yfinance_prices(tickers, START_DATE, END_DATE)
    raise ValueError(f"Unknown price provider: {provider}")


def main(tickers=None) -> None:
    """Execute the covariance pipeline."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    tickers = tickers or DEFAULT_TICKERS

    print("\n" + "╔" + "═" * 58 + "╗")
    print("║   DAILY RETURNS COVARIANCE ENGINE                        ║")
    print("╚" + "═" * 58 + "╝")

    # ── PHASE 1: Data ─────────────────────────────────────────
    print_header("PHASE 1 — PRICE DATA")

    cached = load_price_csv(str(DATA_PATH)) if DATA_PATH.exists() else {}
    if cached and all(t in cached for t in tickers):
        print(f"  Loading cached data from {DATA_PATH}")
        prices = {t: cached[t] for t in tickers}
    else:
        print(f"  Fetching {PROVIDER} price data for: {tickers}")
        prices = fetch_prices(tickers)
        if prices:
            DATA_PATH.parent.mkdir(parents=True, exist_ok=True)
            save_price_csv(prices, str(DATA_PATH))

    missing = [t for t in tickers if t not in prices]
    if missing:
        logger.warning(f"No prices for {missing}; continuing without them")

    prices = align_price_table(prices)
    print(f"  Securities: {list(prices)}")
    print(f"  Observations per security: {len(next(iter(prices.values()), {}))}")

    # ── PHASE 2: Returns ──────────────────────────────────────
    print_header("PHASE 2 — DAILY RETURNS")

    returns = compute_daily_returns(prices)
    print(f"  Return series lengths: {returns_table_lengths(returns)}")
    for s, r in returns.items():
        if len(r) < 2:
            continue
        print_metrics({
            f"{s} mean daily return": compute_mean(r),
            f"{s} daily volatility": standard_deviation(r, DENOMINATOR_MODE),
        })

    # ── PHASE 3: Covariance ───────────────────────────────────
    print_header(f"PHASE 3 — COVARIANCE MATRIX ({DENOMINATOR_MODE.value})")

    cov = build_covariance_matrix(returns, DENOMINATOR_MODE)
    cov_frame = matrix_to_frame(cov)
    print("\n" + cov_frame.to_string(float_format=lambda x: f"{x:.8f}"))

    # ── PHASE 4: Validation ───────────────────────────────────
    print_header("PHASE 4 — VALIDATION & CORRELATION")

    valid = validate_covariance_matrix(cov)
    print(f"  Symmetric and PSD: {valid}")
    if not valid:
        logger.warning("Covariance matrix failed validation")

    corr = covariance_to_correlation(cov)
    corr_frame = matrix_to_frame(corr)
    print("\n" + corr_frame.to_string(float_format=lambda x: f"{x:.4f}"))

    # ── PHASE 5: Visualization ────────────────────────────────
    print_header("PHASE 5 — FIGURES")

    if cov:
        figure_dir = str(FIGURES_DIR)
        for path in (
            plot_covariance_heatmap(cov, output_dir=figure_dir),
            plot_correlation_heatmap(corr, output_dir=figure_dir),
            plot_daily_returns(returns, output_dir=figure_dir),
        ):
            print(f"  Saved: {path}")
    else:
        print("  No securities with prices; skipping figures")

    # ── PHASE 6: Export ───────────────────────────────────────
    TABLES_DIR.mkdir(parents=True, exist_ok=True)
    cov_frame.to_csv(TABLES_DIR / "covariance_matrix.csv")
    corr_frame.to_csv(TABLES_DIR / "correlation_matrix.csv")

    all_results = {
        "securities": list(cov),
        "mode": DENOMINATOR_MODE.value,
        "start": START_DATE,
        "end": END_DATE,
        "num_returns": returns_table_lengths(returns),
        "covariance": cov,
        "valid": valid,
    }

    results_path = TABLES_DIR / "covariance_results.json"
    with open(results_path, "w") as f:
        json.dump(all_results, f, indent=2, default=str)

    print(f"\n  Results saved to: {results_path}")

    print("\n" + "╔" + "═" * 58 + "╗")
    print("║   COVARIANCE ENGINE EXECUTION COMPLETE                   ║")
    print("╚" + "═" * 58 + "╝\n")


if __name__ == "__main__":
    main(sys.argv[1:] or None)
