"""
Daily Returns Covariance Engine
===============================
Turns per-security daily price series into:
- Simple daily returns
- Variance and covariance under sample or population convention
- An exactly symmetric variance-covariance matrix
"""

__version__ = "1.0.0"
