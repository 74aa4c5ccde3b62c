"""
Tests for variance / covariance estimators and the denominator convention.
"""

import math

import pytest

from src.exceptions import DimensionMismatchError, InsufficientDataError
from src.statistics import (
    DEFAULT_MODE,
    DenominatorMode,
    compute_mean,
    covariance,
    standard_deviation,
    variance,
)

SAMPLE = DenominatorMode.SAMPLE
POPULATION = DenominatorMode.POPULATION


class TestDenominatorMode:

    def test_divisors(self):
        assert SAMPLE.divisor(5) == 4
        assert POPULATION.divisor(5) == 5

    def test_default_is_population(self):
        assert DEFAULT_MODE is POPULATION

    @pytest.mark.parametrize("value", ["sample", "Sample", " SAMPLE ", SAMPLE])
    def test_parse(self, value):
        assert DenominatorMode.parse(value) is SAMPLE

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown denominator mode"):
            DenominatorMode.parse("biased")


class TestVariance:

    def test_sample_variance(self, returns_a):
        # mean 0.01, squared deviations sum to 0.0014
        assert variance(returns_a, SAMPLE) == pytest.approx(0.00035, abs=1e-6)

    def test_population_variance(self, returns_a):
        assert variance(returns_a, POPULATION) == pytest.approx(0.00028, abs=1e-6)

    def test_default_mode_is_population(self, returns_a):
        assert variance(returns_a) == variance(returns_a, POPULATION)

    def test_constant_series_has_zero_variance(self):
        assert variance([0.5, 0.5, 0.5], SAMPLE) == 0.0

    def test_sample_is_scaled_population(self, returns_a):
        n = len(returns_a)
        assert variance(returns_a, SAMPLE) == pytest.approx(
            variance(returns_a, POPULATION) * n / (n - 1), rel=1e-12
        )

    @pytest.mark.parametrize("returns", [[], [0.01]])
    def test_insufficient_data(self, returns):
        with pytest.raises(InsufficientDataError):
            variance(returns, SAMPLE)

    def test_insufficient_data_is_value_error(self):
        with pytest.raises(ValueError):
            variance([0.01])

    def test_accepts_tuple(self, returns_a):
        assert variance(tuple(returns_a), SAMPLE) == variance(returns_a, SAMPLE)

    def test_nan_propagates(self):
        assert math.isnan(variance([float("nan"), 0.01, 0.02]))

    def test_standard_deviation(self, returns_a):
        assert standard_deviation(returns_a, SAMPLE) == pytest.approx(
            math.sqrt(0.00035), rel=1e-9
        )


class TestCovariance:

    def test_sample_covariance(self, returns_a, returns_b):
        assert covariance(returns_a, returns_b, SAMPLE) == pytest.approx(0.000300, abs=1e-6)

    def test_population_covariance(self, returns_a, returns_b):
        assert covariance(returns_a, returns_b, POPULATION) == pytest.approx(0.00024, abs=1e-6)

    @pytest.mark.parametrize("mode", [SAMPLE, POPULATION])
    def test_exactly_symmetric(self, returns_a, returns_b, mode):
        assert covariance(returns_a, returns_b, mode) == covariance(returns_b, returns_a, mode)

    @pytest.mark.parametrize("mode", [SAMPLE, POPULATION])
    def test_self_covariance_equals_variance(self, returns_a, mode):
        assert covariance(returns_a, returns_a, mode) == variance(returns_a, mode)

    def test_sample_is_scaled_population(self, returns_a, returns_b):
        n = len(returns_a)
        assert covariance(returns_a, returns_b, SAMPLE) == pytest.approx(
            covariance(returns_a, returns_b, POPULATION) * n / (n - 1), rel=1e-12
        )

    def test_length_mismatch(self, returns_a):
        with pytest.raises(DimensionMismatchError, match="5 and 4"):
            covariance(returns_a, returns_a[:4], SAMPLE)

    def test_mismatch_checked_before_length(self):
        with pytest.raises(DimensionMismatchError):
            covariance([0.01], [0.01, 0.02])

    def test_insufficient_data(self):
        with pytest.raises(InsufficientDataError):
            covariance([0.01], [0.02], SAMPLE)
        with pytest.raises(InsufficientDataError):
            covariance([], [])

    def test_independent_means(self):
        # Shifting one series by a constant leaves covariance unchanged
        x = [0.01, 0.03, -0.02, 0.00]
        y = [0.02, 0.01, 0.00, 0.05]
        shifted = [v + 1.0 for v in y]
        assert covariance(x, shifted, SAMPLE) == pytest.approx(
            covariance(x, y, SAMPLE), abs=1e-12
        )


class TestMean:

    def test_mean(self, returns_a):
        assert compute_mean(returns_a) == pytest.approx(0.01, abs=1e-12)

    def test_empty(self):
        with pytest.raises(InsufficientDataError):
            compute_mean([])
