import numpy as np
import pytest
from scipy import stats

from betaprior.core.math_engine import (
    derive_shape_b,
    interval_coverage,
    prior_summary,
    select_minimum,
    squared_deviation,
)


class TestDeriveShapeB:

    def test_exact_ratio(self):
        np.testing.assert_array_equal(derive_shape_b(np.arange(1, 5), 0.25), [3, 6, 9, 12])

    def test_symmetric_mean(self):
        np.testing.assert_array_equal(derive_shape_b(np.arange(1, 4), 0.5), [1, 2, 3])

    def test_large_mean_rounds_to_zero(self):
        assert derive_shape_b(np.array([1]), 0.9)[0] == 0


class TestIntervalCoverage:

    def test_uniform_prior(self):
        coverage = interval_coverage(0.2, 0.7, np.array([1]), np.array([1]))
        np.testing.assert_allclose(coverage, [0.5], atol=1e-12)

    def test_whole_support(self):
        coverage = interval_coverage(0.0, 1.0, np.array([1, 5, 40]), np.array([1, 28, 3]))
        np.testing.assert_array_equal(coverage, [1.0, 1.0, 1.0])

    def test_matches_binomial_identity(self):
        # I_x(a, b) = P[Binomial(a + b - 1, x) >= a] for integer shapes
        a, b, lo, hi = 5, 28, 0.05, 0.30
        n = a + b - 1
        expected = stats.binom.sf(a - 1, n, hi) - stats.binom.sf(a - 1, n, lo)
        np.testing.assert_allclose(interval_coverage(lo, hi, np.array([a]), np.array([b])), [expected], rtol=1e-10)


def test_squared_deviation():
    np.testing.assert_allclose(squared_deviation(0.95, np.array([0.95, 1.0, 0.85])), [0.0, 0.0025, 0.01])


class TestSelectMinimum:

    def test_unique(self):
        assert select_minimum(np.array([0.3, 0.1, 0.2])) == (1, True)

    def test_tie_keeps_first(self):
        assert select_minimum(np.array([0.3, 0.1, 0.1])) == (1, False)

    def test_single_candidate(self):
        assert select_minimum(np.array([0.4])) == (0, True)

    def test_empty(self):
        with pytest.raises(ValueError):
            select_minimum(np.array([]))


class TestPriorSummary:

    def test_moments(self):
        summary = prior_summary(5, 28)
        np.testing.assert_allclose(summary["mean"], 5 / 33)
        np.testing.assert_allclose(summary["variance"], 5 * 28 / (33 ** 2 * 34))
        np.testing.assert_allclose(summary["std"], np.sqrt(summary["variance"]))
        np.testing.assert_allclose(summary["mode"], 4 / 31)
        assert summary["equivalent_sample_size"] == 33

    def test_equal_tailed_interval(self):
        summary = prior_summary(5, 28, coverage=0.9)
        lo, hi = summary["interval_lower"], summary["interval_upper"]
        assert lo < summary["mean"] < hi
        np.testing.assert_allclose(stats.beta.cdf(hi, 5, 28) - stats.beta.cdf(lo, 5, 28), 0.9, atol=1e-9)

    def test_uniform_has_no_mode(self):
        summary = prior_summary(1, 1)
        assert summary["mode"] is None
        np.testing.assert_allclose([summary["interval_lower"], summary["interval_upper"]], [0.025, 0.975])

    @pytest.mark.parametrize("a, b, coverage", [(0, 1, 0.95), (1, -2, 0.95), (2, 2, 1.0)])
    def test_rejects_invalid_arguments(self, a, b, coverage):
        with pytest.raises(ValueError):
            prior_summary(a, b, coverage)
