# tests/unit/test_sampling.py
"""Tests for simulation sampling module."""

import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st
from scipy import stats

from leaguecast.simulation.sampling import (
    MIN_LAMBDA,
    sample_match_outcome,
    sample_poisson,
    sample_scorelines,
)


class TestSamplePoisson:
    """Tests for the capped inverse-transform Poisson sampler."""

    def test_size_parameter(self):
        rng = np.random.default_rng(42)
        result = sample_poisson(1.5, rng, size=100)
        assert isinstance(result, np.ndarray)
        assert result.shape == (100,)

    def test_array_lambda_keeps_shape(self):
        rng = np.random.default_rng(42)
        result = sample_poisson(np.array([[1.0, 2.0], [0.5, 3.0]]), rng)
        assert result.shape == (2, 2)

    def test_matches_poisson_moments(self):
        """Mean and variance should both be close to lambda."""
        rng = np.random.default_rng(42)
        lam = 1.5
        samples = sample_poisson(lam, rng, size=20000)
        assert abs(samples.mean() - lam) < 0.05
        assert abs(samples.var() - lam) < 0.1

    def test_pmf_close_to_analytic(self):
        rng = np.random.default_rng(7)
        samples = sample_poisson(1.2, rng, size=50000)
        freqs = np.bincount(samples, minlength=5)[:5] / len(samples)
        np.testing.assert_allclose(freqs, stats.poisson.pmf(np.arange(5), 1.2), atol=0.01)

    def test_capped_at_fourteen(self):
        """Huge lambdas saturate at 14 goals."""
        rng = np.random.default_rng(42)
        samples = sample_poisson(50.0, rng, size=1000)
        assert samples.max() == 14
        assert samples.min() >= 0

    def test_lambda_floor(self):
        """Zero and negative lambdas behave like MIN_LAMBDA."""
        rng = np.random.default_rng(42)
        samples = sample_poisson(np.array([0.0, -1.0]), rng, size=(20000, 2))
        assert np.all(samples >= 0)
        assert samples.mean() < 5 * MIN_LAMBDA

    def test_seeded_draws_identical(self):
        first = sample_poisson(1.3, np.random.default_rng(3), size=50)
        second = sample_poisson(1.3, np.random.default_rng(3), size=50)
        np.testing.assert_array_equal(first, second)


class TestSampleScorelines:
    """Tests for Dixon-Coles adjusted scoreline sampling."""

    def test_shapes(self):
        rng = np.random.default_rng(0)
        home, away = sample_scorelines(
            np.array([1.2, 1.5, 0.8]), np.array([1.0, 0.9, 1.4]), -0.05, rng, size=(10, 3)
        )
        assert home.shape == (10, 3)
        assert away.shape == (10, 3)

    def test_negative_rho_suppresses_one_nil(self):
        """Cells with tau below one lose mass to the redraw."""
        n = 50000
        home_0, away_0 = sample_scorelines(1.3, 1.1, 0.0, np.random.default_rng(1), size=n)
        home_r, away_r = sample_scorelines(1.3, 1.1, -0.1, np.random.default_rng(1), size=n)

        nil_one_plain = np.mean((home_0 == 0) & (away_0 == 1))
        nil_one_adjusted = np.mean((home_r == 0) & (away_r == 1))
        assert nil_one_adjusted < nil_one_plain - 0.005

    def test_zero_rho_is_independent_poisson(self):
        rng = np.random.default_rng(5)
        home, away = sample_scorelines(1.0, 1.0, 0.0, rng, size=40000)
        draw_rate = np.mean(home == away)
        expected = np.sum(stats.poisson.pmf(np.arange(15), 1.0) ** 2)
        assert abs(draw_rate - expected) < 0.015


class TestSampleMatchOutcome:
    """Tests for single match outcome sampling."""

    def test_returns_tuple_of_two_ints(self):
        result = sample_match_outcome(1.5, 1.2, -0.1, np.random.default_rng(42))
        assert isinstance(result, tuple)
        assert len(result) == 2
        assert all(isinstance(g, int) for g in result)

    def test_default_rng(self):
        home, away = sample_match_outcome(1.5, 1.2, 0.0)
        assert home >= 0 and away >= 0

    @given(
        st.floats(min_value=0.0, max_value=6.0),
        st.floats(min_value=0.0, max_value=6.0),
        st.floats(min_value=-0.15, max_value=0.15),
        st.integers(min_value=0, max_value=2**32 - 1),
    )
    @settings(max_examples=100)
    def test_goals_bounded(self, lambda_home, lambda_away, rho, seed):
        home, away = sample_match_outcome(
            lambda_home, lambda_away, rho, np.random.default_rng(seed)
        )
        assert 0 <= home <= 14
        assert 0 <= away <= 14
