# tests/unit/test_predictions.py
"""Tests for single match simulation and round predictions."""

import numpy as np
import pytest
from scipy import stats

from leaguecast.models.ratings import GlobalParameters, TeamRating
from leaguecast.processing.match_records import Fixture
from leaguecast.simulation.predictions import (
    MATRIX_SIZE,
    NO_ODDS,
    OutcomeProbabilities,
    calculate_decimal_odds,
    predict_fixture,
    predict_next_fixtures,
    simulate_match,
    simulate_round,
)


@pytest.fixture
def neutral_params():
    return GlobalParameters(home_field_advantage=0.0, rho=0.0)


class TestSimulateMatch:
    """Tests for the Monte Carlo match simulator."""

    def test_equal_teams_no_advantage(self, neutral_params):
        """Lambda 1 v 1: home and away balance, draws near the Poisson tie rate."""
        result = simulate_match(
            TeamRating(), TeamRating(), neutral_params, n_simulations=20000, seed=42
        )
        probs = result.outcome_probabilities

        assert result.expected_goals.home == 1.0
        assert result.expected_goals.away == 1.0
        assert abs(probs.home - probs.away) < 2.0

        tie_rate = np.sum(stats.poisson.pmf(np.arange(15), 1.0) ** 2) * 100
        assert abs(probs.draw - tie_rate) < 1.5

    def test_probabilities_sum_to_100(self, sample_snapshot):
        result = predict_fixture("Flamengo", "Gremio", sample_snapshot, 5000, seed=1)
        assert result.outcome_probabilities.as_array().sum() == pytest.approx(100.0)

    def test_matrix_shape_and_total(self, sample_snapshot):
        result = predict_fixture("Flamengo", "Gremio", sample_snapshot, 5000, seed=1)
        assert result.scoreline_matrix.shape == (MATRIX_SIZE, MATRIX_SIZE)
        assert result.scoreline_matrix.sum() == pytest.approx(100.0)

    def test_high_scores_collected_in_last_bucket(self):
        params = GlobalParameters(home_field_advantage=0.0)
        strong = TeamRating(attack=16.0)
        result = simulate_match(strong, TeamRating(), params, n_simulations=2000, seed=3)
        # lambda_home = e^2 so many games reach five or more
        assert result.scoreline_matrix[MATRIX_SIZE - 1].sum() > 10.0

    def test_outcome_uses_uncapped_scores(self):
        """Both sides scoring 5+ land in one cell but are not all draws."""
        params = GlobalParameters(home_field_advantage=0.0)
        strong = TeamRating(attack=16.0)
        result = simulate_match(strong, strong, params, n_simulations=5000, seed=4)

        # lambda = e^2 for both sides
        corner = result.scoreline_matrix[-1, -1]
        assert corner > 50.0
        assert result.outcome_probabilities.draw < 25.0

    def test_expected_points(self, sample_snapshot):
        result = predict_fixture("Flamengo", "Gremio", sample_snapshot, 4000, seed=2)
        probs = result.outcome_probabilities
        assert result.expected_points.home == pytest.approx(
            (3 * probs.home + probs.draw) / 100
        )
        assert result.expected_points.away == pytest.approx(
            (3 * probs.away + probs.draw) / 100
        )

    def test_stronger_home_team_favoured(self, sample_snapshot):
        result = predict_fixture("Flamengo", "Gremio", sample_snapshot, 5000, seed=5)
        probs = result.outcome_probabilities
        assert probs.home > probs.away

    def test_seeded_runs_identical(self, sample_snapshot):
        first = predict_fixture("Santos", "Palmeiras", sample_snapshot, 2000, seed=9)
        second = predict_fixture("Santos", "Palmeiras", sample_snapshot, 2000, seed=9)

        assert first.outcome_probabilities == second.outcome_probabilities
        np.testing.assert_array_equal(first.scoreline_matrix, second.scoreline_matrix)
        assert first.expected_points == second.expected_points

    def test_unknown_team_is_neutral(self, sample_snapshot):
        result = predict_fixture("Unknown", "Other", sample_snapshot, 1000, seed=0)
        expected = np.exp(sample_snapshot.params.home_field_advantage / 2)
        assert result.expected_goals.home == pytest.approx(expected)
        assert result.expected_goals.away == pytest.approx(1.0)

    def test_matrix_read_only(self, sample_snapshot):
        result = predict_fixture("Flamengo", "Gremio", sample_snapshot, 100, seed=0)
        with pytest.raises(ValueError):
            result.scoreline_matrix[0, 0] = 50.0

    def test_invalid_simulation_count(self, neutral_params):
        with pytest.raises(ValueError):
            simulate_match(TeamRating(), TeamRating(), neutral_params, n_simulations=0)

    def test_most_likely_score(self, neutral_params):
        result = simulate_match(
            TeamRating(), TeamRating(), neutral_params, n_simulations=20000, seed=6
        )
        h, a = result.most_likely_score()
        assert h in (0, 1) and a in (0, 1)


class TestDecimalOdds:
    """Tests for fair odds conversion."""

    def test_inverse_probability(self):
        assert calculate_decimal_odds(50.0) == pytest.approx(2.0)
        assert calculate_decimal_odds(25.0) == pytest.approx(4.0)

    def test_zero_probability_sentinel(self):
        assert calculate_decimal_odds(0.0) == NO_ODDS

    def test_result_odds(self, sample_snapshot):
        result = predict_fixture("Flamengo", "Gremio", sample_snapshot, 1000, seed=0)
        odds = result.decimal_odds()
        assert odds["home"] == pytest.approx(100 / result.outcome_probabilities.home)

    def test_as_array_order(self):
        probs = OutcomeProbabilities(home=50.0, draw=30.0, away=20.0)
        np.testing.assert_array_equal(probs.as_array(), [50.0, 30.0, 20.0])


class TestRoundPredictions:
    """Tests for round level helpers."""

    def test_simulate_round(self, sample_snapshot, sample_schedule):
        results = simulate_round(sample_schedule, 3, sample_snapshot, 500, seed=0)
        assert set(results) == {("Flamengo", "Palmeiras"), ("Santos", "Gremio")}

    def test_simulate_missing_round(self, sample_snapshot, sample_schedule):
        assert simulate_round(sample_schedule, 99, sample_snapshot, 500, seed=0) == {}

    def test_predict_next_fixtures(self, sample_snapshot, sample_schedule):
        df = predict_next_fixtures(sample_schedule, sample_snapshot, 500, seed=0)
        assert len(df) == 2
        assert (df["round"] == 3).all()
        total = df["home_win"] + df["draw"] + df["away_win"]
        np.testing.assert_allclose(total, 100.0)

    def test_no_next_round(self, sample_snapshot):
        schedule = [Fixture("Flamengo", "Santos", round=1, home_goals=1, away_goals=0)]
        assert predict_next_fixtures(schedule, sample_snapshot, 100, seed=0) is None
