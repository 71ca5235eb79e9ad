# leaguecast/simulation/predictions.py

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from ..models.poisson import calculate_lambdas_single
from ..models.ratings import DEFAULT_SCALE, GlobalParameters, RatingSnapshot, TeamRating
from ..processing.match_records import Fixture, get_next_round
from .sampling import sample_scorelines

# rows/columns 0..5, the last one collecting 5 or more goals
MATRIX_SIZE = 6
NO_ODDS = 99.0


@dataclass(frozen=True)
class OutcomeProbabilities:
    """Home/draw/away probabilities in percent."""

    home: float
    draw: float
    away: float

    def as_array(self) -> np.ndarray:
        return np.array([self.home, self.draw, self.away])


@dataclass(frozen=True)
class ExpectedValues:
    home: float
    away: float


@dataclass(frozen=True, eq=False)
class SimulationResult:
    """Monte Carlo summary of a single fixture."""

    outcome_probabilities: OutcomeProbabilities
    scoreline_matrix: np.ndarray
    expected_goals: ExpectedValues
    expected_points: ExpectedValues

    def most_likely_score(self) -> Tuple[int, int]:
        """Most frequent (home, away) cell; 5 stands for five or more"""
        h, a = np.unravel_index(np.argmax(self.scoreline_matrix), self.scoreline_matrix.shape)
        return int(h), int(a)

    def decimal_odds(self) -> Dict[str, float]:
        probs = self.outcome_probabilities
        return {
            "home": calculate_decimal_odds(probs.home),
            "draw": calculate_decimal_odds(probs.draw),
            "away": calculate_decimal_odds(probs.away),
        }


def calculate_decimal_odds(probability: float) -> float:
    """Fair decimal odds for a probability in percent (NO_ODDS when zero)"""
    if probability <= 0:
        return NO_ODDS
    return 100.0 / probability


def simulate_match(
    home_rating: TeamRating,
    away_rating: TeamRating,
    params: GlobalParameters,
    n_simulations: int = 10000,
    scale: float = DEFAULT_SCALE,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> SimulationResult:
    """
    Simulate one fixture n_simulations times.

    Win/draw/loss uses the uncapped scores; only the matrix bucket index is
    capped at MATRIX_SIZE - 1.
    """
    if n_simulations < 1:
        raise ValueError(f"n_simulations must be at least 1, got {n_simulations}")

    if rng is None:
        rng = np.random.default_rng(seed)

    lambda_home, lambda_away = calculate_lambdas_single(
        home_rating, away_rating, params, scale=scale
    )

    home_goals, away_goals = sample_scorelines(
        lambda_home, lambda_away, params.rho, rng, size=n_simulations
    )

    home_wins = int((home_goals > away_goals).sum())
    away_wins = int((home_goals < away_goals).sum())
    draws = n_simulations - home_wins - away_wins

    counts = np.zeros((MATRIX_SIZE, MATRIX_SIZE))
    np.add.at(
        counts,
        (np.minimum(home_goals, MATRIX_SIZE - 1), np.minimum(away_goals, MATRIX_SIZE - 1)),
        1,
    )
    matrix = counts / n_simulations * 100
    matrix.flags.writeable = False

    return SimulationResult(
        outcome_probabilities=OutcomeProbabilities(
            home=home_wins / n_simulations * 100,
            draw=draws / n_simulations * 100,
            away=away_wins / n_simulations * 100,
        ),
        scoreline_matrix=matrix,
        expected_goals=ExpectedValues(home=lambda_home, away=lambda_away),
        expected_points=ExpectedValues(
            home=(3 * home_wins + draws) / n_simulations,
            away=(3 * away_wins + draws) / n_simulations,
        ),
    )


def predict_fixture(
    home_team: str,
    away_team: str,
    snapshot: RatingSnapshot,
    n_simulations: int = 10000,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> SimulationResult:
    """Simulate a fixture between two named teams (unknown teams are neutral)"""
    return simulate_match(
        snapshot.get_rating(home_team),
        snapshot.get_rating(away_team),
        snapshot.params,
        n_simulations=n_simulations,
        scale=snapshot.scale,
        rng=rng,
        seed=seed,
    )


def simulate_round(
    schedule: Iterable[Fixture],
    round_number: int,
    snapshot: RatingSnapshot,
    n_simulations: int = 10000,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> Dict[Tuple[str, str], SimulationResult]:
    """Simulate every fixture of one round"""
    if rng is None:
        rng = np.random.default_rng(seed)

    return {
        (fixture.home_team, fixture.away_team): predict_fixture(
            fixture.home_team, fixture.away_team, snapshot, n_simulations, rng=rng
        )
        for fixture in schedule
        if fixture.round == round_number
    }


def predict_next_fixtures(
    schedule: Iterable[Fixture],
    snapshot: RatingSnapshot,
    n_simulations: int = 10000,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> Optional[pd.DataFrame]:
    """Generate predictions for the round after the last played fixture"""
    schedule = list(schedule)
    round_number = get_next_round(schedule)

    results = simulate_round(schedule, round_number, snapshot, n_simulations, rng=rng, seed=seed)
    if not results:
        return None

    rows = []
    for (home_team, away_team), result in results.items():
        probs = result.outcome_probabilities
        odds = result.decimal_odds()
        h, a = result.most_likely_score()
        rows.append(
            {
                "round": round_number,
                "home_team": home_team,
                "away_team": away_team,
                "expected_goals_home": result.expected_goals.home,
                "expected_goals_away": result.expected_goals.away,
                "home_win": probs.home,
                "draw": probs.draw,
                "away_win": probs.away,
                "odds_home": odds["home"],
                "odds_draw": odds["draw"],
                "odds_away": odds["away"],
                "most_likely_score": f"{h}-{a}",
            }
        )

    return pd.DataFrame(rows)
