# leaguecast/models/poisson.py

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .dixon_coles import RHO_BOUND, clamp_rho
from .hyperparameters import get_default_hyperparameters
from .ratings import (
    DEFAULT_SCALE,
    GlobalParameters,
    RatingSnapshot,
    TeamRating,
    publish_ratings,
)

logger = logging.getLogger(__name__)


# ============================================================================
# GOAL-RATE MODEL
# ============================================================================


def calculate_lambdas_single(
    home_rating: TeamRating,
    away_rating: TeamRating,
    params: GlobalParameters,
    scale: float = DEFAULT_SCALE,
) -> Tuple[float, float]:
    """Calculate expected goals for a single match from published ratings"""
    home_adv = (params.home_field_advantage + home_rating.hfa_raw) / 2

    home_strength = home_rating.attack / scale + away_rating.defense / scale + home_adv
    away_strength = away_rating.attack / scale + home_rating.defense / scale

    return math.exp(home_strength), math.exp(away_strength)


def calculate_lambdas(
    fixtures: Iterable[Any], snapshot: RatingSnapshot
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Calculate expected goals for many fixtures at once.

    Fixtures only need home_team/away_team attributes; teams missing from the
    snapshot are treated as neutral.
    """
    fixtures = list(fixtures)
    home = [snapshot.get_rating(f.home_team) for f in fixtures]
    away = [snapshot.get_rating(f.away_team) for f in fixtures]

    attack_h = np.array([r.attack for r in home], dtype=float)
    defense_h = np.array([r.defense for r in home], dtype=float)
    hfa_h = np.array([r.hfa_raw for r in home], dtype=float)
    attack_a = np.array([r.attack for r in away], dtype=float)
    defense_a = np.array([r.defense for r in away], dtype=float)

    home_adv = (snapshot.params.home_field_advantage + hfa_h) / 2
    home_strength = attack_h / snapshot.scale + defense_a / snapshot.scale + home_adv
    away_strength = attack_a / snapshot.scale + defense_h / snapshot.scale

    return np.exp(home_strength), np.exp(away_strength)


# ============================================================================
# RATING TRAINER
# ============================================================================


@dataclass(frozen=True)
class TrainingResult:
    """Raw (uncentred) output of one training run."""

    raw_ratings: Mapping[str, Mapping[str, float]]
    home_field_advantage: float
    rho: float
    training_error: float
    n_matches: int
    average_goals: float
    time_decay: float = 0.0

    def __post_init__(self):
        frozen = {team: MappingProxyType(dict(r)) for team, r in self.raw_ratings.items()}
        object.__setattr__(self, "raw_ratings", MappingProxyType(frozen))


def calculate_time_weights(
    dates: Sequence[pd.Timestamp],
    time_decay: float,
    reference_date: Optional[pd.Timestamp] = None,
) -> np.ndarray:
    """Exponential recency weights; matches after the reference date get weight 1"""
    reference = pd.Timestamp.now() if reference_date is None else pd.Timestamp(reference_date)
    dates = pd.DatetimeIndex(dates)

    # compare in naive UTC so aware and naive inputs mix
    if reference.tzinfo is not None:
        reference = reference.tz_convert(None)
    if dates.tz is not None:
        dates = dates.tz_convert(None)

    days = np.asarray((reference - dates).total_seconds(), dtype=float) / 86400.0

    return np.exp(-time_decay * np.maximum(days, 0.0))


def fit_team_ratings(
    matches: Sequence[Any],
    time_decay: float,
    hyperparams: Optional[Dict[str, Any]] = None,
    reference_date: Optional[pd.Timestamp] = None,
    shuffle: bool = True,
    rng: Optional[np.random.Generator] = None,
    verbose: bool = False,
) -> TrainingResult:
    """
    Fit attack/defense/home-advantage ratings by weighted stochastic gradient
    descent on the blended goal targets.

    Each epoch visits every match once (in shuffled order when shuffle=True)
    and nudges the involved ratings by learning_rate * error * weight. A
    higher defense_raw means more goals conceded. Rho receives a small
    heuristic push towards draws whenever both targets are low, and is
    clamped once training finishes.
    """
    matches = list(matches)
    if not matches:
        raise ValueError("Cannot fit team ratings on an empty match history")

    hp = {**get_default_hyperparameters(), **(hyperparams or {})}
    epochs = int(hp["epochs"])
    lr = float(hp["learning_rate"])

    # ========================================================================
    # SETUP
    # ========================================================================

    teams = list(dict.fromkeys(t for m in matches for t in (m.home_team, m.away_team)))
    team_to_idx = {t: i for i, t in enumerate(teams)}
    n_teams = len(teams)
    n_matches = len(matches)

    home_idx = [team_to_idx[m.home_team] for m in matches]
    away_idx = [team_to_idx[m.away_team] for m in matches]
    home_target = [m.home_target for m in matches]
    away_target = [m.away_target for m in matches]

    weights = calculate_time_weights(
        [m.date for m in matches], time_decay, reference_date
    ).tolist()

    attack = [0.0] * n_teams
    defense = [0.0] * n_teams
    hfa = [0.0] * n_teams
    home_adv = float(hp["initial_home_adv"])
    rho = float(hp["initial_rho"])

    if rng is None:
        rng = np.random.default_rng()

    # ========================================================================
    # GRADIENT DESCENT
    # ========================================================================

    order = list(range(n_matches))
    total_error = 0.0

    for _ in range(epochs):
        total_error = 0.0
        if shuffle:
            order = rng.permutation(n_matches).tolist()

        for m in order:
            h, a, w = home_idx[m], away_idx[m], weights[m]
            target_h, target_a = home_target[m], away_target[m]

            lambda_home = math.exp(attack[h] + defense[a] + (home_adv + hfa[h]) / 2)
            lambda_away = math.exp(attack[a] + defense[h])

            error_h = target_h - lambda_home
            error_a = target_a - lambda_away
            total_error += (error_h * error_h + error_a * error_a) * w

            attack[h] += lr * error_h * w
            attack[a] += lr * error_a * w

            # conceding more than expected pushes defense_raw up (worse)
            defense[a] += lr * error_h * w
            defense[h] += lr * error_a * w

            hfa[h] += (lr * 0.2) * error_h * w
            home_adv += (lr * 0.05) * error_h * w

            if target_h <= 1 and target_a <= 1:
                direction = 1.0 if target_h == target_a else -1.0
                rho += (lr * 0.01) * direction * w

    rho = clamp_rho(rho, float(hp["rho_bound"]))
    average_goals = float(np.mean(np.add(home_target, away_target)))

    if verbose:
        logger.info(
            f"Fitted {n_teams} teams on {n_matches} matches "
            f"(xi={time_decay:.4f}, hfa={home_adv:.3f}, rho={rho:.3f}, "
            f"error={total_error:.2f})"
        )

    return TrainingResult(
        raw_ratings={
            team: {"attack_raw": attack[i], "defense_raw": defense[i], "hfa_raw": hfa[i]}
            for i, team in enumerate(teams)
        },
        home_field_advantage=home_adv,
        rho=rho,
        training_error=total_error,
        n_matches=n_matches,
        average_goals=average_goals,
        time_decay=time_decay,
    )


def create_rating_snapshot(
    result: TrainingResult,
    scale: float = DEFAULT_SCALE,
    rating_clip: Optional[float] = None,
    validation_scores: Optional[Mapping[float, float]] = None,
    rho_bound: float = RHO_BOUND,
) -> RatingSnapshot:
    """Publish a training result as an immutable snapshot"""
    return RatingSnapshot(
        ratings=publish_ratings(result.raw_ratings, scale=scale, rating_clip=rating_clip),
        params=GlobalParameters(
            home_field_advantage=result.home_field_advantage,
            rho=result.rho,
            time_decay=result.time_decay,
            rho_bound=rho_bound,
        ),
        scale=scale,
        n_matches=result.n_matches,
        average_goals=result.average_goals,
        training_error=result.training_error,
        validation_scores=validation_scores or {},
    )


def fit_rating_snapshot(
    matches: Sequence[Any],
    time_decay: float,
    hyperparams: Optional[Dict[str, Any]] = None,
    reference_date: Optional[pd.Timestamp] = None,
    shuffle: bool = True,
    rng: Optional[np.random.Generator] = None,
    verbose: bool = False,
) -> RatingSnapshot:
    """Train ratings at one time decay and publish them"""
    hp = {**get_default_hyperparameters(), **(hyperparams or {})}

    result = fit_team_ratings(
        matches,
        time_decay,
        hyperparams=hp,
        reference_date=reference_date,
        shuffle=shuffle,
        rng=rng,
        verbose=verbose,
    )

    return create_rating_snapshot(
        result,
        scale=float(hp["scale"]),
        rating_clip=hp.get("rating_clip"),
        rho_bound=float(hp["rho_bound"]),
    )
