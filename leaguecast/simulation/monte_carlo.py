# leaguecast/simulation/monte_carlo.py

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..models.poisson import calculate_lambdas
from ..models.ratings import RatingSnapshot
from ..processing.match_records import Fixture, get_season_teams
from .sampling import sample_scorelines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeagueShape:
    """
    Table bands reported by the season simulator.

    tier_cutoffs: three top-N cutoffs (e.g. top 6, top 8, top 12)
    relegation_size: size of the bottom band
    """

    tier_cutoffs: Tuple[int, int, int] = (6, 8, 12)
    relegation_size: int = 4

    def __post_init__(self):
        cutoffs = tuple(int(c) for c in self.tier_cutoffs)
        if len(cutoffs) != 3 or any(c < 1 for c in cutoffs):
            raise ValueError(
                f"tier_cutoffs must be three positive ints, got {self.tier_cutoffs}"
            )
        if self.relegation_size < 0:
            raise ValueError(f"relegation_size must be >= 0, got {self.relegation_size}")
        object.__setattr__(self, "tier_cutoffs", cutoffs)


@dataclass(frozen=True)
class SeasonStanding:
    """Projected end-of-season outcome for one team (probabilities in percent)."""

    team: str
    average_points: float
    title_probability: float
    tier1_probability: float
    tier2_probability: float
    tier3_probability: float
    relegation_probability: float


def calculate_points(home_goals, away_goals) -> Tuple[np.ndarray, np.ndarray]:
    """Points for home and away sides under the 3-1-0 system"""
    home_goals = np.asarray(home_goals)
    away_goals = np.asarray(away_goals)

    home_points = np.where(home_goals > away_goals, 3, np.where(home_goals == away_goals, 1, 0))
    away_points = np.where(away_goals > home_goals, 3, np.where(away_goals == home_goals, 1, 0))

    return home_points, away_points


def get_current_standings(schedule: Iterable[Fixture]) -> Dict[str, Dict[str, int]]:
    """Calculate current league standings from played fixtures"""
    standings: Dict[str, Dict[str, int]] = {}

    def _entry(team: str) -> Dict[str, int]:
        return standings.setdefault(
            team,
            {"points": 0, "goals_for": 0, "goals_against": 0, "goal_diff": 0, "games_played": 0},
        )

    for fixture in schedule:
        if not fixture.is_played:
            continue

        hg, ag = fixture.home_goals, fixture.away_goals
        home_points, away_points = calculate_points(hg, ag)

        for team, gf, ga, pts in [
            (fixture.home_team, hg, ag, home_points),
            (fixture.away_team, ag, hg, away_points),
        ]:
            entry = _entry(team)
            entry["points"] += int(pts)
            entry["goals_for"] += gf
            entry["goals_against"] += ga
            entry["goal_diff"] += gf - ga
            entry["games_played"] += 1

    return standings


def simulate_season(
    schedule: Iterable[Fixture],
    snapshot: RatingSnapshot,
    n_simulations: int = 10000,
    league_shape: Optional[LeagueShape] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    batch_size: int = 1000,
    verbose: bool = False,
) -> List[SeasonStanding]:
    """
    Simulate the remaining season many times and summarise table positions.

    Played fixtures keep their real result; every unplayed fixture is
    sampled from the snapshot (teams without ratings are neutral). Teams are
    ranked on points only, with ties kept in first-appearance order.
    """
    if n_simulations < 1:
        raise ValueError(f"n_simulations must be at least 1, got {n_simulations}")

    if league_shape is None:
        league_shape = LeagueShape()

    if rng is None:
        rng = np.random.default_rng(seed)

    schedule = list(schedule)
    teams = get_season_teams(schedule)
    if not teams:
        return []

    n_teams = len(teams)
    team_to_idx = {t: i for i, t in enumerate(teams)}

    # ========================================================================
    # FIXED AND SIMULATED FIXTURES
    # ========================================================================

    current = get_current_standings(schedule)
    base_points = np.array([current.get(t, {}).get("points", 0) for t in teams], dtype=float)

    unplayed = [f for f in schedule if not f.is_played]
    home_idx = np.array([team_to_idx[f.home_team] for f in unplayed], dtype=int)
    away_idx = np.array([team_to_idx[f.away_team] for f in unplayed], dtype=int)
    lambda_home, lambda_away = calculate_lambdas(unplayed, snapshot)

    if verbose:
        logger.info(
            f"Simulating {n_simulations} seasons: {len(schedule) - len(unplayed)} played, "
            f"{len(unplayed)} remaining fixtures"
        )

    # ========================================================================
    # SIMULATION LOOP
    # ========================================================================

    total_points = np.zeros(n_teams)
    title_counts = np.zeros(n_teams, dtype=int)
    tier_counts = np.zeros((len(league_shape.tier_cutoffs), n_teams), dtype=int)
    relegation_counts = np.zeros(n_teams, dtype=int)
    relegation_start = max(n_teams - league_shape.relegation_size, 0)
    positions = np.arange(n_teams)

    for start in range(0, n_simulations, batch_size):
        size = min(batch_size, n_simulations - start)
        points = np.tile(base_points, (size, 1))

        if unplayed:
            hg, ag = sample_scorelines(
                lambda_home, lambda_away, snapshot.params.rho, rng, size=(size, len(unplayed))
            )
            hp, ap = calculate_points(hg, ag)
            rows = np.arange(size)[:, None]
            np.add.at(points, (rows, home_idx[None, :]), hp)
            np.add.at(points, (rows, away_idx[None, :]), ap)

        order = np.argsort(-points, axis=1, kind="stable")
        ranks = np.empty_like(order)
        np.put_along_axis(ranks, order, np.broadcast_to(positions, order.shape), axis=1)

        total_points += points.sum(axis=0)
        title_counts += (ranks == 0).sum(axis=0)
        for k, cutoff in enumerate(league_shape.tier_cutoffs):
            tier_counts[k] += (ranks < cutoff).sum(axis=0)
        relegation_counts += (ranks >= relegation_start).sum(axis=0)

    # ========================================================================
    # SUMMARY
    # ========================================================================

    standings = [
        SeasonStanding(
            team=team,
            average_points=float(total_points[i] / n_simulations),
            title_probability=float(title_counts[i] / n_simulations * 100),
            tier1_probability=float(tier_counts[0, i] / n_simulations * 100),
            tier2_probability=float(tier_counts[1, i] / n_simulations * 100),
            tier3_probability=float(tier_counts[2, i] / n_simulations * 100),
            relegation_probability=float(relegation_counts[i] / n_simulations * 100),
        )
        for i, team in enumerate(teams)
    ]

    return sorted(standings, key=lambda s: s.average_points, reverse=True)


def create_final_summary(
    standings: List[SeasonStanding], snapshot: Optional[RatingSnapshot] = None
) -> pd.DataFrame:
    """Create final summary table from simulated standings"""
    columns = [
        "team",
        "projected_points",
        "title_prob",
        "tier1_prob",
        "tier2_prob",
        "tier3_prob",
        "relegation_prob",
    ]
    if snapshot is not None:
        columns += ["attack_rating", "defense_rating"]

    rows = []
    for standing in standings:
        row = {
            "team": standing.team,
            "projected_points": standing.average_points,
            "title_prob": standing.title_probability,
            "tier1_prob": standing.tier1_probability,
            "tier2_prob": standing.tier2_probability,
            "tier3_prob": standing.tier3_probability,
            "relegation_prob": standing.relegation_probability,
        }
        if snapshot is not None:
            rating = snapshot.get_rating(standing.team)
            row["attack_rating"] = rating.attack
            row["defense_rating"] = rating.defense
        rows.append(row)

    return (
        pd.DataFrame(rows, columns=columns)
        .sort_values("projected_points", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
