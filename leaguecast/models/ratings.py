# leaguecast/models/ratings.py

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .dixon_coles import RHO_BOUND, clamp_rho

DEFAULT_SCALE = 8.0


@dataclass(frozen=True)
class TeamRating:
    """
    Fitted strength of a single team.

    The *_raw fields live in the unscaled training space. attack/defense are
    the published, league-centred figures (raw minus league mean, times the
    scale). Higher defense means a worse defense.
    """

    attack_raw: float = 0.0
    defense_raw: float = 0.0
    hfa_raw: float = 0.0
    attack: float = 0.0
    defense: float = 0.0


NEUTRAL_RATING = TeamRating()


@dataclass(frozen=True)
class GlobalParameters:
    """League-wide parameters shared by every simulation of a training run."""

    home_field_advantage: float = 0.25
    rho: float = 0.0
    time_decay: float = 0.0
    rho_bound: float = RHO_BOUND

    def __post_init__(self):
        object.__setattr__(self, "rho", clamp_rho(self.rho, self.rho_bound))


@dataclass(frozen=True)
class RatingSnapshot:
    """Immutable result of one training run."""

    ratings: Mapping[str, TeamRating]
    params: GlobalParameters
    scale: float = DEFAULT_SCALE
    n_matches: int = 0
    average_goals: float = 0.0
    training_error: float = 0.0
    validation_scores: Mapping[float, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "ratings", MappingProxyType(dict(self.ratings)))
        object.__setattr__(
            self, "validation_scores", MappingProxyType(dict(self.validation_scores))
        )

    @property
    def teams(self) -> Tuple[str, ...]:
        return tuple(self.ratings)

    def get_rating(self, team: str) -> TeamRating:
        """Rating for a team, neutral if the team has no training history"""
        return self.ratings.get(team, NEUTRAL_RATING)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        """Published ratings as {team: {"attack": ..., "defense": ...}}"""
        return {
            team: {"attack": rating.attack, "defense": rating.defense}
            for team, rating in self.ratings.items()
        }


def publish_ratings(
    raw_ratings: Mapping[str, Mapping[str, float]],
    scale: float = DEFAULT_SCALE,
    rating_clip: Optional[float] = None,
) -> Dict[str, TeamRating]:
    """
    Centre raw attack/defense on the league mean and scale them.

    rating_clip: optional symmetric bound applied to the scaled values only.
    """
    teams = list(raw_ratings)
    if not teams:
        return {}

    attack_raw = np.array([raw_ratings[t]["attack_raw"] for t in teams], dtype=float)
    defense_raw = np.array([raw_ratings[t]["defense_raw"] for t in teams], dtype=float)

    attack = (attack_raw - attack_raw.mean()) * scale
    defense = (defense_raw - defense_raw.mean()) * scale

    if rating_clip is not None:
        attack = np.clip(attack, -rating_clip, rating_clip)
        defense = np.clip(defense, -rating_clip, rating_clip)

    return {
        team: TeamRating(
            attack_raw=float(attack_raw[i]),
            defense_raw=float(defense_raw[i]),
            hfa_raw=float(raw_ratings[team].get("hfa_raw", 0.0)),
            attack=float(attack[i]),
            defense=float(defense[i]),
        )
        for i, team in enumerate(teams)
    }


def create_power_rankings(snapshot: RatingSnapshot) -> pd.DataFrame:
    """Rank teams by strength (attack minus defense, since high defense is bad)"""
    rows = [
        {
            "team": team,
            "attack": rating.attack,
            "defense": rating.defense,
            "home_advantage": rating.hfa_raw,
            "strength": rating.attack - rating.defense,
        }
        for team, rating in snapshot.ratings.items()
    ]

    df = pd.DataFrame(
        rows, columns=["team", "attack", "defense", "home_advantage", "strength"]
    )
    return df.sort_values("strength", ascending=False, kind="stable").reset_index(drop=True)
