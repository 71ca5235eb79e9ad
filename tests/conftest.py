# tests/conftest.py
"""Shared pytest fixtures and configuration."""

import numpy as np
import pandas as pd
import pytest

from leaguecast.models.ratings import GlobalParameters, RatingSnapshot, TeamRating
from leaguecast.processing.match_records import Fixture, MatchRecord


@pytest.fixture
def sample_predictions():
    """Sample predictions DataFrame for testing metrics."""
    return pd.DataFrame(
        {
            "home_win": [0.5, 0.3, 0.6, 0.4, 0.7],
            "draw": [0.25, 0.35, 0.25, 0.3, 0.2],
            "away_win": [0.25, 0.35, 0.15, 0.3, 0.1],
        }
    )


@pytest.fixture
def sample_actuals():
    """Sample actual outcomes for testing metrics."""
    return np.array(["H", "D", "H", "A", "H"])


@pytest.fixture
def sample_history_frame():
    """Raw match history as it comes out of a delimited file."""
    return pd.DataFrame(
        {
            "Home": ["Flamengo", "Palmeiras", "Santos", "Gremio"],
            "Away": ["Palmeiras", "Santos", "Flamengo", "Flamengo"],
            "HGoals": [2, 1, None, 3],
            "AGoals": [1, 1, 2, 0],
            "hxG": [2.1, None, 0.8, 2.4],
            "axG": [0.9, 1.2, 1.9, 0.3],
            "Data": ["2024-01-15", "2024-01-08", "2024-01-22", "not a date"],
        }
    )


@pytest.fixture
def sample_matches():
    """Chronological MatchRecords for trainer and selector tests."""
    rng = np.random.default_rng(42)
    teams = ["Flamengo", "Palmeiras", "Santos", "Gremio", "Bahia"]
    strength = {"Flamengo": 1.9, "Palmeiras": 1.7, "Santos": 1.3, "Gremio": 1.1, "Bahia": 0.9}

    records = []
    start = pd.Timestamp("2024-01-07")
    n_matches = 60
    for i in range(n_matches):
        home = teams[i % len(teams)]
        away = teams[(i + 1 + i // len(teams)) % len(teams)]
        if home == away:
            away = teams[(i + 2) % len(teams)]
        records.append(
            MatchRecord(
                home_team=home,
                away_team=away,
                date=start + pd.Timedelta(days=7 * i),
                home_goals=float(rng.poisson(strength[home])),
                away_goals=float(rng.poisson(strength[away] * 0.8)),
            )
        )
    return records


@pytest.fixture
def reference_date():
    """Fixed 'today' so time weights do not depend on the wall clock."""
    return pd.Timestamp("2025-03-01")


@pytest.fixture
def sample_snapshot():
    """Published ratings for a four team league."""
    return RatingSnapshot(
        ratings={
            "Flamengo": TeamRating(attack=3.0, defense=-2.0, hfa_raw=0.05),
            "Palmeiras": TeamRating(attack=2.0, defense=-1.0),
            "Santos": TeamRating(attack=-1.0, defense=1.0),
            "Gremio": TeamRating(attack=-4.0, defense=2.0, hfa_raw=-0.05),
        },
        params=GlobalParameters(home_field_advantage=0.25, rho=-0.05, time_decay=0.002),
        scale=8.0,
        n_matches=120,
        average_goals=2.6,
    )


@pytest.fixture
def sample_schedule():
    """Double round robin of four teams with the first two rounds played."""
    return [
        Fixture("Flamengo", "Gremio", round=1, home_goals=3, away_goals=0),
        Fixture("Palmeiras", "Santos", round=1, home_goals=1, away_goals=1),
        Fixture("Gremio", "Palmeiras", round=2, home_goals=0, away_goals=2),
        Fixture("Santos", "Flamengo", round=2, home_goals=2, away_goals=2),
        Fixture("Flamengo", "Palmeiras", round=3),
        Fixture("Santos", "Gremio", round=3),
        Fixture("Palmeiras", "Flamengo", round=4),
        Fixture("Gremio", "Santos", round=4),
        Fixture("Flamengo", "Santos", round=5),
        Fixture("Palmeiras", "Gremio", round=5),
        Fixture("Santos", "Palmeiras", round=6),
        Fixture("Gremio", "Flamengo", round=6),
    ]
