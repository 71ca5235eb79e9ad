# leaguecast/processing/match_records.py

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# weights for the blended training target
XG_WEIGHT = 0.7
GOALS_WEIGHT = 0.3

COLUMN_ALIASES = {
    "home": "home_team",
    "away": "away_team",
    "hgoals": "home_goals",
    "agoals": "away_goals",
    "hxg": "home_xg",
    "axg": "away_xg",
    "data": "date",
    "match_date": "date",
    "rodada": "round",
}


def blend_target(goals: float, xg: Optional[float]) -> float:
    """Blend goals and xG into a single training target (raw goals if no xG)"""
    if xg is None or pd.isna(xg):
        return float(goals)
    return XG_WEIGHT * float(xg) + GOALS_WEIGHT * float(goals)


@dataclass(frozen=True)
class MatchRecord:
    """A played match from the training history."""

    home_team: str
    away_team: str
    date: pd.Timestamp
    home_goals: float
    away_goals: float
    home_xg: Optional[float] = None
    away_xg: Optional[float] = None
    home_target: float = field(init=False)
    away_target: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "home_target", blend_target(self.home_goals, self.home_xg))
        object.__setattr__(self, "away_target", blend_target(self.away_goals, self.away_xg))


@dataclass(frozen=True)
class Fixture:
    """A fixture of the current season, played or still to be played."""

    home_team: str
    away_team: str
    round: Optional[int] = None
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None

    @property
    def is_played(self) -> bool:
        return self.home_goals is not None


def normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lower-case column names and map known header aliases"""
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df.rename(columns={k: v for k, v in COLUMN_ALIASES.items() if k in df.columns})


def _clean_team_names(series: pd.Series) -> pd.Series:
    cleaned = series.astype("string").str.strip()
    return cleaned.mask(cleaned.fillna("") == "")


def _optional_float(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def prepare_training_records(df: pd.DataFrame) -> List[MatchRecord]:
    """
    Convert raw match history into chronologically sorted MatchRecords.

    Rows without both team names or with an unparseable date are dropped
    before sorting. Missing goals count as zero and missing xG falls back to
    goals in the blended target.
    """
    df = normalise_columns(df)

    for col in ["home_team", "away_team", "date"]:
        if col not in df.columns:
            raise ValueError(f"Match history is missing required column '{col}'")

    df["home_team"] = _clean_team_names(df["home_team"])
    df["away_team"] = _clean_team_names(df["away_team"])
    # each cell parsed on its own; offsets normalised to naive UTC
    df["date"] = pd.to_datetime(
        df["date"], errors="coerce", format="mixed", utc=True
    ).dt.tz_convert(None)

    for col in ["home_goals", "away_goals", "home_xg", "away_xg"]:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
        else:
            df[col] = np.nan

    valid = df["home_team"].notna() & df["away_team"].notna() & df["date"].notna()
    n_dropped = int((~valid).sum())
    if n_dropped:
        logger.warning(f"Dropped {n_dropped} history rows without teams or a valid date")

    df = df[valid].sort_values("date", kind="stable")

    records = [
        MatchRecord(
            home_team=str(row.home_team),
            away_team=str(row.away_team),
            date=row.date,
            home_goals=0.0 if pd.isna(row.home_goals) else float(row.home_goals),
            away_goals=0.0 if pd.isna(row.away_goals) else float(row.away_goals),
            home_xg=_optional_float(row.home_xg),
            away_xg=_optional_float(row.away_xg),
        )
        for row in df.itertuples(index=False)
    ]

    logger.debug(f"Prepared {len(records)} training records")
    return records


def _is_blank(value) -> bool:
    return value is None or pd.isna(value) or str(value).strip() == ""


def _parse_int(value) -> Optional[int]:
    """Parse a possibly blank cell into an int (None when blank or invalid)"""
    if value is None or pd.isna(value):
        return None
    number = pd.to_numeric(str(value).strip(), errors="coerce")
    return None if pd.isna(number) else int(number)


def prepare_schedule(df: pd.DataFrame) -> List[Fixture]:
    """
    Convert a raw season schedule into Fixtures, preserving order.

    A fixture counts as played when its home goals parse as a number. A
    non-blank cell that does not parse (e.g. "-") leaves the fixture
    unplayed and is logged as a warning.
    """
    df = normalise_columns(df)

    for col in ["home_team", "away_team"]:
        if col not in df.columns:
            raise ValueError(f"Schedule is missing required column '{col}'")

    df["home_team"] = _clean_team_names(df["home_team"])
    df["away_team"] = _clean_team_names(df["away_team"])
    df = df[df["home_team"].notna() & df["away_team"].notna()]

    fixtures = []
    for _, row in df.iterrows():
        raw_home_goals = row.get("home_goals")
        home_goals = _parse_int(raw_home_goals)
        if home_goals is None and not _is_blank(raw_home_goals):
            logger.warning(
                f"Unreadable home goals {raw_home_goals!r} for "
                f"{row['home_team']} vs {row['away_team']}, treating fixture as unplayed"
            )
        away_goals = None
        if home_goals is not None:
            away_goals = _parse_int(row.get("away_goals")) or 0

        fixtures.append(
            Fixture(
                home_team=str(row["home_team"]),
                away_team=str(row["away_team"]),
                round=_parse_int(row.get("round")),
                home_goals=home_goals,
                away_goals=away_goals,
            )
        )

    return fixtures


def get_season_teams(schedule: Iterable[Fixture]) -> List[str]:
    """Season participants in order of first appearance"""
    teams = {}
    for fixture in schedule:
        teams.setdefault(fixture.home_team, None)
        teams.setdefault(fixture.away_team, None)
    return list(teams)


def get_next_round(schedule: Iterable[Fixture]) -> int:
    """Round following the last played fixture (1 if nothing has been played)"""
    last_played = None
    for fixture in schedule:
        if fixture.is_played:
            last_played = fixture

    if last_played is None or last_played.round is None:
        return 1
    return last_played.round + 1
