# leaguecast/processing/__init__.py

from .match_records import (
    MatchRecord,
    Fixture,
    blend_target,
    normalise_columns,
    prepare_training_records,
    prepare_schedule,
    get_season_teams,
    get_next_round,
)

__all__ = [
    # records
    "MatchRecord",
    "Fixture",
    "blend_target",
    # ingestion
    "normalise_columns",
    "prepare_training_records",
    "prepare_schedule",
    # schedule helpers
    "get_season_teams",
    "get_next_round",
]
