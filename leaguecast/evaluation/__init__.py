# leaguecast/evaluation/__init__.py

from .metrics import (
    OUTCOMES,
    determine_outcome,
    calculate_rps,
    ranked_probability_score,
    rps_to_accuracy,
)

__all__ = [
    # metrics
    "OUTCOMES",
    "determine_outcome",
    "calculate_rps",
    "ranked_probability_score",
    "rps_to_accuracy",
]
