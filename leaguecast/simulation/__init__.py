# leaguecast/simulation/__init__.py

from .sampling import (
    sample_poisson,
    sample_scorelines,
    sample_match_outcome,
)

from .predictions import (
    OutcomeProbabilities,
    ExpectedValues,
    SimulationResult,
    calculate_decimal_odds,
    simulate_match,
    predict_fixture,
    simulate_round,
    predict_next_fixtures,
)

from .monte_carlo import (
    LeagueShape,
    SeasonStanding,
    calculate_points,
    get_current_standings,
    simulate_season,
    create_final_summary,
)

__all__ = [
    # sampling
    "sample_poisson",
    "sample_scorelines",
    "sample_match_outcome",
    # predictions
    "OutcomeProbabilities",
    "ExpectedValues",
    "SimulationResult",
    "calculate_decimal_odds",
    "simulate_match",
    "predict_fixture",
    "simulate_round",
    "predict_next_fixtures",
    # monte carlo
    "LeagueShape",
    "SeasonStanding",
    "calculate_points",
    "get_current_standings",
    "simulate_season",
    "create_final_summary",
]
