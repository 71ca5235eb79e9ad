# leaguecast/models/__init__.py

from .dixon_coles import (
    tau_dixon_coles,
    tau_dixon_coles_array,
    clamp_rho,
)

from .ratings import (
    TeamRating,
    GlobalParameters,
    RatingSnapshot,
    NEUTRAL_RATING,
    publish_ratings,
    create_power_rankings,
)

from .hyperparameters import (
    get_default_hyperparameters,
    optimise_time_decay,
    fit_model,
)

from .poisson import (
    TrainingResult,
    calculate_lambdas,
    calculate_lambdas_single,
    calculate_time_weights,
    fit_team_ratings,
    fit_rating_snapshot,
    create_rating_snapshot,
)

__all__ = [
    # dixon-coles
    "tau_dixon_coles",
    "tau_dixon_coles_array",
    "clamp_rho",
    # ratings
    "TeamRating",
    "GlobalParameters",
    "RatingSnapshot",
    "NEUTRAL_RATING",
    "publish_ratings",
    "create_power_rankings",
    # hyperparameters
    "get_default_hyperparameters",
    "optimise_time_decay",
    "fit_model",
    # core model
    "TrainingResult",
    "calculate_lambdas",
    "calculate_lambdas_single",
    "calculate_time_weights",
    "fit_team_ratings",
    "fit_rating_snapshot",
    "create_rating_snapshot",
]
