# leaguecast/models/dixon_coles.py

from typing import Union

import numpy as np

RHO_BOUND = 0.15


def tau_dixon_coles(
    home_goals: int, away_goals: int, lambda_home: float, lambda_away: float, rho: float
) -> float:
    """Dixon-Coles tau correction function for low-scoring outcomes"""
    if home_goals == 0 and away_goals == 0:
        return 1 - lambda_home * lambda_away * rho
    elif home_goals == 0 and away_goals == 1:
        return 1 + lambda_home * rho
    elif home_goals == 1 and away_goals == 0:
        return 1 + lambda_away * rho
    elif home_goals == 1 and away_goals == 1:
        return 1 - rho
    else:
        return 1.0


def tau_dixon_coles_array(
    home_goals: np.ndarray,
    away_goals: np.ndarray,
    lambda_home: Union[float, np.ndarray],
    lambda_away: Union[float, np.ndarray],
    rho: float,
) -> np.ndarray:
    """Vectorised tau over arrays of scorelines (1.0 outside the four low cells)"""
    home_goals = np.asarray(home_goals)
    away_goals = np.asarray(away_goals)
    lambda_home = np.broadcast_to(lambda_home, home_goals.shape)
    lambda_away = np.broadcast_to(lambda_away, home_goals.shape)

    return np.select(
        [
            (home_goals == 0) & (away_goals == 0),
            (home_goals == 0) & (away_goals == 1),
            (home_goals == 1) & (away_goals == 0),
            (home_goals == 1) & (away_goals == 1),
        ],
        [
            1 - lambda_home * lambda_away * rho,
            1 + lambda_home * rho,
            1 + lambda_away * rho,
            np.full(home_goals.shape, 1 - rho),
        ],
        default=1.0,
    )


def clamp_rho(rho: float, bound: float = RHO_BOUND) -> float:
    """Clamp the low-score correlation to [-bound, bound]"""
    return float(max(-bound, min(bound, rho)))
