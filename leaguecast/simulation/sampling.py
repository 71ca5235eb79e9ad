# leaguecast/simulation/sampling.py

from typing import Optional, Tuple, Union

import numpy as np

from ..models.dixon_coles import tau_dixon_coles_array

MIN_LAMBDA = 0.01
# caps the sampler's loop, so the largest possible sample is 14 goals
POISSON_MAX_ITERATIONS = 15

SizeType = Optional[Union[int, Tuple[int, ...]]]


def _resolve_shape(lambda_val: np.ndarray, size: SizeType) -> Tuple[int, ...]:
    if size is None:
        return lambda_val.shape
    if isinstance(size, int):
        return (size,)
    return tuple(size)


def sample_poisson(
    lambda_val: Union[float, np.ndarray],
    rng: np.random.Generator,
    size: SizeType = None,
) -> np.ndarray:
    """
    Sample Poisson goals by multiplying uniforms until the running product
    falls below exp(-lambda).

    The loop is capped at POISSON_MAX_ITERATIONS, which biases samples down
    for very large lambdas. Lambda is floored at MIN_LAMBDA.
    """
    lam = np.maximum(np.asarray(lambda_val, dtype=float), MIN_LAMBDA)
    shape = _resolve_shape(lam, size)
    threshold = np.broadcast_to(np.exp(-lam), shape)

    # the k-th running product decides whether the loop runs past step k;
    # only the first (max - 1) products can change the result
    uniforms = rng.random(shape + (POISSON_MAX_ITERATIONS - 1,))
    products = np.cumprod(uniforms, axis=-1)

    return (products > threshold[..., None]).sum(axis=-1)


def sample_scorelines(
    lambda_home: Union[float, np.ndarray],
    lambda_away: Union[float, np.ndarray],
    rho: float,
    rng: np.random.Generator,
    size: SizeType = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample scorelines with the Dixon-Coles low-score adjustment.

    Whenever both goal counts are at most one, an extra uniform is drawn and
    compared with tau; if it exceeds tau both counts are redrawn once. The
    rejected mass is not renormalised, so the low-score cells are only
    approximately Dixon-Coles.
    """
    lambda_home = np.asarray(lambda_home, dtype=float)
    lambda_away = np.asarray(lambda_away, dtype=float)
    shape = _resolve_shape(np.broadcast(lambda_home, lambda_away), size)

    lambda_home = np.broadcast_to(lambda_home, shape)
    lambda_away = np.broadcast_to(lambda_away, shape)

    home_goals = sample_poisson(lambda_home, rng)
    away_goals = sample_poisson(lambda_away, rng)

    low = (home_goals <= 1) & (away_goals <= 1)
    tau = tau_dixon_coles_array(home_goals, away_goals, lambda_home, lambda_away, rho)
    retry = low & (rng.random(shape) > tau)

    if retry.any():
        home_goals[retry] = sample_poisson(lambda_home[retry], rng)
        away_goals[retry] = sample_poisson(lambda_away[retry], rng)

    return home_goals, away_goals


def sample_match_outcome(
    lambda_home: float,
    lambda_away: float,
    rho: float,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[int, int]:
    """Sample a single match scoreline (uncapped)"""
    if rng is None:
        rng = np.random.default_rng()

    home_goals, away_goals = sample_scorelines(lambda_home, lambda_away, rho, rng, size=1)
    return int(home_goals[0]), int(away_goals[0])
