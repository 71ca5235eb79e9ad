# leaguecast/evaluation/metrics.py

from typing import Any, Mapping, Sequence, Union

import numpy as np
import pandas as pd

OUTCOMES = ("H", "D", "A")
OUTCOME_INDEX = {outcome: i for i, outcome in enumerate(OUTCOMES)}


def determine_outcome(home_goals: float, away_goals: float) -> str:
    """Categorical result of a match: 'H', 'D' or 'A'"""
    if home_goals > away_goals:
        return "H"
    if home_goals < away_goals:
        return "A"
    return "D"


def _outcome_indices(actuals: Union[pd.Series, np.ndarray, Sequence]) -> np.ndarray:
    """Convert 'H'/'D'/'A' or 0/1/2 labels to integer indices"""
    if isinstance(actuals, pd.Series):
        actuals = actuals.reset_index(drop=True).values
    elif not isinstance(actuals, np.ndarray):
        actuals = np.array(actuals)

    if actuals.dtype.kind in ("U", "O"):
        try:
            return np.array([OUTCOME_INDEX[a] for a in actuals], dtype=int)
        except KeyError as e:
            raise ValueError(f"Unknown outcome in actuals: {e}")

    actuals_idx = actuals.astype(int)
    if not all(a in (0, 1, 2) for a in actuals_idx):
        raise ValueError("Integer actuals must be 0 (H), 1 (D), or 2 (A)")
    return actuals_idx


def _probability_vector(probabilities: Any) -> np.ndarray:
    """Home/draw/away vector from an object, mapping or sequence"""
    if isinstance(probabilities, Mapping):
        return np.array(
            [probabilities["home"], probabilities["draw"], probabilities["away"]], dtype=float
        )
    if hasattr(probabilities, "home"):
        return np.array(
            [probabilities.home, probabilities.draw, probabilities.away], dtype=float
        )
    vector = np.asarray(probabilities, dtype=float)
    if vector.shape != (3,):
        raise ValueError(f"Expected three outcome probabilities, got shape {vector.shape}")
    return vector


def calculate_rps(
    predictions: Union[pd.DataFrame, np.ndarray], actuals: Union[pd.Series, np.ndarray]
) -> float:
    """
    Calculate mean Ranked Probability Score (RPS).

    Predictions are probabilities in [0, 1] ordered home/draw/away.
    Normalised for 3 outcomes by dividing by (K-1) = 2.
    """
    # convert inputs to standard format
    if isinstance(predictions, pd.DataFrame):
        required_cols = ["home_win", "draw", "away_win"]
        if not all(col in predictions.columns for col in required_cols):
            raise ValueError(f"DataFrame predictions must have columns {required_cols}")
        ordered_predictions = predictions.reset_index(drop=True)[required_cols].values
    elif isinstance(predictions, np.ndarray):
        if predictions.ndim != 2 or predictions.shape[1] != 3:
            raise ValueError(
                f"Array predictions must be shape (n, 3), got {predictions.shape}"
            )
        ordered_predictions = predictions
    else:
        raise TypeError(
            f"predictions must be DataFrame or ndarray, got {type(predictions)}"
        )

    actuals_idx = _outcome_indices(actuals)

    # verify lengths match
    if len(ordered_predictions) != len(actuals_idx):
        raise ValueError(
            f"Length mismatch: {len(ordered_predictions)} predictions vs {len(actuals_idx)} actuals"
        )

    n_outcomes = ordered_predictions.shape[1]
    one_hot = np.eye(n_outcomes)[actuals_idx]

    cum_pred = np.cumsum(ordered_predictions, axis=1)
    cum_actual = np.cumsum(one_hot, axis=1)

    # the last cumulative position is always 1 - 1 for valid vectors
    rps = np.sum((cum_pred - cum_actual)[:, :-1] ** 2, axis=1) / (n_outcomes - 1)

    return float(np.mean(rps))


def ranked_probability_score(probabilities: Any, outcome: str) -> float:
    """
    RPS of one match.

    probabilities: home/draw/away in percent, as an object with home/draw/away
    attributes, a mapping, or a sequence.
    outcome: 'H', 'D' or 'A'.
    """
    p = _probability_vector(probabilities) / 100.0
    e = np.zeros(3)
    e[_outcome_indices([outcome])[0]] = 1.0

    cum_diff = np.cumsum(p)[:2] - np.cumsum(e)[:2]
    return float(np.sum(cum_diff**2) / 2)


def rps_to_accuracy(mean_rps: float) -> float:
    """
    Rescale a mean RPS to a 0-100 "accuracy" figure.

    A heuristic linear rescaling for display, not a calibrated goodness of
    fit statistic.
    """
    return max(0.0, 100.0 * (1.0 - mean_rps))
