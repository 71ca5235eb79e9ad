# leaguecast/validation/backtest.py

import logging
from typing import Any, Dict, Iterable, Optional

import numpy as np
import pandas as pd

from ..evaluation.metrics import determine_outcome, ranked_probability_score, rps_to_accuracy
from ..models.ratings import RatingSnapshot
from ..processing.match_records import Fixture
from ..simulation.predictions import predict_fixture

logger = logging.getLogger(__name__)


def backtest_played_fixtures(
    schedule: Iterable[Fixture],
    snapshot: RatingSnapshot,
    n_simulations: int = 10000,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> Dict[str, Any]:
    """
    Re-score every played fixture of the season against the fitted model.

    Returns the mean RPS, its accuracy rescaling and a per-match table.
    Accuracy and RPS are None when nothing has been played yet.
    """
    if rng is None:
        rng = np.random.default_rng(seed)

    played = [f for f in schedule if f.is_played]

    rows = []
    for fixture in played:
        result = predict_fixture(
            fixture.home_team, fixture.away_team, snapshot, n_simulations, rng=rng
        )
        probs = result.outcome_probabilities
        outcome = determine_outcome(fixture.home_goals, fixture.away_goals)

        rows.append(
            {
                "round": fixture.round,
                "home_team": fixture.home_team,
                "away_team": fixture.away_team,
                "home_win": probs.home,
                "draw": probs.draw,
                "away_win": probs.away,
                "result": outcome,
                "rps": ranked_probability_score(probs, outcome),
            }
        )

    predictions = pd.DataFrame(
        rows,
        columns=[
            "round",
            "home_team",
            "away_team",
            "home_win",
            "draw",
            "away_win",
            "result",
            "rps",
        ],
    )

    if predictions.empty:
        logger.warning("No played fixtures to backtest")
        return {"n_matches": 0, "rps": None, "accuracy": None, "predictions": predictions}

    mean_rps = float(predictions["rps"].mean())
    accuracy = rps_to_accuracy(mean_rps)

    if verbose:
        logger.info(
            f"Backtest on {len(predictions)} played fixtures: "
            f"RPS {mean_rps:.4f}, accuracy {accuracy:.1f}%"
        )

    return {
        "n_matches": len(predictions),
        "rps": mean_rps,
        "accuracy": accuracy,
        "predictions": predictions,
    }
