# leaguecast/models/hyperparameters.py

import logging
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np
import optuna
import pandas as pd
from optuna.samplers import GridSampler
from optuna.trial import TrialState

logger = logging.getLogger(__name__)


def get_default_hyperparameters() -> Dict[str, Any]:
    """Get default hyperparameters for the model"""
    return {
        "epochs": 100,
        "learning_rate": 0.012,
        "scale": 8.0,
        "initial_home_adv": 0.25,
        "initial_rho": 0.0,
        "rho_bound": 0.15,
        "time_decay_candidates": [0.0015, 0.0020, 0.0025, 0.0030],
        "validation_fraction": 0.15,
        "validation_simulations": 1000,
        "rating_clip": None,
    }


def optimise_time_decay(
    matches: Sequence[Any],
    candidates: Optional[Sequence[float]] = None,
    hyperparams: Optional[Dict[str, Any]] = None,
    reference_date: Optional[pd.Timestamp] = None,
    fit_fn: Optional[Callable] = None,
    predict_fn: Optional[Callable] = None,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    verbose: bool = False,
) -> Dict[str, Any]:
    """
    Select the time decay by walk-forward validation.

    The history is split chronologically into a training window and a
    held-out tail. Every candidate is trained on the window only and scored
    by mean RPS on the tail; an Optuna grid study runs one trial per
    candidate. Lower is better and ties go to the candidate listed first.

    fit_fn(train_matches, time_decay, rng) -> model
    predict_fn(model, match, rng) -> home/draw/away probabilities in percent
    """
    # import here to avoid circular dependency
    from ..evaluation.metrics import determine_outcome, ranked_probability_score
    from ..simulation.predictions import predict_fixture
    from ..validation.splits import create_validation_split
    from .poisson import fit_rating_snapshot

    hp = {**get_default_hyperparameters(), **(hyperparams or {})}

    if candidates is None:
        candidates = hp["time_decay_candidates"]
    candidates = list(dict.fromkeys(float(c) for c in candidates))
    if not candidates:
        raise ValueError("At least one time decay candidate is required")

    train, validation = create_validation_split(matches, hp["validation_fraction"])

    if not train or not validation:
        logger.warning(
            f"History too short to validate ({len(train)} train / {len(validation)} "
            f"validation matches), using time_decay={candidates[0]}"
        )
        return {"time_decay": candidates[0], "scores": {}}

    if reference_date is None:
        reference_date = pd.Timestamp.now()

    if fit_fn is None:

        def fit_fn(train_matches, time_decay, rng):
            return fit_rating_snapshot(
                train_matches,
                time_decay,
                hyperparams=hp,
                reference_date=reference_date,
                rng=rng,
            )

    if predict_fn is None:

        def predict_fn(model, match, rng):
            return predict_fixture(
                match.home_team,
                match.away_team,
                model,
                n_simulations=int(hp["validation_simulations"]),
                rng=rng,
            ).outcome_probabilities

    if verbose:
        logger.info(
            f"Validating {len(candidates)} time decay candidates on "
            f"{len(train)} train / {len(validation)} validation matches"
        )
    else:
        optuna.logging.set_verbosity(optuna.logging.WARNING)

    def objective(trial: optuna.Trial) -> float:
        """Mean validation RPS for one candidate"""
        time_decay = trial.suggest_categorical("time_decay", candidates)
        rng = np.random.default_rng(
            None if seed is None else [seed, candidates.index(time_decay)]
        )

        model = fit_fn(train, time_decay, rng)

        scores = [
            ranked_probability_score(
                predict_fn(model, match, rng),
                determine_outcome(match.home_goals, match.away_goals),
            )
            for match in validation
        ]

        return float(np.mean(scores))

    study = optuna.create_study(
        direction="minimize",
        sampler=GridSampler({"time_decay": candidates}, seed=seed),
    )
    study.optimize(objective, n_trials=len(candidates), n_jobs=n_jobs)

    scores = {
        trial.params["time_decay"]: trial.value
        for trial in study.trials
        if trial.state == TrialState.COMPLETE
    }
    best = min(candidates, key=lambda xi: scores.get(xi, float("inf")))

    if verbose:
        half_life_days = np.log(2) / best if best > 0 else float("inf")
        logger.info(
            f"Best time_decay: {best:.4f} ({half_life_days:.0f} day half-life), "
            f"validation RPS {scores[best]:.4f}"
        )

    return {"time_decay": best, "scores": scores}


def fit_model(
    matches: Sequence[Any],
    candidates: Optional[Sequence[float]] = None,
    hyperparams: Optional[Dict[str, Any]] = None,
    reference_date: Optional[pd.Timestamp] = None,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    verbose: bool = False,
):
    """
    Select the time decay, then refit on the full history and publish.

    The selection fits only ever see the training window; the returned
    snapshot always comes from the full-history refit at the chosen decay.
    """
    from .poisson import create_rating_snapshot, fit_team_ratings

    matches = list(matches)
    if not matches:
        raise ValueError("Cannot fit a model on an empty match history")

    hp = {**get_default_hyperparameters(), **(hyperparams or {})}

    # one reference date for every fit so weights are comparable
    if reference_date is None:
        reference_date = pd.Timestamp.now()

    selection = optimise_time_decay(
        matches,
        candidates=candidates,
        hyperparams=hp,
        reference_date=reference_date,
        seed=seed,
        n_jobs=n_jobs,
        verbose=verbose,
    )

    result = fit_team_ratings(
        matches,
        selection["time_decay"],
        hyperparams=hp,
        reference_date=reference_date,
        rng=np.random.default_rng(seed),
        verbose=verbose,
    )

    return create_rating_snapshot(
        result,
        scale=float(hp["scale"]),
        rating_clip=hp.get("rating_clip"),
        validation_scores=selection["scores"],
        rho_bound=float(hp["rho_bound"]),
    )
