#!/usr/bin/env python3
"""
Run Forecast
============

Fit team ratings from a match history and produce forecasts.

Usage:
    python scripts/run_forecast.py --history data/history.csv
    python scripts/run_forecast.py --history data/history.csv --schedule data/season.csv
    python scripts/run_forecast.py --history data/history.csv --home Flamengo --away Palmeiras
"""

import sys
import argparse
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pandas as pd

from leaguecast.models import create_power_rankings, fit_model
from leaguecast.processing import prepare_schedule, prepare_training_records
from leaguecast.simulation import (
    LeagueShape,
    create_final_summary,
    predict_fixture,
    predict_next_fixtures,
    simulate_season,
)
from leaguecast.validation import backtest_played_fixtures


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging for the forecast run"""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return logging.getLogger(__name__)


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Fit ratings and simulate matches and the season"
    )

    parser.add_argument(
        "--history", type=str, required=True, help="Delimited file of past matches"
    )

    parser.add_argument(
        "--schedule",
        type=str,
        default=None,
        help="Delimited file of the current season schedule",
    )

    parser.add_argument("--home", type=str, default=None, help="Home team to simulate")
    parser.add_argument("--away", type=str, default=None, help="Away team to simulate")

    parser.add_argument(
        "--n-simulations",
        type=int,
        default=10000,
        help="Monte Carlo trials per match and per season (default: 10000)",
    )

    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for reproducible runs"
    )

    parser.add_argument(
        "--rating-clip",
        type=float,
        default=None,
        help="Optional symmetric bound on published ratings (e.g. 5)",
    )

    parser.add_argument(
        "--tier-cutoffs",
        type=int,
        nargs=3,
        default=[6, 8, 12],
        help="Top-N table bands (default: 6 8 12)",
    )

    parser.add_argument(
        "--relegation-size",
        type=int,
        default=4,
        help="Size of the relegation band (default: 4)",
    )

    parser.add_argument("--verbose", action="store_true", help="Log progress")

    return parser.parse_args()


def read_table(path: str) -> pd.DataFrame:
    """Read a delimited text file, sniffing the separator"""
    return pd.read_csv(path, sep=None, engine="python")


def main():
    """Main forecast pipeline"""
    args = parse_args()
    logger = setup_logging(args.verbose)

    if (args.home is None) != (args.away is None):
        print("Error: --home and --away must be given together")
        sys.exit(1)

    # ========================================================================
    # TRAIN
    # ========================================================================
    print("=" * 70)
    print("FITTING TEAM RATINGS")
    print("=" * 70)

    matches = prepare_training_records(read_table(args.history))
    if not matches:
        print("Error: no usable matches in history")
        sys.exit(1)

    snapshot = fit_model(
        matches,
        hyperparams={"rating_clip": args.rating_clip},
        seed=args.seed,
        verbose=args.verbose,
    )
    logger.info("Model fitted")

    params = snapshot.params
    print(f"   Matches: {snapshot.n_matches}")
    print(f"   Average goals: {snapshot.average_goals:.2f}")
    print(f"   Time decay: {params.time_decay:.4f}")
    print(f"   Home advantage: {params.home_field_advantage:.3f}")
    print(f"   Rho: {params.rho:.3f}")

    print("\nPower rankings:")
    print(create_power_rankings(snapshot).to_string(index=False, float_format="%.2f"))

    # ========================================================================
    # SINGLE MATCH
    # ========================================================================
    if args.home is not None:
        result = predict_fixture(
            args.home, args.away, snapshot, n_simulations=args.n_simulations, seed=args.seed
        )
        probs = result.outcome_probabilities
        odds = result.decimal_odds()
        h, a = result.most_likely_score()

        print("\n" + "=" * 70)
        print(f"{args.home} vs {args.away}")
        print("=" * 70)
        print(
            f"   xG: {result.expected_goals.home:.2f} - {result.expected_goals.away:.2f}"
        )
        print(
            f"   Home {probs.home:.1f}% ({odds['home']:.2f}) | "
            f"Draw {probs.draw:.1f}% ({odds['draw']:.2f}) | "
            f"Away {probs.away:.1f}% ({odds['away']:.2f})"
        )
        print(f"   Most likely score: {h}-{a}")
        print(
            f"   Expected points: {result.expected_points.home:.2f} - "
            f"{result.expected_points.away:.2f}"
        )

    # ========================================================================
    # SEASON
    # ========================================================================
    if args.schedule is not None:
        schedule = prepare_schedule(read_table(args.schedule))

        print("\n" + "=" * 70)
        print("SEASON PROJECTION")
        print("=" * 70)

        standings = simulate_season(
            schedule,
            snapshot,
            n_simulations=args.n_simulations,
            league_shape=LeagueShape(
                tier_cutoffs=tuple(args.tier_cutoffs),
                relegation_size=args.relegation_size,
            ),
            seed=args.seed,
            verbose=args.verbose,
        )
        summary = create_final_summary(standings, snapshot)
        print(summary.to_string(index=False, float_format="%.1f"))

        next_fixtures = predict_next_fixtures(
            schedule, snapshot, n_simulations=args.n_simulations, seed=args.seed
        )
        if next_fixtures is not None:
            print("\nNext round:")
            print(next_fixtures.to_string(index=False, float_format="%.2f"))

        backtest = backtest_played_fixtures(
            schedule, snapshot, n_simulations=args.n_simulations, seed=args.seed
        )
        if backtest["accuracy"] is not None:
            print(
                f"\nBacktest: {backtest['n_matches']} played fixtures, "
                f"RPS {backtest['rps']:.4f}, accuracy {backtest['accuracy']:.1f}%"
            )

    print("\nDone")


if __name__ == "__main__":
    main()
