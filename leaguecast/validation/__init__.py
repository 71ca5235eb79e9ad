# leaguecast/validation/__init__.py

from .splits import create_validation_split

from .backtest import backtest_played_fixtures

__all__ = [
    # splits
    "create_validation_split",
    # backtesting
    "backtest_played_fixtures",
]
