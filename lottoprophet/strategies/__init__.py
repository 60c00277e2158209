from .base import ScoreMap, Strategy, StrategyContext, strategy
from .registry import compute_all, default_weights, get_strategy, list_strategies, list_strategy_names

__all__ = [
    "ScoreMap",
    "Strategy",
    "StrategyContext",
    "strategy",
    "compute_all",
    "default_weights",
    "get_strategy",
    "list_strategies",
    "list_strategy_names",
]
