"""Mark Six special-number recommendation engine."""
from .utilities import logger as _logger  # noqa: F401  (NullHandler on the package logger)
from .config import EngineConfig, load_engine_config
from .errors import ConfigError, LottoProphetError, MalformedDrawError, RegistryError
from .utilities.draws import Draw, HistoryView
from .engine.auto_tune import WeightStore
from .engine.pipeline import RecommendationPipeline, generate, run_backtest
from .engine.recommend import Recommendation

__version__ = "4.0.0"

__all__ = [
    "ConfigError",
    "Draw",
    "EngineConfig",
    "HistoryView",
    "LottoProphetError",
    "MalformedDrawError",
    "Recommendation",
    "RecommendationPipeline",
    "RegistryError",
    "WeightStore",
    "generate",
    "load_engine_config",
    "run_backtest",
]
