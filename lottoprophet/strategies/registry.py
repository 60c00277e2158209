# lottoprophet/strategies/registry.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..utilities.draws import HistoryView
from .base import ScoreMap, Strategy, StrategyContext, registered
from . import transition, omission, pattern, resonance, structural, signal  # noqa: F401  (registration)

logger = logging.getLogger(__name__)


def list_strategies() -> List[Strategy]:
    return registered()


def list_strategy_names() -> List[str]:
    return [s.name for s in list_strategies()]


def get_strategy(name: str) -> Strategy:
    for s in list_strategies():
        if s.name == name:
            return s
    raise KeyError(f"unknown strategy {name!r}")


def default_weights(strategies: Optional[Iterable[Strategy]] = None) -> Dict[str, float]:
    return {s.name: float(s.default_weight) for s in (strategies if strategies is not None else list_strategies())}


def compute_all(history: HistoryView, ctx: StrategyContext,
                strategies: Optional[Iterable[Strategy]] = None) -> Dict[str, ScoreMap]:
    """Run every strategy; a failing one contributes an empty map instead of aborting."""
    out: Dict[str, ScoreMap] = {}
    for s in (strategies if strategies is not None else list_strategies()):
        try:
            out[s.name] = s.score(history, ctx)
        except Exception as e:
            logger.warning("Strategy %s failed on %d draws: %s", s.name, len(history), e, exc_info=True)
            out[s.name] = {}
    return out
