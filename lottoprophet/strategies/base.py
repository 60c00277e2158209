# lottoprophet/strategies/base.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np

from ..config import EngineConfig
from ..utilities.attributes import NUMBERS
from ..utilities.draws import HistoryView

ScoreMap = Dict[int, float]
StrategyFn = Callable[[HistoryView, "StrategyContext"], Mapping[int, float]]


def safe_float(x, default: float = 0.0) -> float:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return default
    return v if math.isfinite(v) else default


def clean_scores(raw: Optional[Mapping[Any, Any]]) -> ScoreMap:
    """Keep keys in 1..49 with finite non-zero scores."""
    out: ScoreMap = {}
    if not raw:
        return out
    for k, v in raw.items():
        try:
            n = int(k)
        except (TypeError, ValueError):
            continue
        if n not in _VALID:
            continue
        s = safe_float(v)
        if s != 0.0:
            out[n] = s
    return out


def vector_to_scores(vec: np.ndarray) -> ScoreMap:
    """Array indexed by number (index 0 unused) -> sparse map."""
    return clean_scores({n: vec[n] for n in NUMBERS})


_VALID = frozenset(NUMBERS)


@dataclass
class StrategyContext:
    config: EngineConfig = field(default_factory=EngineConfig)

    def param(self, strategy: str, key: str, default: Any) -> Any:
        overrides = self.config.strategy_params.get(strategy) or {}
        return overrides.get(key, default)


@dataclass(frozen=True)
class Strategy:
    name: str
    fn: StrategyFn
    category: str = ""
    min_history: int = 1
    default_weight: float = 1.0
    doc: str = ""

    def score(self, history: HistoryView, ctx: StrategyContext) -> ScoreMap:
        if len(history) < self.min_history:
            return {}
        return clean_scores(self.fn(history, ctx))


_REGISTRY: List[Strategy] = []


def strategy(name: str, *, category: str, min_history: int = 1, default_weight: float = 1.0):
    """Register a pure scoring function under `name`."""
    def deco(fn: StrategyFn) -> StrategyFn:
        if any(s.name == name for s in _REGISTRY):
            raise ValueError(f"strategy {name!r} registered twice")
        _REGISTRY.append(Strategy(
            name=name,
            fn=fn,
            category=category,
            min_history=min_history,
            default_weight=default_weight,
            doc=(fn.__doc__ or "").strip().splitlines()[0] if fn.__doc__ else "",
        ))
        return fn
    return deco


def registered() -> List[Strategy]:
    return list(_REGISTRY)


# ---- shared helpers ----

def counts_vector(history: HistoryView, window: Optional[int] = None, specials_only: bool = False) -> np.ndarray:
    """Occurrence counts indexed by number over the `window` most recent draws."""
    h = history if window is None else history.window(window)
    vec = np.zeros(50, dtype=float)
    if specials_only:
        for s in h.specials():
            vec[s] += 1.0
        return vec
    if len(h):
        vec += h.presence_matrix().sum(axis=0)
    return vec


def current_gaps(history: HistoryView) -> np.ndarray:
    """Draws since each number last appeared; never seen = len(history)."""
    m = history.presence_matrix()
    gaps = np.full(50, float(len(history)))
    if len(history):
        seen = m.any(axis=0)
        first = m.argmax(axis=0)
        gaps[seen] = first[seen]
    gaps[0] = 0.0
    return gaps


def rank_groups(heat: Mapping[Any, float], order) -> List[Any]:
    """Groups by heat descending, ties in canonical `order`."""
    pos = {g: i for i, g in enumerate(order)}
    return sorted(heat, key=lambda g: (-heat[g], pos.get(g, len(pos))))
