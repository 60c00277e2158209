# lottoprophet/engine/backtest.py - causal walk-forward replay
"""
Walk-forward backtest.

For replay index i the held-out draw is history[i] and the training slice is
history[i+1:] only, so nothing at or after the held-out draw can leak into
its prediction. Replay points whose training slice is shorter than
`backtest_min_train` are skipped, not scored as misses.

A hit means the held-out draw's special number is inside the top-K list
(12 per strategy, 18 for the composite).
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..strategies.base import Strategy, StrategyContext
from ..utilities.draws import HistoryView
from .aggregate import rank_history, top_numbers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestResult:
    replayed_draw_id: str
    replay_index: int
    predicted_top_k: Tuple[int, ...]
    actual_draw: Tuple[int, ...]
    special_hit: bool
    hit_count: int                                   # of all seven numbers inside the composite top-K
    strategy_hits: Dict[str, bool] = field(default_factory=dict)
    per_strategy_contribution: Dict[str, float] = field(default_factory=dict)  # toward the actual special


@dataclass
class BacktestReport:
    window: int
    evaluated: int
    skipped: int
    composite_accuracy: float
    per_strategy_accuracy: Dict[str, float]
    accuracy_trail: Dict[str, List[float]]
    composite_trail: List[float]
    results: List[BacktestResult]                    # most recent replay first
    completed: bool = True
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.completed and self.evaluated > 0

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for r in self.results:
            row = {
                "replay_index": r.replay_index,
                "draw_id": r.replayed_draw_id,
                "special": r.actual_draw[-1],
                "special_hit": int(r.special_hit),
                "hit_count": r.hit_count,
            }
            for name, hit in r.strategy_hits.items():
                row[f"hit_{name}"] = int(hit)
            rows.append(row)
        return pd.DataFrame(rows)


def _strategy_top_k(score_map: Mapping[int, float], k: int) -> List[int]:
    """Positively scored numbers only, best first, ties ascending."""
    scored = [(n, s) for n, s in score_map.items() if s > 0]
    scored.sort(key=lambda t: (-t[1], t[0]))
    return [n for n, _ in scored[:k]]


def _trail(hits: Sequence[bool], segments: int) -> List[float]:
    if not hits:
        return []
    chunks = np.array_split(np.asarray(hits, dtype=float), min(segments, len(hits)))
    return [float(c.mean()) for c in chunks if c.size]


def run_walk_forward(history: HistoryView,
                     strategies: Sequence[Strategy],
                     weights: Mapping[str, float],
                     ctx: StrategyContext,
                     window: Optional[int] = None,
                     clock: Callable[[], float] = time.monotonic) -> BacktestReport:
    cfg = ctx.config
    W = int(window if window is not None else cfg.backtest_window)
    budget = cfg.backtest_time_budget
    names = [s.name for s in strategies]
    start = clock()

    results: List[BacktestResult] = []
    skipped = 0
    completed = True
    for i in range(min(W, len(history))):
        if budget is not None and clock() - start > budget:
            logger.warning("Backtest stopped after %d replay(s): time budget %.1fs exceeded", len(results), budget)
            completed = False
            break
        train = history.older_than(i)
        if len(train) < cfg.backtest_min_train:
            skipped += 1
            continue
        train = train.window(cfg.history_window)
        actual = history[i]

        score_maps, ranked = rank_history(train, strategies, weights, ctx)
        top = top_numbers(ranked, cfg.top_k_composite)
        top_set = set(top)
        special_entry = next(c for c in ranked if c.number == actual.special)
        results.append(BacktestResult(
            replayed_draw_id=actual.draw_id,
            replay_index=i,
            predicted_top_k=tuple(top),
            actual_draw=actual.numbers,
            special_hit=actual.special in top_set,
            hit_count=sum(1 for n in actual.numbers if n in top_set),
            strategy_hits={
                name: actual.special in _strategy_top_k(score_maps.get(name, {}), cfg.top_k_strategy)
                for name in names
            },
            per_strategy_contribution=dict(special_entry.contributions),
        ))
    skipped += max(0, W - len(history))

    chron = list(reversed(results))   # oldest replay first
    evaluated = len(results)
    composite_hits = [r.special_hit for r in chron]
    per_strategy = {name: [r.strategy_hits[name] for r in chron] for name in names}
    report = BacktestReport(
        window=W,
        evaluated=evaluated,
        skipped=skipped,
        composite_accuracy=float(np.mean(composite_hits)) if evaluated else 0.0,
        per_strategy_accuracy={n: float(np.mean(h)) if h else 0.0 for n, h in per_strategy.items()},
        accuracy_trail={n: _trail(h, cfg.backtest_segments) for n, h in per_strategy.items()},
        composite_trail=_trail(composite_hits, cfg.backtest_segments),
        results=results,
        completed=completed,
        elapsed=clock() - start,
    )
    logger.info("Backtest W=%d evaluated=%d skipped=%d composite=%.3f completed=%s",
                W, evaluated, skipped, report.composite_accuracy, completed)
    return report
