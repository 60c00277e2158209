# lottoprophet/engine/pipeline.py
from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import asdict
from typing import Any, Deque, Dict, Iterable, List, Optional, Sequence

from ..config import EngineConfig
from ..strategies.base import Strategy, StrategyContext
from ..strategies.registry import list_strategies
from ..utilities.attributes import describe_numbers
from ..utilities.diversity import Quotas, select_diverse
from ..utilities.draws import HistoryView, next_draw_id
from ..utilities.logger import append_row
from .aggregate import RankedCandidate, rank_history
from .auto_tune import AdapterParams, AdjustmentOutcome, WeightStore, record_backtest
from .backtest import BacktestReport, BacktestResult, run_walk_forward
from .recommend import Recommendation, recommend_attributes
from ..utilities.fallback_predict import predict_frequency_fallback

logger = logging.getLogger(__name__)


def _top_contributors(ranked: Sequence[RankedCandidate], selected: Iterable[int], k: int = 3) -> List[str]:
    chosen = set(selected)
    agg: Dict[str, float] = {}
    for c in ranked:
        if c.number not in chosen:
            continue
        for name, v in c.contributions.items():
            agg[name] = agg.get(name, 0.0) + v
    return [n for n, v in sorted(agg.items(), key=lambda t: (-t[1], t[0])) if v > 0][:k]


class RecommendationPipeline:
    """
    One engine instance: strategies + committed weights + config.

    generate() only reads the WeightStore; run_backtest() is the only path
    that writes to it.
    """

    def __init__(self, config: Optional[EngineConfig] = None, store: Optional[WeightStore] = None,
                 strategies: Optional[Sequence[Strategy]] = None):
        self.config = config or EngineConfig()
        self.strategies: List[Strategy] = list(strategies) if strategies is not None else list_strategies()
        self.store = store or WeightStore.for_strategies(self.strategies, self.config)
        self.ctx = StrategyContext(self.config)
        self.recent_results: Deque[BacktestResult] = deque(maxlen=self.config.backtest_log_size)
        self.last_report: Optional[BacktestReport] = None

    # ---- generation ----
    def generate(self, history: Any) -> Recommendation:
        cfg = self.config
        view = HistoryView.of(history)
        if len(view) < cfg.min_history:
            return predict_frequency_fallback(view, cfg)

        train = view.window(cfg.history_window)
        weights = self.store.snapshot()
        _, ranked = rank_history(train, self.strategies, weights, self.ctx)
        sel = select_diverse(ranked, cfg.target_size, Quotas(cfg.per_zodiac_quota, cfg.per_wave_quota))
        attrs = recommend_attributes(sel.numbers, ranked, cfg.zodiac_count, cfg.head_count, cfg.tail_count)

        leaders = _top_contributors(ranked, sel.numbers)
        rationale = "top strategies: " + (", ".join(leaders) if leaders else "none")
        if sel.relaxed:
            rationale += f"; quotas relaxed for {len(sel.relaxed)} number(s)"
        latest = view.latest
        rec = Recommendation(
            numbers=sel.sorted_numbers,
            rationale=rationale,
            fallback=False,
            target_draw_id=next_draw_id(latest.draw_id),
            based_on=latest.draw_id,
            scores={c.number: c.total for c in ranked},
            **attrs,
        )
        logger.debug("Generated %s from %d draws: %s", rec.target_draw_id, len(train),
                     describe_numbers(rec.numbers))
        return rec

    # ---- backtest ----
    def run_backtest(self, history: Any, window_size: Optional[int] = None, now: Optional[float] = None,
                     commit: bool = True) -> Dict[str, Any]:
        view = HistoryView.of(history)
        report = run_walk_forward(view, self.strategies, self.store.snapshot(), self.ctx, window_size)
        self.last_report = report
        # results are most recent first; keep the deque newest-last
        self.recent_results.extend(reversed(report.results))
        if self.config.backtest_log_path:
            self._log_results(report)

        if commit:
            outcome = record_backtest(self.store, report, now if now is not None else time.time(),
                                      AdapterParams.from_config(self.config))
        else:
            outcome = AdjustmentOutcome(False, "dry-run", [])
        return self._summary(report, outcome)

    def _log_results(self, report: BacktestReport) -> None:
        path = self.config.backtest_log_path
        for r in reversed(report.results):
            append_row(path, {
                "draw_id": r.replayed_draw_id,
                "special": r.actual_draw[-1],
                "special_hit": int(r.special_hit),
                "hit_count": r.hit_count,
                "predicted": " ".join(f"{n:02d}" for n in r.predicted_top_k),
            })

    @staticmethod
    def _summary(report: BacktestReport, outcome: AdjustmentOutcome) -> Dict[str, Any]:
        return {
            "composite_accuracy": report.composite_accuracy,
            "per_strategy_accuracy": dict(report.per_strategy_accuracy),
            "recommended_weight_changes": [asdict(c) for c in outcome.changes],
            "weights_applied": outcome.applied,
            "adjustment": outcome.reason,
            "evaluated": report.evaluated,
            "skipped": report.skipped,
            "completed": report.completed,
        }


def generate(history: Any, store: Optional[WeightStore] = None,
             config: Optional[EngineConfig] = None) -> Recommendation:
    return RecommendationPipeline(config=config, store=store).generate(history)


def run_backtest(history: Any, window_size: Optional[int] = None, store: Optional[WeightStore] = None,
                 config: Optional[EngineConfig] = None, now: Optional[float] = None) -> Dict[str, Any]:
    return RecommendationPipeline(config=config, store=store).run_backtest(history, window_size, now=now)
