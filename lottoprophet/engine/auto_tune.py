# lottoprophet/engine/auto_tune.py
"""
Strategy weights: the store that holds them and the adapter that moves them.

The WeightStore is the only state that survives between generation cycles.
All writes go through its lock; readers get a copy of the committed vector,
so a recommendation never sees a half-applied adjustment pass.
"""
from __future__ import annotations

import json
import logging
import math
import os
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Union

from ..config import EngineConfig
from ..strategies.base import Strategy

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class StrategyWeight:
    name: str
    current_weight: float
    accuracy_history: Deque[float] = field(default_factory=deque)
    last_adjusted: Optional[float] = None


@dataclass(frozen=True)
class WeightChange:
    name: str
    action: str                       # "increase" | "decrease" | "hold"
    old_weight: float
    new_weight: float
    recent_mean: Optional[float] = None
    previous_mean: Optional[float] = None
    relative_change: Optional[float] = None


@dataclass(frozen=True)
class AdjustmentOutcome:
    applied: bool
    reason: str
    changes: List[WeightChange]


@dataclass(frozen=True)
class AdapterParams:
    improve_threshold: float = 0.20
    degrade_threshold: float = 0.20
    increase: float = 0.15
    decrease: float = 0.10
    cooldown_seconds: float = 24 * 3600.0
    floor: float = 0.01
    span: int = 3

    @classmethod
    def from_config(cls, cfg: EngineConfig) -> "AdapterParams":
        return cls(
            improve_threshold=cfg.improve_threshold,
            degrade_threshold=cfg.degrade_threshold,
            increase=cfg.weight_increase,
            decrease=cfg.weight_decrease,
            cooldown_seconds=cfg.cooldown_hours * 3600.0,
            floor=cfg.weight_floor,
        )


def _valid_vector(w: Mapping[str, Any]) -> bool:
    try:
        vals = [float(v) for v in w.values()]
    except (TypeError, ValueError):
        return False
    return bool(vals) and all(math.isfinite(v) and v >= 0 for v in vals) and sum(vals) > 0


def normalize(weights: Mapping[str, float], budget: float, floor: float = 0.0) -> Dict[str, float]:
    """Floor every weight, then scale so the vector sums to `budget`."""
    floored = {k: max(float(v), floor) for k, v in weights.items()}
    total = sum(floored.values())
    if total <= 0:
        return {k: budget / len(floored) for k in floored} if floored else {}
    return {k: v * budget / total for k, v in floored.items()}


class WeightStore:
    """Committed strategy weight vector plus per-strategy accuracy history."""

    def __init__(self, defaults: Mapping[str, float], budget: Optional[float] = None,
                 history_size: int = 12, floor: float = 0.01):
        if not defaults:
            raise ValueError("WeightStore needs at least one strategy")
        self._lock = threading.RLock()
        self._defaults = {k: float(v) for k, v in defaults.items()}
        self._budget = float(budget) if budget else float(len(self._defaults))
        self._floor = float(floor)
        self._history_size = int(history_size)
        start = normalize(self._defaults if _valid_vector(self._defaults) else {k: 1.0 for k in self._defaults},
                          self._budget, self._floor)
        self._weights: Dict[str, StrategyWeight] = {
            k: StrategyWeight(k, v, deque(maxlen=self._history_size)) for k, v in start.items()
        }
        self._last_good: Dict[str, float] = dict(start)
        self._last_pass: Optional[float] = None
        self._best: Optional[Dict[str, Any]] = None

    @classmethod
    def for_strategies(cls, strategies: Iterable[Strategy], config: Optional[EngineConfig] = None) -> "WeightStore":
        cfg = config or EngineConfig()
        return cls({s.name: s.default_weight for s in strategies},
                   budget=cfg.weight_budget, history_size=cfg.accuracy_history_size, floor=cfg.weight_floor)

    # ---- reads ----
    @property
    def budget(self) -> float:
        return self._budget

    @property
    def floor(self) -> float:
        return self._floor

    @property
    def names(self) -> List[str]:
        return list(self._weights)

    @property
    def last_pass(self) -> Optional[float]:
        return self._last_pass

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            return {k: w.current_weight for k, w in self._weights.items()}

    def weight(self, name: str) -> float:
        with self._lock:
            return self._weights[name].current_weight

    def accuracy_history(self, name: str) -> List[float]:
        with self._lock:
            return list(self._weights[name].accuracy_history)

    @property
    def best_snapshot(self) -> Optional[Dict[str, Any]]:
        """Highest composite accuracy seen and the weights that produced it. Never auto-restored."""
        with self._lock:
            if self._best is None:
                return None
            return {"accuracy": self._best["accuracy"], "weights": dict(self._best["weights"])}

    # ---- writes ----
    @contextmanager
    def locked(self):
        with self._lock:
            yield self

    def commit(self, weights: Mapping[str, float], now: Optional[float] = None) -> Dict[str, float]:
        """Replace the vector (unknown names ignored, missing names keep their weight), renormalised."""
        with self._lock:
            merged = self.snapshot()
            changed = {k for k, v in weights.items() if k in merged and float(v) != merged[k]}
            merged.update({k: float(v) for k, v in weights.items() if k in merged})
            if not _valid_vector(merged):
                raise ValueError("weight vector must be finite, non-negative and not all zero")
            new = normalize(merged, self._budget, self._floor)
            for k, v in new.items():
                w = self._weights[k]
                if now is not None and k in changed:
                    w.last_adjusted = now
                w.current_weight = v
            self._last_good = dict(new)
            return dict(new)

    def set_accuracy_history(self, name: str, values: Iterable[float]) -> None:
        with self._lock:
            if name in self._weights:
                self._weights[name].accuracy_history = deque((float(v) for v in values), maxlen=self._history_size)

    def extend_accuracy_history(self, name: str, values: Iterable[float]) -> None:
        """Append to the rolling history; the oldest values fall off past `history_size`."""
        with self._lock:
            if name in self._weights:
                self._weights[name].accuracy_history.extend(float(v) for v in values)

    def record_composite(self, accuracy: float, weights: Optional[Mapping[str, float]] = None) -> bool:
        """Keep the best-observed vector; returns True when this one is the new best."""
        with self._lock:
            if self._best is not None and accuracy <= self._best["accuracy"]:
                return False
            self._best = {"accuracy": float(accuracy), "weights": dict(weights or self.snapshot())}
            return True

    def mark_pass(self, now: float) -> None:
        with self._lock:
            self._last_pass = float(now)

    # ---- persistence ----
    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "version": SNAPSHOT_VERSION,
                "budget": self._budget,
                "last_pass": self._last_pass,
                "weights": self.snapshot(),
                "accuracy_history": {k: list(w.accuracy_history) for k, w in self._weights.items()},
                "last_adjusted": {k: w.last_adjusted for k, w in self._weights.items()},
                "best": self.best_snapshot,
            }

    def restore(self, data: Any) -> bool:
        """
        Load a snapshot produced by to_dict(). The whole snapshot is checked
        before anything is applied; a corrupt one leaves the last-known-good
        vector in place and returns False.
        """
        with self._lock:
            try:
                state = self._parse_snapshot(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Corrupt weight snapshot (%s); keeping last-known-good weights", e)
                self.commit(self._last_good)
                return False

            self.commit(state["weights"])
            for k, hist in state["accuracy_history"].items():
                self.set_accuracy_history(k, hist)
            for k, ts in state["last_adjusted"].items():
                self._weights[k].last_adjusted = ts
            self._last_pass = state["last_pass"]
            if state["best"] is not None:
                self._best = state["best"]
            return True

    def _parse_snapshot(self, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise TypeError("snapshot is not a JSON object")
        weights = data["weights"]
        if not isinstance(weights, dict) or not _valid_vector(weights):
            raise ValueError("invalid weight vector")
        known = {k: float(v) for k, v in weights.items() if k in self._weights}
        if not known:
            raise ValueError("snapshot shares no strategy names with this build")

        histories = data.get("accuracy_history") or {}
        stamps = data.get("last_adjusted") or {}
        best = data.get("best")
        if not isinstance(histories, dict) or not isinstance(stamps, dict):
            raise TypeError("accuracy_history and last_adjusted must be objects")
        if best is not None and not (isinstance(best, dict) and isinstance(best.get("weights"), dict)
                                     and isinstance(best.get("accuracy"), (int, float))):
            raise TypeError("best must be an object with accuracy and weights")

        parsed_hist: Dict[str, List[float]] = {}
        for k, hist in histories.items():
            if k not in self._weights:
                continue
            if not isinstance(hist, list):
                raise TypeError(f"accuracy history for {k} is not a list")
            parsed_hist[k] = [float(v) for v in hist]
        parsed_stamps: Dict[str, float] = {}
        for k, ts in stamps.items():
            if k in self._weights and ts is not None:
                if not isinstance(ts, (int, float)):
                    raise TypeError(f"last_adjusted for {k} is not a number")
                parsed_stamps[k] = float(ts)
        lp = data.get("last_pass")
        if lp is not None and not isinstance(lp, (int, float)):
            raise TypeError("last_pass is not a number")
        return {
            "weights": known,
            "accuracy_history": parsed_hist,
            "last_adjusted": parsed_stamps,
            "last_pass": float(lp) if lp is not None else None,
            "best": {"accuracy": float(best["accuracy"]), "weights": dict(best["weights"])} if best else None,
        }

    def save(self, path: Union[str, Path]) -> None:
        """Atomic write: temp file then replace."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        tmp.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        os.replace(tmp, p)

    def load(self, path: Union[str, Path]) -> bool:
        p = Path(path)
        if not p.exists():
            return False
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Weight snapshot %s unreadable (%s); keeping current weights", p, e)
            return False
        return self.restore(data)


# ---- adapter ----

def _decide(history: List[float], params: AdapterParams):
    span = params.span
    if len(history) < 2 * span:
        return "hold", None, None, None
    recent = sum(history[-span:]) / span
    previous = sum(history[-2 * span:-span]) / span
    if previous == 0:
        rel = math.inf if recent > 0 else 0.0
    else:
        rel = (recent - previous) / previous
    if rel >= params.improve_threshold:
        action = "increase"
    elif rel <= -params.degrade_threshold:
        action = "decrease"
    else:
        action = "hold"
    return action, recent, previous, rel


def plan_adjustments(store: WeightStore, params: AdapterParams = AdapterParams()) -> List[WeightChange]:
    """Pure read of the store: proposed (pre-normalisation) weight per strategy."""
    plan: List[WeightChange] = []
    with store.locked():
        for name in store.names:
            w = store.weight(name)
            action, recent, previous, rel = _decide(store.accuracy_history(name), params)
            if action == "increase":
                new = w * (1.0 + params.increase)
            elif action == "decrease":
                new = w * (1.0 - params.decrease)
            else:
                new = w
            plan.append(WeightChange(name, action, w, new, recent, previous, rel))
    return plan


def apply_adjustments(store: WeightStore, plan: List[WeightChange], now: Optional[float] = None,
                      params: AdapterParams = AdapterParams()) -> AdjustmentOutcome:
    """
    Commit a plan and renormalise to the store's budget. At most one pass per
    cooldown period; a plan of holds commits nothing and does not start one.
    """
    now = time.time() if now is None else float(now)
    with store.locked():
        if store.last_pass is not None and now - store.last_pass < params.cooldown_seconds:
            logger.info("Weight adjustment skipped: cooldown (%.0fs left)",
                        params.cooldown_seconds - (now - store.last_pass))
            return AdjustmentOutcome(False, "cooldown", [
                WeightChange(c.name, "hold", c.old_weight, c.old_weight, c.recent_mean, c.previous_mean,
                             c.relative_change) for c in plan])
        if all(c.action == "hold" for c in plan):
            return AdjustmentOutcome(False, "no-change", plan)
        final = store.commit({c.name: c.new_weight for c in plan if c.action != "hold"}, now=now)
        store.mark_pass(now)
    changes = [WeightChange(c.name, c.action, c.old_weight, final.get(c.name, c.new_weight),
                            c.recent_mean, c.previous_mean, c.relative_change) for c in plan]
    moved = [c.name for c in changes if c.action != "hold"]
    logger.info("Weight pass applied: %d strategy weight(s) moved (%s)", len(moved), ", ".join(moved))
    return AdjustmentOutcome(True, "applied", changes)


def record_backtest(store: WeightStore, report, now: Optional[float] = None,
                    params: AdapterParams = AdapterParams()) -> AdjustmentOutcome:
    """Feed a finished backtest into the store and run one adjustment pass."""
    if not report.completed:
        logger.warning("Backtest incomplete; weights left untouched")
        return AdjustmentOutcome(False, "incomplete", [])
    if report.evaluated == 0:
        return AdjustmentOutcome(False, "no-data", [])
    with store.locked():
        for name, trail in report.accuracy_trail.items():
            store.extend_accuracy_history(name, trail)
        store.record_composite(report.composite_accuracy)
        plan = plan_adjustments(store, params)
        return apply_adjustments(store, plan, now, params)
