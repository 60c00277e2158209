# lottoprophet/strategies/signal.py
"""
Statistical / signal strategies.

Each number's draw history is treated as a 0/1 presence series (oldest ->
newest where the signal needs time order). The arithmetic is vectorised over
all 49 numbers with numpy.
"""
from __future__ import annotations

import math
from typing import Dict

import numpy as np

from ..utilities.attributes import CLUSTER_SIZE, NUMBERS
from ..utilities.draws import HistoryView
from .base import StrategyContext, counts_vector, strategy, vector_to_scores


@strategy("frequency", category="signal", min_history=1, default_weight=0.3)
def frequency(history: HistoryView, ctx: StrategyContext):
    """Plain occurrence counts over the recent window."""
    window = int(ctx.param("frequency", "window", 50))
    return vector_to_scores(counts_vector(history, window))


@strategy("decay_frequency", category="signal", min_history=1, default_weight=0.5)
def decay_frequency(history: HistoryView, ctx: StrategyContext):
    """Occurrences weighted by decay**age, so recent draws dominate."""
    decay = float(ctx.param("decay_frequency", "decay", 0.9))
    window = int(ctx.param("decay_frequency", "window", 100))
    p = history.window(window).presence_matrix().astype(float)
    w = decay ** np.arange(p.shape[0], dtype=float)
    return vector_to_scores(w @ p)


@strategy("macd_trend", category="signal", min_history=10, default_weight=0.02)
def macd_trend(history: HistoryView, ctx: StrategyContext):
    """MACD(12, 26, 9) on each number's presence series."""
    fast = int(ctx.param("macd_trend", "fast", 12))
    slow = int(ctx.param("macd_trend", "slow", 26))
    signal = int(ctx.param("macd_trend", "signal", 9))
    k_fast, k_slow, k_sig = 2.0 / (fast + 1), 2.0 / (slow + 1), 2.0 / (signal + 1)

    chron = history.presence_matrix()[::-1].astype(float)
    ema_fast = np.full(50, 1.0 / 49.0)
    ema_slow = np.full(50, 1.0 / 49.0)
    dea = np.zeros(50)
    for row in chron:
        ema_fast = row * k_fast + ema_fast * (1 - k_fast)
        ema_slow = row * k_slow + ema_slow * (1 - k_slow)
        dea = (ema_fast - ema_slow) * k_sig + dea * (1 - k_sig)
    dif = ema_fast - ema_slow
    macd = (dif - dea) * 2.0
    return vector_to_scores(macd * 2000.0 + dif * 1000.0)


@strategy("autocorrelation", category="signal", min_history=30, default_weight=0.8)
def autocorrelation(history: HistoryView, ctx: StrategyContext):
    """Best positive lag-k autocorrelation, when the lagged draw contained the number."""
    max_lag = int(ctx.param("autocorrelation", "max_lag", 10))
    scale = float(ctx.param("autocorrelation", "scale", 10.0))
    p = history.presence_matrix()
    chron = p[::-1].astype(float)
    best = np.zeros(50)
    for k in range(1, min(max_lag, len(history) // 2) + 1):
        a, b = chron[:-k], chron[k:]
        a_c = a - a.mean(axis=0)
        b_c = b - b.mean(axis=0)
        denom = np.sqrt((a_c ** 2).sum(axis=0) * (b_c ** 2).sum(axis=0))
        with np.errstate(invalid="ignore", divide="ignore"):
            r = np.where(denom > 0, (a_c * b_c).sum(axis=0) / denom, 0.0)
        # the value k draws before the next draw is history[k-1]
        r = np.where(p[k - 1], np.clip(r, 0.0, None), 0.0)
        best = np.maximum(best, r)
    best[0] = 0.0
    return vector_to_scores(best * scale)


@strategy("logistic_map", category="signal", min_history=1, default_weight=0.3)
def logistic_map(history: HistoryView, ctx: StrategyContext):
    """Iterate x -> r*x*(1-x) seeded by the latest special; earlier iterates score more."""
    r = float(ctx.param("logistic_map", "r", 3.9))
    steps = int(ctx.param("logistic_map", "steps", 6))
    x = history.latest.special / 50.0
    out: Dict[int, float] = {}
    for i in range(steps):
        x = r * x * (1.0 - x)
        n = min(49, int(x * 49) + 1)
        out[n] = out.get(n, 0.0) + float(steps - i)
    return out


@strategy("entropy_balance", category="signal", min_history=10, default_weight=0.6)
def entropy_balance(history: HistoryView, ctx: StrategyContext):
    """Under-filled clusters, boosted further the less even the recent spread is."""
    window = int(ctx.param("entropy_balance", "window", 30))
    scale = float(ctx.param("entropy_balance", "scale", 3.0))
    counts = counts_vector(history, window)[1:]
    clusters = counts.reshape(-1, CLUSTER_SIZE).sum(axis=1)
    total = clusters.sum()
    if total <= 0:
        return {}
    p = clusters / total
    nz = p[p > 0]
    entropy = float(-(nz * np.log(nz)).sum())
    imbalance = 1.0 - entropy / math.log(len(clusters))
    expected = total / len(clusters)
    out: Dict[int, float] = {}
    for c, observed in enumerate(clusters):
        if observed < expected:
            v = (expected - observed) / expected * (1.0 + imbalance) * scale
            for n in range(c * CLUSTER_SIZE + 1, (c + 1) * CLUSTER_SIZE + 1):
                out[n] = v
    return out


@strategy("special_periodicity", category="signal", min_history=20, default_weight=0.6)
def special_periodicity(history: HistoryView, ctx: StrategyContext):
    """Specials whose median recurrence interval lines up with the next draw."""
    min_hits = int(ctx.param("special_periodicity", "min_occurrences", 3))
    scale = float(ctx.param("special_periodicity", "scale", 3.0))
    chron = np.array([d.special for d in history.chronological()])
    last_idx = len(chron) - 1
    out: Dict[int, float] = {}
    for n in NUMBERS:
        idx = np.flatnonzero(chron == n)
        if idx.size < min_hits:
            continue
        period = float(np.median(np.diff(idx)))
        since = last_idx - int(idx[-1])
        out[n] = scale / (1.0 + abs(since + 1 - period))
    return out
