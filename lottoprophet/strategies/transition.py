# lottoprophet/strategies/transition.py
"""Transition-probability strategies: what tended to come after the latest draw."""
from __future__ import annotations

import numpy as np

from ..utilities.draws import HistoryView
from .base import StrategyContext, strategy, vector_to_scores


@strategy("special_transition", category="transition", min_history=2, default_weight=1.0)
def special_transition(history: HistoryView, ctx: StrategyContext):
    """First-order special -> next special counts, keyed on the latest special."""
    window = int(ctx.param("special_transition", "window", 0)) or len(history)
    specials = [d.special for d in history.window(window).chronological()]
    last = specials[-1]
    vec = np.zeros(50, dtype=float)
    for prev, nxt in zip(specials[:-1], specials[1:]):
        if prev == last:
            vec[nxt] += 1.0
    return vector_to_scores(vec)


@strategy("markov_transition", category="transition", min_history=2, default_weight=0.05)
def markov_transition(history: HistoryView, ctx: StrategyContext):
    """All-seven first-order matrix projected from the latest draw."""
    window = int(ctx.param("markov_transition", "window", 150))
    scale = float(ctx.param("markov_transition", "scale", 3.0))
    p = history.window(window).presence_matrix().astype(float)
    # m[a, b]: times b appeared in the draw right after a draw containing a
    m = p[1:].T @ p[:-1]
    vec = (p[0] @ m) * scale
    return vector_to_scores(vec)
