# lottoprophet/strategies/omission.py
"""Gap / omission strategies."""
from __future__ import annotations

import numpy as np

from ..utilities.attributes import NUMBERS
from ..utilities.draws import HistoryView, DRAW_SIZE
from .base import StrategyContext, current_gaps, strategy, vector_to_scores

EXPECTED_GAP = 49.0 / DRAW_SIZE


@strategy("omission", category="gap", min_history=1, default_weight=0.6)
def omission(history: HistoryView, ctx: StrategyContext):
    """Longer absence scores higher; a number drawn last time scores nothing."""
    cap = float(ctx.param("omission", "cap", 100))
    gaps = np.minimum(current_gaps(history), cap)
    return vector_to_scores(gaps / EXPECTED_GAP)


@strategy("omission_bands", category="gap", min_history=10, default_weight=0.2)
def omission_bands(history: HistoryView, ctx: StrategyContext):
    """Due near the mean gap, overdue at 2 < z < 3, inertia when just drawn."""
    due = float(ctx.param("omission_bands", "due", 20.0))
    overdue = float(ctx.param("omission_bands", "overdue", 35.0))
    inertia = float(ctx.param("omission_bands", "inertia", 15.0))
    baseline = float(ctx.param("omission_bands", "baseline", 5.0))

    m = history.presence_matrix()
    total = len(history)
    vec = np.zeros(50, dtype=float)
    for n in NUMBERS:
        rows = np.flatnonzero(m[:, n])
        if rows.size < 2:
            continue  # not enough gaps to estimate a cycle
        chron = np.sort(total - 1 - rows)
        gaps = np.diff(np.concatenate(([-1], chron))) - 1
        current = float(rows.min())
        avg = float(gaps.mean())
        std = float(gaps.std()) or 1.0
        z = (current - avg) / std
        if abs(z) < 0.5:
            vec[n] = due
        elif 2.0 < z < 3.0:
            vec[n] = overdue
        elif current == 0:
            vec[n] = inertia
        else:
            vec[n] = baseline
    return vector_to_scores(vec)
