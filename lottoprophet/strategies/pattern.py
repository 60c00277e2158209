# lottoprophet/strategies/pattern.py
"""Pattern / geometry strategies built from the most recent draw."""
from __future__ import annotations

from typing import Dict, List

from ..utilities.attributes import GRID_SIZE, attributes_of
from ..utilities.draws import HistoryView
from .base import StrategyContext, strategy


def _bump(out: Dict[int, float], n: int, v: float) -> None:
    if 1 <= n <= 49:
        out[n] = out.get(n, 0.0) + v


@strategy("neighbors", category="pattern", min_history=1, default_weight=1.0)
def neighbors(history: HistoryView, ctx: StrategyContext):
    """+/-1 of every number in the latest draw; the special's neighbours count more."""
    w_regular = float(ctx.param("neighbors", "regular", 1.0))
    w_special = float(ctx.param("neighbors", "special", 1.5))
    last = history.latest
    out: Dict[int, float] = {}
    for n in last.regular:
        _bump(out, n - 1, w_regular)
        _bump(out, n + 1, w_regular)
    _bump(out, last.special - 1, w_special)
    _bump(out, last.special + 1, w_special)
    return out


def _runs(nums: List[int]) -> List[List[int]]:
    runs: List[List[int]] = []
    for n in sorted(nums):
        if runs and n == runs[-1][-1] + 1:
            runs[-1].append(n)
        else:
            runs.append([n])
    return runs


@strategy("consecutive_runs", category="pattern", min_history=1, default_weight=1.0)
def consecutive_runs(history: HistoryView, ctx: StrategyContext):
    """Extend each run of two or more consecutive numbers at both ends."""
    per_member = float(ctx.param("consecutive_runs", "per_member", 2.0))
    drawn = set(history.latest.numbers)
    out: Dict[int, float] = {}
    for run in _runs(list(drawn)):
        if len(run) < 2:
            continue
        v = per_member * len(run)
        for n in (run[0] - 1, run[-1] + 1):
            if n not in drawn:
                _bump(out, n, v)
    return out


@strategy("grid_neighbors", category="pattern", min_history=1, default_weight=0.8)
def grid_neighbors(history: HistoryView, ctx: StrategyContext):
    """8-neighbourhood of the latest special on the 7x7 grid; orthogonal cells weigh more."""
    orth = float(ctx.param("grid_neighbors", "orthogonal", 2.0))
    diag = float(ctx.param("grid_neighbors", "diagonal", 1.0))
    r, c = attributes_of(history.latest.special).grid
    out: Dict[int, float] = {}
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            rr, cc = r + dr, c + dc
            if 0 <= rr < GRID_SIZE and 0 <= cc < GRID_SIZE:
                _bump(out, rr * GRID_SIZE + cc + 1, orth if dr == 0 or dc == 0 else diag)
    return out
