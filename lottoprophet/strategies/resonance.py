# lottoprophet/strategies/resonance.py
"""
Category-resonance strategies.

Heat per group (zodiac, wave, tail, element) is measured over a recent window
and normalised by group size, so the five-member groups are not favoured just
for being larger. "Resonance" strategies reward the hottest groups, "balance"
strategies reward the coldest.
"""
from __future__ import annotations

from typing import Dict, List, Sequence

from ..utilities.attributes import NUMBERS, group_key, group_order, members
from ..utilities.draws import HistoryView
from .base import StrategyContext, rank_groups, strategy


def group_heat(history: HistoryView, kind: str, window: int, special_weight: float = 1.5) -> Dict[object, float]:
    heat = {g: 0.0 for g in group_order(kind)}
    for d in history.window(window):
        for n in d.regular:
            heat[group_key(kind, n)] += 1.0
        heat[group_key(kind, d.special)] += special_weight
    return {g: v / max(1, len(members(kind, g))) for g, v in heat.items()}


def _reward(groups: List[object], kind: str, rewards: Sequence[float]) -> Dict[int, float]:
    out: Dict[int, float] = {}
    for g, r in zip(groups, rewards):
        for n in NUMBERS:
            if group_key(kind, n) == g:
                out[n] = float(r)
    return out


def _hottest(history: HistoryView, ctx: StrategyContext, name: str, kind: str, rewards: Sequence[float]):
    window = int(ctx.param(name, "window", 30))
    heat = group_heat(history, kind, window, float(ctx.param(name, "special_weight", 1.5)))
    if not any(heat.values()):
        return {}
    ranked = rank_groups(heat, group_order(kind))
    return _reward(ranked, kind, rewards)


def _coldest(history: HistoryView, ctx: StrategyContext, name: str, kind: str, rewards: Sequence[float]):
    window = int(ctx.param(name, "window", 30))
    heat = group_heat(history, kind, window, float(ctx.param(name, "special_weight", 1.5)))
    if not any(heat.values()):
        return {}
    pos = {g: i for i, g in enumerate(group_order(kind))}
    ranked = sorted(heat, key=lambda g: (heat[g], pos[g]))
    return _reward(ranked, kind, rewards)


@strategy("zodiac_resonance", category="resonance", min_history=5, default_weight=0.8)
def zodiac_resonance(history: HistoryView, ctx: StrategyContext):
    """Members of the three hottest zodiac groups."""
    return _hottest(history, ctx, "zodiac_resonance", "zodiac", (3.0, 2.0, 1.0))


@strategy("wave_resonance", category="resonance", min_history=5, default_weight=0.8)
def wave_resonance(history: HistoryView, ctx: StrategyContext):
    """Members of the hottest wave, and less so the runner-up."""
    return _hottest(history, ctx, "wave_resonance", "wave", (2.0, 1.0))


@strategy("tail_resonance", category="resonance", min_history=5, default_weight=0.8)
def tail_resonance(history: HistoryView, ctx: StrategyContext):
    """Members of the three hottest tail digits."""
    return _hottest(history, ctx, "tail_resonance", "tail", (3.0, 2.0, 1.0))


@strategy("element_balance", category="resonance", min_history=5, default_weight=0.6)
def element_balance(history: HistoryView, ctx: StrategyContext):
    """Members of the coldest element groups."""
    return _coldest(history, ctx, "element_balance", "element", (2.0, 1.0))


@strategy("zodiac_balance", category="resonance", min_history=12, default_weight=0.5)
def zodiac_balance(history: HistoryView, ctx: StrategyContext):
    """Members of the coldest zodiac group."""
    return _coldest(history, ctx, "zodiac_balance", "zodiac", (2.0,))
