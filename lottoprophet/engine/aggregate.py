# lottoprophet/engine/aggregate.py - weighted composite of strategy score maps
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from ..utilities.attributes import NUMBERS, attributes_of, group_order
from ..utilities.draws import HistoryView
from ..strategies.base import ScoreMap, Strategy, StrategyContext, rank_groups
from ..strategies.registry import compute_all

DEFAULT_EPSILON = 1e-9


@dataclass(frozen=True)
class RankedCandidate:
    number: int
    total: float
    contributions: Dict[str, float] = field(default_factory=dict, compare=False)


def _order(totals: np.ndarray) -> List[int]:
    return sorted(NUMBERS, key=lambda n: (-totals[n], n))


def aggregate(score_maps: Mapping[str, ScoreMap], weights: Mapping[str, float],
              epsilon: float = DEFAULT_EPSILON) -> List[RankedCandidate]:
    """
    All 49 numbers ranked by sum(score * weight), best first.

    `candidate * epsilon` is subtracted from every total and ties sort by
    ascending number, so the order is total and reproducible; with no signal
    at all the ranking is simply 1..49.
    """
    names = [name for name in score_maps if weights.get(name, 0.0)]
    totals = np.zeros(50, dtype=float)
    contrib: Dict[int, Dict[str, float]] = {n: {} for n in NUMBERS}
    for name in names:
        w = float(weights[name])
        for n, s in score_maps[name].items():
            v = float(s) * w
            totals[n] += v
            contrib[n][name] = v
    totals -= np.arange(50, dtype=float) * epsilon
    return [RankedCandidate(n, float(totals[n]), contrib[n]) for n in _order(totals)]


def top_numbers(ranked: List[RankedCandidate], k: int) -> List[int]:
    return [c.number for c in ranked[:max(0, int(k))]]


def rank_history(history: HistoryView, strategies: Sequence[Strategy], weights: Mapping[str, float],
                 ctx: StrategyContext) -> Tuple[Dict[str, ScoreMap], List[RankedCandidate]]:
    """Strategy library + aggregator (+ optional resonance pass) over one history slice."""
    cfg = ctx.config
    score_maps = compute_all(history, ctx, strategies)
    ranked = aggregate(score_maps, weights, cfg.tie_epsilon)
    if cfg.resonance_boost:
        ranked = resonance_boost(ranked)
    return score_maps, ranked


def resonance_boost(ranked: List[RankedCandidate],
                    zodiac_boost: float = 0.15, wave_boost: float = 0.15, tail_boost: float = 0.10,
                    top_zodiacs: int = 3, top_tails: int = 3) -> List[RankedCandidate]:
    """
    Second-pass attribute resonance: positive totals feed group heat, members
    of the strongest zodiacs / wave / tails are multiplied up, then re-ranked.
    """
    heat: Dict[str, Dict[object, float]] = {"zodiac": {}, "wave": {}, "tail": {}}
    for c in ranked:
        if c.total <= 0:
            continue
        a = attributes_of(c.number)
        for kind, g in (("zodiac", a.zodiac), ("wave", a.wave), ("tail", a.tail)):
            heat[kind][g] = heat[kind].get(g, 0.0) + c.total
    if not heat["zodiac"]:
        return list(ranked)

    strong_z = set(rank_groups(heat["zodiac"], group_order("zodiac"))[:top_zodiacs])
    strong_w = set(rank_groups(heat["wave"], group_order("wave"))[:1])
    strong_t = set(rank_groups(heat["tail"], group_order("tail"))[:top_tails])

    totals = np.zeros(50, dtype=float)
    by_number = {c.number: c for c in ranked}
    for c in ranked:
        a = attributes_of(c.number)
        boost = 1.0
        if a.zodiac in strong_z:
            boost += zodiac_boost
        if a.wave in strong_w:
            boost += wave_boost
        if a.tail in strong_t:
            boost += tail_boost
        totals[c.number] = c.total * boost if c.total > 0 else c.total
    return [RankedCandidate(n, float(totals[n]), by_number[n].contributions) for n in _order(totals)]
