# lottoprophet/strategies/structural.py
"""Structural / numeric strategies: mirrors, residues, sequences, primes."""
from __future__ import annotations

from typing import Dict

import numpy as np

from ..utilities.attributes import NUMBERS, PRIMES
from ..utilities.draws import DRAW_SIZE, HistoryView
from .base import StrategyContext, counts_vector, strategy

FIBONACCI = frozenset({1, 2, 3, 5, 8, 13, 21, 34})
POWERS_OF_TWO = frozenset({1, 2, 4, 8, 16, 32})


def wrap(n: int) -> int:
    """Fold any integer onto 1..49."""
    return (int(n) - 1) % 49 + 1


@strategy("symmetry", category="structural", min_history=1, default_weight=0.7)
def symmetry(history: HistoryView, ctx: StrategyContext):
    """Mirror partner 50-n of each number in the latest draw."""
    w_regular = float(ctx.param("symmetry", "regular", 1.0))
    w_special = float(ctx.param("symmetry", "special", 2.0))
    last = history.latest
    out: Dict[int, float] = {}
    for n, w in [(n, w_regular) for n in last.regular] + [(last.special, w_special)]:
        mirror = 50 - n
        if mirror != n:
            out[mirror] = out.get(mirror, 0.0) + w
    return out


@strategy("modular_cohort", category="structural", min_history=10, default_weight=0.7)
def modular_cohort(history: HistoryView, ctx: StrategyContext):
    """Residue classes mod m drawn less than their share get a proportional boost."""
    mod = int(ctx.param("modular_cohort", "modulus", 3))
    window = int(ctx.param("modular_cohort", "window", 20))
    scale = float(ctx.param("modular_cohort", "scale", 5.0))
    counts = counts_vector(history, window)
    total = counts.sum()
    if total <= 0:
        return {}
    out: Dict[int, float] = {}
    for r in range(mod):
        cohort = [n for n in NUMBERS if n % mod == r]
        expected = total * len(cohort) / 49.0
        observed = float(counts[cohort].sum())
        deficit = (expected - observed) / expected
        if deficit > 0:
            for n in cohort:
                out[n] = deficit * scale
    return out


@strategy("arithmetic_projection", category="structural", min_history=2, default_weight=0.6)
def arithmetic_projection(history: HistoryView, ctx: StrategyContext):
    """Continue the step between the two latest specials, one and two steps ahead."""
    specials = history.specials()
    step = specials[0] - specials[1]
    if step == 0:
        return {}
    out: Dict[int, float] = {}
    for k, v in ((1, 3.0), (2, 1.0)):
        n = wrap(specials[0] + k * step)
        out[n] = out.get(n, 0.0) + v
    return out


@strategy("number_sequences", category="structural", min_history=10, default_weight=0.5)
def number_sequences(history: HistoryView, ctx: StrategyContext):
    """Fibonacci and powers-of-two members, scaled by how hot each sequence runs."""
    window = int(ctx.param("number_sequences", "window", 20))
    h = history.window(window)
    counts = counts_vector(h)
    drawn = float(len(h) * DRAW_SIZE)
    out: Dict[int, float] = {}
    for seq in (FIBONACCI, POWERS_OF_TWO):
        expected = len(seq) / 49.0
        observed = float(counts[sorted(seq)].sum()) / drawn
        ratio = observed / expected
        for n in seq:
            out[n] = out.get(n, 0.0) + ratio
    return out


@strategy("prime_balance", category="structural", min_history=5, default_weight=0.6)
def prime_balance(history: HistoryView, ctx: StrategyContext):
    """Push toward the prime/composite side that recent draws under-represent."""
    window = int(ctx.param("prime_balance", "window", 10))
    scale = float(ctx.param("prime_balance", "scale", 10.0))
    counts = counts_vector(history, window)
    total = counts.sum()
    if total <= 0:
        return {}
    share = float(counts[list(PRIMES)].sum()) / total
    dev = share - len(PRIMES) / 49.0
    if dev == 0:
        return {}
    favour_primes = dev < 0
    mask = np.zeros(50, dtype=bool)
    mask[list(PRIMES)] = True
    return {n: abs(dev) * scale for n in NUMBERS if bool(mask[n]) == favour_primes}
