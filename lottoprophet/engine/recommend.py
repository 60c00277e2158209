# lottoprophet/engine/recommend.py
"""Recommendation record and the secondary attribute groups derived from a selection."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..utilities.attributes import attributes_of, group_key, group_order
from ..utilities.draws import Draw
from .aggregate import RankedCandidate


@dataclass(frozen=True)
class Recommendation:
    numbers: Tuple[int, ...]
    zodiacs: Tuple[str, ...]
    primary_wave: str
    secondary_wave: str
    heads: Tuple[int, ...]
    tails: Tuple[int, ...]
    rationale: Optional[str] = None
    fallback: bool = False
    target_draw_id: Optional[str] = None
    based_on: Optional[str] = None
    scores: Dict[int, float] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_draw_id": self.target_draw_id,
            "based_on": self.based_on,
            "numbers": [f"{n:02d}" for n in self.numbers],
            "zodiacs": list(self.zodiacs),
            "wave": {"main": self.primary_wave, "defense": self.secondary_wave},
            "heads": [str(h) for h in self.heads],
            "tails": [str(t) for t in self.tails],
            "rationale": self.rationale,
            "fallback": self.fallback,
        }

    def summary(self) -> str:
        title = f"Draw {self.target_draw_id}" if self.target_draw_id else "Next draw"
        lines = [
            f"{title}{' (fallback)' if self.fallback else ''}",
            f"  zodiacs : {' '.join(self.zodiacs)}",
            f"  wave    : main {self.primary_wave} / defense {self.secondary_wave}",
            f"  heads   : {', '.join(str(h) for h in self.heads)}",
            f"  tails   : {', '.join(str(t) for t in self.tails)}",
            f"  numbers : {','.join(f'{n:02d}' for n in self.numbers)}",
        ]
        return "\n".join(lines)

    def check(self, draw: Draw) -> Dict[str, Any]:
        """How a later actual draw landed against this recommendation."""
        picked = set(self.numbers)
        a = attributes_of(draw.special)
        return {
            "draw_id": draw.draw_id,
            "special_hit": draw.special in picked,
            "number_hits": sorted(n for n in draw.numbers if n in picked),
            "zodiac_hit": a.zodiac in self.zodiacs,
            "wave_hit": a.wave in (self.primary_wave, self.secondary_wave),
            "head_hit": a.head in self.heads,
            "tail_hit": a.tail in self.tails,
        }


def _top_groups(kind: str, scored: Mapping[object, float], fill_from: Iterable[int], k: int) -> List:
    pos = {g: i for i, g in enumerate(group_order(kind))}
    out = sorted(scored, key=lambda g: (-scored[g], pos[g]))[:k]
    if len(out) < k:
        # pad from the full ranking, then canonical order
        for n in fill_from:
            g = group_key(kind, n)
            if g not in out:
                out.append(g)
            if len(out) >= k:
                break
        for g in group_order(kind):
            if len(out) >= k:
                break
            if g not in out:
                out.append(g)
    return out


def recommend_attributes(selected: Sequence[int], ranked: Sequence[RankedCandidate],
                         zodiac_count: int = 6, head_count: int = 2, tail_count: int = 5) -> Dict[str, Any]:
    """
    Group scores summed over the selected numbers. Totals are shifted so the
    weakest ranked number counts as zero; groups with equal scores fall back
    to canonical order.
    """
    totals = {c.number: c.total for c in ranked}
    floor = min(totals.values()) if totals else 0.0
    chosen = set(int(n) for n in selected)
    scored: Dict[str, Dict[object, float]] = {"zodiac": {}, "wave": {}, "head": {}, "tail": {}}
    for n in selected:
        w = totals.get(n, floor) - floor
        for kind in scored:
            g = group_key(kind, n)
            scored[kind][g] = scored[kind].get(g, 0.0) + w
    rest = [c.number for c in ranked if c.number not in chosen]

    waves = _top_groups("wave", scored["wave"], rest, 2)
    return {
        "zodiacs": tuple(_top_groups("zodiac", scored["zodiac"], rest, zodiac_count)),
        "primary_wave": waves[0],
        "secondary_wave": waves[1],
        "heads": tuple(_top_groups("head", scored["head"], rest, head_count)),
        "tails": tuple(_top_groups("tail", scored["tail"], rest, tail_count)),
    }
