# lottoprophet/utilities/diversity.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

from .attributes import NUMBERS, attributes_of


@dataclass(frozen=True)
class Quotas:
    per_zodiac: int = 2
    per_wave: int = 7


@dataclass(frozen=True)
class Selection:
    numbers: Tuple[int, ...]          # rank order
    relaxed: Tuple[int, ...] = ()     # picked in the quota-free second phase

    @property
    def sorted_numbers(self) -> Tuple[int, ...]:
        return tuple(sorted(self.numbers))


def _as_number(item) -> int:
    return int(getattr(item, "number", item))


def select_diverse(ranked: Sequence[Union[int, object]], target_size: int = 18,
                   quotas: Quotas = Quotas()) -> Selection:
    """
    Walk the ranking greedily, accepting a number only while its zodiac and
    wave are under quota. If that cannot fill `target_size`, top up from the
    best remaining numbers ignoring quotas. Numbers missing from `ranked`
    are appended in ascending order, so the result always has exactly
    `target_size` distinct members.
    """
    if not 1 <= target_size <= len(NUMBERS):
        raise ValueError(f"target_size must be within 1..49, got {target_size}")
    order: List[int] = []
    seen = set()
    for item in ranked:
        n = _as_number(item)
        if n in NUMBERS and n not in seen:
            order.append(n)
            seen.add(n)
    order += [n for n in NUMBERS if n not in seen]

    chosen: List[int] = []
    z_count: Dict[str, int] = {}
    w_count: Dict[str, int] = {}
    for n in order:
        if len(chosen) >= target_size:
            break
        a = attributes_of(n)
        if z_count.get(a.zodiac, 0) >= quotas.per_zodiac or w_count.get(a.wave, 0) >= quotas.per_wave:
            continue
        chosen.append(n)
        z_count[a.zodiac] = z_count.get(a.zodiac, 0) + 1
        w_count[a.wave] = w_count.get(a.wave, 0) + 1

    relaxed: List[int] = []
    if len(chosen) < target_size:
        taken = set(chosen)
        for n in order:
            if len(chosen) + len(relaxed) >= target_size:
                break
            if n not in taken:
                relaxed.append(n)
    return Selection(numbers=tuple(chosen + relaxed), relaxed=tuple(relaxed))
