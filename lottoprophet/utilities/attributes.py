# lottoprophet/utilities/attributes.py
"""
Attribute registry: every number 1..49 mapped to its categorical groups.

The tables are static. A number missing from a table, or listed twice, is a
construction defect and raises RegistryError at import time.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..errors import RegistryError

NUMBERS: Tuple[int, ...] = tuple(range(1, 50))

ZODIAC_TABLE: Dict[str, List[int]] = {
    "snake":   [1, 13, 25, 37, 49],
    "horse":   [12, 24, 36, 48],
    "goat":    [11, 23, 35, 47],
    "monkey":  [10, 22, 34, 46],
    "rooster": [9, 21, 33, 45],
    "dog":     [8, 20, 32, 44],
    "pig":     [7, 19, 31, 43],
    "rat":     [6, 18, 30, 42],
    "ox":      [5, 17, 29, 41],
    "tiger":   [4, 16, 28, 40],
    "rabbit":  [3, 15, 27, 39],
    "dragon":  [2, 14, 26, 38],
}

WAVE_TABLE: Dict[str, List[int]] = {
    "red":   [1, 2, 7, 8, 12, 13, 18, 19, 23, 24, 29, 30, 34, 35, 40, 45, 46],
    "blue":  [3, 4, 9, 10, 14, 15, 20, 25, 26, 31, 36, 37, 41, 42, 47, 48],
    "green": [5, 6, 11, 16, 17, 21, 22, 27, 28, 32, 33, 38, 39, 43, 44, 49],
}

ELEMENT_TABLE: Dict[str, List[int]] = {
    "metal": [4, 5, 12, 13, 26, 27, 34, 35, 42, 43],
    "wood":  [8, 9, 16, 17, 24, 25, 38, 39, 46, 47],
    "water": [1, 14, 15, 22, 23, 30, 31, 44, 45],
    "fire":  [2, 3, 10, 11, 18, 19, 32, 33, 40, 41, 48, 49],
    "earth": [6, 7, 20, 21, 28, 29, 36, 37],
}

ZODIAC_ORDER: Tuple[str, ...] = tuple(ZODIAC_TABLE)
WAVE_ORDER: Tuple[str, ...] = tuple(WAVE_TABLE)
ELEMENT_ORDER: Tuple[str, ...] = tuple(ELEMENT_TABLE)

CLUSTER_SIZE = 7
GRID_SIZE = 7


def _is_prime(n: int) -> bool:
    if n < 2:
        return False
    for d in range(2, int(n ** 0.5) + 1):
        if n % d == 0:
            return False
    return True


@dataclass(frozen=True)
class NumberAttributes:
    number: int
    zodiac: str
    wave: str
    element: str
    head: int
    tail: int
    odd: bool
    prime: bool
    cluster: int
    grid: Tuple[int, int]


def _invert(kind: str, table: Dict[str, List[int]]) -> Dict[int, str]:
    out: Dict[int, str] = {}
    for group, nums in table.items():
        for n in nums:
            if n in out:
                raise RegistryError(f"{kind} table lists {n} under both {out[n]!r} and {group!r}")
            if n not in NUMBERS:
                raise RegistryError(f"{kind} table has out-of-range number {n}")
            out[n] = group
    missing = [n for n in NUMBERS if n not in out]
    if missing:
        raise RegistryError(f"{kind} table does not cover {missing}")
    return out


def _build_registry() -> Dict[int, NumberAttributes]:
    zodiac = _invert("zodiac", ZODIAC_TABLE)
    wave = _invert("wave", WAVE_TABLE)
    element = _invert("element", ELEMENT_TABLE)
    reg: Dict[int, NumberAttributes] = {}
    for n in NUMBERS:
        reg[n] = NumberAttributes(
            number=n,
            zodiac=zodiac[n],
            wave=wave[n],
            element=element[n],
            head=n // 10,
            tail=n % 10,
            odd=bool(n % 2),
            prime=_is_prime(n),
            cluster=(n - 1) // CLUSTER_SIZE,
            grid=((n - 1) // GRID_SIZE, (n - 1) % GRID_SIZE),
        )
    return reg


ATTRIBUTES: Dict[int, NumberAttributes] = _build_registry()

PRIMES: Tuple[int, ...] = tuple(n for n in NUMBERS if ATTRIBUTES[n].prime)

_GROUP_FIELDS = ("zodiac", "wave", "element", "head", "tail", "cluster")


def attributes_of(n: int) -> NumberAttributes:
    try:
        return ATTRIBUTES[int(n)]
    except KeyError:
        raise KeyError(f"{n} is not a candidate number (1..49)") from None


def zodiac_of(n: int) -> str:
    return attributes_of(n).zodiac


def wave_of(n: int) -> str:
    return attributes_of(n).wave


def element_of(n: int) -> str:
    return attributes_of(n).element


def group_key(kind: str, n: int):
    if kind not in _GROUP_FIELDS:
        raise KeyError(f"unknown attribute kind {kind!r}")
    return getattr(ATTRIBUTES[n], kind)


def members(kind: str, group) -> List[int]:
    """Numbers belonging to `group` of attribute `kind`, ascending."""
    return [n for n in NUMBERS if group_key(kind, n) == group]


def group_order(kind: str) -> Tuple:
    """Canonical order of the groups of `kind`, used to break score ties."""
    if kind == "zodiac":
        return ZODIAC_ORDER
    if kind == "wave":
        return WAVE_ORDER
    if kind == "element":
        return ELEMENT_ORDER
    return tuple(sorted({group_key(kind, n) for n in NUMBERS}))


def describe_numbers(numbers: Iterable[int]) -> Dict[str, List[str]]:
    """Zodiac, wave and element labels for a draw, in draw order (manual entry helper)."""
    nums = [int(n) for n in numbers]
    return {
        "zodiac": [zodiac_of(n) for n in nums],
        "wave": [wave_of(n) for n in nums],
        "element": [element_of(n) for n in nums],
    }
