# lottoprophet/utilities/draws.py
"""
Draw records and the read-only history view the strategies work on.

history[0] is always the most recent draw. The view never mutates the
caller's sequence; malformed entries are dropped (and logged) when the view
is built, so a single bad record cannot abort a generation cycle.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import MalformedDrawError

logger = logging.getLogger(__name__)

DRAW_SIZE = 7          # 6 regular + 1 special
MAX_NUMBER = 49

_SPLIT_RE = re.compile(r"[,，\s]+")
_TRAILING_INT_RE = re.compile(r"^(.*?)(\d+)$")


def parse_open_code(code: str) -> Tuple[int, ...]:
    """'01,02,03,04,05,06,07' -> (1, 2, 3, 4, 5, 6, 7). Full-width commas accepted."""
    if code is None:
        raise MalformedDrawError("empty open code")
    parts = [p for p in _SPLIT_RE.split(str(code).strip()) if p]
    try:
        return tuple(int(p) for p in parts)
    except ValueError:
        raise MalformedDrawError(f"non-numeric entry in open code {code!r}") from None


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


@dataclass(frozen=True)
class Draw:
    draw_id: str
    numbers: Tuple[int, ...]
    drawn_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.numbers, tuple) and isinstance(self.numbers, Sequence) \
                and not isinstance(self.numbers, str):
            object.__setattr__(self, "numbers", tuple(self.numbers))

    @property
    def regular(self) -> Tuple[int, ...]:
        return self.numbers[:DRAW_SIZE - 1]

    @property
    def special(self) -> int:
        return self.numbers[DRAW_SIZE - 1]

    @property
    def open_code(self) -> str:
        return ",".join(f"{n:02d}" for n in self.numbers)

    @classmethod
    def from_open_code(cls, draw_id: Any, open_code: str, drawn_at: Any = None) -> "Draw":
        return cls(draw_id=str(draw_id), numbers=parse_open_code(open_code), drawn_at=_parse_time(drawn_at))

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "Draw":
        """Storage-row shape: expect / open_code / open_time."""
        draw_id = rec.get("expect", rec.get("draw_id", ""))
        when = rec.get("open_time", rec.get("drawn_at"))
        return cls.from_open_code(draw_id, rec.get("open_code", ""), when)


def is_well_formed(draw: Any) -> bool:
    if not isinstance(draw, Draw):
        return False
    nums = draw.numbers
    if not isinstance(nums, tuple) or len(nums) != DRAW_SIZE:
        return False
    for n in nums:
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
            return False
        if not 1 <= int(n) <= MAX_NUMBER:
            return False
    return len(set(nums)) == DRAW_SIZE


def _coerce(item: Any) -> Optional[Draw]:
    if isinstance(item, Draw):
        return item
    if isinstance(item, Mapping):
        try:
            return Draw.from_record(item)
        except MalformedDrawError:
            return None
    return None


class HistoryView:
    """Immutable most-recent-first sequence of well-formed draws."""

    __slots__ = ("_draws", "_presence")

    def __init__(self, draws: Iterable[Any] = ()):
        kept: List[Draw] = []
        dropped = 0
        for item in draws or ():
            d = _coerce(item)
            if d is not None and is_well_formed(d):
                kept.append(d)
            else:
                dropped += 1
        if dropped:
            logger.warning("Ignoring %d malformed draw(s) in history", dropped)
        self._draws: Tuple[Draw, ...] = tuple(kept)
        self._presence: Optional[np.ndarray] = None

    @classmethod
    def _from_clean(cls, draws: Tuple[Draw, ...]) -> "HistoryView":
        view = cls.__new__(cls)
        view._draws = draws
        view._presence = None
        return view

    @classmethod
    def of(cls, history: Union["HistoryView", Iterable[Any]]) -> "HistoryView":
        return history if isinstance(history, HistoryView) else cls(history)

    def __len__(self) -> int:
        return len(self._draws)

    def __iter__(self) -> Iterator[Draw]:
        return iter(self._draws)

    def __getitem__(self, i):
        if isinstance(i, slice):
            return HistoryView._from_clean(self._draws[i])
        return self._draws[i]

    def __bool__(self) -> bool:
        return bool(self._draws)

    def __repr__(self) -> str:
        head = self._draws[0].draw_id if self._draws else None
        return f"HistoryView(len={len(self._draws)}, latest={head!r})"

    @property
    def draws(self) -> Tuple[Draw, ...]:
        return self._draws

    @property
    def latest(self) -> Optional[Draw]:
        return self._draws[0] if self._draws else None

    def specials(self) -> List[int]:
        """Special numbers, most recent first."""
        return [d.special for d in self._draws]

    def chronological(self) -> List[Draw]:
        """Oldest -> newest."""
        return list(reversed(self._draws))

    def older_than(self, i: int) -> "HistoryView":
        """Draws strictly older than history[i], i.e. history[i+1:]."""
        return HistoryView._from_clean(self._draws[i + 1:])

    def window(self, n: int) -> "HistoryView":
        return HistoryView._from_clean(self._draws[:max(0, int(n))])

    def presence_matrix(self) -> np.ndarray:
        """Bool array [len, 50]; row i marks the seven numbers of history[i]."""
        if self._presence is None:
            m = np.zeros((len(self._draws), MAX_NUMBER + 1), dtype=bool)
            for i, d in enumerate(self._draws):
                m[i, list(d.numbers)] = True
            m.setflags(write=False)
            self._presence = m
        return self._presence

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for d in self._draws:
            row = {"draw_id": d.draw_id, "drawn_at": d.drawn_at}
            for k, n in enumerate(d.regular, start=1):
                row[f"n{k}"] = n
            row["special"] = d.special
            rows.append(row)
        cols = ["draw_id", "drawn_at"] + [f"n{k}" for k in range(1, DRAW_SIZE)] + ["special"]
        return pd.DataFrame(rows, columns=cols)


def next_draw_id(draw_id: Optional[str]) -> Optional[str]:
    """'2025101' -> '2025102'; zero padding is kept. Non-numeric ids get '+1'."""
    if draw_id is None or str(draw_id) == "":
        return None
    s = str(draw_id)
    m = _TRAILING_INT_RE.match(s)
    if not m:
        return f"{s}+1"
    prefix, digits = m.groups()
    return f"{prefix}{int(digits) + 1:0{len(digits)}d}"


def read_draws_csv(path: Union[str, Path]) -> List[Draw]:
    """
    Load draws from a CSV file, most recent first.

    Accepts either an `open_code` column or `n1..n7` columns, plus optional
    `expect`/`draw_id` and `open_time`/`drawn_at`. Rows that do not parse are
    skipped. Ordering: by draw time when present, else by numeric id, else
    file order reversed (files are usually written oldest first).
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    cols = {c.lower().strip(): c for c in df.columns}
    id_col = cols.get("expect") or cols.get("draw_id") or cols.get("issue")
    time_col = cols.get("open_time") or cols.get("drawn_at") or cols.get("date")
    num_cols = [cols[f"n{k}"] for k in range(1, DRAW_SIZE + 1) if f"n{k}" in cols]

    draws: List[Draw] = []
    for idx, r in df.iterrows():
        draw_id = r[id_col] if id_col else str(idx)
        try:
            if "open_code" in cols:
                code = r[cols["open_code"]]
            elif len(num_cols) == DRAW_SIZE:
                code = ",".join(r[c] for c in num_cols)
            else:
                raise MalformedDrawError("no open_code or n1..n7 columns")
            draws.append(Draw.from_open_code(draw_id, code, r[time_col] if time_col else None))
        except MalformedDrawError as e:
            logger.warning("Skipping row %s of %s: %s", idx, path, e)

    if time_col and all(d.drawn_at is not None for d in draws):
        draws.sort(key=lambda d: d.drawn_at, reverse=True)
    elif id_col and all(d.draw_id.isdigit() for d in draws):
        draws.sort(key=lambda d: int(d.draw_id), reverse=True)
    else:
        draws.reverse()
    return draws


def draws_from_rows(rows: Sequence[Sequence[int]], start_id: int = 1) -> List[Draw]:
    """Build draws from plain number rows given oldest first; returns most recent first."""
    out = [Draw(draw_id=str(start_id + i), numbers=tuple(int(x) for x in row)) for i, row in enumerate(rows)]
    out.reverse()
    return out
