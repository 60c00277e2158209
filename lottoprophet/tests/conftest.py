from __future__ import annotations

from typing import List

import numpy as np
import pytest

from lottoprophet.config import EngineConfig
from lottoprophet.utilities.draws import Draw, HistoryView, draws_from_rows


def random_rows(count: int, seed: int = 7) -> List[List[int]]:
    rng = np.random.default_rng(seed)
    return [[int(x) for x in rng.choice(np.arange(1, 50), size=7, replace=False)] for _ in range(count)]


def make_history(count: int, seed: int = 7, start_id: int = 1) -> HistoryView:
    """`count` synthetic draws with increasing integer ids, most recent first."""
    return HistoryView(draws_from_rows(random_rows(count, seed), start_id=start_id))


def cycling_specials(count: int) -> List[Draw]:
    """Special of draw j (oldest first) is (j mod 49) + 1; regulars are fixed offsets from it."""
    rows = []
    for j in range(count):
        s = j % 49 + 1
        regular = [(s - 1 + 7 * k) % 49 + 1 for k in range(1, 7)]
        rows.append(regular + [s])
    return draws_from_rows(rows)


@pytest.fixture
def history() -> HistoryView:
    return make_history(120)


@pytest.fixture
def short_history() -> HistoryView:
    return make_history(10, seed=3)


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()
