# lottoprophet/utilities/fallback_predict.py
from __future__ import annotations

import logging
from collections import Counter
from typing import List

from ..config import EngineConfig
from ..engine.aggregate import RankedCandidate
from ..engine.recommend import Recommendation, recommend_attributes
from .attributes import NUMBERS
from .diversity import Quotas, select_diverse
from .draws import HistoryView, next_draw_id

logger = logging.getLogger(__name__)

FALLBACK_FREQUENCY = "fallback:frequency"
FALLBACK_STATIC = "fallback:static"


def _frequency_ranking(history: HistoryView, epsilon: float) -> List[RankedCandidate]:
    counts = Counter(n for d in history for n in d.numbers)
    totals = {n: float(counts.get(n, 0)) - n * epsilon for n in NUMBERS}
    return [RankedCandidate(n, totals[n]) for n in sorted(NUMBERS, key=lambda n: (-totals[n], n))]


def predict_frequency_fallback(history: HistoryView, config: EngineConfig) -> Recommendation:
    """Pure-frequency (or, with no draws at all, ascending) recommendation, flagged as fallback."""
    ranked = _frequency_ranking(history, config.tie_epsilon)
    rationale = FALLBACK_FREQUENCY if len(history) else FALLBACK_STATIC
    logger.info("History has %d draw(s) (< %d); using %s", len(history), config.min_history, rationale)

    sel = select_diverse(ranked, config.target_size, Quotas(config.per_zodiac_quota, config.per_wave_quota))
    attrs = recommend_attributes(sel.numbers, ranked, config.zodiac_count, config.head_count, config.tail_count)
    latest = history.latest
    return Recommendation(
        numbers=sel.sorted_numbers,
        rationale=rationale,
        fallback=True,
        target_draw_id=next_draw_id(latest.draw_id) if latest else None,
        based_on=latest.draw_id if latest else None,
        scores={c.number: c.total for c in ranked},
        **attrs,
    )
