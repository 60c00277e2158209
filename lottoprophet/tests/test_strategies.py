import math

import pytest

from lottoprophet.strategies import StrategyContext, compute_all, get_strategy, list_strategies
from lottoprophet.strategies.base import Strategy, clean_scores
from lottoprophet.utilities.draws import HistoryView, draws_from_rows

from .conftest import cycling_specials, make_history


def test_registry_is_populated_and_unique():
    names = [s.name for s in list_strategies()]
    assert len(names) >= 20
    assert len(names) == len(set(names))
    assert all(s.category for s in list_strategies())


@pytest.mark.parametrize("strategy", list_strategies(), ids=lambda s: s.name)
def test_scores_stay_inside_the_candidate_set(strategy, history):
    scores = strategy.score(history, StrategyContext())
    assert set(scores) <= set(range(1, 50))
    assert all(math.isfinite(v) and v != 0 for v in scores.values())


@pytest.mark.parametrize("strategy", list_strategies(), ids=lambda s: s.name)
def test_insufficient_history_gives_empty_map(strategy):
    h = make_history(strategy.min_history - 1) if strategy.min_history > 1 else HistoryView([])
    assert strategy.score(h, StrategyContext()) == {}


def test_strategies_are_deterministic(history):
    ctx = StrategyContext()
    assert compute_all(history, ctx) == compute_all(history, ctx)


def test_failing_strategy_contributes_nothing(history):
    def boom(h, ctx):
        raise RuntimeError("boom")

    bad = Strategy(name="boom", fn=boom, category="test")
    out = compute_all(history, StrategyContext(), [bad, get_strategy("frequency")])
    assert out["boom"] == {}
    assert out["frequency"]


def test_clean_scores_filters_keys_and_values():
    raw = {0: 1.0, 1: 2.0, 50: 3.0, "7": 1.5, 8: float("nan"), 9: 0.0, 10: float("inf")}
    assert clean_scores(raw) == {1: 2.0, 7: 1.5}


def test_special_transition_follows_the_cycle():
    draws = cycling_specials(80)
    h = HistoryView(draws)
    last = h.latest.special
    scores = get_strategy("special_transition").score(h, StrategyContext())
    top = max(scores, key=lambda n: (scores[n], -n))
    assert top == last % 49 + 1


def test_long_absence_beats_last_draw_on_omission():
    # 49 never appears in 60 draws; the latest draw contains 1
    rows = [[(j + k) % 48 + 1 for k in range(7)] for j in range(59)] + [[1, 2, 3, 4, 5, 6, 7]]
    h = HistoryView(draws_from_rows(rows))
    assert len(h) == 60
    scores = get_strategy("omission").score(h, StrategyContext())
    assert scores.get(49, 0.0) > scores.get(1, 0.0)


def test_strategy_params_override(history):
    ctx = StrategyContext()
    ctx.config.strategy_params["frequency"] = {"window": 1}
    scores = get_strategy("frequency").score(history, ctx)
    assert set(scores) == set(history.latest.numbers)


def test_neighbors_weights_special_more():
    h = HistoryView(draws_from_rows([[10, 20, 30, 40, 44, 46, 2]]))
    scores = get_strategy("neighbors").score(h, StrategyContext())
    assert scores[1] == 1.5 and scores[3] == 1.5
    assert scores[45] == 2.0     # between 44 and 46
