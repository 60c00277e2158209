import itertools

from lottoprophet.config import EngineConfig
from lottoprophet.engine.backtest import run_walk_forward
from lottoprophet.strategies import StrategyContext, get_strategy
from lottoprophet.strategies.base import Strategy

from .conftest import make_history


def _spy():
    seen = []

    def fn(history, ctx):
        seen.append((history.latest.draw_id, max(int(d.draw_id) for d in history), len(history)))
        return {}

    return Strategy(name="spy", fn=fn, category="test"), seen


def _fast():
    return [get_strategy("frequency"), get_strategy("omission")]


def test_training_slices_never_see_the_held_out_draw():
    history = make_history(90)
    spy, seen = _spy()
    cfg = EngineConfig(backtest_window=10, backtest_min_train=50, history_window=60)
    report = run_walk_forward(history, _fast() + [spy], {"frequency": 1.0, "omission": 1.0, "spy": 1.0},
                              StrategyContext(cfg))
    assert report.evaluated == 10
    assert len(seen) == 10
    for result, (latest, newest, size) in zip(report.results, seen):
        held_out = int(result.replayed_draw_id)
        assert newest < held_out
        assert int(latest) == held_out - 1
        assert size == 60


def test_short_training_points_are_skipped_not_missed():
    history = make_history(60)
    cfg = EngineConfig(backtest_window=30, backtest_min_train=50)
    report = run_walk_forward(history, _fast(), {"frequency": 1.0, "omission": 1.0}, StrategyContext(cfg))
    assert report.evaluated == 10
    assert report.skipped == 20
    assert len(report.results) == 10
    assert 0.0 <= report.composite_accuracy <= 1.0


def test_window_longer_than_history():
    history = make_history(20)
    cfg = EngineConfig(backtest_window=30, backtest_min_train=50)
    report = run_walk_forward(history, _fast(), {"frequency": 1.0}, StrategyContext(cfg))
    assert report.evaluated == 0
    assert report.skipped == 30
    assert report.composite_accuracy == 0.0
    assert not report.ok


def test_accuracy_matches_results():
    history = make_history(80)
    cfg = EngineConfig(backtest_window=12, backtest_min_train=50)
    report = run_walk_forward(history, _fast(), {"frequency": 1.0, "omission": 1.0}, StrategyContext(cfg))
    hits = sum(r.special_hit for r in report.results)
    assert report.composite_accuracy == hits / report.evaluated
    for r in report.results:
        assert len(r.predicted_top_k) == 18
        assert r.special_hit == (r.actual_draw[-1] in r.predicted_top_k)
        assert 0 <= r.hit_count <= 7
    assert len(report.accuracy_trail["frequency"]) == 6
    assert len(report.to_frame()) == report.evaluated


def test_time_budget_marks_report_incomplete():
    ticks = itertools.count(0.0, 10.0)
    cfg = EngineConfig(backtest_window=10, backtest_min_train=50, backtest_time_budget=15.0)
    report = run_walk_forward(make_history(80), _fast(), {"frequency": 1.0}, StrategyContext(cfg),
                              clock=lambda: next(ticks))
    assert not report.completed
    assert report.evaluated == 1
