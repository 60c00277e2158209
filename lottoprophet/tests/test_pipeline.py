import pytest

from lottoprophet import EngineConfig, RecommendationPipeline, WeightStore, generate, run_backtest
from lottoprophet.strategies import list_strategies
from lottoprophet.utilities.attributes import wave_of
from lottoprophet.utilities.draws import Draw
from lottoprophet.utilities.fallback_predict import FALLBACK_FREQUENCY, FALLBACK_STATIC

from .conftest import make_history


def _check_shape(rec, config):
    assert len(rec.numbers) == config.target_size
    assert list(rec.numbers) == sorted(set(rec.numbers))
    assert all(1 <= n <= 49 for n in rec.numbers)
    assert len(rec.zodiacs) == len(set(rec.zodiacs)) == config.zodiac_count
    assert rec.primary_wave != rec.secondary_wave
    assert len(rec.heads) == config.head_count
    assert len(rec.tails) == config.tail_count


def test_generate_shape(history, config):
    rec = generate(history)
    _check_shape(rec, config)
    assert not rec.fallback
    assert rec.target_draw_id == "121"
    assert rec.based_on == "120"
    assert rec.rationale.startswith("top strategies")


def test_generate_is_deterministic(history):
    pipe = RecommendationPipeline()
    assert pipe.generate(history) == pipe.generate(history)


def test_generate_does_not_touch_weights(history):
    pipe = RecommendationPipeline()
    before = pipe.store.snapshot()
    pipe.generate(history)
    assert pipe.store.snapshot() == before
    assert pipe.store.last_pass is None


def test_generate_accepts_plain_lists_with_bad_rows(history):
    rows = list(history) + [Draw("x", (1, 2, 3)), None]
    rec = generate(rows)
    assert rec == generate(history)


def test_fallback_below_threshold(short_history, config):
    rec = generate(short_history)
    _check_shape(rec, config)
    assert rec.fallback
    assert rec.rationale == FALLBACK_FREQUENCY
    assert rec.target_draw_id == "11"


def test_fallback_on_empty_history(config):
    rec = generate([])
    _check_shape(rec, config)
    assert rec.fallback
    assert rec.rationale == FALLBACK_STATIC
    assert rec.target_draw_id is None


def test_threshold_is_configurable(short_history):
    cfg = EngineConfig(min_history=5)
    assert not generate(short_history, config=cfg).fallback


def test_custom_target_size(history):
    cfg = EngineConfig(target_size=10, per_zodiac_quota=1)
    rec = generate(history, config=cfg)
    assert len(rec.numbers) == 10


def test_recommendation_presentation(history):
    rec = generate(history)
    d = rec.to_dict()
    assert all(len(s) == 2 for s in d["numbers"])
    assert d["wave"] == {"main": rec.primary_wave, "defense": rec.secondary_wave}
    assert "numbers :" in rec.summary()


def test_check_against_a_later_draw(history):
    rec = generate(history)
    picked = rec.numbers[:7]
    report = rec.check(Draw("121", tuple(picked)))
    assert report["special_hit"]
    assert report["number_hits"] == sorted(picked)
    assert report["wave_hit"] == (wave_of(picked[-1]) in (rec.primary_wave, rec.secondary_wave))


def test_run_backtest_summary():
    history = make_history(70)
    cfg = EngineConfig(backtest_window=5, backtest_min_train=50)
    out = run_backtest(history, config=cfg, now=0.0)
    assert set(out) >= {"composite_accuracy", "per_strategy_accuracy", "recommended_weight_changes",
                        "evaluated", "skipped", "completed"}
    assert out["evaluated"] == 5
    assert set(out["per_strategy_accuracy"]) == {s.name for s in list_strategies()}


def test_backtest_dry_run_leaves_store_alone():
    history = make_history(70)
    cfg = EngineConfig(backtest_window=3, backtest_min_train=50)
    pipe = RecommendationPipeline(config=cfg)
    before = pipe.store.snapshot()
    out = pipe.run_backtest(history, commit=False)
    assert out["adjustment"] == "dry-run"
    assert pipe.store.snapshot() == before
    assert len(pipe.recent_results) == 3
    assert pipe.recent_results[-1].replayed_draw_id == "70"


def test_backtest_log(tmp_path):
    log = tmp_path / "trail.csv"
    cfg = EngineConfig(backtest_window=2, backtest_min_train=50, backtest_log_path=str(log))
    RecommendationPipeline(config=cfg).run_backtest(make_history(60), commit=False)
    lines = log.read_text(encoding="utf-8").strip().splitlines()
    assert lines[0].startswith("draw_id,")
    assert len(lines) == 3


def test_shared_store(history):
    store = WeightStore.for_strategies(list_strategies())
    store.commit({"frequency": 50.0})
    a = generate(history, store=store)
    b = generate(history)
    assert a.numbers != b.numbers or a.scores != b.scores


def test_draws_with_list_numbers_are_used(history):
    as_lists = [Draw(d.draw_id, list(d.numbers)) for d in history]
    rec = generate(as_lists)
    assert not rec.fallback
    assert rec == generate(history)
