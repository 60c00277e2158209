import json

import pytest

from lottoprophet.config import EngineConfig, load_engine_config, load_user_config, save_user_config
from lottoprophet.errors import ConfigError


@pytest.mark.parametrize("kwargs", [
    {"target_size": 0},
    {"target_size": 50},
    {"per_wave_quota": -1},
    {"zodiac_count": 13},
    {"head_count": 4},
    {"backtest_segments": 1},
    {"weight_budget": 0},
])
def test_invalid_values_raise(kwargs):
    with pytest.raises(ConfigError):
        EngineConfig(**kwargs)


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)


def test_engine_section_overrides_defaults(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"engine": {"target_size": 12, "bogus": 1}}), encoding="utf-8")
    with caplog.at_level("WARNING"):
        cfg = load_engine_config(path)
    assert cfg.target_size == 12
    assert cfg.history_window == 150
    assert "bogus" in caplog.text


def test_missing_or_broken_file_gives_defaults(tmp_path):
    assert load_user_config(tmp_path / "nope.json") == {}
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    assert load_user_config(broken) == {}
    assert load_engine_config(broken) == EngineConfig()


def test_save_round_trip(tmp_path):
    path = tmp_path / "sub" / "config.json"
    save_user_config({"engine": {"min_history": 40}}, path)
    assert load_engine_config(path).min_history == 40


def test_data_dir_env_override(tmp_path, monkeypatch):
    from lottoprophet.config import config_path, data_dir
    monkeypatch.setenv("LOTTOPROPHET_DATA_DIR", str(tmp_path / "d"))
    monkeypatch.delenv("LOTTOPROPHET_CONFIG", raising=False)
    assert data_dir() == (tmp_path / "d").resolve()
    assert config_path() == (tmp_path / "d" / "config.json").resolve()


@pytest.mark.parametrize("section", [{"target_size": "x"}, {"per_zodiac_quota": "two"}, {"history_window": None}])
def test_wrongly_typed_values_raise_config_error(tmp_path, section):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"engine": section}), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_engine_config(path)
