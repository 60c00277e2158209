# lottoprophet/config.py
"""
Config module used by the engine, the weight store and the CLI.

Exports:
- data_dir() -> Path to the data directory (created on first use)
- load_user_config() -> dict
- save_user_config(cfg: dict) -> None
- EngineConfig: every tunable default of the recommendation engine
- load_engine_config(path=None) -> EngineConfig
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Project root = lottoprophet/.. (one level up from this file)
ROOT = Path(__file__).resolve().parents[1]

DATA_DIR_ENV = "LOTTOPROPHET_DATA_DIR"
CONFIG_ENV = "LOTTOPROPHET_CONFIG"
CONFIG_NAME = "config.json"


def data_dir() -> Path:
    """Data/ directory, overridable via LOTTOPROPHET_DATA_DIR."""
    d = Path(os.environ.get(DATA_DIR_ENV, ROOT / "Data")).resolve()
    d.mkdir(parents=True, exist_ok=True)
    return d


def config_path() -> Path:
    envv = os.environ.get(CONFIG_ENV, "").strip()
    if envv:
        return Path(envv).expanduser().resolve()
    return data_dir() / CONFIG_NAME


def load_user_config(path: Optional[Path] = None) -> dict:
    """
    Load user config JSON.
    If the file is missing or invalid, return an empty dict.
    Never raises for common read/parse issues.
    """
    p = Path(path) if path is not None else config_path()
    try:
        if p.exists():
            text = p.read_text(encoding="utf-8", errors="ignore")
            if text.strip():
                data = json.loads(text)
                if isinstance(data, dict):
                    return data
                logger.warning("Config %s is not a JSON object; ignoring", p)
    except (OSError, ValueError) as e:
        logger.warning("Config load failed from %s: %s", p, e)
    return {}


def save_user_config(cfg: dict, path: Optional[Path] = None) -> None:
    """Save user config atomically (temp file + replace)."""
    p = Path(path) if path is not None else config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(json.dumps(cfg, indent=2, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp, p)


@dataclass
class EngineConfig:
    # generation
    history_window: int = 150          # most recent draws fed to the strategies
    min_history: int = 30              # below this the fallback generator answers
    target_size: int = 18
    per_zodiac_quota: int = 2
    per_wave_quota: int = 7
    zodiac_count: int = 6
    head_count: int = 2
    tail_count: int = 5
    tie_epsilon: float = 1e-9
    resonance_boost: bool = True

    # backtest
    backtest_window: int = 30
    backtest_min_train: int = 50
    top_k_strategy: int = 12
    top_k_composite: int = 18
    backtest_segments: int = 6
    backtest_time_budget: Optional[float] = None   # seconds; None = unbounded
    backtest_log_size: int = 200
    backtest_log_path: Optional[str] = None

    # weight adapter
    improve_threshold: float = 0.20
    degrade_threshold: float = 0.20
    weight_increase: float = 0.15
    weight_decrease: float = 0.10
    cooldown_hours: float = 24.0
    weight_budget: Optional[float] = None          # None = one unit per strategy
    weight_floor: float = 0.01
    accuracy_history_size: int = 12

    # per-strategy overrides: {"omission": {"cap": 60}, ...}
    strategy_params: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not 1 <= int(self.target_size) <= 49:
            raise ConfigError(f"target_size must be within 1..49, got {self.target_size}")
        if self.per_zodiac_quota < 0 or self.per_wave_quota < 0:
            raise ConfigError("quotas must be non-negative")
        if self.zodiac_count > 12 or self.head_count > 3 or self.tail_count > 5:
            raise ConfigError("group counts exceed zodiac=12, heads=3, tails=5")
        if self.history_window < 1 or self.min_history < 1:
            raise ConfigError("history_window and min_history must be positive")
        if self.backtest_window < 1 or self.backtest_min_train < 1:
            raise ConfigError("backtest_window and backtest_min_train must be positive")
        if self.backtest_segments < 2:
            raise ConfigError("backtest_segments must be at least 2")
        if self.weight_budget is not None and self.weight_budget <= 0:
            raise ConfigError("weight_budget must be positive")
        if self.tie_epsilon <= 0:
            raise ConfigError("tie_epsilon must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in data if k not in known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid engine config: {e}") from e


def load_engine_config(path: Optional[Path] = None) -> EngineConfig:
    """Defaults overlaid with the user config file (section "engine" or top level)."""
    raw = load_user_config(path)
    section = raw.get("engine", raw) if isinstance(raw.get("engine", raw), dict) else {}
    return EngineConfig.from_dict(section)
