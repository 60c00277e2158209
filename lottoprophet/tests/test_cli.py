import json

import pytest

from lottoprophet.cli import main

from .conftest import random_rows


@pytest.fixture
def csv_path(tmp_path, monkeypatch):
    monkeypatch.setenv("LOTTOPROPHET_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("LOTTOPROPHET_CONFIG", raising=False)
    monkeypatch.setattr("lottoprophet.cli.configure_logging", lambda level: None)
    lines = ["expect,open_code"]
    for i, row in enumerate(random_rows(60, seed=11), start=1):
        lines.append(f"2025{i:03d},\"{','.join(f'{n:02d}' for n in row)}\"")
    p = tmp_path / "draws.csv"
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return p


def test_predict_json(csv_path, capsys):
    assert main(["predict", "--csv", str(csv_path), "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["target_draw_id"] == "2025061"
    assert len(out["numbers"]) == 18
    assert out["fallback"] is False


def test_backtest_save_then_show(csv_path, tmp_path, capsys):
    weights = tmp_path / "w.json"
    assert main(["backtest", "--csv", str(csv_path), "--window", "3", "--weights", str(weights), "--save"]) == 0
    assert weights.exists()
    capsys.readouterr()
    assert main(["show-weights", "--weights", str(weights)]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert set(shown["weights"]) >= {"omission", "special_transition"}
