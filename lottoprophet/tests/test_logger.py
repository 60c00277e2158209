from lottoprophet.utilities.logger import append_row, ensure_csv


def test_ensure_csv_writes_header_once(tmp_path):
    p = tmp_path / "out" / "log.csv"
    ensure_csv(p, ["a", "b"])
    ensure_csv(p, ["x", "y"])
    assert p.read_text(encoding="utf-8").splitlines() == ["a,b"]


def test_append_row_fills_an_empty_file(tmp_path):
    p = tmp_path / "log.csv"
    p.write_text("", encoding="utf-8")
    append_row(p, {"draw_id": "7", "hit": 1})
    append_row(p, {"draw_id": "8", "hit": 0})
    assert p.read_text(encoding="utf-8").splitlines() == ["draw_id,hit", "7,1", "8,0"]
