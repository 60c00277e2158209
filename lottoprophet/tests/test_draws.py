import numpy as np
import pytest

from lottoprophet.errors import MalformedDrawError
from lottoprophet.utilities.draws import (
    Draw, HistoryView, next_draw_id, parse_open_code, read_draws_csv,
)

from .conftest import make_history


def test_parse_open_code_accepts_fullwidth_commas():
    assert parse_open_code("01,02，03 04,05,06,07") == (1, 2, 3, 4, 5, 6, 7)


def test_parse_open_code_rejects_text():
    with pytest.raises(MalformedDrawError):
        parse_open_code("01,02,xx,04,05,06,07")


def test_draw_parts():
    d = Draw.from_open_code("2025101", "10,20,30,40,41,42,07")
    assert d.regular == (10, 20, 30, 40, 41, 42)
    assert d.special == 7
    assert d.open_code.endswith(",07")


def test_malformed_draws_are_dropped():
    good = Draw("3", (1, 2, 3, 4, 5, 6, 7))
    view = HistoryView([
        good,
        Draw("2", (1, 1, 2, 3, 4, 5, 6)),          # duplicate
        Draw("1", (1, 2, 3, 4, 5, 6, 50)),         # out of range
        {"expect": "0", "open_code": "1,2,3"},     # short
        "garbage",
    ])
    assert len(view) == 1
    assert view.latest is good


def test_records_are_accepted():
    view = HistoryView([{"expect": "2025001", "open_code": "01,02,03,04,05,06,07", "open_time": "2025-01-02"}])
    assert view.latest.draw_id == "2025001"
    assert view.latest.drawn_at.year == 2025


def test_slices_and_older_than():
    h = make_history(20)
    assert h.latest.draw_id == "20"
    older = h.older_than(4)
    assert len(older) == 15
    assert older.latest.draw_id == "15"
    assert len(h.window(5)) == 5
    assert h[2:4].latest.draw_id == "18"


def test_presence_matrix_is_read_only():
    h = make_history(5)
    m = h.presence_matrix()
    assert m.shape == (5, 50)
    assert m.sum() == 35
    assert not m[:, 0].any()
    with pytest.raises(ValueError):
        m[0, 1] = True


@pytest.mark.parametrize("given,expected", [
    ("2025101", "2025102"),
    ("0099", "0100"),
    ("A-009", "A-010"),
    ("abc", "abc+1"),
    (None, None),
])
def test_next_draw_id(given, expected):
    assert next_draw_id(given) == expected


def test_read_draws_csv_orders_most_recent_first(tmp_path):
    p = tmp_path / "draws.csv"
    p.write_text(
        "expect,open_code,open_time\n"
        "2025001,\"01,02,03,04,05,06,07\",2025-01-01\n"
        "2025002,\"08,09,10,11,12,13,14\",2025-01-03\n"
        "2025003,\"bad\",2025-01-05\n",
        encoding="utf-8",
    )
    draws = read_draws_csv(p)
    assert [d.draw_id for d in draws] == ["2025002", "2025001"]


def test_to_frame_columns():
    df = make_history(3).to_frame()
    assert list(df.columns[-2:]) == ["n6", "special"]
    assert len(df) == 3
    assert np.issubdtype(df["special"].dtype, np.integer)


def test_list_numbers_are_accepted():
    d = Draw("1", [3, 14, 15, 26, 35, 41, 9])
    assert d.numbers == (3, 14, 15, 26, 35, 41, 9)
    assert len(HistoryView([d])) == 1


def test_chronological_is_oldest_first():
    h = make_history(4)
    assert [d.draw_id for d in h.chronological()] == ["1", "2", "3", "4"]
    assert [d.draw_id for d in h] == ["4", "3", "2", "1"]
