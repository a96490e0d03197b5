"""Tests for the windowed statistics column extractor."""

import io
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

from statgraph.series.extractor import extract, extract_file
from statgraph.series.model import TimeWindow

START = datetime(2026, 10, 19, 10, 0, 0)
HEADER = "DateTime,OpenSessionsCurrentCount,Throughput"


def _row(minute: int, *values: str) -> str:
    ts = START + timedelta(minutes=minute)
    return ",".join([ts.strftime("%d/%m/%Y %H:%M:%S"), *values])


def _csv(count: int = 10, newline: str = "\n") -> str:
    rows = [HEADER] + [_row(i, str(i), str(i * 1.5)) for i in range(count)]
    return newline.join(rows) + newline


def _window(first: int, last: int) -> TimeWindow:
    return TimeWindow(START + timedelta(minutes=first), START + timedelta(minutes=last))


def test_window_selects_inclusive_rows_in_order():
    series = extract(io.StringIO(_csv()), _window(2, 6), 1)
    assert len(series) == 5
    assert [p.value for p in series] == [2.0, 3.0, 4.0, 5.0, 6.0]
    assert [p.timestamp for p in series] == [START + timedelta(minutes=m) for m in range(2, 7)]


def test_last_column_without_trailing_separator():
    series = extract(io.StringIO(_csv()), _window(0, 9), 2)
    assert len(series) == 10
    assert series.last.value == 13.5


def test_rows_with_trailing_separator():
    text = HEADER + ",\n" + "".join(_row(i, str(i), "7") + ",\n" for i in range(3))
    series = extract(io.StringIO(text), _window(0, 9), 2)
    assert [p.value for p in series] == [7.0, 7.0, 7.0]


def test_crlf_and_cr_row_terminators():
    for newline in ("\r\n", "\r"):
        series = extract(io.StringIO(_csv(newline=newline)), _window(2, 6), 1)
        assert [p.value for p in series] == [2.0, 3.0, 4.0, 5.0, 6.0]


def test_window_after_last_row_is_empty():
    series = extract(io.StringIO(_csv()), _window(60, 120), 1)
    assert len(series) == 0


def test_window_before_first_row_is_empty_and_stops_early():
    source = io.StringIO(_csv())
    window = TimeWindow(START - timedelta(hours=2), START - timedelta(hours=1))
    series = extract(source, window, 1)
    assert len(series) == 0
    # header and first data row consumed, nothing else
    remaining = source.read()
    assert remaining.startswith(_row(1, "1", "1.5"))


def test_scan_stops_at_first_row_after_window_end():
    source = io.StringIO(_csv())
    extract(source, _window(2, 6), 1)
    assert source.read() == _row(8, "8", "12.0") + "\n" + _row(9, "9", "13.5") + "\n"


def test_rows_after_window_end_are_not_parsed():
    """Garbage following the first late row must never be looked at."""
    text = _csv(5) + _row(30, "1", "1") + "\n" + "\x00garbage,,,\n" * 3
    series = extract(io.StringIO(text), _window(0, 10), 1)
    assert len(series) == 5


def test_corrupt_value_skips_only_that_row():
    rows = [HEADER]
    for i in range(10):
        rows.append(_row(i, "abc" if i == 4 else str(i), "0"))
    series = extract(io.StringIO("\n".join(rows) + "\n"), _window(0, 9), 1)
    assert len(series) == 9
    assert START + timedelta(minutes=4) not in [p.timestamp for p in series]


def test_corrupt_timestamp_row_skipped():
    text = _csv(3) + "not a date,99,99\n" + _row(3, "3", "4.5") + "\n"
    series = extract(io.StringIO(text), _window(0, 9), 1)
    assert [p.value for p in series] == [0.0, 1.0, 2.0, 3.0]


def test_empty_value_is_skipped():
    text = HEADER + "\n" + _row(0, "", "1") + "\n" + _row(1, "5", "1") + "\n"
    series = extract(io.StringIO(text), _window(0, 9), 1)
    assert [p.value for p in series] == [5.0]


def test_unterminated_last_row_is_ignored():
    """A row still being appended (\"4217\" caught as \"42\") yields no point."""
    text = _csv(3) + _row(3, "42")
    assert [p.value for p in extract(io.StringIO(text), _window(0, 9), 1)] == [0.0, 1.0, 2.0]
    assert len(extract(io.StringIO(text), _window(0, 9), 2)) == 3
    text = _csv(3) + _row(3, "42", "7")
    assert [p.value for p in extract(io.StringIO(text), _window(0, 9), 2)] == [0.0, 1.5, 3.0]


def test_non_finite_values_skipped():
    rows = [HEADER] + [_row(i, v, "0") for i, v in enumerate(["1", "NaN", "Infinity", "-inf", "5"])]
    series = extract(io.StringIO("\n".join(rows) + "\n"), _window(0, 9), 1)
    assert [p.value for p in series] == [1.0, 5.0]


def test_timestamp_only_row_after_window_end_stops_scan():
    source = io.StringIO(_csv(3) + _row(30) + "\n" + _row(31, "9", "9") + "\n")
    series = extract(source, _window(0, 10), 1)
    assert len(series) == 3
    assert source.read() == _row(31, "9", "9") + "\n"


def test_column_beyond_row_width_is_empty():
    series = extract(io.StringIO(_csv()), _window(0, 9), 7)
    assert len(series) == 0


def test_timestamp_column_is_not_a_metric():
    assert len(extract(io.StringIO(_csv()), _window(0, 9), 0)) == 0
    assert len(extract(io.StringIO(_csv()), _window(0, 9), -1)) == 0


def test_empty_source():
    assert len(extract(io.StringIO(""), _window(0, 9), 1)) == 0


def test_extract_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "OrdersDS.csv"
        path.write_text(_csv(), encoding="utf-8")
        series = extract_file(path, _window(2, 6), 2)
        assert [p.value for p in series] == [3.0, 4.5, 6.0, 7.5, 9.0]


def test_extract_file_tolerates_undecodable_bytes():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "OrdersDS.csv"
        path.write_bytes(_csv(3).encode("utf-8") + b"\xff\xfe\x00,1\n" + _row(3, "3", "0").encode() + b"\n")
        series = extract_file(path, _window(0, 9), 1)
        assert [p.value for p in series] == [0.0, 1.0, 2.0, 3.0]
