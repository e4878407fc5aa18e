import pytest

pytest.importorskip("PySide6.QtWidgets")

from conftest import at, estimate, snapshot  # noqa: E402
from storage_monitor import ui  # noqa: E402
from storage_monitor.models import IoMetrics, IoUsageWindow, WearEstimateChange  # noqa: E402


def test_fmt_bytes():
    assert ui._fmt_bytes(None) == ""
    assert ui._fmt_bytes(0) == ""
    assert ui._fmt_bytes(512) == "512.0 B"
    assert ui._fmt_bytes(2048) == "2.0 KB"
    assert ui._fmt_bytes(-2048) == "-2.0 KB"


def test_fmt_estimate():
    assert ui._fmt_estimate(estimate(40, None)) == "A 40% / B unknown"


def test_fmt_metrics():
    assert ui._fmt_metrics(IoMetrics(0, 0, 1024, 0, 3)) == "R 1.0 KB / W 0 / 3 fsync"


def test_change_row():
    change = WearEstimateChange(estimate(10, 10), estimate(20, 10), 1000, at(0), False)
    row = ui._change_row(change)
    assert row[0] == "1970-01-01 00:00"
    assert row[-1] == "too fast"


def test_window_rows_match_header():
    window = IoUsageWindow(
        [
            snapshot(20, 2000, (200, 60, 100, 30, 40), (20, 10, 20, 0, 0)),
            snapshot(10, 1000, (10, 20, 30, 40, 50), (60, 70, 80, 90, 100)),
        ],
        5000,
    )
    rows = ui._window_rows(window)
    assert [r[0] for r in rows] == [10, 20]
    assert all(len(r) == len(ui.CSV_HEADER) for r in rows)
    assert rows[0][5] == 40


def test_main_configures_logging(monkeypatch, settings):
    calls = {}

    class FakeApp:
        def __init__(self, argv):
            pass

        def exec(self):
            return 0

    class FakeWindow:
        def __init__(self, monitor):
            calls["monitor"] = monitor

        def show(self):
            pass

    monkeypatch.setattr(ui, "get_settings", lambda: settings)
    monkeypatch.setattr(ui.QtWidgets, "QApplication", FakeApp)
    monkeypatch.setattr(ui, "MainWindow", FakeWindow)
    monkeypatch.setattr(ui.logging, "basicConfig", lambda **kw: calls.setdefault("logging", kw))

    with pytest.raises(SystemExit):
        ui.main()

    assert calls["logging"]["level"] == ui.logging.INFO
    assert calls["monitor"].settings is settings
