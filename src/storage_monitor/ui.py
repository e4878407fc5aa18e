from __future__ import annotations

import csv
import json
import logging
import sys
from typing import List, Optional

from PySide6 import QtCore, QtWidgets

from .config import get_settings
from .models import IoMetrics, IoUsageWindow, WearEstimate, WearEstimateChange
from .monitor import StorageMonitor, StorageReport

CSV_HEADER = [
    "uid",
    "runtime_millis",
    "fg_bytes_read",
    "fg_bytes_written",
    "fg_bytes_read_from_storage",
    "fg_bytes_written_to_storage",
    "fg_fsync_calls",
    "bg_bytes_read",
    "bg_bytes_written",
    "bg_bytes_read_from_storage",
    "bg_bytes_written_to_storage",
    "bg_fsync_calls",
]


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, monitor: StorageMonitor) -> None:
        super().__init__()
        self.monitor = monitor
        self.setWindowTitle("Storage Monitor")
        self.resize(960, 540)

        self.status_label = QtWidgets.QLabel("")
        self.poll_button = QtWidgets.QPushButton("Poll")
        self.poll_button.clicked.connect(self.poll)
        self.export_json_button = QtWidgets.QPushButton("Export JSON")
        self.export_json_button.clicked.connect(self.export_json)
        self.export_csv_button = QtWidgets.QPushButton("Export CSV")
        self.export_csv_button.clicked.connect(self.export_csv)
        self._last_report: Optional[StorageReport] = None

        header = QtWidgets.QHBoxLayout()
        header.addWidget(self.poll_button)
        header.addWidget(self.export_json_button)
        header.addWidget(self.export_csv_button)
        header.addStretch(1)
        header.addWidget(self.status_label)

        self.tree = QtWidgets.QTreeWidget()
        self.tree.setColumnCount(5)
        self.tree.setHeaderLabels(["Item", "Value", "Foreground", "Background", "Notes"])
        self.tree.setAlternatingRowColors(True)

        root = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(root)
        layout.addLayout(header)
        layout.addWidget(self.tree)
        self.setCentralWidget(root)

        self._set_status("Ready")

    def _set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def poll(self) -> None:
        self.tree.clear()
        self._set_status("Polling...")
        try:
            report = self.monitor.poll()
            self.monitor.save()
        except Exception as exc:
            self._set_status(f"Poll failed: {exc}")
            return

        self._last_report = report
        level = report.assessment.level

        health = QtWidgets.QTreeWidgetItem(
            ["Health", level, "", "", "; ".join(report.assessment.reasons) or "No issues"]
        )
        _apply_level_color(health, level)
        self.tree.addTopLevelItem(health)

        wear = report.wear_information
        wear_item = QtWidgets.QTreeWidgetItem(
            [
                "Wear",
                _fmt_estimate(wear.to_estimate()) if wear else "",
                "",
                "",
                f"Pre-EOL {wear.pre_eol_info.name}" if wear else "Not reported",
            ]
        )
        for change in report.wear_changes:
            wear_item.addChild(QtWidgets.QTreeWidgetItem(_change_row(change)))
        self.tree.addTopLevelItem(wear_item)

        window = report.io_window
        if window is not None:
            io_item = QtWidgets.QTreeWidgetItem(
                [
                    "I/O window",
                    f"{window.window_millis / 1000:.0f} s",
                    _fmt_metrics(window.foreground_totals),
                    _fmt_metrics(window.background_totals),
                    f"{len(window)} uids",
                ]
            )
            for entry in window:
                io_item.addChild(
                    QtWidgets.QTreeWidgetItem(
                        [
                            f"uid {entry.uid}",
                            f"{entry.runtime_millis} ms",
                            _fmt_metrics(entry.foreground),
                            _fmt_metrics(entry.background),
                            "counter reset" if entry.has_negative_counters() else "",
                        ]
                    )
                )
            self.tree.addTopLevelItem(io_item)

        self.tree.expandAll()
        self._set_status(f"Polled at uptime {report.uptime_millis} ms")

    def export_json(self) -> None:
        if not self._last_report:
            self._set_status("Nothing to export. Run Poll first.")
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export JSON", "storage_report.json", "JSON Files (*.json)"
        )
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._last_report.to_dict(), f, ensure_ascii=False, indent=2)
            self._set_status(f"Exported: {path}")
        except Exception as exc:
            self._set_status(f"Export failed: {exc}")

    def export_csv(self) -> None:
        if not self._last_report or self._last_report.io_window is None:
            self._set_status("No I/O window to export. Run Poll first.")
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export CSV", "storage_io.csv", "CSV Files (*.csv)"
        )
        if not path:
            return
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(CSV_HEADER)
                writer.writerows(_window_rows(self._last_report.io_window))
            self._set_status(f"Exported: {path}")
        except Exception as exc:
            self._set_status(f"Export failed: {exc}")


def _apply_level_color(item: QtWidgets.QTreeWidgetItem, level: str) -> None:
    if level == "CRITICAL":
        color = QtCore.Qt.GlobalColor.red
    elif level == "WARNING":
        color = QtCore.Qt.GlobalColor.darkYellow
    elif level == "OK":
        color = QtCore.Qt.GlobalColor.darkGreen
    else:
        color = QtCore.Qt.GlobalColor.gray

    for i in range(item.columnCount()):
        item.setForeground(i, color)


def _fmt_bytes(value: int | None) -> str:
    if not value:
        return ""
    size = float(value)
    sign = "-" if size < 0 else ""
    size = abs(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            return f"{sign}{size:.1f} {unit}"
        size /= 1024
    return f"{sign}{size:.1f} PB"


def _fmt_percent(value: int | None) -> str:
    if value is None:
        return "unknown"
    return f"{value}%"


def _fmt_estimate(estimate: WearEstimate) -> str:
    return f"A {_fmt_percent(estimate.a)} / B {_fmt_percent(estimate.b)}"


def _fmt_metrics(metrics: IoMetrics) -> str:
    written = _fmt_bytes(metrics.bytes_written_to_storage) or "0"
    read = _fmt_bytes(metrics.bytes_read_from_storage) or "0"
    return f"R {read} / W {written} / {metrics.fsync_calls} fsync"


def _change_row(change: WearEstimateChange) -> List[str]:
    return [
        change.date_at_change.strftime("%Y-%m-%d %H:%M"),
        f"{_fmt_estimate(change.old_estimate)} -> {_fmt_estimate(change.new_estimate)}",
        "",
        "",
        "acceptable" if change.is_acceptable_degradation else "too fast",
    ]


def _window_rows(window: IoUsageWindow) -> List[List[int]]:
    rows = []
    for entry in window:
        fg = entry.foreground
        bg = entry.background
        rows.append(
            [
                entry.uid,
                entry.runtime_millis,
                fg.bytes_read,
                fg.bytes_written,
                fg.bytes_read_from_storage,
                fg.bytes_written_to_storage,
                fg.fsync_calls,
                bg.bytes_read,
                bg.bytes_written,
                bg.bytes_read_from_storage,
                bg.bytes_written_to_storage,
                bg.fsync_calls,
            ]
        )
    return rows


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    app = QtWidgets.QApplication(sys.argv)
    win = MainWindow(StorageMonitor(settings))
    win.show()
    sys.exit(app.exec())
