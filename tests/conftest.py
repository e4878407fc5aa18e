from datetime import datetime, timezone
from pathlib import Path

import pytest

from storage_monitor.config import Settings
from storage_monitor.models import IoMetrics, IoUsageSnapshot, WearEstimate, WearEstimateRecord


@pytest.fixture
def write_file(tmp_path: Path):
    """Write ``content`` to a file under tmp_path and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="ascii")
        return path

    return _write


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        emmc_lifetime_path=str(tmp_path / "mmc" / "life_time"),
        emmc_eol_path=str(tmp_path / "mmc" / "pre_eol_info"),
        ufs_health_path=str(tmp_path / "ufs" / "health"),
        uid_io_stats_path=str(tmp_path / "uid_io" / "stats"),
        state_file=str(tmp_path / "state" / "monitor.json"),
        io_sample_window_ms=1000,
        io_samples_to_store=5,
        acceptable_bytes_written_per_sample=1000,
        acceptable_fsync_calls_per_sample=10,
        max_excessive_io_samples=2,
    )


def at(millis: int) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def record(old, new, uptime: int, observed_millis: int) -> WearEstimateRecord:
    return WearEstimateRecord(old, new, uptime, at(observed_millis))


def snapshot(uid, runtime, fg, bg) -> IoUsageSnapshot:
    return IoUsageSnapshot(uid, runtime, IoMetrics(*fg), IoMetrics(*bg))


def estimate(a, b) -> WearEstimate:
    return WearEstimate(a, b)
