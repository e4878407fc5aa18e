"""Storage wear and per-uid I/O monitoring."""

from .errors import IoStatsParseError, ParseError, StorageMonitorError, WearParseError
from .models import (
    UNKNOWN_ESTIMATE,
    HealthAssessment,
    IoCounterRecord,
    IoMetrics,
    IoUsageSnapshot,
    IoUsageWindow,
    PreEolInfo,
    WearEstimate,
    WearEstimateChange,
    WearEstimateRecord,
    WearHistory,
    WearInformation,
    io_delta,
)
from .wear import parse_emmc_wear, parse_ufs_wear, read_emmc_wear, read_ufs_wear
from .procfs import parse_uid_io_stats, read_uid_io_stats
from .platform import get_wear_information
from .rules import evaluate_health

__all__ = [
    "StorageMonitorError",
    "ParseError",
    "WearParseError",
    "IoStatsParseError",
    "UNKNOWN_ESTIMATE",
    "HealthAssessment",
    "IoCounterRecord",
    "IoMetrics",
    "IoUsageSnapshot",
    "IoUsageWindow",
    "PreEolInfo",
    "WearEstimate",
    "WearEstimateChange",
    "WearEstimateRecord",
    "WearHistory",
    "WearInformation",
    "io_delta",
    "parse_emmc_wear",
    "parse_ufs_wear",
    "read_emmc_wear",
    "read_ufs_wear",
    "parse_uid_io_stats",
    "read_uid_io_stats",
    "get_wear_information",
    "evaluate_health",
]
