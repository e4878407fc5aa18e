from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from .errors import ConfigError

T = TypeVar("T")

DEFAULT_EMMC_LIFETIME_PATH = "/sys/bus/mmc/devices/mmc0:0001/life_time"
DEFAULT_EMMC_EOL_PATH = "/sys/bus/mmc/devices/mmc0:0001/pre_eol_info"
DEFAULT_UFS_HEALTH_PATH = "/sys/devices/soc/624000.ufshc/health"
DEFAULT_UID_IO_STATS_PATH = "/proc/uid_io/stats"


@dataclass(frozen=True)
class Settings:
    emmc_lifetime_path: str = DEFAULT_EMMC_LIFETIME_PATH
    emmc_eol_path: str = DEFAULT_EMMC_EOL_PATH
    ufs_health_path: str = DEFAULT_UFS_HEALTH_PATH
    uid_io_stats_path: str = DEFAULT_UID_IO_STATS_PATH
    state_file: str = "storage_monitor_state.json"

    acceptable_wear_percent_per_hour: float = 1.0
    io_sample_window_ms: int = 60 * 60 * 1000
    io_samples_to_store: int = 60
    acceptable_bytes_written_per_sample: int = 32 * 1024 * 1024
    acceptable_fsync_calls_per_sample: int = 150
    max_excessive_io_samples: int = 11

    log_level: str = "INFO"


def _env(name: str, default: T, convert: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return convert(raw.strip())
    except ValueError:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from None


def get_settings(env_file: Optional[str] = None) -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = env_file or os.getenv("STORAGE_MONITOR_ENV_FILE", ".env")
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    defaults = Settings()
    settings = Settings(
        emmc_lifetime_path=_env("EMMC_LIFETIME_PATH", defaults.emmc_lifetime_path, str),
        emmc_eol_path=_env("EMMC_EOL_PATH", defaults.emmc_eol_path, str),
        ufs_health_path=_env("UFS_HEALTH_PATH", defaults.ufs_health_path, str),
        uid_io_stats_path=_env("UID_IO_STATS_PATH", defaults.uid_io_stats_path, str),
        state_file=_env("STATE_FILE", defaults.state_file, str),
        acceptable_wear_percent_per_hour=_env(
            "ACCEPTABLE_WEAR_PERCENT_PER_HOUR", defaults.acceptable_wear_percent_per_hour, float
        ),
        io_sample_window_ms=_env("IO_SAMPLE_WINDOW_MS", defaults.io_sample_window_ms, int),
        io_samples_to_store=_env("IO_SAMPLES_TO_STORE", defaults.io_samples_to_store, int),
        acceptable_bytes_written_per_sample=_env(
            "ACCEPTABLE_BYTES_WRITTEN_PER_SAMPLE", defaults.acceptable_bytes_written_per_sample, int
        ),
        acceptable_fsync_calls_per_sample=_env(
            "ACCEPTABLE_FSYNC_CALLS_PER_SAMPLE", defaults.acceptable_fsync_calls_per_sample, int
        ),
        max_excessive_io_samples=_env(
            "MAX_EXCESSIVE_IO_SAMPLES", defaults.max_excessive_io_samples, int
        ),
        log_level=_env("LOG_LEVEL", defaults.log_level, str).upper(),
    )

    if settings.io_sample_window_ms <= 0:
        raise ConfigError("IO_SAMPLE_WINDOW_MS must be positive")
    if settings.io_samples_to_store <= 0:
        raise ConfigError("IO_SAMPLES_TO_STORE must be positive")
    if settings.acceptable_wear_percent_per_hour < 0:
        raise ConfigError("ACCEPTABLE_WEAR_PERCENT_PER_HOUR must not be negative")
    return settings
