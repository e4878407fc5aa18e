import pytest

from storage_monitor.config import DEFAULT_UID_IO_STATS_PATH, get_settings
from storage_monitor.errors import ConfigError

ENV_VARS = [
    "STORAGE_MONITOR_ENV_FILE",
    "EMMC_LIFETIME_PATH",
    "UFS_HEALTH_PATH",
    "UID_IO_STATS_PATH",
    "ACCEPTABLE_WEAR_PERCENT_PER_HOUR",
    "IO_SAMPLE_WINDOW_MS",
    "IO_SAMPLES_TO_STORE",
    "MAX_EXCESSIVE_IO_SAMPLES",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestGetSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.uid_io_stats_path == DEFAULT_UID_IO_STATS_PATH
        assert settings.acceptable_wear_percent_per_hour == 1.0
        assert settings.io_sample_window_ms == 3600000
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("UID_IO_STATS_PATH", "/tmp/stats")
        monkeypatch.setenv("ACCEPTABLE_WEAR_PERCENT_PER_HOUR", "0.25")
        monkeypatch.setenv("IO_SAMPLES_TO_STORE", "12")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = get_settings()
        assert settings.uid_io_stats_path == "/tmp/stats"
        assert settings.acceptable_wear_percent_per_hour == 0.25
        assert settings.io_samples_to_store == 12
        assert settings.log_level == "DEBUG"

    def test_env_file(self, monkeypatch, tmp_path):
        env_file = tmp_path / "monitor.env"
        env_file.write_text("UFS_HEALTH_PATH=/data/ufs_health\nMAX_EXCESSIVE_IO_SAMPLES=3\n")
        # values loaded from the file land in os.environ; let monkeypatch restore them
        monkeypatch.setenv("UFS_HEALTH_PATH", "")
        monkeypatch.delenv("UFS_HEALTH_PATH")
        monkeypatch.setenv("MAX_EXCESSIVE_IO_SAMPLES", "")
        monkeypatch.delenv("MAX_EXCESSIVE_IO_SAMPLES")
        settings = get_settings(str(env_file))
        assert settings.ufs_health_path == "/data/ufs_health"
        assert settings.max_excessive_io_samples == 3

    def test_real_environment_wins_over_env_file(self, monkeypatch, tmp_path):
        env_file = tmp_path / "monitor.env"
        env_file.write_text("IO_SAMPLE_WINDOW_MS=5\n")
        monkeypatch.setenv("IO_SAMPLE_WINDOW_MS", "7")
        assert get_settings(str(env_file)).io_sample_window_ms == 7

    @pytest.mark.parametrize(
        "name,value",
        [
            ("IO_SAMPLE_WINDOW_MS", "soon"),
            ("IO_SAMPLE_WINDOW_MS", "0"),
            ("IO_SAMPLES_TO_STORE", "-1"),
            ("ACCEPTABLE_WEAR_PERCENT_PER_HOUR", "-2"),
        ],
    )
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigError):
            get_settings()
