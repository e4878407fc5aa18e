import json

from storage_monitor import cli


def test_single_poll_prints_json(tmp_path, monkeypatch, capsys):
    lifetime = tmp_path / "life_time"
    eol = tmp_path / "pre_eol_info"
    lifetime.write_text("0x05 0x00")
    eol.write_text("01")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("EMMC_LIFETIME_PATH", str(lifetime))
    monkeypatch.setenv("EMMC_EOL_PATH", str(eol))
    monkeypatch.setenv("UID_IO_STATS_PATH", str(tmp_path / "missing"))
    monkeypatch.setenv("STATE_FILE", str(tmp_path / "state.json"))

    assert cli.main(["--once", "--json"]) == 0

    report = json.loads(capsys.readouterr().out)
    assert report["wear_information"]["lifetime_estimate_a"] == 40
    assert report["wear_information"]["pre_eol_info"] == "NORMAL"
    assert (tmp_path / "state.json").exists()


def test_bad_configuration(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("IO_SAMPLE_WINDOW_MS", "never")
    assert cli.main(["--once"]) == 2
