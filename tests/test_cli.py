import json

import matplotlib
import pandas as pd
import pytest

matplotlib.use('Agg')

from flutterlab.cli import build_parser, main  # noqa: E402


def run_cli(tmp_path, *args):
    return main(["--output-dir", str(tmp_path), "--quiet", *args])


def only_run_dir(tmp_path):
    dirs = list(tmp_path.iterdir())
    assert len(dirs) == 1
    return dirs[0]


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.sheet == "a4_paper"
    assert args.environment == "sea_level"
    assert args.altitude == 2.0
    assert args.wind is None


def test_default_run(tmp_path, capsys):
    code = run_cli(tmp_path, "--altitude", "0.4", "--pitch", "10")
    assert code == 0
    out = capsys.readouterr().out
    assert "Termination: ground_impact" in out

    logs = only_run_dir(tmp_path) / "logs"
    assert (logs / "simulation.csv").exists()
    df = pd.read_csv(logs / "export.csv")
    assert df["z"].iloc[-1] <= 0.0


def test_step_budget_run(tmp_path, capsys):
    code = run_cli(tmp_path, "--duration", "0.05", "--dt", "0.001", "--name", "short")
    assert code == 0
    assert "Termination: step_budget" in capsys.readouterr().out
    assert only_run_dir(tmp_path).name.startswith("short_")


def test_wind_and_environment(tmp_path):
    code = run_cli(tmp_path, "--environment", "breezy", "--wind", "0", "1", "0",
                   "--duration", "0.2")
    assert code == 0


def test_config_file(tmp_path):
    cfg = tmp_path / "drop.json"
    cfg.write_text(json.dumps({"sheet": "cardstock", "initial": {"altitude": 0.2}, "dt": 0.002}))
    out_dir = tmp_path / "out"
    code = main(["--config", str(cfg), "--output-dir", str(out_dir), "--quiet"])
    assert code == 0
    export = pd.read_csv(only_run_dir(out_dir) / "logs" / "export.csv")
    assert export["z"].iloc[-1] <= 0.0


def test_plots(tmp_path):
    code = run_cli(tmp_path, "--duration", "0.1", "--plots")
    assert code == 0
    plots = only_run_dir(tmp_path) / "plots"
    assert (plots / "trajectory_3d.png").exists()
    assert (plots / "diagnostics.png").exists()


def test_invalid_configuration_returns_1(tmp_path, capsys):
    code = run_cli(tmp_path, "--dt", "-0.01")
    assert code == 1
    assert "invalid configuration" in capsys.readouterr().out


def test_missing_config_file_returns_1(tmp_path):
    assert run_cli(tmp_path, "--config", str(tmp_path / "missing.json")) == 1


def test_unknown_preset_rejected_by_parser(tmp_path):
    with pytest.raises(SystemExit):
        run_cli(tmp_path, "--sheet", "papyrus")


@pytest.mark.parametrize("document", [
    {"dt": "fast", "duration": 1.0},
    {"max_steps": "abc"},
    {"dt": None},
])
def test_non_numeric_config_values_return_1(tmp_path, capsys, document):
    cfg = tmp_path / "bad.json"
    cfg.write_text(json.dumps(document))
    code = main(["--config", str(cfg), "--output-dir", str(tmp_path / "out"), "--quiet"])
    assert code == 1
    assert "invalid configuration" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()


@pytest.mark.parametrize("interval", ["0", "-0.1"])
def test_non_positive_export_interval_returns_1(tmp_path, capsys, interval):
    code = run_cli(tmp_path, "--duration", "0.05", "--export-interval", interval)
    assert code == 1
    assert "invalid configuration" in capsys.readouterr().out
    assert list(tmp_path.iterdir()) == []
