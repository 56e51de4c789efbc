import matplotlib
import numpy as np
import pandas as pd
import pytest

matplotlib.use('Agg')

from flutterlab.api.scenario import Scenario  # noqa: E402
from flutterlab.core.config import SimulationConfig  # noqa: E402
from flutterlab.core.records import EXPORT_COLUMNS, TerminationReason  # noqa: E402
from flutterlab.core.simulation import SimulationDriver  # noqa: E402
from flutterlab.dynamics.body import BodyProperties  # noqa: E402
from flutterlab.dynamics.environment import Environment  # noqa: E402
from flutterlab.utils.validation import ConfigurationError, NumericalInstabilityError  # noqa: E402


def test_fluent_configuration():
    scenario = (
        Scenario("drop")
        .with_sheet("cardstock")
        .with_environment("sea_level", wind_velocity=[0.5, 0.0, 0.0])
        .release(altitude=3.0, pitch=30.0, position_xy=(1.0, -1.0))
        .configure(dt=2e-3, duration=1.5, lift_offset=0.002)
    )
    config = scenario.config()
    assert isinstance(config, SimulationConfig)
    assert config.body.width == 0.148
    np.testing.assert_array_equal(config.environment.wind_velocity, [0.5, 0.0, 0.0])
    np.testing.assert_allclose(config.initial_state.position, [1.0, -1.0, 3.0])
    assert config.initial_state.pitch == pytest.approx(np.pi / 6)
    assert config.n_steps == 750
    assert config.lift_offset == 0.002


def test_explicit_objects():
    body = BodyProperties(width=0.1, height=0.2, thickness=1e-4, mass=0.002)
    env = Environment(air_density=1.0)
    config = Scenario("x").with_sheet(body).with_environment(env).config()
    assert config.body is body
    assert config.environment is env


def test_configure_max_steps_replaces_duration():
    config = Scenario("x").configure(dt=1e-3, max_steps=40).config()
    assert config.duration is None
    assert config.n_steps == 40


def test_run_without_output(tmp_path):
    scenario = Scenario("quick", output_dir=tmp_path).configure(dt=1e-3, max_steps=30)
    result = scenario.run(log_interval=0)
    assert len(result) == 30
    assert result.reason is TerminationReason.STEP_BUDGET
    assert scenario.output_path is None
    assert list(tmp_path.iterdir()) == []


def test_run_with_logging(tmp_path):
    scenario = (
        Scenario("logged", output_dir=tmp_path, auto_timestamp=False)
        .release(altitude=0.3)
        .configure(dt=1e-3, duration=5.0)
        .enable_logging(export_interval=0.05)
    )
    result = scenario.run(log_interval=0)
    assert result.reason is TerminationReason.GROUND_IMPACT

    logs = tmp_path / "logged" / "logs"
    full = pd.read_csv(logs / "simulation.csv")
    assert len(full) == len(result)

    export = pd.read_csv(logs / "export.csv")
    assert list(export.columns) == list(EXPORT_COLUMNS)
    assert export["t"].iloc[-1] == pytest.approx(result.terminal_time)
    assert export["z"].iloc[-1] <= 0.0
    assert len(export) < len(full)


def test_run_with_plots(tmp_path):
    scenario = (
        Scenario("plotted", output_dir=tmp_path, auto_timestamp=False)
        .configure(dt=2e-3, max_steps=100)
        .enable_plotting(show=False)
    )
    scenario.run(log_interval=0)
    plots = tmp_path / "plotted" / "plots"
    assert (plots / "trajectory_3d.png").exists()
    assert (plots / "diagnostics.png").exists()


def test_timestamped_output(tmp_path):
    scenario = Scenario("stamped", output_dir=tmp_path).configure(max_steps=5).enable_logging()
    scenario.run(log_interval=0)
    assert scenario.output_path.parent == tmp_path
    assert scenario.output_path.name.startswith("stamped_")


def test_from_config(tmp_path):
    config = SimulationConfig.from_dict({"sheet": "letter_paper", "max_steps": 12})
    result = Scenario.from_config("cfg", config, output_dir=tmp_path).run(log_interval=0)
    assert len(result) == 12


def test_save_plots_before_run():
    with pytest.raises(RuntimeError):
        Scenario("x").save_plots()


def test_invalid_settings_surface_on_run():
    with pytest.raises(ConfigurationError):
        Scenario("x").with_sheet("papyrus")
    scenario = Scenario("x").configure(dt=-1.0)
    with pytest.raises(ConfigurationError):
        scenario.run(log_interval=0)


@pytest.mark.parametrize("interval", [0.0, -0.05, float("nan")])
def test_export_interval_rejected_before_run(tmp_path, interval):
    scenario = Scenario("x", output_dir=tmp_path)
    with pytest.raises(ConfigurationError, match="Export interval"):
        scenario.enable_logging(export_interval=interval)
    assert list(tmp_path.iterdir()) == []


def test_export_can_be_skipped(tmp_path):
    scenario = (
        Scenario("raw", output_dir=tmp_path, auto_timestamp=False)
        .configure(max_steps=10)
        .enable_logging(export_interval=None)
    )
    scenario.run(log_interval=0)
    logs = tmp_path / "raw" / "logs"
    assert (logs / "simulation.csv").exists()
    assert not (logs / "export.csv").exists()


def test_live_view_closed_when_run_fails(monkeypatch):
    import matplotlib.pyplot as plt

    def unstable(self, log_interval=1.0):
        raise NumericalInstabilityError(4, 0.005, "velocity")

    monkeypatch.setattr(plt, "pause", lambda interval: None)
    monkeypatch.setattr(SimulationDriver, "run", unstable)
    plt.close("all")

    scenario = Scenario("x").configure(max_steps=10).enable_live_view(every=2)
    with pytest.raises(NumericalInstabilityError):
        scenario.run(log_interval=0)
    assert plt.get_fignums() == []


def test_live_view_closed_after_run(monkeypatch):
    import matplotlib.pyplot as plt

    monkeypatch.setattr(plt, "pause", lambda interval: None)
    plt.close("all")

    Scenario("x").configure(max_steps=10).enable_live_view(every=5).run(log_interval=0)
    assert plt.get_fignums() == []
