"""
Scenario API: Fluent interface for defining and running sheet drops.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np

from flutterlab.core.config import SimulationConfig
from flutterlab.core.records import DEFAULT_EXPORT_INTERVAL, SimulationResult
from flutterlab.core.simulation import SimulationDriver
from flutterlab.dynamics.body import BodyProperties, RigidBodyState, sheet_from_preset
from flutterlab.dynamics.environment import Environment, environment_from_preset
from flutterlab.dynamics.forces import DEFAULT_LIFT_OFFSET
from flutterlab.logger import CSVLogger
from flutterlab.utils.io import export_records
from flutterlab.utils.orientation import orientation_from_euler
from flutterlab.utils.validation import validate_positive

# Default output directory
DEFAULT_OUTPUT_DIR = Path("output")


class Scenario:
    """
    Builder for a single sheet drop with organised output.

    Output layout (when logging or plotting is enabled)::

        output_dir/
            name_20260109_101530/
                logs/
                    simulation.csv      full-rate stream
                    export.csv          downsampled table
                plots/
                    trajectory_3d.png
                    diagnostics.png

    Examples
    --------
    >>> result = (
    ...     Scenario("a4_flutter")
    ...     .with_sheet("a4_paper")
    ...     .with_environment("sea_level", wind_velocity=[0.5, 0, 0])
    ...     .release(altitude=3.0, pitch=15, roll=5)
    ...     .configure(dt=1e-3, duration=10.0)
    ...     .enable_logging()
    ...     .run()
    ... )
    """

    def __init__(self, name: str, output_dir: str | Path = DEFAULT_OUTPUT_DIR,
                 auto_timestamp: bool = True):
        self.name = name
        self.output_dir = Path(output_dir)
        self.auto_timestamp = auto_timestamp
        self.output_path: Path | None = None

        self.body: BodyProperties = sheet_from_preset("a4_paper")
        self.environment: Environment = environment_from_preset("sea_level")
        self.initial_state = RigidBodyState(np.array([0.0, 0.0, 2.0]))

        # Solver defaults
        self._dt = 1e-3
        self._duration: float | None = 10.0
        self._max_steps: int | None = None
        self._lift_offset = DEFAULT_LIFT_OFFSET

        self._logging = False
        self._export_interval: float | None = DEFAULT_EXPORT_INTERVAL
        self._save_plots = False
        self._show_plots = False
        self._live_every: int | None = None

        self.driver: SimulationDriver | None = None
        self.result: SimulationResult | None = None

    @classmethod
    def from_config(cls, name: str, config: SimulationConfig, **kwargs) -> Scenario:
        """Scenario preloaded with the body, environment and timing of a config."""
        scenario = cls(name, **kwargs)
        scenario.body = config.body
        scenario.environment = config.environment
        scenario.initial_state = config.initial_state.copy()
        scenario._dt = config.dt
        scenario._duration = config.duration
        scenario._max_steps = config.max_steps
        scenario._lift_offset = config.lift_offset
        return scenario

    def with_sheet(self, sheet: str | BodyProperties) -> Scenario:
        """Use a SHEET_PRESETS name or explicit BodyProperties."""
        self.body = sheet_from_preset(sheet) if isinstance(sheet, str) else sheet
        return self

    def with_environment(self, environment: str | Environment = "sea_level", **overrides) -> Scenario:
        """
        Use an ENVIRONMENT_PRESETS name (with optional overrides) or an Environment.
        """
        if isinstance(environment, Environment):
            self.environment = environment
        else:
            self.environment = environment_from_preset(environment, **overrides)
        return self

    def release(
        self,
        altitude: float = 2.0,
        velocity: list[float] | None = None,
        yaw: float = 0.0,
        pitch: float = 0.0,
        roll: float = 0.0,
        angular_velocity: list[float] | None = None,
        position_xy: tuple[float, float] = (0.0, 0.0),
    ) -> Scenario:
        """
        Set the release state. Angles in degrees, angular velocity in rad/s (body frame).
        """
        self.initial_state = RigidBodyState(
            position=[position_xy[0], position_xy[1], altitude],
            velocity=velocity,
            orientation=orientation_from_euler(yaw=yaw, pitch=pitch, roll=roll, degrees=True),
            angular_velocity=angular_velocity,
        )
        return self

    def configure(
        self,
        dt: float = 1e-3,
        duration: float | None = None,
        max_steps: int | None = None,
        lift_offset: float | None = None,
    ) -> Scenario:
        """
        Time step and budget. Give either ``duration`` or ``max_steps``;
        neither keeps the current budget.
        """
        self._dt = float(dt)
        if duration is not None or max_steps is not None:
            self._duration = duration
            self._max_steps = max_steps
        if lift_offset is not None:
            self._lift_offset = float(lift_offset)
        return self

    def config(self) -> SimulationConfig:
        """Validated SimulationConfig for the current settings."""
        return SimulationConfig(
            body=self.body,
            environment=self.environment,
            initial_state=self.initial_state.copy(),
            dt=self._dt,
            duration=self._duration,
            max_steps=self._max_steps,
            lift_offset=self._lift_offset,
        )

    def enable_logging(self, export_interval: float | None = DEFAULT_EXPORT_INTERVAL) -> Scenario:
        """
        Stream every record to logs/simulation.csv and, after the run, write the
        table downsampled to ``export_interval`` seconds to logs/export.csv
        (None skips the export).

        Raises
        ------
        ConfigurationError
            If ``export_interval`` is not positive
        """
        if export_interval is not None:
            validate_positive(export_interval, "Export interval")
        self._logging = True
        self._export_interval = export_interval
        return self

    def enable_plotting(self, show: bool = False) -> Scenario:
        """
        Save trajectory and diagnostics plots at the end of the run.

        Parameters
        ----------
        show : bool
            If True, also display plots interactively.
        """
        self._save_plots = True
        self._show_plots = show
        return self

    def enable_live_view(self, every: int = 20) -> Scenario:
        """Redraw a live 3D view every ``every`` steps while running."""
        self._live_every = int(every)
        return self

    def _prepare_output(self) -> Path:
        if self.auto_timestamp:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            folder_name = f"{self.name}_{timestamp}"
        else:
            folder_name = self.name
        self.output_path = self.output_dir / folder_name
        (self.output_path / "logs").mkdir(parents=True, exist_ok=True)
        (self.output_path / "plots").mkdir(parents=True, exist_ok=True)
        print(f"[Scenario] Output: {self.output_path}")
        return self.output_path

    def run(self, log_interval: float = 1.0) -> SimulationResult:
        """
        Build the driver, run it to termination and write any requested output.

        Returns
        -------
        SimulationResult
        """
        config = self.config()
        if log_interval > 0:
            print(f"Running Scenario: {self.name}")
            print(f"[Scenario] dt={config.dt}s, budget={config.n_steps} steps, "
                  f"z0={config.initial_state.position[2]:.3f}m")

        if self._logging or self._save_plots:
            self._prepare_output()

        logger = None
        if self._logging:
            logger = CSVLogger(self.output_path / "logs" / "simulation.csv")
        self.driver = SimulationDriver.from_config(config, logger=logger)

        live = None
        if self._live_every is not None:
            from flutterlab.visualization.plotting import LivePlotter

            live = LivePlotter(self.body, every=self._live_every)
            self.driver.subscribe(live)

        finished = False
        try:
            self.result = self.driver.run(log_interval=log_interval)
            finished = True
        finally:
            if logger is not None:
                logger.close()
            # Keep the live figure open only for interactive display of a finished run
            if live is not None and not (finished and self._show_plots):
                live.close()

        if self._logging and self._export_interval is not None:
            export_records(
                self.result.records,
                self.output_path / "logs" / "export.csv",
                interval=self._export_interval,
                dt=config.dt,
            )

        if self._save_plots:
            self.save_plots(show=self._show_plots)

        return self.result

    def save_plots(self, show: bool = False) -> None:
        """
        Generate trajectory and diagnostics plots for the last run.

        Raises
        ------
        RuntimeError
            If the scenario has not been run or has no output directory
        """
        if self.result is None:
            raise RuntimeError("Run the scenario before saving plots.")
        if self.output_path is None:
            self._prepare_output()

        import matplotlib.pyplot as plt

        from flutterlab.visualization.plotting import plot_diagnostics, plot_trajectory_3d

        plots_dir = self.output_path / "plots"
        figs = [
            plot_trajectory_3d(self.result, self.body,
                               save_path=str(plots_dir / "trajectory_3d.png"), show=show),
            plot_diagnostics(self.result, save_path=str(plots_dir / "diagnostics.png"), show=show),
        ]
        if not show:
            for fig in figs:
                plt.close(fig)
        print(f"[Scenario] Plots saved to: {plots_dir}")
