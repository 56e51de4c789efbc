"""
Simulation driver for the falling sheet.

Owns the rigid-body state for the duration of a run, advances it with the
aerodynamic model and the fixed-step integrator, records one StepRecord per
step and stops on ground impact or when the step budget is spent.
"""
from __future__ import annotations

import warnings
from collections.abc import Callable
from enum import Enum

import numpy as np

from flutterlab.core.config import SimulationConfig, step_budget
from flutterlab.core.integrator import SemiImplicitEulerIntegrator
from flutterlab.core.records import SimulationResult, StepRecord, TerminationReason
from flutterlab.dynamics.body import (
    BodyProperties,
    RigidBodyState,
    angular_momentum,
    kinetic_energy,
)
from flutterlab.dynamics.environment import Environment
from flutterlab.dynamics.forces import AeroForceModel
from flutterlab.dynamics.rotation import rotation_from_orientation
from flutterlab.logger import CSVLogger
from flutterlab.utils.validation import (
    ConfigurationError,
    NumericalInstabilityError,
    validate_timestep,
)

GROUND_Z = 0.0
EPSILON_GROUND = 1e-9  # Tolerance for touchdown interpolation


class SimulationStatus(Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class SimulationDriver:
    """
    Fixed-step orchestrator for a single sheet drop.

    Parameters
    ----------
    body : BodyProperties
        Sheet geometry and mass
    environment : Environment
        Air properties, gravity and wind
    initial_state : RigidBodyState
        State at t = 0. Copied; the caller's object is never modified.
    dt : float
        Fixed time step [s]
    duration : float | None
        Total simulated time T [s]. Step budget N = floor(T / dt).
    max_steps : int | None
        Step budget N, alternative to ``duration``
    aero_model : AeroForceModel | None
        Force model. Defaults to AeroForceModel() with the default lift offset.
    integrator : SemiImplicitEulerIntegrator | None
        Time integrator. Defaults to SemiImplicitEulerIntegrator().
    logger : CSVLogger | None
        Optional streaming logger; receives every record and is flushed when
        run() returns.

    Attributes
    ----------
    state : RigidBodyState
        Current state, owned by the driver
    t : float
        Current simulation time [s]
    n_steps : int
        Step budget N
    records : list[StepRecord]
        All records produced so far, index == step
    status : SimulationStatus
        RUNNING until ground impact or budget exhaustion, then TERMINATED
    termination : TerminationReason | None
        Why the run stopped, or None while running
    t_touchdown : float | None
        Interpolated time at which z crossed the ground plane

    Notes
    -----
    **Step sequence:**
    1. Rotation matrix from the current Euler angles
    2. Aerodynamic loads and accelerations
    3. Semi-implicit Euler update
    4. Finite-state check
    5. Record (and notify subscribers)
    6. Termination check: z <= 0 stops the run after the record is logged, so
       the impact record is always the last one.

    Examples
    --------
    >>> driver = SimulationDriver(body, Environment(), state, dt=1e-3, duration=5.0)
    >>> result = driver.run()
    >>> result.reason, result.terminal_time
    """

    def __init__(
        self,
        body: BodyProperties,
        environment: Environment,
        initial_state: RigidBodyState,
        dt: float,
        duration: float | None = None,
        max_steps: int | None = None,
        aero_model: AeroForceModel | None = None,
        integrator: SemiImplicitEulerIntegrator | None = None,
        logger: CSVLogger | None = None,
    ) -> None:
        if not isinstance(body, BodyProperties):
            raise ConfigurationError(f"body must be BodyProperties, got {type(body).__name__}")
        if not isinstance(environment, Environment):
            raise ConfigurationError(
                f"environment must be Environment, got {type(environment).__name__}"
            )
        if not isinstance(initial_state, RigidBodyState):
            raise ConfigurationError(
                f"initial_state must be RigidBodyState, got {type(initial_state).__name__}"
            )
        bad = initial_state.first_non_finite()
        if bad is not None:
            raise ConfigurationError(f"Initial state has non-finite {bad}")
        validate_timestep(dt)

        self.body = body
        self.environment = environment
        self.dt = float(dt)
        self.n_steps = step_budget(self.dt, duration, max_steps)
        self.aero_model = aero_model if aero_model is not None else AeroForceModel()
        self.integrator = integrator if integrator is not None else SemiImplicitEulerIntegrator()
        self.logger = logger

        self.initial_state = initial_state.copy()
        self.state = initial_state.copy()
        self.t = 0.0
        self.records: list[StepRecord] = []
        self.status = SimulationStatus.RUNNING
        self.termination: TerminationReason | None = None
        self.t_touchdown: float | None = None
        self._subscribers: list[Callable[[StepRecord], None]] = []

    @classmethod
    def from_config(cls, config: SimulationConfig, **kwargs) -> SimulationDriver:
        """
        Build a driver from a SimulationConfig.

        Extra keyword arguments (e.g. ``logger``) are passed to __init__.
        """
        kwargs.setdefault("aero_model", AeroForceModel(lift_offset=config.lift_offset))
        return cls(
            body=config.body,
            environment=config.environment,
            initial_state=config.initial_state,
            dt=config.dt,
            duration=config.duration,
            max_steps=config.max_steps,
            **kwargs,
        )

    # --- Subscribers ---

    def subscribe(self, callback: Callable[[StepRecord], None]) -> None:
        """
        Register a callable invoked with every new StepRecord.

        A subscriber that raises is detached with a RuntimeWarning; the run
        and the records collected so far are unaffected.
        """
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[StepRecord], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, record: StepRecord) -> None:
        for cb in list(self._subscribers):
            try:
                cb(record)
            except Exception as e:
                self._subscribers.remove(cb)
                warnings.warn(
                    f"Subscriber {cb!r} failed at step {record.step} and was detached: {e}",
                    RuntimeWarning,
                    stacklevel=3,
                )

    # --- Fixed-Step Integration ---

    @property
    def is_running(self) -> bool:
        return self.status is SimulationStatus.RUNNING

    def step(self) -> StepRecord:
        """
        Advance the simulation by one time step.

        Returns
        -------
        StepRecord
            Record of the state at the end of the step

        Raises
        ------
        RuntimeError
            If the driver has already terminated
        NumericalInstabilityError
            If the updated state is not finite
        """
        if self.status is SimulationStatus.TERMINATED:
            raise RuntimeError(
                f"Simulation already terminated ({self.termination.value}) at t={self.t:.6f}s"
            )

        step_index = len(self.records)
        z_pre = float(self.state.position[2])

        # 1-2) Frame conversion and loads
        R = rotation_from_orientation(self.state.orientation)
        loads = self.aero_model.evaluate(self.state, self.body, self.environment, R)

        # 3) Integrate
        self.integrator.step(self.state, loads.acceleration, loads.angular_acceleration, self.dt)
        t_new = (step_index + 1) * self.dt

        # 4) Reject non-finite states before they reach the record
        bad = self.state.first_non_finite()
        if bad is not None:
            raise NumericalInstabilityError(step_index, t_new, bad)
        self.t = t_new

        # 5) Record
        record = StepRecord(
            step=step_index,
            time=self.t,
            position=self.state.position.copy(),
            velocity=self.state.velocity.copy(),
            orientation=self.state.orientation.copy(),
            angular_velocity=self.state.angular_velocity.copy(),
            angular_momentum=angular_momentum(self.state, self.body),
            projected_area=loads.projected_area,
            kinetic_energy=kinetic_energy(self.state, self.body),
            drag_magnitude=loads.drag_magnitude,
            lift_magnitude=loads.lift_magnitude,
            reynolds=loads.reynolds,
        )
        self.records.append(record)
        if self.logger is not None:
            self.logger.log(record)
        self._notify(record)

        # 6) Termination
        z_post = float(self.state.position[2])
        if z_post <= GROUND_Z:
            self.status = SimulationStatus.TERMINATED
            self.termination = TerminationReason.GROUND_IMPACT
            if z_pre > GROUND_Z + EPSILON_GROUND:
                # Linear interpolation for touchdown time
                frac = (z_pre - GROUND_Z) / max(z_pre - z_post, EPSILON_GROUND)
                self.t_touchdown = float(self.t - self.dt + frac * self.dt)
            else:
                # Already at or below ground
                self.t_touchdown = self.t
        elif len(self.records) >= self.n_steps:
            self.status = SimulationStatus.TERMINATED
            self.termination = TerminationReason.STEP_BUDGET

        return record

    def run(self, log_interval: float = 1.0) -> SimulationResult:
        """
        Step until ground impact or step-budget exhaustion.

        Parameters
        ----------
        log_interval : float
            Interval [s] of simulated time between progress lines printed to
            the terminal. Set to <= 0 to disable.

        Returns
        -------
        SimulationResult
        """
        last_log_time = self.t
        if log_interval > 0:
            print(
                f"[Simulation] Starting fixed-step run: up to {self.n_steps} steps, "
                f"dt={self.dt}s, z0={self.state.position[2]:.3f}m"
            )

        try:
            while self.status is SimulationStatus.RUNNING:
                self.step()

                # Terminal Progress Log
                if log_interval > 0 and (self.t - last_log_time) >= log_interval:
                    z = self.state.position[2]
                    vz = self.state.velocity[2]
                    print(f"[Simulation] t={self.t:6.2f}s | z={z:8.3f}m, vz={vz:7.3f}m/s")
                    last_log_time = self.t
        finally:
            # Ensure data is written
            if self.logger is not None:
                self.logger.flush()

        if log_interval > 0:
            print(f"[Simulation] Terminated ({self.termination.value}) at t={self.t:.6f}s")
            if self.t_touchdown is not None:
                print(f"             Touchdown detected at t={self.t_touchdown:.6f}s")

        return self.result()

    def result(self) -> SimulationResult:
        """
        Records and termination metadata of a finished run.

        Raises
        ------
        RuntimeError
            If the run has not terminated yet
        """
        if self.status is not SimulationStatus.TERMINATED:
            raise RuntimeError("Simulation is still running; call run() or keep stepping")
        return SimulationResult(
            records=list(self.records),
            reason=self.termination,
            terminal_time=self.t,
            dt=self.dt,
            touchdown_time=self.t_touchdown,
            metadata={"n_steps_budget": self.n_steps,
                      "lift_offset": self.aero_model.lift_offset},
        )

    def get_energy(self) -> dict[str, float]:
        """
        Compute mechanical energy of the current state (diagnostic).

        Returns
        -------
        dict[str, float]
            Dictionary with keys:
            - 'kinetic': kinetic energy [J]
            - 'potential': gravitational potential energy relative to z = 0 [J]
            - 'total': sum of kinetic and potential [J]
        """
        KE = kinetic_energy(self.state, self.body)
        PE = self.body.mass * self.environment.gravity * float(self.state.position[2] - GROUND_Z)
        return {
            "kinetic": KE,
            "potential": PE,
            "total": KE + PE,
        }

    def positions(self) -> np.ndarray:
        """Positions recorded so far, stacked as (N, 3)."""
        return np.array([r.position for r in self.records]).reshape(-1, 3)
