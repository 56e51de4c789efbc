"""
FlutterLab - 6-DOF free-fall simulation of thin rectangular sheets.

Core Components
---------------
SimulationDriver : Fixed-step run orchestrator (ground impact / step budget)
AeroForceModel : Flat-plate drag, lift, buoyancy and lift torque
SemiImplicitEulerIntegrator : Symplectic Euler with direct Euler-angle update
rotation_matrix_zyx : ZYX Euler angles to body-to-world rotation
BodyProperties / RigidBodyState / Environment : Run inputs

Collaborators
-------------
CSVLogger : Streaming per-step CSV
Scenario : Fluent builder with organised output
run_sweep : Independent runs across processes

Examples
--------
>>> from flutterlab import Scenario
>>> result = Scenario("drop").with_sheet("a4_paper").release(altitude=3.0, pitch=20).run()
"""

__version__ = "0.1.0"

# Core simulation classes
from flutterlab.core.config import SimulationConfig, load_simulation_config
from flutterlab.core.integrator import SemiImplicitEulerIntegrator
from flutterlab.core.records import (
    EXPORT_COLUMNS,
    SimulationResult,
    StepRecord,
    TerminationReason,
    downsample_records,
)
from flutterlab.core.simulation import SimulationDriver, SimulationStatus

# Physics
from flutterlab.dynamics.body import (
    SHEET_PRESETS,
    BodyProperties,
    RigidBodyState,
    angular_momentum,
    kinetic_energy,
)
from flutterlab.dynamics.environment import ENVIRONMENT_PRESETS, Environment
from flutterlab.dynamics.forces import AeroForceModel, AeroLoads
from flutterlab.dynamics.rotation import rotation_matrix_zyx

# Errors
from flutterlab.utils.validation import ConfigurationError, NumericalInstabilityError

# Logging / export
from flutterlab.logger import CSVLogger
from flutterlab.utils.io import export_records, records_to_dataframe
from flutterlab.api.scenario import Scenario
from flutterlab.api.sweep import run_sweep, summarize

__all__ = [
    # Version
    "__version__",
    # Core
    "SimulationDriver",
    "SimulationStatus",
    "SimulationConfig",
    "load_simulation_config",
    "SemiImplicitEulerIntegrator",
    "SimulationResult",
    "StepRecord",
    "TerminationReason",
    "EXPORT_COLUMNS",
    "downsample_records",
    # Physics
    "BodyProperties",
    "RigidBodyState",
    "Environment",
    "AeroForceModel",
    "AeroLoads",
    "rotation_matrix_zyx",
    "angular_momentum",
    "kinetic_energy",
    "SHEET_PRESETS",
    "ENVIRONMENT_PRESETS",
    # Errors
    "ConfigurationError",
    "NumericalInstabilityError",
    # Logging
    "CSVLogger",
    "export_records",
    "records_to_dataframe",
    # API
    "Scenario",
    "run_sweep",
    "summarize",
]
