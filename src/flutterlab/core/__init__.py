from .config import SimulationConfig, load_simulation_config
from .integrator import SemiImplicitEulerIntegrator
from .records import SimulationResult, StepRecord, TerminationReason
from .simulation import SimulationDriver, SimulationStatus

__all__ = [
    "SimulationConfig",
    "load_simulation_config",
    "SemiImplicitEulerIntegrator",
    "SimulationResult",
    "StepRecord",
    "TerminationReason",
    "SimulationDriver",
    "SimulationStatus",
]
