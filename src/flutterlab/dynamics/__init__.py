from .body import BodyProperties, RigidBodyState, angular_momentum, kinetic_energy
from .environment import Environment
from .forces import AeroForceModel, AeroLoads
from .rotation import rotation_matrix_zyx

__all__ = [
    "BodyProperties",
    "RigidBodyState",
    "Environment",
    "AeroForceModel",
    "AeroLoads",
    "rotation_matrix_zyx",
    "angular_momentum",
    "kinetic_energy",
]
