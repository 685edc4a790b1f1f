from .body import RigidBody6DOF
from .forces import FluidForces, Force, Gravity
from .inertia import CompositeMassProperties, recalculate
