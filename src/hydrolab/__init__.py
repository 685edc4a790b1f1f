"""
HydroLab - composite rigid bodies moving through a fluid.

Core Components
---------------
CompositeBody : Rigid body assembled from internal and external parts
Ocean : Liquid with a flat free surface
HydrodynamicsSettings : Switches for buoyancy and drag computation
RigidBody6DOF : 6 degree-of-freedom rigid body

Examples
--------
>>> from hydrolab import CompositeBody, Cylinder, Ocean, HydrodynamicsSettings
>>> auv = CompositeBody("auv", Cylinder("hull", radius=0.1, length=1.5))
>>> forces = auv.compute_fluid_forces(HydrodynamicsSettings(), Ocean())
"""

__version__ = "0.1.0"

# Geometry
from hydrolab.geometry import Transform, TriangleMesh

# Solids
from hydrolab.solids import Box, Cylinder, Material, PointMass, Sphere
from hydrolab.solids.compound import CompositeBody

# Hydrodynamics
from hydrolab.hydrodynamics import (
    HYDRODYNAMICS_PRESETS,
    BodyFluidPosition,
    ForceAccumulator,
    ForceComposer,
    HydrodynamicsSettings,
    MeshForceIntegrator,
    Ocean,
    OverlapCorrection,
    settings_from_preset,
)

# Dynamics
from hydrolab.dynamics import FluidForces, Gravity, RigidBody6DOF

# Errors
from hydrolab.errors import (
    DegenerateBodyError,
    IllConditionedInertiaWarning,
    MissingGeometryWarning,
)

# Logging
from hydrolab.logger import ForceLogger

__all__ = [
    # Version
    "__version__",
    # Geometry
    "Transform",
    "TriangleMesh",
    # Solids
    "Box",
    "Cylinder",
    "Material",
    "PointMass",
    "Sphere",
    "CompositeBody",
    # Hydrodynamics
    "BodyFluidPosition",
    "ForceAccumulator",
    "ForceComposer",
    "HydrodynamicsSettings",
    "HYDRODYNAMICS_PRESETS",
    "MeshForceIntegrator",
    "Ocean",
    "OverlapCorrection",
    "settings_from_preset",
    # Dynamics
    "FluidForces",
    "Gravity",
    "RigidBody6DOF",
    # Errors
    "DegenerateBodyError",
    "IllConditionedInertiaWarning",
    "MissingGeometryWarning",
    # Logging
    "ForceLogger",
]
