from .fluid import (
    HYDRODYNAMICS_PRESETS,
    BodyFluidPosition,
    Fluid,
    HydrodynamicsSettings,
    Ocean,
    settings_from_preset,
)
from .accumulator import ForceAccumulator
from .classifier import classify
from .correction import DampingCorrection, OverlapCorrection
from .integrator import MeshForceIntegrator, SubmergedForceIntegrator
from .composer import ForceComposer
