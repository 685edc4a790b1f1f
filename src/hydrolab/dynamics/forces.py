"""
Force models applied to the rigid body representing a composite.

All force classes follow the Force protocol and act on RigidBody6DOF
instances. Loads are accumulated into the body, which integrates them.

Physical units:
- Forces: Newtons [N]
- Torques: Newton-meters [N·m]
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import numpy as np
from numpy.typing import NDArray

from hydrolab.dynamics.body import RigidBody6DOF
from hydrolab.hydrodynamics.fluid import Fluid, HydrodynamicsSettings

if TYPE_CHECKING:
    from hydrolab.solids.compound import CompositeBody


class Force(Protocol):
    """Protocol for force application to rigid bodies."""
    def apply(self, body: RigidBody6DOF, t: float | None = None) -> None:
        """
        Apply force to a rigid body.

        Parameters
        ----------
        body : RigidBody6DOF
            The body to apply force to
        t : float | None
            Current simulation time [s]. Optional for time-independent forces.
        """
        ...


class Gravity:
    """
    Uniform gravitational force F = m * g at the centre of mass.

    Parameters
    ----------
    g : NDArray[np.float64]
        Gravitational acceleration vector in world frame [m/s²] (3,)

    Examples
    --------
    >>> gravity = Gravity(np.array([0.0, 0.0, -9.81]))
    >>> gravity.apply(body)
    """
    def __init__(self, g: NDArray[np.float64]) -> None:
        self.g = np.asarray(g, dtype=np.float64)
        if self.g.shape != (3,):
            raise ValueError(f"Gravity vector must be (3,), got shape {self.g.shape}")

    def apply(self, body: RigidBody6DOF, t: float | None = None) -> None:
        body.apply_force(body.mass * self.g)


class FluidForces:
    """
    Buoyancy and drag of a composite, applied to its rigid body.

    On every application the composite state is synchronised from the
    body, fluid forces are recomputed and their totals added to the body
    accumulators. The torque is about the CG, which is the body origin.

    Parameters
    ----------
    composite : CompositeBody
        Composite whose fluid forces are evaluated
    fluid : Fluid
        Fluid the composite moves in
    settings : HydrodynamicsSettings | None
        Hydrodynamic switches. Defaults to ``HydrodynamicsSettings()``.

    Examples
    --------
    >>> body = auv.to_rigid_body()
    >>> forces = [Gravity(np.array([0, 0, -9.81])), FluidForces(auv, Ocean())]
    >>> for f in forces:
    ...     f.apply(body)
    """
    def __init__(
        self,
        composite: CompositeBody,
        fluid: Fluid,
        settings: HydrodynamicsSettings | None = None,
    ) -> None:
        self.composite = composite
        self.fluid = fluid
        self.settings = settings if settings is not None else HydrodynamicsSettings()

    def apply(self, body: RigidBody6DOF, t: float | None = None) -> None:
        self.composite.sync_from_body(body)
        acc = self.composite.compute_fluid_forces(self.settings, self.fluid)
        body.apply_force(acc.total_force())
        body.apply_torque(acc.total_torque())
