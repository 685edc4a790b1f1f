"""
Composition of buoyancy and drag for composite bodies.

State machine over the body/fluid classification:

    OUTSIDE  → all forces zero, no integration
    INSIDE   → buoyancy from the composite volume at the CB; drag from
               external parts integrated as fully submerged
    CROSSING → every part recomputed with the surface-aware integrator;
               external parts give buoyancy and drag, internal parts
               buoyancy only

Internal parts are enclosed by external ones, so they never contribute
drag in any state.
"""
from __future__ import annotations

import warnings
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from hydrolab.errors import MissingGeometryWarning
from hydrolab.geometry.mesh import TriangleMesh
from hydrolab.geometry.transform import Transform
from hydrolab.hydrodynamics.accumulator import ForceAccumulator
from hydrolab.hydrodynamics.correction import DampingCorrection, OverlapCorrection
from hydrolab.hydrodynamics.fluid import BodyFluidPosition, Fluid, HydrodynamicsSettings
from hydrolab.hydrodynamics.integrator import MeshForceIntegrator, SubmergedForceIntegrator
from hydrolab.solids.base import Part


def usable_mesh(part: Part) -> TriangleMesh | None:
    """
    Physics mesh of a part, or None with a warning if it has none.

    A missing or empty mesh is a zero contribution, never an error.
    """
    mesh = part.body.physics_mesh
    if mesh is None or mesh.is_empty:
        warnings.warn(
            f"Part '{part.body.name}' has no physics mesh. "
            "Treating its fluid force contribution as zero.",
            MissingGeometryWarning,
            stacklevel=3
        )
        return None
    return mesh


class ForceComposer:
    """
    Orchestrates per-part force integration for one composite.

    Parameters
    ----------
    integrator : SubmergedForceIntegrator | None
        Per-part integrator. Defaults to ``MeshForceIntegrator()``.
    correction : DampingCorrection | None
        Drag correction applied after assembly when damping is enabled.
        Defaults to ``OverlapCorrection()`` (no overlap).
    """

    def __init__(
        self,
        integrator: SubmergedForceIntegrator | None = None,
        correction: DampingCorrection | None = None,
    ) -> None:
        self.integrator = integrator if integrator is not None else MeshForceIntegrator()
        self.correction = correction if correction is not None else OverlapCorrection()

    def compute(
        self,
        parts: Sequence[Part],
        settings: HydrodynamicsSettings,
        fluid: Fluid,
        position: BodyFluidPosition,
        cg_frame: Transform,
        origin_frame: Transform,
        linear_velocity: NDArray[np.float64],
        angular_velocity: NDArray[np.float64],
        volume: float,
        center_of_buoyancy: NDArray[np.float64],
        accumulator: ForceAccumulator | None = None,
    ) -> ForceAccumulator:
        """
        Compute fluid forces on a composite for one simulation tick.

        Parameters
        ----------
        parts : Sequence[Part]
            Parts of the composite
        settings : HydrodynamicsSettings
            Global hydrodynamic switches and gravity
        fluid : Fluid
            Fluid the body moves in
        position : BodyFluidPosition
            Result of the fluid position classification
        cg_frame : Transform
            World pose of the composite CG (principal) frame
        origin_frame : Transform
            World pose of the composite origin frame
        linear_velocity : NDArray[np.float64]
            Velocity of the CG in world frame [m/s] (3,)
        angular_velocity : NDArray[np.float64]
            Angular velocity in world frame [rad/s] (3,)
        volume : float
            Buoyant volume of the composite [m³]
        center_of_buoyancy : NDArray[np.float64]
            Centre of buoyancy in the CG frame [m] (3,)
        accumulator : ForceAccumulator | None
            Accumulator to overwrite. A new one is created if None.

        Returns
        -------
        ForceAccumulator
            The overwritten accumulator
        """
        acc = accumulator if accumulator is not None else ForceAccumulator()
        acc.clear()

        if position is BodyFluidPosition.OUTSIDE:
            return acc

        v = np.asarray(linear_velocity, dtype=np.float64)
        omega = np.asarray(angular_velocity, dtype=np.float64)

        if position is BodyFluidPosition.INSIDE:
            self._compose_submerged(
                acc, parts, settings, fluid, cg_frame, origin_frame,
                v, omega, volume, center_of_buoyancy,
            )
        elif settings.realistic_buoyancy or settings.damping_forces:
            self._compose_crossing(
                acc, parts, settings, fluid, cg_frame, origin_frame, v, omega,
            )

        if settings.damping_forces:
            acc = self.correction(acc)
        return acc

    def _compose_submerged(
        self,
        acc: ForceAccumulator,
        parts: Sequence[Part],
        settings: HydrodynamicsSettings,
        fluid: Fluid,
        cg_frame: Transform,
        origin_frame: Transform,
        v: NDArray[np.float64],
        omega: NDArray[np.float64],
        volume: float,
        center_of_buoyancy: NDArray[np.float64],
    ) -> None:
        if volume > 0.0:
            acc.buoyancy_force[:] = -volume * fluid.density * settings.gravity_vector
            arm = cg_frame.apply(center_of_buoyancy) - cg_frame.translation
            acc.buoyancy_torque[:] = np.cross(arm, acc.buoyancy_force)

        if not settings.damping_forces:
            return

        for part in parts:
            if not part.external:
                continue
            mesh = usable_mesh(part)
            if mesh is None:
                continue
            F_lin, T_lin, F_quad, T_quad = self.integrator.integrate_fully_submerged(
                mesh, fluid, cg_frame, origin_frame * part.placement, v, omega,
            )
            acc.linear_drag_force += F_lin
            acc.linear_drag_torque += T_lin
            acc.quadratic_drag_force += F_quad
            acc.quadratic_drag_torque += T_quad

    def _compose_crossing(
        self,
        acc: ForceAccumulator,
        parts: Sequence[Part],
        settings: HydrodynamicsSettings,
        fluid: Fluid,
        cg_frame: Transform,
        origin_frame: Transform,
        v: NDArray[np.float64],
        omega: NDArray[np.float64],
    ) -> None:
        for part in parts:
            part_settings = settings.with_overrides(
                realistic_buoyancy=settings.realistic_buoyancy and part.body.is_buoyant
            )
            if not part.external:
                if not part_settings.realistic_buoyancy:
                    continue
                part_settings = part_settings.with_overrides(damping_forces=False)

            mesh = usable_mesh(part)
            if mesh is None:
                continue
            Fb, Tb, F_lin, T_lin, F_quad, T_quad = self.integrator.integrate_surface_crossing(
                part_settings, mesh, fluid, cg_frame, origin_frame * part.placement, v, omega,
            )
            acc.buoyancy_force += Fb
            acc.buoyancy_torque += Tb
            if part.external:
                acc.linear_drag_force += F_lin
                acc.linear_drag_torque += T_lin
                acc.quadratic_drag_force += F_quad
                acc.quadratic_drag_torque += T_quad
