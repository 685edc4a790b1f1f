"""
Composite rigid body assembled from several sub-bodies.

A composite owns every attached sub-body. External parts form its wetted
surface and collision geometry; internal parts (batteries, ballast,
electronics housings) only add mass, inertia and optionally buoyancy.

Mass properties are recomputed from scratch whenever a part is attached.
Parts cannot be removed: the assembly is built once.
"""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from hydrolab.dynamics.body import RigidBody6DOF
from hydrolab.dynamics.inertia import CompositeMassProperties, recalculate
from hydrolab.geometry.mesh import TriangleMesh
from hydrolab.geometry.transform import Transform
from hydrolab.hydrodynamics.accumulator import ForceAccumulator
from hydrolab.hydrodynamics.classifier import classify
from hydrolab.hydrodynamics.composer import ForceComposer
from hydrolab.hydrodynamics.correction import DampingCorrection
from hydrolab.hydrodynamics.fluid import Fluid, HydrodynamicsSettings
from hydrolab.hydrodynamics.integrator import SubmergedForceIntegrator
from hydrolab.solids.base import (
    CompoundShape,
    Material,
    Part,
    SubBody,
    claim_ownership,
    release_ownership,
)


class CompositeBody:
    """
    Rigid body built from external and internal parts.

    Parameters
    ----------
    name : str
        Composite identifier
    first_part : SubBody
        First external part (a composite always has a surface)
    placement : Transform | None
        Pose of the first part origin in the composite-origin frame.
        Defaults to identity.
    enable_hydrodynamics : bool
        If False, ``compute_fluid_forces`` always returns zero forces
    integrator : SubmergedForceIntegrator | None
        Per-part fluid force integrator. Defaults to ``MeshForceIntegrator``.
    damping_correction : DampingCorrection | None
        Drag correction for overlapping parts. Defaults to no correction.

    Attributes
    ----------
    cg_frame : Transform
        World pose of the CG principal frame
    linear_velocity : NDArray[np.float64]
        CG velocity in world frame [m/s] (3,)
    angular_velocity : NDArray[np.float64]
        Angular velocity in world frame [rad/s] (3,)
    fluid_forces : ForceAccumulator
        Result of the last ``compute_fluid_forces`` call

    Examples
    --------
    >>> hull = Cylinder("hull", radius=0.1, length=1.5, mass=30.0)
    >>> auv = CompositeBody("auv", hull, Transform.from_euler(pitch=90))
    >>> auv.attach_internal_part(PointMass("battery", 5.0),
    ...                          Transform.from_translation([0.2, 0.0, -0.05]))
    >>> forces = auv.compute_fluid_forces(HydrodynamicsSettings(), Ocean())
    """

    def __init__(
        self,
        name: str,
        first_part: SubBody,
        placement: Transform | None = None,
        *,
        enable_hydrodynamics: bool = True,
        integrator: SubmergedForceIntegrator | None = None,
        damping_correction: DampingCorrection | None = None,
    ) -> None:
        self._name = name
        self._parts: list[Part] = []
        self._collision_part_ids: list[int] = []
        self._props: CompositeMassProperties | None = None
        self._mesh: TriangleMesh | None = None
        self._reference_points: NDArray[np.float64] | None = None

        self.enable_hydrodynamics = enable_hydrodynamics
        self.composer = ForceComposer(integrator, damping_correction)

        self.cg_frame = Transform.identity()
        self.linear_velocity = np.zeros(3)
        self.angular_velocity = np.zeros(3)
        self.fluid_forces = ForceAccumulator()

        self.attach_external_part(first_part, placement)

    # -------------------------------------------------------------------------
    # Assembly
    # -------------------------------------------------------------------------

    def attach_internal_part(self, body: SubBody, placement: Transform | None = None) -> int:
        """
        Attach a part enclosed by the hull (no drag, no collision geometry).

        Returns
        -------
        int
            Index of the new part
        """
        return self._attach(body, placement, external=False)

    def attach_external_part(self, body: SubBody, placement: Transform | None = None) -> int:
        """
        Attach a part exposed to the fluid.

        The part also receives the next collision index.

        Returns
        -------
        int
            Index of the new part
        """
        return self._attach(body, placement, external=True)

    def _attach(self, body: SubBody | None, placement: Transform | None, external: bool) -> int:
        if body is None:
            raise ValueError("Cannot attach a None sub-body")
        if placement is None:
            placement = Transform.identity()
        elif not isinstance(placement, Transform):
            raise ValueError(f"Placement must be a Transform, got {type(placement).__name__}")

        claim_ownership(body, self)
        self._parts.append(Part(body, placement, external))
        try:
            self._recalculate()
        except Exception:
            # Degenerate totals or a faulty sub-body leave the composite unchanged
            self._parts.pop()
            release_ownership(body)
            raise

        index = len(self._parts) - 1
        if external:
            self._collision_part_ids.append(index)
        return index

    def _recalculate(self) -> None:
        origin = self.origin_frame() if self._props is not None else Transform.identity()
        props = recalculate(self._parts)

        external = [
            p.body.physics_mesh.transformed(p.placement)
            for p in self._parts
            if p.external and p.body.physics_mesh is not None
        ]
        mesh = TriangleMesh.merge(external)

        corners = [
            p.body.physics_mesh.transformed(p.placement).corners()
            for p in self._parts
            if p.body.physics_mesh is not None and not p.body.physics_mesh.is_empty
        ]
        reference_points = props.cg_to_origin.apply(np.vstack(corners)) if corners else None

        # Nothing is stored until every derived quantity is available
        self._props = props
        self._mesh = mesh
        self._reference_points = reference_points
        # Keep the composite origin where it was
        self.cg_frame = origin * props.cg_to_origin.inverse()

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def parts(self) -> tuple[Part, ...]:
        return tuple(self._parts)

    def get_material(self, part_index: int) -> Material:
        """Material of a part, or ``Material()`` if the index is out of range."""
        if 0 <= part_index < len(self._parts):
            return self._parts[part_index].body.material
        return Material()

    def get_part_index_for_collision_index(self, collision_index: int) -> int:
        """Part index behind a collision sub-shape, or 0 if out of range."""
        if 0 <= collision_index < len(self._collision_part_ids):
            return self._collision_part_ids[collision_index]
        return 0

    # -------------------------------------------------------------------------
    # Sub-body capabilities (allows nesting)
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def mass_properties(self) -> CompositeMassProperties:
        return self._props

    @property
    def mass(self) -> float:
        return self._props.mass

    @property
    def volume(self) -> float:
        return self._props.volume

    @property
    def is_buoyant(self) -> bool:
        return self._props.volume > 0.0

    @property
    def principal_inertia(self) -> NDArray[np.float64]:
        return self._props.principal_inertia.copy()

    @property
    def cg_to_origin(self) -> Transform:
        return self._props.cg_to_origin

    @property
    def cg_to_buoyancy(self) -> Transform:
        return self._props.cg_to_buoyancy

    @property
    def center_of_buoyancy(self) -> NDArray[np.float64]:
        return self._props.center_of_buoyancy.copy()

    @property
    def physics_mesh(self) -> TriangleMesh | None:
        """Merged external-part mesh in the composite-origin frame."""
        if self._mesh is None or self._mesh.is_empty:
            return None
        return self._mesh

    @property
    def material(self) -> Material:
        return Material()

    def mesh_vertices(self) -> NDArray[np.float64]:
        """Vertices of all external part meshes in the composite-origin frame (N, 3)."""
        mesh = self.physics_mesh
        return np.zeros((0, 3)) if mesh is None else mesh.vertices.copy()

    def build_collision_shape(self) -> CompoundShape:
        """Compound collision shape of the external parts."""
        children = tuple(
            (self._parts[i].placement, self._parts[i].body.build_collision_shape())
            for i in self._collision_part_ids
        )
        return CompoundShape(children=children, part_ids=tuple(self._collision_part_ids))

    # -------------------------------------------------------------------------
    # Kinematic state
    # -------------------------------------------------------------------------

    def origin_frame(self) -> Transform:
        """World pose of the composite-origin frame."""
        return self.cg_frame * self._props.cg_to_origin

    def set_state(
        self,
        cg_frame: Transform,
        linear_velocity: NDArray[np.float64] | None = None,
        angular_velocity: NDArray[np.float64] | None = None,
    ) -> None:
        self.cg_frame = cg_frame
        if linear_velocity is not None:
            self.linear_velocity = np.asarray(linear_velocity, dtype=np.float64).copy()
        if angular_velocity is not None:
            self.angular_velocity = np.asarray(angular_velocity, dtype=np.float64).copy()

    def set_origin_pose(self, origin_pose: Transform) -> None:
        """Place the composite so that its origin frame sits at ``origin_pose``."""
        self.cg_frame = origin_pose * self._props.cg_to_origin.inverse()

    def sync_from_body(self, body: RigidBody6DOF) -> None:
        """Copy pose and velocities from the rigid body representing this composite."""
        self.set_state(body.frame(), body.v, body.w)

    def to_rigid_body(
        self,
        origin_pose: Transform | None = None,
        name: str | None = None,
    ) -> RigidBody6DOF:
        """
        Rigid body with the composite mass, principal inertia and current state.

        If ``origin_pose`` is given the composite is first placed there
        (see ``set_origin_pose``).

        Raises
        ------
        ValueError
            If the principal inertia is not positive definite.
        """
        if origin_pose is not None:
            self.set_origin_pose(origin_pose)
        return RigidBody6DOF(
            name=self._name if name is None else name,
            mass=self.mass,
            inertia_tensor_body=np.diag(self._props.principal_inertia),
            position=self.cg_frame.translation,
            orientation=self.cg_frame.as_quat(),
            linear_velocity=self.linear_velocity,
            angular_velocity=self.angular_velocity,
        )

    # -------------------------------------------------------------------------
    # Fluid forces
    # -------------------------------------------------------------------------

    def compute_fluid_forces(
        self,
        settings: HydrodynamicsSettings,
        fluid: Fluid,
    ) -> ForceAccumulator:
        """
        Compute buoyancy and drag for the current tick.

        Parameters
        ----------
        settings : HydrodynamicsSettings
            Hydrodynamic switches and gravity
        fluid : Fluid
            Fluid the composite moves in

        Returns
        -------
        ForceAccumulator
            Overwritten accumulator, also stored as ``fluid_forces``
        """
        if not self.enable_hydrodynamics:
            self.fluid_forces.clear()
            return self.fluid_forces

        position = classify(fluid, self.cg_frame, self._reference_points)
        self.fluid_forces = self.composer.compute(
            self._parts,
            settings,
            fluid,
            position,
            self.cg_frame,
            self.origin_frame(),
            self.linear_velocity,
            self.angular_velocity,
            self._props.volume,
            self._props.center_of_buoyancy,
            accumulator=self.fluid_forces,
        )
        return self.fluid_forces

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._parts)

    def __repr__(self) -> str:
        return (
            f"CompositeBody(name='{self._name}', parts={len(self._parts)}, "
            f"mass={self.mass:.4g})"
        )

    def summary(self) -> str:
        """Multi-line summary of parts and mass properties."""
        lines = [f"CompositeBody: {self._name}"]
        lines.append(f"  Mass: {self.mass:.6g} kg  Volume: {self.volume:.6g} m³")
        lines.append(f"  Principal inertia: {np.round(self._props.principal_inertia, 6).tolist()}")
        lines.append(f"  Parts ({len(self._parts)}):")
        for i, part in enumerate(self._parts):
            kind = "external" if part.external else "internal"
            lines.append(f"    [{i}] {part.body.name} ({kind}, {part.body.mass:.4g} kg)")
        return "\n".join(lines)
