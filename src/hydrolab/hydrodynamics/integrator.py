"""
Per-part submerged force integration.

The composer only relies on the ``SubmergedForceIntegrator`` contract.
``MeshForceIntegrator`` is the reference implementation: it integrates
hydrostatic pressure and drag face by face over a part's surface mesh,
clipping faces against the free surface when the part crosses it.

Drag model (per face, centre c, outward normal n, area A):
    u = v + ω × (c - cg) - u_fluid(c)
    quadratic (pressure) drag:  F = -½ ρ (u·n)² A n     for u·n > 0
    linear (skin friction) drag: F = -μ A u_t / δ       u_t = u - (u·n) n
Buoyancy (surface crossing only):
    F = -ρ |g| depth(c) A n  on submerged pieces

Torques are about the world CG.
"""
from __future__ import annotations

from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from hydrolab.geometry.mesh import TriangleMesh, clip_below_plane, triangle_geometry
from hydrolab.geometry.transform import Transform
from hydrolab.hydrodynamics.fluid import Fluid, HydrodynamicsSettings
from hydrolab.utils.validation import validate_positive

DragPair = tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]
SurfaceResult = tuple[
    NDArray[np.float64], NDArray[np.float64],
    NDArray[np.float64], NDArray[np.float64],
    NDArray[np.float64], NDArray[np.float64],
]


class SubmergedForceIntegrator(Protocol):
    """Contract of the low-level per-part fluid force integrator."""

    def integrate_fully_submerged(
        self,
        mesh: TriangleMesh,
        fluid: Fluid,
        cg_frame: Transform,
        part_frame: Transform,
        linear_velocity: NDArray[np.float64],
        angular_velocity: NDArray[np.float64],
    ) -> DragPair:
        """Return (F_lin, T_lin, F_quad, T_quad) for a fully submerged mesh."""
        ...

    def integrate_surface_crossing(
        self,
        settings: HydrodynamicsSettings,
        mesh: TriangleMesh,
        fluid: Fluid,
        cg_frame: Transform,
        part_frame: Transform,
        linear_velocity: NDArray[np.float64],
        angular_velocity: NDArray[np.float64],
    ) -> SurfaceResult:
        """Return (F_b, T_b, F_lin, T_lin, F_quad, T_quad) for a mesh cut by the surface."""
        ...


def _sum_force_torque(
    forces: NDArray[np.float64],
    arms: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    if len(forces) == 0:
        return np.zeros(3), np.zeros(3)
    return forces.sum(axis=0), np.cross(arms, forces).sum(axis=0)


class MeshForceIntegrator:
    """
    Face-by-face fluid force integration over triangle meshes.

    Parameters
    ----------
    boundary_layer : float
        Boundary layer thickness δ used by the skin friction term [m].
        Default 1e-3.
    """

    def __init__(self, boundary_layer: float = 1e-3) -> None:
        validate_positive(boundary_layer, "Boundary layer thickness")
        self.boundary_layer = float(boundary_layer)

    def _drag(
        self,
        triangles: NDArray[np.float64],
        fluid: Fluid,
        cg: NDArray[np.float64],
        v: NDArray[np.float64],
        omega: NDArray[np.float64],
    ) -> DragPair:
        centers, normals, areas = triangle_geometry(triangles)
        arms = centers - cg
        u = v + np.cross(omega, arms) - fluid.velocity_at(centers)
        un = np.einsum("ij,ij->i", u, normals)
        u_t = u - un[:, None] * normals

        f_lin = -(fluid.viscosity * areas / self.boundary_layer)[:, None] * u_t
        advancing = un > 0.0
        f_quad = np.zeros_like(f_lin)
        f_quad[advancing] = (
            -0.5 * fluid.density * (un[advancing] ** 2 * areas[advancing])[:, None]
            * normals[advancing]
        )

        F_lin, T_lin = _sum_force_torque(f_lin, arms)
        F_quad, T_quad = _sum_force_torque(f_quad, arms)
        return F_lin, T_lin, F_quad, T_quad

    def integrate_fully_submerged(
        self,
        mesh: TriangleMesh,
        fluid: Fluid,
        cg_frame: Transform,
        part_frame: Transform,
        linear_velocity: NDArray[np.float64],
        angular_velocity: NDArray[np.float64],
    ) -> DragPair:
        triangles = mesh.transformed(part_frame).triangles()
        return self._drag(
            triangles, fluid, cg_frame.translation,
            np.asarray(linear_velocity, dtype=np.float64),
            np.asarray(angular_velocity, dtype=np.float64),
        )

    def submerged_triangles(
        self,
        mesh: TriangleMesh,
        fluid: Fluid,
        part_frame: Transform,
    ) -> NDArray[np.float64]:
        """World-frame triangles of the part of ``mesh`` below the surface (K, 3, 3)."""
        world = mesh.transformed(part_frame)
        depths = fluid.depth(world.vertices)[world.faces]
        triangles = world.triangles()

        full = np.all(depths >= 0.0, axis=1)
        partial = ~full & np.any(depths >= 0.0, axis=1)
        pieces = [triangles[full]]
        for tri, d in zip(triangles[partial], depths[partial]):
            clipped = clip_below_plane(tri, d)
            if clipped:
                pieces.append(np.array(clipped))
        return np.concatenate(pieces, axis=0) if pieces else np.zeros((0, 3, 3))

    def integrate_surface_crossing(
        self,
        settings: HydrodynamicsSettings,
        mesh: TriangleMesh,
        fluid: Fluid,
        cg_frame: Transform,
        part_frame: Transform,
        linear_velocity: NDArray[np.float64],
        angular_velocity: NDArray[np.float64],
    ) -> SurfaceResult:
        zero = np.zeros(3)
        Fb, Tb = zero.copy(), zero.copy()
        F_lin, T_lin, F_quad, T_quad = zero.copy(), zero.copy(), zero.copy(), zero.copy()

        submerged = self.submerged_triangles(mesh, fluid, part_frame)
        if len(submerged) == 0:
            return Fb, Tb, F_lin, T_lin, F_quad, T_quad

        cg = cg_frame.translation
        if settings.realistic_buoyancy:
            centers, normals, areas = triangle_geometry(submerged)
            g = np.linalg.norm(settings.gravity_vector)
            pressure = fluid.density * g * np.maximum(fluid.depth(centers), 0.0)
            f_b = -(pressure * areas)[:, None] * normals
            Fb, Tb = _sum_force_torque(f_b, centers - cg)

        if settings.damping_forces:
            F_lin, T_lin, F_quad, T_quad = self._drag(
                submerged, fluid, cg,
                np.asarray(linear_velocity, dtype=np.float64),
                np.asarray(angular_velocity, dtype=np.float64),
            )
        return Fb, Tb, F_lin, T_lin, F_quad, T_quad

    def __repr__(self) -> str:
        return f"MeshForceIntegrator(boundary_layer={self.boundary_layer})"
