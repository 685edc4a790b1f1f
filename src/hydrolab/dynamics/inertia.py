"""
Mass properties of composite bodies.

Combines the mass, volume, centre of gravity, centre of buoyancy and
inertia tensors of the parts of a composite into a single rigid body
description expressed in its principal frame.

Algorithm
---------
1. Compound mass and CG (mass-weighted part CG positions).
2. Compound volume and CB (volume-weighted, buoyant parts only).
3. Part inertia rotated into the composite frame (R D R^T) and moved to
   the compound CG with the parallel-axis theorem, then summed.
4. Principal moments from the closed-form eigenvalues of a symmetric
   3x3 matrix and principal axes from null-space directions.
5. Frame rotated onto the principal axes and CB re-expressed in it.

All physical quantities use SI units.
"""
from __future__ import annotations

import warnings
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from hydrolab.errors import DegenerateBodyError, IllConditionedInertiaWarning
from hydrolab.geometry.transform import Transform
from hydrolab.solids.base import Part

# Off-diagonal terms below this fraction of the trace count as zero
DIAGONAL_TOLERANCE = 1e-12
# Eigenvalues closer than this fraction of the trace are treated as equal.
# A double root comes out of the closed form split by O(sqrt(eps)).
EIGENVALUE_TOLERANCE = 1e-6
# Negative principal moments below -tol * trace are reported, not just clamped
NEGATIVE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class CompositeMassProperties:
    """
    Aggregate mass properties of a composite body.

    Attributes
    ----------
    mass : float
        Total mass [kg]
    volume : float
        Buoyant volume [m³] (buoyant parts only)
    principal_inertia : NDArray[np.float64]
        Principal moments of inertia [kg·m²] (3,)
    cg_to_origin : Transform
        Maps composite-origin coordinates into the CG principal frame
    cg_to_buoyancy : Transform
        Maps coordinates of the buoyancy frame (CG-aligned, origin at the
        centre of buoyancy) into the CG principal frame
    center_of_buoyancy : NDArray[np.float64]
        Centre of buoyancy in the CG principal frame [m] (3,)
    center_of_gravity : NDArray[np.float64]
        Centre of gravity in the composite-origin frame [m] (3,)
    inertia_tensor : NDArray[np.float64]
        Composite inertia about the CG, composite-origin orientation (3, 3)
    """
    mass: float
    volume: float
    principal_inertia: NDArray[np.float64]
    cg_to_origin: Transform
    cg_to_buoyancy: Transform
    center_of_buoyancy: NDArray[np.float64]
    center_of_gravity: NDArray[np.float64]
    inertia_tensor: NDArray[np.float64]


def parallel_axis(mass: float, t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Parallel-axis correction m (|t|² I₃ - t ⊗ t) for an offset t [m]."""
    t = np.asarray(t, dtype=np.float64)
    return mass * (np.dot(t, t) * np.eye(3) - np.outer(t, t))


def part_inertia_about(part: Part, cg_shift: Transform) -> NDArray[np.float64]:
    """
    Inertia tensor of one part about the composite CG.

    Parameters
    ----------
    part : Part
        The part to transform
    cg_shift : Transform
        Maps composite-origin coordinates to CG-centred coordinates
    """
    D = np.diag(np.asarray(part.body.principal_inertia, dtype=np.float64))
    comp_to_part = cg_shift * part.cg_in_origin_frame()
    R = comp_to_part.rotation
    return R @ D @ R.T + parallel_axis(part.body.mass, comp_to_part.translation)


def is_diagonal(I: NDArray[np.float64], tol: float = DIAGONAL_TOLERANCE) -> bool:
    scale = max(float(np.trace(I)), 0.0)
    off = I - np.diag(np.diag(I))
    return bool(np.all(np.abs(off) <= tol * scale))


def principal_moments(I: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Eigenvalues of a symmetric 3x3 matrix, trigonometric closed form.

    Uses the invariants T = tr(I), II = sum of 2x2 principal minors and
    det(I). Returned in the order (A, B, C) of the closed form, no sorting.
    """
    T = I[0, 0] + I[1, 1] + I[2, 2]
    II = (I[0, 0]*I[1, 1] + I[0, 0]*I[2, 2] + I[1, 1]*I[2, 2]
          - I[0, 1]**2 - I[0, 2]**2 - I[1, 2]**2)
    disc = T*T - 3.0*II
    if disc <= (EIGENVALUE_TOLERANCE * T)**2:
        # All three eigenvalues coincide
        return np.full(3, T / 3.0)

    U = np.sqrt(disc) / 3.0
    arg = (-2.0*T**3 + 9.0*T*II - 27.0*np.linalg.det(I)) / (54.0 * U**3)
    # Close to a double root U**3 falls below the rounding of the numerator
    if abs(arg) > 1.0 + 1e-6 and U > EIGENVALUE_TOLERANCE * abs(T):
        warnings.warn(
            f"Inconsistent inertia invariants (acos argument {arg:.6g}). "
            "Clamping to the valid range.",
            IllConditionedInertiaWarning,
            stacklevel=3
        )
    theta = np.arccos(np.clip(arg, -1.0, 1.0))
    A = T/3.0 - 2.0*U*np.cos(theta/3.0)
    B = T/3.0 - 2.0*U*np.cos(theta/3.0 - 2.0*np.pi/3.0)
    C = T/3.0 - 2.0*U*np.cos(theta/3.0 + 2.0*np.pi/3.0)
    return np.array([A, B, C])


def find_inertia_axis(I: NDArray[np.float64], value: float) -> NDArray[np.float64] | None:
    """
    Unit direction spanning the null space of I - value * I₃.

    Taken as the largest cross product of two rows of the shifted matrix.
    Returns None when the matrix has rank below 2 (repeated eigenvalue).
    """
    M = I - value * np.eye(3)
    candidates = [
        np.cross(M[0], M[1]),
        np.cross(M[0], M[2]),
        np.cross(M[1], M[2]),
    ]
    norms = [np.linalg.norm(c) for c in candidates]
    k = int(np.argmax(norms))
    scale = max(float(np.abs(M).max()), 1e-300) ** 2
    if norms[k] <= 1e-10 * scale:
        return None
    return candidates[k] / norms[k]


def _any_perpendicular(v: NDArray[np.float64]) -> NDArray[np.float64]:
    helper = np.eye(3)[int(np.argmin(np.abs(v)))]
    p = np.cross(v, helper)
    return p / np.linalg.norm(p)


def principal_axes(
    I: NDArray[np.float64],
    tol: float = EIGENVALUE_TOLERANCE,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Principal moments and axes of a symmetric inertia tensor.

    Parameters
    ----------
    I : NDArray[np.float64]
        Symmetric 3x3 inertia tensor [kg·m²]
    tol : float
        Relative tolerance under which eigenvalues are considered equal

    Returns
    -------
    moments : NDArray[np.float64]
        Principal moments (3,), closed-form order
    axes : NDArray[np.float64]
        Rotation matrix (3, 3) whose columns are the principal axes,
        orthonormal and right-handed

    Notes
    -----
    Two axes are computed as null-space directions and the third as their
    cross product, which keeps the triple orthogonal. With a repeated root
    only the isolated axis is determined; the degenerate plane is spanned
    by an arbitrary orthonormal pair. Axes are never reordered.
    """
    I = 0.5 * (I + I.T)
    moments = principal_moments(I)
    scale = max(abs(float(np.trace(I))), 1e-300)

    isolated = [
        i for i in range(3)
        if all(abs(moments[i] - moments[j]) > tol * scale for j in range(3) if j != i)
    ]

    axes = [None, None, None]
    if len(isolated) == 3:
        axes[0] = find_inertia_axis(I, moments[0])
        axes[1] = find_inertia_axis(I, moments[1])
        if axes[0] is None or axes[1] is None:
            isolated = []
        else:
            axes[2] = np.cross(axes[0], axes[1])
            n2 = np.linalg.norm(axes[2])
            if n2 < 1e-6:
                isolated = []
            else:
                axes[2] /= n2
                axes[1] = np.cross(axes[2], axes[0])
    if len(isolated) == 1:
        k = isolated[0]
        v = find_inertia_axis(I, moments[k])
        if v is None:
            isolated = []
        else:
            # Keep (a0, a1, a2) right-handed whichever slot is isolated
            i, j = (k + 1) % 3, (k + 2) % 3
            axes[k] = v
            axes[i] = _any_perpendicular(v)
            axes[j] = np.cross(axes[k], axes[i])
    if len(isolated) not in (1, 3):
        return moments, np.eye(3)

    L = np.column_stack(axes)
    return moments, L


def _clamp_moments(moments: NDArray[np.float64], scale: float) -> NDArray[np.float64]:
    if np.any(moments < -NEGATIVE_TOLERANCE * max(scale, 1e-300)):
        warnings.warn(
            f"Composite inertia has negative principal moments {moments}. "
            "Clamping to zero.",
            IllConditionedInertiaWarning,
            stacklevel=3
        )
    return np.maximum(moments, 0.0)


def recalculate(parts: Sequence[Part]) -> CompositeMassProperties:
    """
    Recompute composite mass properties from scratch.

    Parameters
    ----------
    parts : Sequence[Part]
        All parts of the composite

    Returns
    -------
    CompositeMassProperties
        Mass properties in the composite principal frame

    Raises
    ------
    DegenerateBodyError
        If the total mass is not positive.
    """
    # 1. Mass, CG and CB in the composite-origin frame
    mass = 0.0
    volume = 0.0
    cg = np.zeros(3)
    cb = np.zeros(3)
    for part in parts:
        m = float(part.body.mass)
        to_origin = part.cg_in_origin_frame()
        mass += m
        cg += to_origin.translation * m
        if part.body.is_buoyant:
            v = float(part.body.volume)
            volume += v
            cb += to_origin.apply(part.body.center_of_buoyancy) * v

    if not mass > 0.0:
        raise DegenerateBodyError(
            f"Composite total mass must be positive, got {mass} kg "
            f"from {len(parts)} part(s)"
        )
    cg /= mass
    if volume > 0.0:
        cb /= volume

    cg_to_origin = Transform.from_translation(-cg)

    # 2. Composite inertia about the CG
    I = np.zeros((3, 3))
    for part in parts:
        I += part_inertia_about(part, cg_to_origin)
    I = 0.5 * (I + I.T)

    # 3-4. Principal moments and axes
    if is_diagonal(I):
        moments = np.diag(I).copy()
    else:
        moments, L = principal_axes(I)
        cg_to_origin = Transform(L).inverse() * cg_to_origin
    moments = _clamp_moments(moments, float(np.trace(I)))

    # 5. CB in the CG principal frame
    cb_cg = cg_to_origin.apply(cb)

    return CompositeMassProperties(
        mass=mass,
        volume=volume,
        principal_inertia=moments,
        cg_to_origin=cg_to_origin,
        cg_to_buoyancy=Transform.from_translation(cb_cg),
        center_of_buoyancy=cb_cg,
        center_of_gravity=cg,
        inertia_tensor=I,
    )
