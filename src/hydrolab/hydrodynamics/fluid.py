"""
Fluid descriptors and hydrodynamic settings.

The fluid is consumed read-only: density, viscosity, current and a
free-surface plane test. Settings are passed explicitly on every force
computation; nothing here reads global simulation state.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from hydrolab.utils.validation import validate_non_negative, validate_positive, validate_vector3

SURFACE_TOLERANCE = 1e-9  # Points closer than this to the surface [m] are on it
STANDARD_GRAVITY = (0.0, 0.0, -9.81)


class BodyFluidPosition(Enum):
    """
    Position of a body relative to the fluid.

    OUTSIDE → no fluid forces
    INSIDE → fully submerged
    CROSSING → straddling the free surface
    """

    OUTSIDE = auto()
    INSIDE = auto()
    CROSSING = auto()


class Fluid(Protocol):
    """Read-only fluid collaborator."""

    @property
    def density(self) -> float: ...

    @property
    def viscosity(self) -> float: ...

    def classify_position(self, point: NDArray[np.float64]) -> BodyFluidPosition: ...

    def surface_plane(self) -> tuple[NDArray[np.float64], float]: ...

    def depth(self, points: NDArray[np.float64]) -> NDArray[np.float64]: ...

    def velocity_at(self, points: NDArray[np.float64]) -> NDArray[np.float64]: ...


class Ocean:
    """
    Liquid with a flat free surface and a uniform current.

    The surface is the plane ``n · p = offset`` with unit normal ``n``
    pointing out of the liquid (opposite to gravity). Depth is measured
    along ``-n``, positive below the surface.

    Parameters
    ----------
    density : float
        Liquid density [kg/m³]. Fresh water 1000, sea water ≈ 1025.
    viscosity : float
        Dynamic viscosity [Pa·s]. Water ≈ 1e-3.
    surface_normal : NDArray[np.float64]
        Upward surface normal (3,). Normalized on construction.
    surface_offset : float
        Plane offset along the normal [m]
    current : NDArray[np.float64]
        Uniform current velocity in world frame [m/s] (3,)

    Examples
    --------
    >>> sea = Ocean(density=1025.0)
    >>> sea.classify_position(np.array([0.0, 0.0, -2.0]))
    <BodyFluidPosition.INSIDE: 2>
    """

    def __init__(
        self,
        density: float = 1000.0,
        viscosity: float = 1.0e-3,
        surface_normal: NDArray[np.float64] = (0.0, 0.0, 1.0),
        surface_offset: float = 0.0,
        current: NDArray[np.float64] = (0.0, 0.0, 0.0),
    ) -> None:
        validate_positive(density, "Fluid density")
        validate_non_negative(viscosity, "Fluid viscosity")
        n = np.asarray(surface_normal, dtype=np.float64)
        validate_vector3(n, "Surface normal")
        norm = np.linalg.norm(n)
        if norm == 0.0:
            raise ValueError("Surface normal must be non-zero")
        c = np.asarray(current, dtype=np.float64)
        validate_vector3(c, "Current")

        self._density = float(density)
        self._viscosity = float(viscosity)
        self.normal = n / norm
        self.offset = float(surface_offset)
        self.current = c.copy()

    @property
    def density(self) -> float:
        return self._density

    @property
    def viscosity(self) -> float:
        return self._viscosity

    def surface_plane(self) -> tuple[NDArray[np.float64], float]:
        return self.normal.copy(), self.offset

    def depth(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Signed depth below the surface [m]; positive when submerged."""
        p = np.asarray(points, dtype=np.float64)
        return self.offset - p @ self.normal

    def classify_position(self, point: NDArray[np.float64]) -> BodyFluidPosition:
        d = float(self.depth(point))
        if d > SURFACE_TOLERANCE:
            return BodyFluidPosition.INSIDE
        if d < -SURFACE_TOLERANCE:
            return BodyFluidPosition.OUTSIDE
        return BodyFluidPosition.CROSSING

    def velocity_at(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        p = np.asarray(points, dtype=np.float64)
        return np.broadcast_to(self.current, p.shape).copy()

    def __repr__(self) -> str:
        return (
            f"Ocean(density={self.density}, normal={self.normal.tolist()}, "
            f"offset={self.offset})"
        )


@dataclass(frozen=True)
class HydrodynamicsSettings:
    """
    Switches for hydrodynamic force computation.

    Attributes
    ----------
    damping_forces : bool
        Compute linear and quadratic drag
    realistic_buoyancy : bool
        Integrate buoyancy over the submerged mesh when crossing the surface
    gravity : tuple[float, float, float]
        Gravitational acceleration in world frame [m/s²]
    """
    damping_forces: bool = True
    realistic_buoyancy: bool = True
    gravity: tuple[float, float, float] = field(default=STANDARD_GRAVITY)

    def __post_init__(self) -> None:
        g = np.asarray(self.gravity, dtype=np.float64)
        validate_vector3(g, "Gravity")
        object.__setattr__(self, "gravity", tuple(float(x) for x in g))

    @property
    def gravity_vector(self) -> NDArray[np.float64]:
        return np.array(self.gravity, dtype=np.float64)

    def with_overrides(self, **kwargs) -> HydrodynamicsSettings:
        return replace(self, **kwargs)


HYDRODYNAMICS_PRESETS = {
    "default": {"damping_forces": True, "realistic_buoyancy": True},
    "buoyancy_only": {"damping_forces": False, "realistic_buoyancy": True},
    "drag_only": {"damping_forces": True, "realistic_buoyancy": False},
    "disabled": {"damping_forces": False, "realistic_buoyancy": False},
}


def settings_from_preset(preset: str = "default", **overrides) -> HydrodynamicsSettings:
    """
    Build settings from a named preset with optional overrides.

    Presets: 'default', 'buoyancy_only', 'drag_only', 'disabled'
    Overrides: damping_forces, realistic_buoyancy, gravity
    """
    if preset not in HYDRODYNAMICS_PRESETS:
        raise ValueError(
            f"Unknown preset '{preset}'. Valid options: {sorted(HYDRODYNAMICS_PRESETS)}"
        )
    params = dict(HYDRODYNAMICS_PRESETS[preset])
    unknown = set(overrides) - {"damping_forces", "realistic_buoyancy", "gravity"}
    if unknown:
        raise ValueError(f"Invalid settings: {sorted(unknown)}")
    params.update(overrides)
    return HydrodynamicsSettings(**params)
