"""
Primitive solids implementing the sub-body capability interface.

All primitives have their centre of gravity and centre of buoyancy at the
origin of their local frame, with principal axes aligned to it.
Mass defaults to ``material.density * volume`` unless given explicitly,
which models hollow hulls or dense equipment of known weight.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from hydrolab.geometry.mesh import TriangleMesh, box_mesh, cylinder_mesh, sphere_mesh
from hydrolab.geometry.transform import Transform
from hydrolab.solids.base import CollisionShape, Material
from hydrolab.utils.validation import validate_non_negative, validate_positive


class Solid(ABC):
    """
    Common state for primitive solids.

    Parameters
    ----------
    name : str
        Identifier of the solid
    volume : float
        Geometric volume [m³]
    material : Material | None
        Material. Defaults to ``Material()``.
    mass : float | None
        Explicit mass [kg]. If None, ``material.density * volume``.
    buoyant : bool
        Whether the solid displaces fluid (contributes buoyancy)
    """

    def __init__(
        self,
        name: str,
        volume: float,
        material: Material | None = None,
        mass: float | None = None,
        buoyant: bool = True,
    ) -> None:
        self._name = name
        self._material = material if material is not None else Material()
        self._volume = float(volume)
        m = self._material.density * self._volume if mass is None else mass
        validate_non_negative(m, f"Mass of '{name}'")
        self._mass = float(m)
        self._buoyant = bool(buoyant)
        self._mesh: TriangleMesh | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def mass(self) -> float:
        return self._mass

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def is_buoyant(self) -> bool:
        return self._buoyant and self._volume > 0.0

    @property
    def material(self) -> Material:
        return self._material

    @property
    def cg_to_origin(self) -> Transform:
        return Transform.identity()

    @property
    def center_of_buoyancy(self) -> NDArray[np.float64]:
        return np.zeros(3)

    @property
    @abstractmethod
    def principal_inertia(self) -> NDArray[np.float64]:
        """Principal moments of inertia about the CG [kg·m²] (3,)."""

    @property
    def physics_mesh(self) -> TriangleMesh | None:
        if self._mesh is None:
            self._mesh = self._build_mesh()
        return self._mesh

    def _build_mesh(self) -> TriangleMesh | None:
        return None

    @abstractmethod
    def build_collision_shape(self) -> CollisionShape:
        """Collision primitive in the local frame."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', mass={self.mass:.4g})"


class Sphere(Solid):
    """Solid sphere of given radius [m]."""

    def __init__(
        self,
        name: str,
        radius: float,
        material: Material | None = None,
        mass: float | None = None,
        buoyant: bool = True,
    ) -> None:
        validate_positive(radius, "Sphere radius")
        self.radius = float(radius)
        super().__init__(name, 4.0 / 3.0 * np.pi * self.radius**3, material, mass, buoyant)

    @property
    def principal_inertia(self) -> NDArray[np.float64]:
        i = 0.4 * self.mass * self.radius**2
        return np.array([i, i, i])

    def _build_mesh(self) -> TriangleMesh:
        return sphere_mesh(self.radius)

    def build_collision_shape(self) -> CollisionShape:
        return CollisionShape("sphere", (self.radius,))


class Box(Solid):
    """Solid box with edge lengths ``size`` = (a, b, c) [m]."""

    def __init__(
        self,
        name: str,
        size: NDArray[np.float64],
        material: Material | None = None,
        mass: float | None = None,
        buoyant: bool = True,
    ) -> None:
        self.size = np.asarray(size, dtype=np.float64)
        if self.size.shape != (3,):
            raise ValueError(f"Box size must have shape (3,), got {self.size.shape}")
        for s in self.size:
            validate_positive(s, "Box edge length")
        super().__init__(name, float(np.prod(self.size)), material, mass, buoyant)

    @property
    def principal_inertia(self) -> NDArray[np.float64]:
        a, b, c = self.size
        k = self.mass / 12.0
        return np.array([k * (b*b + c*c), k * (a*a + c*c), k * (a*a + b*b)])

    def _build_mesh(self) -> TriangleMesh:
        return box_mesh(self.size)

    def build_collision_shape(self) -> CollisionShape:
        return CollisionShape("box", tuple(float(s) for s in self.size))


class Cylinder(Solid):
    """Solid cylinder with axis along local z."""

    def __init__(
        self,
        name: str,
        radius: float,
        length: float,
        material: Material | None = None,
        mass: float | None = None,
        buoyant: bool = True,
    ) -> None:
        validate_positive(radius, "Cylinder radius")
        validate_positive(length, "Cylinder length")
        self.radius = float(radius)
        self.length = float(length)
        super().__init__(name, np.pi * self.radius**2 * self.length, material, mass, buoyant)

    @property
    def principal_inertia(self) -> NDArray[np.float64]:
        r, L, m = self.radius, self.length, self.mass
        i_t = m * (3.0 * r * r + L * L) / 12.0
        return np.array([i_t, i_t, 0.5 * m * r * r])

    def _build_mesh(self) -> TriangleMesh:
        return cylinder_mesh(self.radius, self.length)

    def build_collision_shape(self) -> CollisionShape:
        return CollisionShape("cylinder", (self.radius, self.length))


class PointMass(Solid):
    """
    Concentrated mass with no extent.

    Has no volume, no inertia about its own centre and no physics mesh,
    so it never contributes buoyancy or drag.
    """

    def __init__(self, name: str, mass: float, material: Material | None = None) -> None:
        super().__init__(name, 0.0, material, mass, buoyant=False)

    @property
    def principal_inertia(self) -> NDArray[np.float64]:
        return np.zeros(3)

    def build_collision_shape(self) -> CollisionShape:
        return CollisionShape("point")
