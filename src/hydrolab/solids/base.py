"""
Sub-body capability interface and the part record binding it to a composite.

Any object exposing the ``SubBody`` accessors can be attached to a
``CompositeBody``, including another composite. No class hierarchy is
required.
"""
from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from hydrolab.geometry.mesh import TriangleMesh
from hydrolab.geometry.transform import Transform


@dataclass(frozen=True)
class Material:
    """
    Physical material of a solid.

    ``Material()`` doubles as the default returned for out-of-range lookups.
    """
    name: str = "default"
    density: float = 1000.0  # [kg/m³]
    restitution: float = 0.5
    friction: float = 0.5


@dataclass(frozen=True)
class CollisionShape:
    """Primitive collision shape description for the collision collaborator."""
    kind: str
    dimensions: tuple[float, ...] = ()


@dataclass(frozen=True)
class CompoundShape:
    """
    Collision shape assembled from the external parts of a composite.

    ``part_ids[i]`` is the index (in the composite part list) of the part
    that produced ``children[i]``.
    """
    children: tuple[tuple[Transform, CollisionShape | CompoundShape], ...] = ()
    part_ids: tuple[int, ...] = ()
    kind: str = field(default="compound", init=False)


class SubBody(Protocol):
    """Capabilities a solid must expose to become part of a composite."""

    @property
    def name(self) -> str: ...

    @property
    def mass(self) -> float: ...

    @property
    def volume(self) -> float: ...

    @property
    def is_buoyant(self) -> bool: ...

    @property
    def principal_inertia(self) -> NDArray[np.float64]:
        """Principal moments in the body-local CG frame [kg·m²] (3,)."""
        ...

    @property
    def cg_to_origin(self) -> Transform:
        """Maps body-origin coordinates into the CG (principal) frame."""
        ...

    @property
    def center_of_buoyancy(self) -> NDArray[np.float64]:
        """Centre of buoyancy in the CG frame [m] (3,)."""
        ...

    @property
    def physics_mesh(self) -> TriangleMesh | None:
        """Surface mesh in the body-origin frame, or None if unavailable."""
        ...

    @property
    def material(self) -> Material: ...

    def build_collision_shape(self) -> CollisionShape | CompoundShape: ...


@dataclass(frozen=True)
class Part:
    """
    A sub-body placed in a composite.

    Parameters
    ----------
    body : SubBody
        The attached solid, exclusively owned by the composite
    placement : Transform
        Maps part-origin coordinates into composite-origin coordinates
    external : bool
        True if the part surface is exposed to the fluid (drag, collision)
    """
    body: SubBody
    placement: Transform
    external: bool

    def cg_in_origin_frame(self) -> Transform:
        """Pose of the part CG frame in the composite-origin frame."""
        return self.placement * self.body.cg_to_origin.inverse()


# Exclusive ownership registry keyed by identity:
# id(sub-body) -> (weak reference to the sub-body, weak reference to its owner)
_OWNERS: dict[int, tuple[weakref.ref, weakref.ref]] = {}


def _forget(key: int, body_ref: weakref.ref) -> None:
    entry = _OWNERS.get(key)
    if entry is not None and entry[0] is body_ref:
        del _OWNERS[key]


def claim_ownership(body: SubBody, owner: object) -> None:
    """
    Register ``owner`` as the sole owner of ``body``.

    Bodies are tracked by identity, so unhashable or equal-valued
    sub-bodies are each owned separately.

    Raises
    ------
    ValueError
        If the body already belongs to a composite or is the owner itself.
    """
    if body is owner:
        raise ValueError("A composite body cannot be attached to itself")
    current = owner_of(body)
    if current is not None:
        who = getattr(current, "name", repr(current))
        raise ValueError(f"Sub-body '{body.name}' is already owned by '{who}'")
    key = id(body)
    body_ref = weakref.ref(body, lambda ref, key=key: _forget(key, ref))
    _OWNERS[key] = (body_ref, weakref.ref(owner))


def release_ownership(body: SubBody) -> None:
    """Forget the owner of ``body`` (used when an attach is rolled back)."""
    entry = _OWNERS.get(id(body))
    if entry is not None and entry[0]() is body:
        del _OWNERS[id(body)]


def owner_of(body: SubBody) -> object | None:
    entry = _OWNERS.get(id(body))
    if entry is None or entry[0]() is not body:
        return None
    return entry[1]()
