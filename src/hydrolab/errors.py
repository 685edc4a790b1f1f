"""
Error and warning taxonomy for composite body computations.

Only ``DegenerateBodyError`` is raised. The two warning classes are emitted
through :mod:`warnings` and never interrupt a simulation step.
"""
from __future__ import annotations


class DegenerateBodyError(ValueError):
    """Composite has zero or negative total mass and cannot be simulated."""


class IllConditionedInertiaWarning(RuntimeWarning):
    """
    Composite inertia tensor is near-singular or numerically inconsistent.

    Principal moments are clamped to best-effort values and the
    computation proceeds.
    """


class MissingGeometryWarning(RuntimeWarning):
    """A part has no usable physics mesh; its drag contribution is zero."""
