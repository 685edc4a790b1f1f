"""
Drag correction applied after per-part drag integration.

Summing drag part by part counts every exposed face, including faces
shadowed by neighbouring parts along the flow direction. A correction
step rescales the summed drag to compensate.
"""
from __future__ import annotations

from typing import Protocol

from hydrolab.hydrodynamics.accumulator import ForceAccumulator


class DampingCorrection(Protocol):
    """Adjusts summed drag terms of an accumulator in place and returns it."""

    def __call__(self, accumulator: ForceAccumulator) -> ForceAccumulator: ...


class OverlapCorrection:
    """
    Uniform correction for overlapping projected areas.

    Parameters
    ----------
    overlap : float
        Fraction of the summed per-part projected area hidden by other
        parts, in [0, 1). Linear and quadratic drag force/torque are
        scaled by ``1 - overlap``; buoyancy is untouched.

    Examples
    --------
    >>> correction = OverlapCorrection(overlap=0.2)
    >>> acc = correction(acc)  # drag reduced by 20 %
    """

    def __init__(self, overlap: float = 0.0) -> None:
        if not 0.0 <= overlap < 1.0:
            raise ValueError(f"Overlap fraction must be in [0, 1), got {overlap}")
        self.overlap = float(overlap)

    def __call__(self, accumulator: ForceAccumulator) -> ForceAccumulator:
        if self.overlap == 0.0:
            return accumulator
        k = 1.0 - self.overlap
        accumulator.linear_drag_force *= k
        accumulator.linear_drag_torque *= k
        accumulator.quadratic_drag_force *= k
        accumulator.quadratic_drag_torque *= k
        return accumulator

    def __repr__(self) -> str:
        return f"OverlapCorrection(overlap={self.overlap})"
