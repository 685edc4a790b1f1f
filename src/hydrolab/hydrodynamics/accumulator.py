"""
Fluid force/torque accumulator.

Overwritten at the start of every force computation, never accumulated
across simulation ticks.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields

import numpy as np
from numpy.typing import NDArray


def _zero() -> NDArray[np.float64]:
    return np.zeros(3, dtype=np.float64)


@dataclass
class ForceAccumulator:
    """
    Buoyancy and drag force/torque pairs in world frame.

    Torques are about the body centre of gravity [N·m]; forces in [N].
    """
    buoyancy_force: NDArray[np.float64] = field(default_factory=_zero)
    buoyancy_torque: NDArray[np.float64] = field(default_factory=_zero)
    linear_drag_force: NDArray[np.float64] = field(default_factory=_zero)
    linear_drag_torque: NDArray[np.float64] = field(default_factory=_zero)
    quadratic_drag_force: NDArray[np.float64] = field(default_factory=_zero)
    quadratic_drag_torque: NDArray[np.float64] = field(default_factory=_zero)

    # Short names used in logs: buoyancy, skin (linear) and pressure (quadratic) drag
    SHORT_NAMES = {
        "Fb": "buoyancy_force",
        "Tb": "buoyancy_torque",
        "Fds": "linear_drag_force",
        "Tds": "linear_drag_torque",
        "Fdp": "quadratic_drag_force",
        "Tdp": "quadratic_drag_torque",
    }

    @classmethod
    def zeros(cls) -> ForceAccumulator:
        return cls()

    def clear(self) -> None:
        """Reset all six vectors to zero in place."""
        for f in fields(self):
            getattr(self, f.name).fill(0.0)

    def copy(self) -> ForceAccumulator:
        return ForceAccumulator(**{f.name: getattr(self, f.name).copy() for f in fields(self)})

    def total_force(self) -> NDArray[np.float64]:
        return self.buoyancy_force + self.linear_drag_force + self.quadratic_drag_force

    def total_torque(self) -> NDArray[np.float64]:
        return self.buoyancy_torque + self.linear_drag_torque + self.quadratic_drag_torque

    def is_zero(self) -> bool:
        return all(not np.any(getattr(self, f.name)) for f in fields(self))

    def as_dict(self) -> dict[str, NDArray[np.float64]]:
        """Field values keyed by their short log names (Fb, Tb, Fds, ...)."""
        return {short: getattr(self, name).copy() for short, name in self.SHORT_NAMES.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ForceAccumulator):
            return NotImplemented
        return all(
            np.array_equal(getattr(self, f.name), getattr(other, f.name))
            for f in fields(self)
        )
