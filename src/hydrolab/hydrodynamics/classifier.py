"""Classification of a body's position relative to the fluid surface."""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from hydrolab.geometry.transform import Transform
from hydrolab.hydrodynamics.fluid import BodyFluidPosition, Fluid


def classify(
    fluid: Fluid,
    cg_frame: Transform,
    reference_points: NDArray[np.float64] | None = None,
) -> BodyFluidPosition:
    """
    Determine whether a body is outside, inside or crossing the fluid.

    Parameters
    ----------
    fluid : Fluid
        Fluid performing the point/plane test
    cg_frame : Transform
        World pose of the body CG frame
    reference_points : NDArray[np.float64] | None
        Points bounding the body, in the CG frame (N, 3). If None or empty,
        the CG itself is tested.

    Returns
    -------
    BodyFluidPosition
        INSIDE if every point is submerged, OUTSIDE if none is,
        CROSSING otherwise.
    """
    if reference_points is None or len(reference_points) == 0:
        points = cg_frame.translation[None, :]
    else:
        points = cg_frame.apply(np.asarray(reference_points, dtype=np.float64).reshape(-1, 3))

    states = {fluid.classify_position(p) for p in points}
    if states == {BodyFluidPosition.INSIDE}:
        return BodyFluidPosition.INSIDE
    if states == {BodyFluidPosition.OUTSIDE}:
        return BodyFluidPosition.OUTSIDE
    return BodyFluidPosition.CROSSING
