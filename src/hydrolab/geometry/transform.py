"""
Rigid transforms (rotation + translation) between coordinate frames.

A ``Transform`` maps points expressed in a child frame into its parent
frame: ``p_parent = R @ p_child + t``. Composition follows the usual
operator order, ``(A * B).apply(p) == A.apply(B.apply(p))``.
"""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation as ScR

from hydrolab.utils.validation import validate_rotation_matrix, validate_vector3


class Transform:
    """
    Rigid transform with an orthonormal rotation and a finite translation.

    Parameters
    ----------
    rotation : NDArray[np.float64] | None
        3x3 rotation matrix. Defaults to identity.
    translation : NDArray[np.float64] | None
        Translation vector [m] (3,). Defaults to zero.

    Raises
    ------
    ValueError
        If the rotation is not orthonormal and right-handed, or the
        translation is not a finite 3-vector.

    Examples
    --------
    >>> T = Transform.from_euler(yaw=90, translation=[1.0, 0.0, 0.0])
    >>> T.apply([1.0, 0.0, 0.0])
    array([1., 1., 0.])
    """
    __slots__ = ("rotation", "translation")

    def __init__(
        self,
        rotation: NDArray[np.float64] | None = None,
        translation: NDArray[np.float64] | None = None,
    ) -> None:
        R = np.eye(3) if rotation is None else np.asarray(rotation, dtype=np.float64)
        t = np.zeros(3) if translation is None else np.asarray(translation, dtype=np.float64)
        validate_rotation_matrix(R, "rotation")
        validate_vector3(t, "translation")
        self.rotation = R.copy()
        self.translation = t.copy()

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> Transform:
        return cls()

    @classmethod
    def from_translation(cls, translation: NDArray[np.float64]) -> Transform:
        return cls(None, translation)

    @classmethod
    def from_quat(
        cls,
        q: NDArray[np.float64],
        translation: NDArray[np.float64] | None = None,
    ) -> Transform:
        """Build from a scalar-last quaternion [x, y, z, w]."""
        return cls(ScR.from_quat(np.asarray(q, dtype=np.float64)).as_matrix(), translation)

    @classmethod
    def from_euler(
        cls,
        roll: float = 0.0,
        pitch: float = 0.0,
        yaw: float = 0.0,
        translation: NDArray[np.float64] | None = None,
        degrees: bool = True,
    ) -> Transform:
        """Build from extrinsic XYZ Euler angles (roll, pitch, yaw)."""
        rot = ScR.from_euler("xyz", [roll, pitch, yaw], degrees=degrees)
        return cls(rot.as_matrix(), translation)

    # -------------------------------------------------------------------------
    # Algebra
    # -------------------------------------------------------------------------

    def __mul__(self, other: Transform) -> Transform:
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform(
            self.rotation @ other.rotation,
            self.rotation @ other.translation + self.translation,
        )

    def inverse(self) -> Transform:
        Rt = self.rotation.T
        return Transform(Rt, -Rt @ self.translation)

    def apply(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """
        Map point(s) from the child frame into the parent frame.

        Parameters
        ----------
        points : NDArray[np.float64]
            Single point (3,) or array of points (N, 3).
        """
        p = np.asarray(points, dtype=np.float64)
        if p.ndim == 1:
            return self.rotation @ p + self.translation
        return p @ self.rotation.T + self.translation

    def apply_vector(self, vectors: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotate free vector(s) without translating them."""
        v = np.asarray(vectors, dtype=np.float64)
        if v.ndim == 1:
            return self.rotation @ v
        return v @ self.rotation.T

    @property
    def origin(self) -> NDArray[np.float64]:
        """Child frame origin expressed in the parent frame [m]."""
        return self.translation.copy()

    def as_quat(self) -> NDArray[np.float64]:
        """Rotation as scalar-last quaternion [x, y, z, w]."""
        return ScR.from_matrix(self.rotation).as_quat()

    def allclose(self, other: Transform, atol: float = 1e-9) -> bool:
        return bool(
            np.allclose(self.rotation, other.rotation, atol=atol)
            and np.allclose(self.translation, other.translation, atol=atol)
        )

    def __repr__(self) -> str:
        return (
            f"Transform(quat={np.round(self.as_quat(), 6).tolist()}, "
            f"translation={np.round(self.translation, 6).tolist()})"
        )
