"""
Validation utilities for physical parameters and geometric inputs.

Provides functions to validate inputs for composite body computations,
ensuring physical consistency and numerical stability.
"""
from __future__ import annotations
import numpy as np
from numpy.typing import NDArray
import warnings

ROTATION_TOLERANCE = 1e-6  # Orthonormality tolerance for rotation matrices


def validate_positive(value: float, name: str, strict: bool = True) -> None:
    """
    Validate that a scalar value is positive.

    Parameters
    ----------
    value : float
        Value to validate
    name : str
        Parameter name for error messages
    strict : bool
        If True, raise ValueError. If False, issue warning.

    Raises
    ------
    ValueError
        If strict=True and value <= 0
    """
    if not value > 0:
        msg = f"{name} must be positive, got {value}"
        if strict:
            raise ValueError(msg)
        else:
            warnings.warn(msg, RuntimeWarning, stacklevel=2)


def validate_non_negative(value: float, name: str) -> None:
    """Validate that a value is non-negative."""
    if not value >= 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_vector3(v: NDArray[np.float64], name: str) -> None:
    """Validate that array is a finite 3-vector."""
    if v.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {v.shape}")
    if not np.all(np.isfinite(v)):
        raise ValueError(f"{name} must be finite, got {v}")


def validate_rotation_matrix(R: NDArray[np.float64], name: str, tol: float = ROTATION_TOLERANCE) -> None:
    """
    Validate that a matrix is a proper rotation.

    Parameters
    ----------
    R : NDArray[np.float64]
        Candidate rotation matrix (3, 3)
    name : str
        Parameter name for error messages
    tol : float
        Tolerance on R^T R = I and det(R) = +1

    Raises
    ------
    ValueError
        If shape is wrong, entries are not finite, or the matrix is not
        orthonormal and right-handed
    """
    if R.shape != (3, 3):
        raise ValueError(f"{name} must be 3x3, got shape {R.shape}")
    if not np.all(np.isfinite(R)):
        raise ValueError(f"{name} must be finite")
    if not np.allclose(R.T @ R, np.eye(3), atol=tol):
        raise ValueError(f"{name} is not orthonormal")
    if abs(np.linalg.det(R) - 1.0) > tol:
        raise ValueError(f"{name} must be right-handed (det = +1), got det = {np.linalg.det(R):.6f}")


def validate_inertia_tensor(I: NDArray[np.float64]) -> None:
    """
    Validate inertia tensor is 3x3 and positive definite.

    Parameters
    ----------
    I : NDArray[np.float64]
        Inertia tensor (3, 3)

    Raises
    ------
    ValueError
        If shape is wrong or matrix is not positive definite
    """
    if I.shape != (3, 3):
        raise ValueError(f"Inertia tensor must be 3x3, got shape {I.shape}")

    # Check symmetry
    if not np.allclose(I, I.T):
        warnings.warn(
            "Inertia tensor is not symmetric. Using (I + I^T)/2.",
            RuntimeWarning,
            stacklevel=2
        )

    # Check positive definiteness
    eigenvalues = np.linalg.eigvalsh(0.5 * (I + I.T))
    if np.any(eigenvalues <= 0):
        raise ValueError(
            f"Inertia tensor must be positive definite. "
            f"Got eigenvalues: {eigenvalues}"
        )
