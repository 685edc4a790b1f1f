"""
Utility functions for HydroLab.

``hydrolab.utils.io`` (pandas/JSON helpers) is imported explicitly by
callers; it depends on the hydrodynamics package, which itself uses the
validation helpers below.
"""

from .validation import (
    validate_inertia_tensor,
    validate_non_negative,
    validate_positive,
    validate_rotation_matrix,
    validate_vector3,
)

__all__ = [
    "validate_positive",
    "validate_non_negative",
    "validate_vector3",
    "validate_rotation_matrix",
    "validate_inertia_tensor",
]
