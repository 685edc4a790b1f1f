"""
Rigid body state under which a composite is registered with a host
dynamics loop.

The body frame is the composite's CG principal frame, so the inertia
tensor is diagonal and the position is the CG position.

All physical quantities use SI units:
- Position: meters [m]
- Velocity: meters per second [m/s]
- Angular velocity: radians per second [rad/s]
- Mass: kilograms [kg]
- Inertia: kilogram-meter-squared [kg·m²]
"""
from __future__ import annotations

import warnings

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation as ScR

from hydrolab.geometry.transform import Transform
from hydrolab.utils.validation import validate_inertia_tensor

# Constants
QUATERNION_EPSILON = 1e-12
MIN_MASS = 1e-10  # Minimum mass to avoid division by zero


def quat_normalize(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Return unit quaternion (float64), scalar-last [x, y, z, w].

    Returns [0, 0, 0, 1] with a RuntimeWarning if the input norm is zero.
    """
    q = np.asarray(q, dtype=np.float64)
    n = np.linalg.norm(q)
    if n < QUATERNION_EPSILON:
        warnings.warn(
            "Zero-norm quaternion detected. Returning identity quaternion [0,0,0,1].",
            RuntimeWarning,
            stacklevel=2
        )
        return np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float64)
    return q / n


def quat_derivative(q: NDArray[np.float64], omega: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Quaternion time derivative for a world-frame angular velocity.

    qdot = 0.5 * [ω, 0] ⊗ q (scalar-last convention)
    """
    qx, qy, qz, qw = q
    ox, oy, oz = omega
    return 0.5 * np.array([
        qw*ox + oy*qz - oz*qy,
        qw*oy + oz*qx - ox*qz,
        qw*oz + ox*qy - oy*qx,
        -qx*ox - qy*oy - qz*oz
    ], dtype=np.float64)


class RigidBody6DOF:
    """
    6-DoF rigid body in world frame with quaternion orientation.

    State Variables
    ---------------
    - p : CG position in world frame [m] (3,)
    - q : Unit quaternion body->world (scalar-last [x,y,z,w]) (4,)
    - v : CG linear velocity in world frame [m/s] (3,)
    - w : Angular velocity in world frame [rad/s] (3,)

    Force/Torque Accumulators (cleared each step)
    ----------------------------------------------
    - f : Accumulated force in world frame [N] (3,)
    - tau : Accumulated torque about the CG in world frame [N·m] (3,)

    Notes
    -----
    World inertia tensor: I_world = R(q) @ I_body @ R(q)^T
    """
    __slots__ = (
        "name", "p", "q", "v", "w",
        "mass", "I_body", "I_body_inv",
        "inv_mass",
        "f", "tau",
    )

    def __init__(
        self,
        name: str,
        mass: float,
        inertia_tensor_body: NDArray[np.float64],
        position: NDArray[np.float64],
        orientation: NDArray[np.float64],
        linear_velocity: NDArray[np.float64] | None = None,
        angular_velocity: NDArray[np.float64] | None = None,
    ) -> None:
        """
        Parameters
        ----------
        name : str
            Unique identifier for the body
        mass : float
            Body mass [kg]. Must be non-negative.
        inertia_tensor_body : NDArray[np.float64]
            3x3 inertia tensor in body principal frame [kg·m²]
        position : NDArray[np.float64]
            Initial CG position in world frame [m] (3,)
        orientation : NDArray[np.float64]
            Initial orientation quaternion [x,y,z,w] (4,). Will be normalized.
        linear_velocity, angular_velocity : NDArray[np.float64] | None
            Initial velocities. Default to zero.

        Raises
        ------
        ValueError
            If mass is negative or inertia tensor is not positive definite.
        """
        if mass < 0:
            raise ValueError(f"Mass must be non-negative, got {mass}")
        if mass < MIN_MASS:
            warnings.warn(
                f"Very small mass ({mass} kg) detected. Consider using a larger value.",
                RuntimeWarning, stacklevel=2
            )

        self.name = name
        self.mass = float(mass)
        self.inv_mass = 0.0 if self.mass < MIN_MASS else 1.0 / self.mass

        I = np.asarray(inertia_tensor_body, dtype=np.float64)
        validate_inertia_tensor(I)
        self.I_body = I.copy()
        self.I_body_inv = np.linalg.inv(self.I_body)

        self.p = np.asarray(position, dtype=np.float64).copy()
        self.q = quat_normalize(np.asarray(orientation, dtype=np.float64).copy())
        self.v = (np.zeros(3, dtype=np.float64) if linear_velocity is None
                  else np.asarray(linear_velocity, dtype=np.float64).copy())
        self.w = (np.zeros(3, dtype=np.float64) if angular_velocity is None
                  else np.asarray(angular_velocity, dtype=np.float64).copy())

        self.f = np.zeros(3, dtype=np.float64)
        self.tau = np.zeros(3, dtype=np.float64)

    def clear_forces(self) -> None:
        """Reset force and torque accumulators to zero."""
        self.f.fill(0.0)
        self.tau.fill(0.0)

    def rotation_world(self) -> NDArray[np.float64]:
        """Rotation matrix R such that v_world = R @ v_body."""
        return ScR.from_quat(self.q).as_matrix()

    def frame(self) -> Transform:
        """World pose of the body (CG principal) frame."""
        return Transform(self.rotation_world(), self.p)

    def inertia_world(self) -> NDArray[np.float64]:
        R = self.rotation_world()
        return R @ self.I_body @ R.T

    def apply_force(
        self,
        f: NDArray[np.float64],
        point_world: NDArray[np.float64] | None = None
    ) -> None:
        """
        Apply force to the body.

        Parameters
        ----------
        f : NDArray[np.float64]
            Force vector in world frame [N] (3,)
        point_world : NDArray[np.float64] | None
            Application point in world frame [m] (3,). If provided,
            generates torque τ = r × f where r = point_world - p.
            If None, force is applied at the CG (no torque).
        """
        f = np.asarray(f, dtype=np.float64)
        self.f += f
        if point_world is not None:
            r = np.asarray(point_world, dtype=np.float64) - self.p
            self.tau += np.cross(r, f)

    def apply_torque(self, tau: NDArray[np.float64]) -> None:
        """Apply torque [N·m] (3,) in world frame."""
        self.tau += np.asarray(tau, dtype=np.float64)

    def generalized_force(self) -> NDArray[np.float64]:
        """Concatenated generalized force [f; tau] (6,)."""
        out = np.zeros(6, dtype=np.float64)
        out[:3] = self.f
        out[3:] = self.tau
        return out

    def accelerations(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Linear and angular accelerations from the accumulated loads.

        Uses Euler's equations in world frame:
        α = I_world⁻¹ (τ - ω × I_world ω)
        """
        a_lin = self.f * self.inv_mass
        R = self.rotation_world()
        I_w = R @ self.I_body @ R.T
        I_w_inv = R @ self.I_body_inv @ R.T
        a_ang = I_w_inv @ (self.tau - np.cross(self.w, I_w @ self.w))
        return a_lin, a_ang

    def integrate_semi_implicit(
        self,
        dt: float,
        a_lin: NDArray[np.float64],
        a_ang: NDArray[np.float64],
    ) -> None:
        """
        Semi-implicit (symplectic) Euler integration.

        Notes
        -----
        Integration order (symplectic):
        1. v_{n+1} = v_n + a_lin * dt
        2. w_{n+1} = w_n + a_ang * dt
        3. p_{n+1} = p_n + v_{n+1} * dt
        4. q_{n+1} = normalize(q_n + qdot(q_n, w_{n+1}) * dt)
        """
        self.v += a_lin * dt
        self.w += a_ang * dt
        self.p += self.v * dt
        qdot = quat_derivative(self.q, self.w)
        self.q = quat_normalize(self.q + qdot * dt)

    def kinetic_energy(self) -> float:
        """Total kinetic energy [J] = 0.5 m |v|² + 0.5 ωᵀ I_world ω."""
        T_trans = 0.5 * self.mass * np.dot(self.v, self.v)
        T_rot = 0.5 * np.dot(self.w, self.inertia_world() @ self.w)
        return float(T_trans + T_rot)
