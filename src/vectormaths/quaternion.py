"""
Unit-quaternion rotations.

Quaternion Convention: (w, x, y, z) - scalar first

Composition convention (used everywhere in the package):
- ``a * b`` is the Hamilton product; as a rotation it applies ``b`` first,
  then ``a`` (same order as matrix products on column vectors).
- ``rotate_vector`` computes ``q * (0, v) * conj(q)``.
- ``to_rotation_matrix`` is the closed form of that sandwich product.

Euler Convention: ``from_euler_angles(pitch, yaw, roll)`` builds
``qz(yaw) * qy(pitch) * qx(roll)``, i.e. roll about X is applied first,
then pitch about Y, then yaw about Z.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from numbers import Real
from typing import NamedTuple, TypeAlias

import numpy as np

from vectormaths.constants import (
    AXIS_ANGLE_EPSILON,
    DEGENERATE_EPSILON,
    EQUALITY_EPSILON,
    FALLBACK_AXIS,
    QUATERNION_DIMS,
    SLERP_LINEAR_THRESHOLD,
)
from vectormaths.matrix import Mat3, Mat4
from vectormaths.vector import Vec3, clamp

# Type aliases for better readability (Python 3.12+ syntax)
ArrayLike: TypeAlias = np.ndarray | tuple | list


class AxisAngle(NamedTuple):
    """Rotation of ``angle`` radians about unit ``axis``."""

    axis: Vec3
    angle: float


class EulerAngles(NamedTuple):
    """Euler angles in radians, ordered like ``Quaternion.from_euler_angles``."""

    pitch: float
    yaw: float
    roll: float


@dataclass(frozen=True, slots=True, eq=False)
class Quaternion:
    """Quaternion for rotations. ``q`` and ``-q`` compare equal."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        return iter((self.w, self.x, self.y, self.z))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Quaternion):
            return NotImplemented
        same = all(abs(a - b) < EQUALITY_EPSILON for a, b in zip(self, other))
        negated = all(abs(a + b) < EQUALITY_EPSILON for a, b in zip(self, other))
        return same or negated

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __mul__(self, other):
        if isinstance(other, Quaternion):
            w1, x1, y1, z1 = self.w, self.x, self.y, self.z
            w2, x2, y2, z2 = other.w, other.x, other.y, other.z
            return Quaternion(
                w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
                w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
                w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
                w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            )
        if isinstance(other, Real):
            return Quaternion(self.w * other, self.x * other, self.y * other, self.z * other)
        return NotImplemented

    def __rmul__(self, scalar: float) -> Quaternion:
        if not isinstance(scalar, Real):
            return NotImplemented
        return self * scalar

    def __truediv__(self, scalar: float) -> Quaternion:
        if not isinstance(scalar, Real):
            return NotImplemented
        return Quaternion(self.w / scalar, self.x / scalar, self.y / scalar, self.z / scalar)

    def __rtruediv__(self, scalar: float) -> Quaternion:
        # Mirrors q / scalar, like the vector types
        return self.__truediv__(scalar)

    def __add__(self, other: Quaternion) -> Quaternion:
        if not isinstance(other, Quaternion):
            return NotImplemented
        return Quaternion(self.w + other.w, self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Quaternion) -> Quaternion:
        if not isinstance(other, Quaternion):
            return NotImplemented
        return Quaternion(self.w - other.w, self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def dot(self, other: Quaternion) -> float:
        """4D dot product; cosine of half the angle between unit rotations."""
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalised(self) -> Quaternion:
        """Unit copy, or the identity when the magnitude is degenerate."""
        ln = self.length()
        if ln < DEGENERATE_EPSILON:
            return Quaternion.identity()
        return self / ln

    def conjugate(self) -> Quaternion:
        """``(w, -x, -y, -z)``; the inverse rotation for a unit quaternion."""
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def inverse(self) -> Quaternion:
        """``conjugate / |q|^2``; the identity for a degenerate quaternion."""
        if self.length() < DEGENERATE_EPSILON:
            return Quaternion.identity()
        return self.conjugate() / self.length_squared()

    # -------------------------------------------------------------------------
    # Rotation
    # -------------------------------------------------------------------------

    def rotate_vector(self, v: Vec3) -> Vec3:
        """Rotate ``v`` by the normalized quaternion: ``q * (0, v) * conj(q)``."""
        q = self.normalised()
        p = q * Quaternion(0.0, v.x, v.y, v.z) * q.conjugate()
        return Vec3(p.x, p.y, p.z)

    @staticmethod
    def slerp(a: Quaternion, b: Quaternion, t: float) -> Quaternion:
        """
        Spherical linear interpolation along the shortest arc.

        Nearly parallel inputs (dot above ``SLERP_LINEAR_THRESHOLD``) fall back
        to normalized linear interpolation to avoid dividing by ``sin(theta) ~ 0``.
        """
        dot = a.dot(b)

        if dot < 0.0:
            b = -b
            dot = -dot

        dot = clamp(dot, -1.0, 1.0)

        if dot > SLERP_LINEAR_THRESHOLD:
            return (a + (b - a) * t).normalised()

        theta = math.acos(dot)
        sin_theta = math.sin(theta)

        s0 = math.sin((1.0 - t) * theta) / sin_theta
        s1 = math.sin(t * theta) / sin_theta

        return a * s0 + b * s1

    # -------------------------------------------------------------------------
    # Conversions
    # -------------------------------------------------------------------------

    def to_rotation_matrix(self) -> Mat4:
        """Rotation matrix of the normalized quaternion, embedded in a Mat4."""
        q = self.normalised()
        w, x, y, z = q.w, q.x, q.y, q.z

        return Mat4.from_rows(
            [
                [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y), 0.0],
                [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x), 0.0],
                [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y), 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    @staticmethod
    def from_rotation_matrix(m: Mat3 | Mat4) -> Quaternion:
        """Quaternion from the upper-left 3x3 rotation block of ``m``."""
        trace = m.at(0, 0) + m.at(1, 1) + m.at(2, 2)

        if trace > 0:
            s = 0.5 / math.sqrt(trace + 1.0)
            w = 0.25 / s
            x = (m.at(2, 1) - m.at(1, 2)) * s
            y = (m.at(0, 2) - m.at(2, 0)) * s
            z = (m.at(1, 0) - m.at(0, 1)) * s
        elif m.at(0, 0) > m.at(1, 1) and m.at(0, 0) > m.at(2, 2):
            s = 2.0 * math.sqrt(1.0 + m.at(0, 0) - m.at(1, 1) - m.at(2, 2))
            w = (m.at(2, 1) - m.at(1, 2)) / s
            x = 0.25 * s
            y = (m.at(0, 1) + m.at(1, 0)) / s
            z = (m.at(0, 2) + m.at(2, 0)) / s
        elif m.at(1, 1) > m.at(2, 2):
            s = 2.0 * math.sqrt(1.0 + m.at(1, 1) - m.at(0, 0) - m.at(2, 2))
            w = (m.at(0, 2) - m.at(2, 0)) / s
            x = (m.at(0, 1) + m.at(1, 0)) / s
            y = 0.25 * s
            z = (m.at(1, 2) + m.at(2, 1)) / s
        else:
            s = 2.0 * math.sqrt(1.0 + m.at(2, 2) - m.at(0, 0) - m.at(1, 1))
            w = (m.at(1, 0) - m.at(0, 1)) / s
            x = (m.at(0, 2) + m.at(2, 0)) / s
            y = (m.at(1, 2) + m.at(2, 1)) / s
            z = 0.25 * s

        return Quaternion(w, x, y, z).normalised()

    @staticmethod
    def from_euler_angles(pitch: float, yaw: float, roll: float) -> Quaternion:
        """Half-angle product ``qz(yaw) * qy(pitch) * qx(roll)`` (radians)."""
        cr = math.cos(roll / 2)
        sr = math.sin(roll / 2)
        cp = math.cos(pitch / 2)
        sp = math.sin(pitch / 2)
        cy = math.cos(yaw / 2)
        sy = math.sin(yaw / 2)

        w = cr * cp * cy + sr * sp * sy
        x = sr * cp * cy - cr * sp * sy
        y = cr * sp * cy + sr * cp * sy
        z = cr * cp * sy - sr * sp * cy

        return Quaternion(w, x, y, z)

    def to_euler_angles(self) -> EulerAngles:
        """
        Inverse of ``from_euler_angles``.

        The pitch ``asin`` argument is clamped to [-1, 1], so gimbal lock
        (pitch = +/-90 degrees) yields +/-pi/2 instead of NaN.
        """
        q = self.normalised()
        w, x, y, z = q.w, q.x, q.y, q.z

        # Roll (x-axis rotation)
        sinr_cosp = 2 * (w * x + y * z)
        cosr_cosp = 1 - 2 * (x * x + y * y)
        roll = math.atan2(sinr_cosp, cosr_cosp)

        # Pitch (y-axis rotation)
        sinp = clamp(2 * (w * y - z * x), -1.0, 1.0)
        pitch = math.asin(sinp)

        # Yaw (z-axis rotation)
        siny_cosp = 2 * (w * z + x * y)
        cosy_cosp = 1 - 2 * (y * y + z * z)
        yaw = math.atan2(siny_cosp, cosy_cosp)

        return EulerAngles(pitch, yaw, roll)

    @staticmethod
    def from_axis_angle(axis: Vec3, angle: float) -> Quaternion:
        """Rotation of ``angle`` radians about ``axis`` (normalized here)."""
        axis = axis.normalised()
        if axis.length() < DEGENERATE_EPSILON:
            return Quaternion.identity()

        half_angle = angle / 2
        sin_half = math.sin(half_angle)
        return Quaternion(
            math.cos(half_angle), axis.x * sin_half, axis.y * sin_half, axis.z * sin_half
        )

    def to_axis_angle(self) -> AxisAngle:
        """
        Axis and angle in [0, 2*pi] of the normalized quaternion.

        When ``sin(angle / 2)`` is below ``AXIS_ANGLE_EPSILON`` the axis is
        undefined and ``FALLBACK_AXIS`` is returned.
        """
        q = self.normalised()
        w = clamp(q.w, -1.0, 1.0)
        angle = 2.0 * math.acos(w)
        sin_half = math.sqrt(1.0 - w * w)

        if sin_half < AXIS_ANGLE_EPSILON:
            return AxisAngle(Vec3(*FALLBACK_AXIS), angle)
        return AxisAngle(Vec3(q.x / sin_half, q.y / sin_half, q.z / sin_half), angle)

    # -------------------------------------------------------------------------
    # Utilities
    # -------------------------------------------------------------------------

    @staticmethod
    def identity() -> Quaternion:
        """No rotation, ``(1, 0, 0, 0)``."""
        return Quaternion(1.0, 0.0, 0.0, 0.0)

    def to_array(self, dtype: np.dtype = np.float64) -> np.ndarray:
        """Array [4] in (w, x, y, z) order."""
        return np.array([self.w, self.x, self.y, self.z], dtype=dtype)

    @staticmethod
    def from_array(values: ArrayLike) -> Quaternion:
        """
        Build from a flat array-like in (w, x, y, z) order.

        Raises:
            ValueError: If the array does not hold 4 components
        """
        arr = np.asarray(values, dtype=np.float64).ravel()
        if arr.shape[0] != QUATERNION_DIMS:
            raise ValueError(f"Quaternion needs 4 components (w, x, y, z), got {arr.shape[0]}")
        return Quaternion(*(float(v) for v in arr))
