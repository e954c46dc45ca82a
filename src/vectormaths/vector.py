"""
Vector types for 2D, 3D and homogeneous 4D math.

Vectors are immutable value types. Equality is approximate (per-component
absolute tolerance ``EQUALITY_EPSILON``), so vectors are not hashable.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from numbers import Real
from typing import Self, TypeAlias

import numpy as np

from vectormaths.constants import DEGENERATE_EPSILON, EQUALITY_EPSILON

# Type aliases for better readability (Python 3.12+ syntax)
ArrayLike: TypeAlias = np.ndarray | tuple | list


def clamp(value: float, min_val: float, max_val: float) -> float:
    return max(min_val, min(value, max_val))


class _Vector:
    """Component-wise behaviour shared by Vec2, Vec3 and Vec4."""

    __slots__ = ()

    def __iter__(self) -> Iterator[float]:
        return (getattr(self, name) for name in self.__slots__)

    def __len__(self) -> int:
        return len(self.__slots__)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(abs(a - b) < EQUALITY_EPSILON for a, b in zip(self, other))

    def __add__(self, other: Self) -> Self:
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(*(a + b for a, b in zip(self, other)))

    def __sub__(self, other: Self) -> Self:
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(*(a - b for a, b in zip(self, other)))

    def __neg__(self) -> Self:
        return type(self)(*(-a for a in self))

    def __mul__(self, scalar: float) -> Self:
        if not isinstance(scalar, Real):
            return NotImplemented
        return type(self)(*(a * scalar for a in self))

    def __rmul__(self, scalar: float) -> Self:
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Self:
        if not isinstance(scalar, Real):
            return NotImplemented
        return type(self)(*(a / scalar for a in self))

    def __rtruediv__(self, scalar: float) -> Self:
        # Mirrors v / scalar; there is no component-wise reciprocal
        return self.__truediv__(scalar)

    def dot(self, other: Self) -> float:
        """Sum of component-wise products."""
        return sum(a * b for a, b in zip(self, other))

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalised(self) -> Self:
        """Unit-length copy, or the zero vector when the length is degenerate."""
        ln = self.length()
        if ln < DEGENERATE_EPSILON:
            return type(self)(*(0.0 for _ in self))
        return type(self)(*(a / ln for a in self))

    @staticmethod
    def lerp(a: _Vector, b: _Vector, t: float) -> _Vector:
        """
        Linear interpolation from ``a`` to ``b``.

        Args:
            a: Start vector (returned for t <= 0)
            b: End vector (returned for t >= 1)
            t: Interpolation factor, clamped to [0, 1] (never extrapolates)

        Returns:
            Vector of the same type as ``a``
        """
        t = clamp(t, 0.0, 1.0)
        return type(a)(*(x + (y - x) * t for x, y in zip(a, b)))

    @staticmethod
    def distance(a: _Vector, b: _Vector) -> float:
        """Euclidean distance, ``length(b - a)``."""
        return (b - a).length()

    def to_tuple(self) -> tuple[float, ...]:
        return tuple(self)

    def to_array(self, dtype: np.dtype = np.float64) -> np.ndarray:
        return np.array(tuple(self), dtype=dtype)

    @classmethod
    def from_array(cls, values: ArrayLike) -> Self:
        """
        Build from a flat array-like of exactly ``len(cls)`` components.

        Raises:
            ValueError: If the component count does not match
        """
        arr = np.asarray(values, dtype=np.float64).ravel()
        if arr.shape[0] != len(cls.__slots__):
            raise ValueError(
                f"{cls.__name__} needs {len(cls.__slots__)} components, got {arr.shape[0]}"
            )
        return cls(*(float(v) for v in arr))


@dataclass(frozen=True, slots=True, eq=False)
class Vec2(_Vector):
    """2D vector."""

    x: float = 0.0
    y: float = 0.0

    def cross(self, other: Vec2) -> float:
        """Z component of the 3D cross product of (x, y, 0) and (ox, oy, 0)."""
        return self.x * other.y - self.y * other.x


@dataclass(frozen=True, slots=True, eq=False)
class Vec3(_Vector):
    """3D vector for positions, directions and scales."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    @staticmethod
    def zero() -> Vec3:
        return Vec3(0.0, 0.0, 0.0)

    @staticmethod
    def one() -> Vec3:
        return Vec3(1.0, 1.0, 1.0)

    @staticmethod
    def unit_x() -> Vec3:
        return Vec3(1.0, 0.0, 0.0)

    @staticmethod
    def unit_y() -> Vec3:
        return Vec3(0.0, 1.0, 0.0)

    @staticmethod
    def unit_z() -> Vec3:
        return Vec3(0.0, 0.0, 1.0)


@dataclass(frozen=True, slots=True, eq=False)
class Vec4(_Vector):
    """4D vector for homogeneous coordinates."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    def xyz(self) -> Vec3:
        return Vec3(self.x, self.y, self.z)

    @staticmethod
    def from_vec3(v: Vec3, w: float = 1.0) -> Vec4:
        return Vec4(v.x, v.y, v.z, w)
