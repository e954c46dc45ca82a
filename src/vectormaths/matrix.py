"""
Column-major 3x3 and 4x4 matrices.

Element (row, col) is stored at flat index ``col * N + row``. Matrices are
immutable; every operation returns a new matrix. Composition and
matrix-vector products use NumPy, while determinant and inverse use the
cofactor kernels in ``vectormaths.kernels``.

Transform builders follow the column-vector convention: ``A * B`` applies
``B`` first. ``rotate_local`` post-multiplies (object space) and
``rotate_world`` pre-multiplies (world space); the two are not
interchangeable.
"""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import TYPE_CHECKING, Self, TypeAlias

import numpy as np

from vectormaths.constants import (
    DEGENERATE_EPSILON,
    EQUALITY_EPSILON,
    MAT3_SIZE,
    MAT4_SIZE,
    PARALLEL_EPSILON,
    SINGULAR_EPSILON,
)
from vectormaths.kernels import adjugate_inverse_numba, determinant_numba
from vectormaths.validators import validate_index
from vectormaths.vector import Vec3, Vec4

if TYPE_CHECKING:
    from vectormaths.quaternion import Quaternion

logger = logging.getLogger(__name__)

# Type aliases for better readability (Python 3.12+ syntax)
ArrayLike: TypeAlias = np.ndarray | tuple | list


def look_basis(back: Vec3, up: Vec3) -> tuple[Vec3, Vec3, Vec3]:
    """
    Right-handed orthonormal camera basis around a viewing axis.

    When ``up`` is (nearly) parallel to ``back`` the world axis least aligned
    with ``back`` replaces it, so the basis is never degenerate.

    Args:
        back: Unit vector pointing away from the target (camera +Z)
        up: Approximate up direction

    Returns:
        Tuple (right, up, back) of unit vectors
    """
    right = up.cross(back)
    if right.length() < PARALLEL_EPSILON:
        up = min(
            (Vec3.unit_x(), Vec3.unit_y(), Vec3.unit_z()),
            key=lambda axis: abs(axis.dot(back)),
        )
        right = up.cross(back)
    right = right.normalised()
    return right, back.cross(right), back


class _SquareMatrix:
    """Storage, access and algebra shared by Mat3 and Mat4."""

    __slots__ = ("_m",)

    SIZE: int = 0
    _VECTOR_TYPE: type = Vec3

    def __init__(self, values: ArrayLike | None = None):
        """Initialize from column-major values, or as identity."""
        n = self.SIZE
        if values is None:
            m = np.eye(n, dtype=np.float64).ravel()
        else:
            m = np.array(values, dtype=np.float64).ravel()
            if m.shape[0] != n * n:
                raise ValueError(
                    f"{type(self).__name__} needs {n * n} column-major values, got {m.shape[0]}"
                )
        m.flags.writeable = False
        self._m = m

    # -------------------------------------------------------------------------
    # Construction / conversion
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> Self:
        """Identity matrix (same as the default constructor)."""
        return cls()

    @classmethod
    def from_numpy(cls, array: ArrayLike) -> Self:
        """Build from a 2D array indexed ``[row, col]``."""
        arr = np.asarray(array, dtype=np.float64)
        if arr.shape != (cls.SIZE, cls.SIZE):
            raise ValueError(
                f"{cls.__name__} needs a {cls.SIZE}x{cls.SIZE} array, got shape {arr.shape}"
            )
        return cls(arr.T.ravel())

    @classmethod
    def from_rows(cls, rows: ArrayLike) -> Self:
        """Build from row-major nested sequences (reads like the written matrix)."""
        return cls.from_numpy(rows)

    def to_numpy(self) -> np.ndarray:
        """Writable 2D copy indexed ``[row, col]``."""
        n = self.SIZE
        return self._m.reshape(n, n).T.copy()

    @property
    def values(self) -> np.ndarray:
        """Read-only flat column-major storage."""
        return self._m

    # -------------------------------------------------------------------------
    # Element access
    # -------------------------------------------------------------------------

    @validate_index()
    def at(self, row: int, col: int) -> float:
        """
        Element at (row, col).

        Raises:
            IndexError: If row or col is outside [0, SIZE)
            TypeError: If row or col is not an int
        """
        return float(self._m[col * self.SIZE + row])

    def __getitem__(self, idx: tuple[int, int]) -> float:
        row, col = idx
        return self.at(row, col)

    # -------------------------------------------------------------------------
    # Algebra
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(np.all(np.abs(self._m - other._m) < EQUALITY_EPSILON))

    def __mul__(self, other):
        """
        Matrix product, matrix-vector product or scalar scaling.

        ``A * B`` composes so that ``B`` is applied first. Vectors are treated
        as columns: Mat3 takes Vec3 and Mat4 takes Vec4.
        """
        if type(other) is type(self):
            return type(self).from_numpy(self.to_numpy() @ other.to_numpy())
        if isinstance(other, self._VECTOR_TYPE):
            return self._VECTOR_TYPE.from_array(self.to_numpy() @ other.to_array())
        if isinstance(other, Real):
            return type(self)(self._m * float(other))
        return NotImplemented

    def __rmul__(self, scalar: float) -> Self:
        if not isinstance(scalar, Real):
            return NotImplemented
        return type(self)(self._m * float(scalar))

    def __matmul__(self, other):
        if isinstance(other, Real):
            return NotImplemented
        return self.__mul__(other)

    def __truediv__(self, scalar: float) -> Self:
        if not isinstance(scalar, Real):
            return NotImplemented
        return type(self)(self._m / float(scalar))

    def transpose(self) -> Self:
        """Swap rows and columns."""
        n = self.SIZE
        return type(self)(self._m.reshape(n, n).T.ravel())

    def determinant(self) -> float:
        """Cofactor expansion along the first row."""
        return float(determinant_numba(self._m, self.SIZE))

    def inverse(self) -> Self:
        """
        Inverse via adjugate / determinant.

        Singular matrices (``|det| < SINGULAR_EPSILON``) return the identity
        instead of raising.
        """
        det = self.determinant()
        if abs(det) < SINGULAR_EPSILON:
            logger.debug(
                "[%s] Singular matrix (det=%.3e), returning identity", type(self).__name__, det
            )
            return type(self)()

        out = np.empty(self.SIZE * self.SIZE, dtype=np.float64)
        adjugate_inverse_numba(self._m, self.SIZE, det, out)
        return type(self)(out)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_numpy().tolist()})"


class Mat3(_SquareMatrix):
    """3x3 matrix for rotations and linear maps."""

    __slots__ = ()

    SIZE = MAT3_SIZE
    _VECTOR_TYPE = Vec3

    def to_mat4(self) -> Mat4:
        """Embed as the upper-left block of an identity Mat4."""
        out = np.eye(MAT4_SIZE, dtype=np.float64)
        out[:3, :3] = self.to_numpy()
        return Mat4.from_numpy(out)


class Mat4(_SquareMatrix):
    """4x4 matrix for homogeneous 3D transforms."""

    __slots__ = ()

    SIZE = MAT4_SIZE
    _VECTOR_TYPE = Vec4

    def to_mat3(self) -> Mat3:
        """Extract upper-left 3x3 (rotation/scale)."""
        return Mat3.from_numpy(self.to_numpy()[:3, :3])

    def transform_point(self, v: Vec3) -> Vec3:
        """Apply to a point (w = 1), including translation."""
        return (self * Vec4.from_vec3(v, 1.0)).xyz()

    def transform_direction(self, v: Vec3) -> Vec3:
        """Apply to a direction (w = 0), ignoring translation."""
        return (self * Vec4.from_vec3(v, 0.0)).xyz()

    # -------------------------------------------------------------------------
    # Transform builders
    # -------------------------------------------------------------------------

    def translation(self, offset: Vec3) -> Mat4:
        """Add ``offset`` into the translation column."""
        m = self._m.copy()
        m[12] += offset.x
        m[13] += offset.y
        m[14] += offset.z
        return Mat4(m)

    def scale(self, factors: Vec3) -> Mat4:
        """Right-multiply by ``diag(factors, 1)``."""
        S = np.diag([factors.x, factors.y, factors.z, 1.0])
        return self * Mat4.from_numpy(S)

    def rotate_local(self, rotation: Quaternion) -> Mat4:
        """Object-space rotation: ``self * R``."""
        return self * rotation.to_rotation_matrix()

    def rotate_world(self, rotation: Quaternion) -> Mat4:
        """World-space rotation: ``R * self``."""
        return rotation.to_rotation_matrix() * self

    # -------------------------------------------------------------------------
    # Projection / view
    # -------------------------------------------------------------------------

    @staticmethod
    def perspective(fov: float, aspect: float, near: float, far: float) -> Mat4:
        """
        OpenGL-style perspective projection.

        Args:
            fov: Vertical field of view in radians
            aspect: Width / height
            near: Near clip distance
            far: Far clip distance
        """
        f = 1.0 / math.tan(fov / 2.0)
        dz = near - far

        return Mat4.from_rows(
            [
                [f / aspect, 0.0, 0.0, 0.0],
                [0.0, f, 0.0, 0.0],
                [0.0, 0.0, (far + near) / dz, 2.0 * far * near / dz],
                [0.0, 0.0, -1.0, 0.0],
            ]
        )

    @staticmethod
    def ortho(
        left: float, right: float, bottom: float, top: float, near: float, far: float
    ) -> Mat4:
        """
        OpenGL-style orthographic projection.

        Maps the box [left, right] x [bottom, top] x [-near, -far] to the
        [-1, 1] clip cube.

        Args:
            left, right: Horizontal extent in view space
            bottom, top: Vertical extent in view space
            near, far: Distances to the clip planes along -Z
        """
        dx = right - left
        dy = top - bottom
        dz = far - near

        return Mat4.from_rows(
            [
                [2.0 / dx, 0.0, 0.0, -(right + left) / dx],
                [0.0, 2.0 / dy, 0.0, -(top + bottom) / dy],
                [0.0, 0.0, -2.0 / dz, -(far + near) / dz],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    @staticmethod
    def look_at(eye: Vec3, target: Vec3, up: Vec3 | None = None) -> Mat4:
        """
        View matrix looking from ``eye`` towards ``target``.

        The basis is built from ``eye - target`` (the camera's +Z) and ``up``
        via cross products, assembled as a rotation, then the negated eye
        position is applied as translation.

        Degenerate input still yields a proper view matrix: ``eye == target``
        looks down -Z, and an ``up`` parallel to the view direction is
        replaced as in ``look_basis``.
        """
        if up is None:
            up = Vec3.unit_y()

        back = eye - target
        if back.length() < DEGENERATE_EPSILON:
            logger.debug("[Mat4] look_at eye equals target, looking down -Z")
            back = Vec3.unit_z()
        else:
            back = back.normalised()
        right, new_up, back = look_basis(back, up)

        rotation = Mat4.from_rows(
            [
                [right.x, right.y, right.z, 0.0],
                [new_up.x, new_up.y, new_up.z, 0.0],
                [back.x, back.y, back.z, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )
        return rotation * Mat4().translation(-eye)
