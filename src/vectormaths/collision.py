"""
Geometric primitives and closed-form intersection tests.

Ray predicates return the hit distance along the (normalized) ray direction,
or None when there is no hit in front of the origin. Overlap predicates
count touching shapes as intersecting.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from vectormaths.constants import PARALLEL_EPSILON
from vectormaths.vector import ArrayLike, Vec3

# =============================================================================
# Primitives
# =============================================================================


@dataclass(frozen=True, slots=True)
class Ray:
    """
    Half-line ``origin + t * direction`` for t >= 0.

    The direction is normalized on construction.
    """

    origin: Vec3 = field(default_factory=Vec3.zero)
    direction: Vec3 = field(default_factory=Vec3.unit_z)

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", self.direction.normalised())

    def point_at(self, t: float) -> Vec3:
        return self.origin + self.direction * t


@dataclass(frozen=True, slots=True)
class AABB:
    """
    Axis-aligned bounding box.

    Attributes:
        min: Minimum corner [x, y, z]
        max: Maximum corner [x, y, z]
    """

    min: Vec3 = field(default_factory=Vec3.zero)
    max: Vec3 = field(default_factory=Vec3.zero)

    @staticmethod
    def from_center_and_extents(center: Vec3, extents: Vec3) -> AABB:
        """Box spanning ``center +/- extents`` (extents are half sizes)."""
        return AABB(center - extents, center + extents)

    @staticmethod
    def from_points(points: ArrayLike) -> AABB:
        """
        Tightest box around a point cloud.

        Args:
            points: Array [N, 3] in format [x, y, z]
        """
        points = np.asarray(points, dtype=np.float64)

        if len(points) == 0:
            raise ValueError("points cannot be empty")

        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError(f"points must be [N, 3], got shape {points.shape}")

        return AABB(Vec3.from_array(points.min(axis=0)), Vec3.from_array(points.max(axis=0)))

    def center(self) -> Vec3:
        return (self.min + self.max) * 0.5

    def extents(self) -> Vec3:
        """Half size along each axis."""
        return (self.max - self.min) * 0.5

    def contains(self, point: Vec3) -> bool:
        """Boundary-inclusive point test."""
        return (
            self.min.x <= point.x <= self.max.x
            and self.min.y <= point.y <= self.max.y
            and self.min.z <= point.z <= self.max.z
        )

    def expand(self, point: Vec3) -> AABB:
        """Smallest box containing this box and ``point``."""
        return AABB(
            Vec3.from_array(np.minimum(self.min.to_array(), point.to_array())),
            Vec3.from_array(np.maximum(self.max.to_array(), point.to_array())),
        )

    def merge(self, other: AABB) -> AABB:
        """Smallest box containing both boxes."""
        return AABB(
            Vec3.from_array(np.minimum(self.min.to_array(), other.min.to_array())),
            Vec3.from_array(np.maximum(self.max.to_array(), other.max.to_array())),
        )


@dataclass(frozen=True, slots=True)
class Sphere:
    center: Vec3 = field(default_factory=Vec3.zero)
    radius: float = 1.0

    def contains(self, point: Vec3) -> bool:
        """Boundary-inclusive point test."""
        return (point - self.center).length_squared() <= self.radius * self.radius


# =============================================================================
# Ray queries
# =============================================================================


def ray_intersects_sphere(ray: Ray, sphere: Sphere) -> float | None:
    """
    Distance to the first hit of ``ray`` with ``sphere``.

    From inside the sphere the exit distance is returned.
    """
    oc = ray.origin - sphere.center
    b = oc.dot(ray.direction)
    c = oc.length_squared() - sphere.radius * sphere.radius
    discriminant = b * b - c

    if discriminant < 0.0:
        return None

    sqrt_disc = math.sqrt(discriminant)
    t = -b - sqrt_disc
    if t < 0.0:
        t = -b + sqrt_disc
    if t < 0.0:
        return None
    return t


def ray_intersects_plane(ray: Ray, normal: Vec3, point: Vec3) -> float | None:
    """
    Distance to the plane through ``point`` with ``normal``.

    Misses when the ray is parallel to the plane or the plane is behind the
    ray origin.
    """
    denom = normal.dot(ray.direction)
    if abs(denom) < PARALLEL_EPSILON:
        return None

    t = (point - ray.origin).dot(normal) / denom
    if t < 0.0:
        return None
    return t


def ray_intersects_aabb(ray: Ray, box: AABB) -> float | None:
    """
    Slab test against an axis-aligned box.

    Zero direction components divide to +/-inf, which keeps the slab
    comparisons correct without special cases. From inside the box the exit
    distance is returned.
    """
    origin = ray.origin.to_array()

    with np.errstate(divide="ignore", invalid="ignore"):
        inv_dir = 1.0 / ray.direction.to_array()
        t1 = (box.min.to_array() - origin) * inv_dir
        t2 = (box.max.to_array() - origin) * inv_dir

    # 0 * inf is NaN: a parallel ray lying on a slab plane is inside that slab
    on_plane = np.isnan(t1) | np.isnan(t2)
    t_near = float(np.max(np.where(on_plane, -np.inf, np.minimum(t1, t2))))
    t_far = float(np.min(np.where(on_plane, np.inf, np.maximum(t1, t2))))

    if t_far < 0.0 or t_near > t_far:
        return None
    return t_near if t_near >= 0.0 else t_far


# =============================================================================
# Overlap queries
# =============================================================================


def aabb_intersects_aabb(a: AABB, b: AABB) -> bool:
    return (
        a.min.x <= b.max.x
        and a.max.x >= b.min.x
        and a.min.y <= b.max.y
        and a.max.y >= b.min.y
        and a.min.z <= b.max.z
        and a.max.z >= b.min.z
    )


def sphere_intersects_sphere(a: Sphere, b: Sphere) -> bool:
    radius_sum = a.radius + b.radius
    return (b.center - a.center).length_squared() <= radius_sum * radius_sum


def point_in_aabb(point: Vec3, box: AABB) -> bool:
    return box.contains(point)
