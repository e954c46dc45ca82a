"""
vectormaths - Spatial transformation math

Vector, matrix and quaternion algebra plus a hierarchical scene graph with
lazily cached transforms.

Features:
- Immutable Vec2/Vec3/Vec4 value types with approximate equality
- Column-major Mat3/Mat4 with Numba-compiled determinant and inverse
- Quaternion rotations: Hamilton product, slerp, Euler/axis-angle/matrix conversions
- SceneGraph arena of TransformNodes with dirty-flag cache invalidation
- Ray, AABB and Sphere intersection tests

Conventions:
- Matrices are column-major and act on column vectors: ``A * B`` applies ``B`` first
- Quaternions are (w, x, y, z); ``a * b`` applies ``b`` first
- Euler angles: ``q = qz(yaw) * qy(pitch) * qx(roll)``
- Camera convention: ``forward()`` is -Z

Example - Scene graph:
    >>> from vectormaths import SceneGraph, Quaternion, Vec3
    >>> import math
    >>>
    >>> graph = SceneGraph()
    >>> parent = graph.create_node(position=Vec3(10, 0, 0), name="parent")
    >>> child = graph.create_node(position=Vec3(5, 0, 0), name="child")
    >>> parent.add_child(child)
    >>> child.world_position()
    Vec3(x=15.0, y=0.0, z=0.0)
    >>>
    >>> parent.rotate(Quaternion.from_axis_angle(Vec3.unit_z(), math.pi / 2))
    >>> child.is_dirty
    True

Example - Rotations:
    >>> q = Quaternion.from_axis_angle(Vec3(0, 0, 1), math.pi / 2)
    >>> q.rotate_vector(Vec3(1, 0, 0))  # ~ (0, 1, 0)
    >>> q.to_rotation_matrix().transform_direction(Vec3(1, 0, 0))  # same
"""

__version__ = "0.1.0"

# Geometric primitives and intersection tests
from vectormaths.collision import (
    AABB,
    Ray,
    Sphere,
    aabb_intersects_aabb,
    point_in_aabb,
    ray_intersects_aabb,
    ray_intersects_plane,
    ray_intersects_sphere,
    sphere_intersects_sphere,
)

# Tolerances and canonical axes
from vectormaths.constants import (
    DEGENERATE_EPSILON,
    EQUALITY_EPSILON,
    SLERP_LINEAR_THRESHOLD,
)

# Matrices
from vectormaths.matrix import Mat3, Mat4

# Rotations
from vectormaths.quaternion import AxisAngle, EulerAngles, Quaternion

# Scene graph
from vectormaths.transform import MatrixCache, SceneGraph, TransformNode

# Vectors
from vectormaths.vector import Vec2, Vec3, Vec4, clamp

__all__ = [
    # Version
    "__version__",
    # Vectors
    "Vec2",
    "Vec3",
    "Vec4",
    "clamp",
    # Matrices
    "Mat3",
    "Mat4",
    # Rotations
    "Quaternion",
    "AxisAngle",
    "EulerAngles",
    # Scene graph
    "SceneGraph",
    "TransformNode",
    "MatrixCache",
    # Collision
    "Ray",
    "AABB",
    "Sphere",
    "ray_intersects_sphere",
    "ray_intersects_plane",
    "ray_intersects_aabb",
    "aabb_intersects_aabb",
    "sphere_intersects_sphere",
    "point_in_aabb",
    # Constants
    "EQUALITY_EPSILON",
    "DEGENERATE_EPSILON",
    "SLERP_LINEAR_THRESHOLD",
]
