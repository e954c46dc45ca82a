"""
Constants and default values for vectormaths.

Centralizes tolerances and canonical axes so every module applies the same
degeneracy thresholds.
"""

from __future__ import annotations

# =============================================================================
# Tolerances
# =============================================================================

EQUALITY_EPSILON = 1e-4  # Per-component tolerance for ==
DEGENERATE_EPSILON = 1e-6  # Below this length a vector/quaternion is degenerate
SINGULAR_EPSILON = 1e-6  # |det| below this means the matrix is singular
AXIS_ANGLE_EPSILON = 1e-6  # sin(angle/2) below this means the axis is undefined
SLERP_LINEAR_THRESHOLD = 0.9995  # Dot above this falls back to normalized lerp
PARALLEL_EPSILON = 1e-6  # |dot(normal, dir)| below this means ray || plane

# =============================================================================
# Canonical axes (x, y, z)
# =============================================================================

FALLBACK_AXIS = (1.0, 0.0, 0.0)  # Substituted when a rotation axis is undefined
FORWARD_AXIS = (0.0, 0.0, -1.0)  # Camera convention: forward is -Z
RIGHT_AXIS = (1.0, 0.0, 0.0)
UP_AXIS = (0.0, 1.0, 0.0)

# =============================================================================
# Dimensions
# =============================================================================

MAT3_SIZE = 3
MAT4_SIZE = 4
QUATERNION_DIMS = 4  # w, x, y, z
