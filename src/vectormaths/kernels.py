"""
Numba-optimized kernels for cofactor-based matrix operations.

All kernels work on flat column-major float64 arrays (element (r, c) at index
``c * n + r``) for n in {3, 4}. Multiplication is left to NumPy's BLAS path;
these kernels cover the cofactor expansions NumPy does not expose.
"""

from __future__ import annotations

import numpy as np
from numba import njit
from numpy.typing import NDArray

# ============================================================================
# Determinants
# ============================================================================


@njit(cache=True, nogil=True)
def determinant3_numba(m: NDArray[np.float64]) -> float:
    """
    Determinant of a 3x3 matrix by cofactor expansion along the first row.

    Args:
        m: Flat column-major matrix [9]
    """
    a00, a10, a20 = m[0], m[1], m[2]
    a01, a11, a21 = m[3], m[4], m[5]
    a02, a12, a22 = m[6], m[7], m[8]

    return (
        a00 * (a11 * a22 - a12 * a21)
        - a01 * (a10 * a22 - a12 * a20)
        + a02 * (a10 * a21 - a11 * a20)
    )


@njit(cache=True, nogil=True)
def minor_determinant_numba(m: NDArray[np.float64], n: int, row: int, col: int) -> float:
    """
    Determinant of the submatrix left after deleting ``row`` and ``col``.

    Args:
        m: Flat column-major matrix [n * n]
        n: Matrix dimension (3 or 4)
        row: Row to delete
        col: Column to delete
    """
    k = n - 1
    sub = np.empty(k * k)

    ci = 0
    for c in range(n):
        if c == col:
            continue
        ri = 0
        for r in range(n):
            if r == row:
                continue
            sub[ci * k + ri] = m[c * n + r]
            ri += 1
        ci += 1

    if k == 2:
        return sub[0] * sub[3] - sub[2] * sub[1]
    return determinant3_numba(sub)


@njit(cache=True, nogil=True)
def determinant_numba(m: NDArray[np.float64], n: int) -> float:
    """
    Determinant by cofactor expansion along the first row.

    The 4x4 case recurses into 3x3 minors.

    Args:
        m: Flat column-major matrix [n * n]
        n: Matrix dimension (3 or 4)
    """
    if n == 3:
        return determinant3_numba(m)

    total = 0.0
    sign = 1.0
    for c in range(n):
        total += sign * m[c * n] * minor_determinant_numba(m, n, 0, c)
        sign = -sign
    return total


# ============================================================================
# Inverse
# ============================================================================


@njit(cache=True, nogil=True)
def adjugate_inverse_numba(
    m: NDArray[np.float64], n: int, det: float, out: NDArray[np.float64]
) -> None:
    """
    Inverse as adjugate / determinant.

    The caller is responsible for rejecting singular matrices first.

    Args:
        m: Flat column-major matrix [n * n]
        n: Matrix dimension (3 or 4)
        det: Determinant of ``m`` (non-zero)
        out: Output array [n * n] (pre-allocated)

    Note: Modifies out in-place
    """
    inv_det = 1.0 / det
    for r in range(n):
        for c in range(n):
            sign = 1.0 if (r + c) % 2 == 0 else -1.0
            cofactor = sign * minor_determinant_numba(m, n, r, c)
            # adj = transpose(cofactors): cofactor (r, c) lands at (c, r)
            out[r * n + c] = cofactor * inv_det
