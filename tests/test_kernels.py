"""
Tests for Numba-optimized matrix kernels.

Kernels are checked against NumPy's LAPACK results on column-major input.
"""

import numpy as np
import pytest

from vectormaths.kernels import (
    adjugate_inverse_numba,
    determinant3_numba,
    determinant_numba,
    minor_determinant_numba,
)


def to_column_major(rows: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(rows.T).ravel()


@pytest.fixture
def rng():
    return np.random.default_rng(42)


class TestDeterminant:
    """Test cofactor determinants."""

    def test_determinant3_matches_numpy(self, rng):
        for _ in range(20):
            rows = rng.standard_normal((3, 3))
            assert determinant3_numba(to_column_major(rows)) == pytest.approx(
                np.linalg.det(rows)
            )

    @pytest.mark.parametrize("n", [3, 4])
    def test_determinant_matches_numpy(self, rng, n):
        for _ in range(20):
            rows = rng.standard_normal((n, n))
            assert determinant_numba(to_column_major(rows), n) == pytest.approx(
                np.linalg.det(rows)
            )

    def test_minor_2x2(self):
        rows = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 10.0]])
        m = to_column_major(rows)

        # Delete row 0, col 0 -> [[5, 6], [8, 10]]
        assert minor_determinant_numba(m, 3, 0, 0) == pytest.approx(2.0)
        # Delete row 1, col 2 -> [[1, 2], [7, 8]]
        assert minor_determinant_numba(m, 3, 1, 2) == pytest.approx(-6.0)

    def test_minor_3x3(self):
        rows = np.diag([1.0, 2.0, 3.0, 4.0])
        m = to_column_major(rows)
        assert minor_determinant_numba(m, 4, 3, 3) == pytest.approx(6.0)
        assert minor_determinant_numba(m, 4, 0, 1) == pytest.approx(0.0)

    def test_read_only_input(self):
        m = to_column_major(np.diag([2.0, 3.0, 4.0, 5.0]))
        m.flags.writeable = False
        assert determinant_numba(m, 4) == pytest.approx(120.0)


class TestInverse:
    """Test adjugate inverse."""

    @pytest.mark.parametrize("n", [3, 4])
    def test_inverse_matches_numpy(self, rng, n):
        for _ in range(10):
            rows = rng.standard_normal((n, n)) + n * np.eye(n)
            m = to_column_major(rows)
            det = determinant_numba(m, n)

            out = np.empty(n * n)
            adjugate_inverse_numba(m, n, det, out)

            np.testing.assert_allclose(
                out, to_column_major(np.linalg.inv(rows)), rtol=1e-9, atol=1e-12
            )
