"""
Tests for the single-matrix column-pivoted QR kernels.

Validates:
    - A[:, P] = Q R and orthogonality for tall, square and wide shapes
    - Non-increasing |diag(R)| (pivoting order)
    - Economic layout agrees with the full one
    - Exact zeros below the diagonal
"""

import numpy as np
import pytest

from pyrrqr.core.compute.linalg.norms import ColumnNorms
from pyrrqr.core.compute.linalg.pivoted_qr import pivoted_qr_full, pivoted_qr_economic


def factor_full(A):
    m, n = A.shape
    R = A.copy()
    Q = np.empty((m, m))
    P = np.empty(n, dtype=np.int32)
    pivoted_qr_full(R, Q, P, ColumnNorms(n))
    return Q, R, P


def factor_economic(A):
    m, n = A.shape
    Q = A.copy()
    R = np.empty((n, n))
    P = np.empty(n, dtype=np.int32)
    pivoted_qr_economic(Q, R, P, ColumnNorms(n))
    return Q, R, P


# ═══════════════════════════════════════════════════════════════════════
# Full layout
# ═══════════════════════════════════════════════════════════════════════


class TestPivotedQRFull:

    @pytest.mark.parametrize("shape", [(7, 4), (5, 5), (3, 6), (1, 4), (4, 1)])
    def test_identity_and_orthogonality(self, rng, shape):
        A = rng.standard_normal(shape)
        Q, R, P = factor_full(A)
        m, n = shape
        assert Q.shape == (m, m)
        assert R.shape == (m, n)
        np.testing.assert_allclose(Q @ R, A[:, P], atol=1e-12)
        np.testing.assert_allclose(Q.T @ Q, np.eye(m), atol=1e-12)

    def test_permutation_is_bijection(self, rng):
        Q, R, P = factor_full(rng.standard_normal((6, 9)))
        assert sorted(P.tolist()) == list(range(9))

    def test_exactly_triangular(self, rng):
        _, R, _ = factor_full(rng.standard_normal((8, 5)))
        assert np.all(np.tril(R, -1) == 0)

    def test_diagonal_non_increasing(self, rng):
        _, R, _ = factor_full(rng.standard_normal((9, 6)))
        d = np.abs(np.diag(R))
        assert np.all(d[:-1] >= d[1:] * (1 - 1e-12))

    def test_largest_column_first(self):
        A = np.array([[1.0, 0.0, 10.0], [0.0, 2.0, 0.0]])
        _, _, P = factor_full(A)
        assert P[0] == 2

    def test_ties_go_to_lowest_index(self):
        _, _, P = factor_full(np.eye(3))
        np.testing.assert_array_equal(P, [0, 1, 2])

    def test_zero_matrix(self):
        Q, R, P = factor_full(np.zeros((3, 2)))
        np.testing.assert_array_equal(Q, np.eye(3))
        np.testing.assert_array_equal(R, np.zeros((3, 2)))
        np.testing.assert_array_equal(P, [0, 1])

    def test_scratch_reuse(self, rng):
        """The same norms object serves consecutive matrices."""
        norms = ColumnNorms(3)
        for _ in range(3):
            A = rng.standard_normal((5, 3))
            R, Q, P = A.copy(), np.empty((5, 5)), np.empty(3, dtype=np.int32)
            pivoted_qr_full(R, Q, P, norms)
            np.testing.assert_allclose(Q @ R, A[:, P], atol=1e-12)


# ═══════════════════════════════════════════════════════════════════════
# Economic layout
# ═══════════════════════════════════════════════════════════════════════


class TestPivotedQREconomic:

    @pytest.mark.parametrize("shape", [(6, 3), (10, 4), (2, 1)])
    def test_identity_and_orthogonality(self, rng, shape):
        A = rng.standard_normal(shape)
        Q, R, P = factor_economic(A)
        m, n = shape
        assert Q.shape == (m, n)
        assert R.shape == (n, n)
        np.testing.assert_allclose(Q @ R, A[:, P], atol=1e-12)
        np.testing.assert_allclose(Q.T @ Q, np.eye(n), atol=1e-12)
        assert np.all(np.tril(R, -1) == 0)

    def test_agrees_with_full(self, rng):
        A = rng.standard_normal((9, 4))
        Qe, Re, Pe = factor_economic(A)
        Qf, Rf, Pf = factor_full(A)
        np.testing.assert_array_equal(Pe, Pf)
        np.testing.assert_allclose(Re, Rf[:4], atol=1e-13)
        np.testing.assert_allclose(Qe, Qf[:, :4], atol=1e-12)

    def test_sparse_column_records_identity_rotations(self):
        """Skipped zeros still occupy a slot in the rotation record."""
        A = np.zeros((5, 2))
        A[0, 0] = 3.0
        A[4, 1] = 2.0
        Q, R, P = factor_economic(A)
        np.testing.assert_allclose(Q @ R, A[:, P], atol=1e-14)
        np.testing.assert_allclose(Q.T @ Q, np.eye(2), atol=1e-14)
