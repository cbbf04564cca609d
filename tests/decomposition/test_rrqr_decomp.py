"""
Tests for column-pivoted QR (full and economic) and rank estimation.

Validates:
    - A[..., :, P] = Q R and orthogonality of Q for all shapes
    - Economic layout for tall matrices, full fallback otherwise
    - Batch dimensions and precision handling
    - Input validation at the boundary
"""

import warnings

import numpy as np
import pytest

from pyrrqr import rrqr_decomp_full, rrqr_decomp, rrqr_rank
from pyrrqr.core.exceptions import DimensionError, NumericalError, ValidationError
from pyrrqr.core.compute.tolerances import select_tolerance


def assert_factorization(A, Q, R, P, atol=1e-12):
    np.testing.assert_allclose(Q @ R, np.take_along_axis(A, P[..., None, :], axis=-1), atol=atol)
    k = Q.shape[-1]
    QtQ = np.swapaxes(Q, -1, -2) @ Q
    np.testing.assert_allclose(QtQ, np.broadcast_to(np.eye(k), QtQ.shape), atol=atol)
    assert np.all(np.tril(R, -1) == 0)


# ═══════════════════════════════════════════════════════════════════════
# Full decomposition
# ═══════════════════════════════════════════════════════════════════════


class TestFullDecomposition:

    @pytest.mark.parametrize("shape", [(5, 5), (8, 5), (4, 7), (1, 1), (1, 4), (4, 1)])
    def test_factorization(self, rng, shape):
        A = rng.standard_normal(shape)
        Q, R, P = rrqr_decomp_full(A)
        m, n = shape
        assert Q.shape == (m, m)
        assert R.shape == (m, n)
        assert P.shape == (n,)
        assert P.dtype == np.int32
        assert_factorization(A, Q, R, P)

    def test_diagonal_is_decreasing(self, tall_matrix):
        _, R, _ = rrqr_decomp_full(tall_matrix)
        d = np.abs(np.diag(R))
        assert np.all(d[:-1] >= d[1:] - 1e-12)

    def test_first_pivot_is_largest_column(self, rng):
        A = rng.standard_normal((6, 4))
        A[:, 2] *= 10
        _, R, P = rrqr_decomp_full(A)
        assert P[0] == 2
        assert abs(R[0, 0]) == pytest.approx(np.linalg.norm(A[:, 2]))

    def test_batch(self, rng):
        A = rng.standard_normal((2, 3, 5, 4))
        Q, R, P = rrqr_decomp_full(A)
        assert Q.shape == (2, 3, 5, 5)
        assert R.shape == (2, 3, 5, 4)
        assert P.shape == (2, 3, 4)
        assert_factorization(A, Q, R, P)

    def test_batch_elements_independent(self, rng):
        A = rng.standard_normal((3, 6, 4))
        Q, R, P = rrqr_decomp_full(A)
        Q1, R1, P1 = rrqr_decomp_full(A[1])
        np.testing.assert_array_equal(Q[1], Q1)
        np.testing.assert_array_equal(R[1], R1)
        np.testing.assert_array_equal(P[1], P1)

    def test_empty_batch(self):
        Q, R, P = rrqr_decomp_full(np.zeros((0, 3, 2)))
        assert Q.shape == (0, 3, 3)
        assert R.shape == (0, 3, 2)
        assert P.shape == (0, 2)

    def test_zero_matrix(self):
        Q, R, P = rrqr_decomp_full(np.zeros((3, 4)))
        np.testing.assert_array_equal(Q, np.eye(3))
        np.testing.assert_array_equal(R, np.zeros((3, 4)))
        assert sorted(P.tolist()) == [0, 1, 2, 3]

    def test_float32(self, rng):
        A = rng.standard_normal((6, 4)).astype(np.float32)
        Q, R, P = rrqr_decomp_full(A)
        assert Q.dtype == np.float32
        assert R.dtype == np.float32
        tol = select_tolerance(R.dtype)
        assert_factorization(A.astype(np.float64), Q, R, P, atol=10 * tol.atol)

    def test_integer_input_promoted(self):
        A = np.arange(12).reshape(4, 3)
        Q, R, P = rrqr_decomp_full(A)
        assert R.dtype == np.float64
        assert_factorization(A.astype(float), Q, R, P)

    def test_input_not_modified(self, tall_matrix):
        A = tall_matrix.copy()
        rrqr_decomp_full(tall_matrix)
        np.testing.assert_array_equal(tall_matrix, A)

    def test_accepts_nested_lists(self):
        Q, R, P = rrqr_decomp_full([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
        assert R.shape == (3, 2)


# ═══════════════════════════════════════════════════════════════════════
# Economic decomposition
# ═══════════════════════════════════════════════════════════════════════


class TestEconomicDecomposition:

    def test_tall_shapes(self, rng):
        A = rng.standard_normal((7, 3))
        result = rrqr_decomp(A)
        Q, R, P = result
        assert Q.shape == (7, 3)
        assert R.shape == (3, 3)
        assert result.info['mode'] == 'economic'
        assert_factorization(A, Q, R, P)

    def test_wide_falls_back_to_full(self, rng):
        A = rng.standard_normal((3, 7))
        result = rrqr_decomp(A)
        assert result.Q.shape == (3, 3)
        assert result.R.shape == (3, 7)
        assert result.info['mode'] == 'full'
        assert result.info['requested_mode'] == 'economic'

    def test_square_falls_back_to_full(self, rng):
        A = rng.standard_normal((4, 4))
        result = rrqr_decomp(A)
        assert result.info['mode'] == 'full'
        assert_factorization(A, *result)

    def test_matches_full_decomposition(self, tall_matrix):
        Qf, Rf, Pf = rrqr_decomp_full(tall_matrix)
        Qe, Re, Pe = rrqr_decomp(tall_matrix)
        np.testing.assert_array_equal(Pe, Pf)
        np.testing.assert_allclose(np.abs(Re), np.abs(Rf[:5]), atol=1e-12)

    def test_batch(self, rng):
        A = rng.standard_normal((2, 9, 4))
        Q, R, P = rrqr_decomp(A)
        assert Q.shape == (2, 9, 4)
        assert R.shape == (2, 4, 4)
        assert_factorization(A, Q, R, P)

    def test_low_rank(self, low_rank_matrix):
        Q, R, P = rrqr_decomp(low_rank_matrix)
        assert_factorization(low_rank_matrix, Q, R, P)

    def test_zero_columns(self):
        A = np.zeros((5, 2))
        A[:, 1] = 1.0
        Q, R, P = rrqr_decomp(A)
        assert P[0] == 1
        assert_factorization(A, Q, R, P)


# ═══════════════════════════════════════════════════════════════════════
# Rank estimation
# ═══════════════════════════════════════════════════════════════════════


class TestRank:

    def test_full_rank(self, tall_matrix):
        assert rrqr_decomp_full(tall_matrix).rank == 5

    def test_low_rank(self, low_rank_matrix):
        assert rrqr_decomp(low_rank_matrix).rank == 3

    def test_lower_ones(self, lower_ones):
        assert rrqr_decomp_full(lower_ones).rank == 4

    def test_rank_of_factor(self, low_rank_matrix):
        _, R, _ = rrqr_decomp_full(low_rank_matrix)
        assert rrqr_rank(R) == 3

    def test_batch_shape(self, rng, low_rank_matrix):
        A = np.stack([low_rank_matrix, rng.standard_normal((8, 6))])
        rank = rrqr_rank(rrqr_decomp_full(A).R)
        assert rank.shape == (2,)
        assert rank.dtype == np.int32
        np.testing.assert_array_equal(rank, [3, 6])

    def test_zero(self):
        assert rrqr_rank(np.zeros((3, 3))) == 0

    def test_rejects_nan(self):
        with pytest.raises(NumericalError):
            rrqr_rank(np.array([[1.0, np.nan], [0.0, 1.0]]))

    def test_rejects_vector(self):
        with pytest.raises(DimensionError):
            rrqr_rank(np.ones(3))


# ═══════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════


class TestValidation:

    def test_rejects_vector(self):
        with pytest.raises(DimensionError):
            rrqr_decomp_full(np.ones(4))

    def test_rejects_complex(self):
        with pytest.raises(ValidationError, match="complex"):
            rrqr_decomp(np.ones((3, 2), dtype=complex))

    def test_rejects_strings(self):
        with pytest.raises(ValidationError):
            rrqr_decomp_full([["a", "b"], ["c", "d"]])

    def test_unknown_backend(self, tall_matrix):
        with pytest.raises(ValidationError, match="Unknown backend"):
            rrqr_decomp_full(tall_matrix, backend='gpu')

    def test_nan_warns(self):
        A = np.ones((3, 3))
        A[0, 0] = np.nan
        with pytest.warns(RuntimeWarning, match="NaN or Inf"):
            result = rrqr_decomp_full(A)
        assert result.warnings
        with pytest.raises(NumericalError):
            result.rank

    def test_finite_input_does_not_warn(self, tall_matrix):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            rrqr_decomp_full(tall_matrix)
