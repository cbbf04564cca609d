"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def tall_matrix(rng):
    """Well-conditioned 8 x 5 matrix."""
    return rng.standard_normal((8, 5))


@pytest.fixture
def wide_matrix(rng):
    """Well-conditioned 4 x 7 matrix."""
    return rng.standard_normal((4, 7))


@pytest.fixture
def low_rank_matrix(rng):
    """8 x 6 matrix of rank 3."""
    return rng.standard_normal((8, 3)) @ rng.standard_normal((3, 6))


@pytest.fixture
def lower_ones():
    """4 x 4 lower triangular matrix of ones."""
    return np.tril(np.ones((4, 4)))


@pytest.fixture
def matrix_with_singular_values(rng):
    """Factory for random m x n matrices with prescribed singular values."""
    def make(m, n, s):
        k = len(s)
        U, _ = np.linalg.qr(rng.standard_normal((m, k)))
        V, _ = np.linalg.qr(rng.standard_normal((n, k)))
        return (U * np.asarray(s, dtype=float)) @ V.T
    return make
