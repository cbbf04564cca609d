"""
Tests for the cached triangular inverse.

Validates:
    - Building the cache pivot by pivot reproduces inv(R11) and inv(R11) R12
    - update/downdate are mutually inverse (within 1e-4)
    - check_inverse detects a corrupted cache
"""

import numpy as np
import pytest

from pyrrqr.core.exceptions import InternalConsistencyError
from pyrrqr.core.compute.tolerances import INVERSE_CHECK
from pyrrqr.core.compute.linalg.inverse import (
    check_inverse,
    inverse_downdate,
    inverse_residual,
    inverse_update,
)


@pytest.fixture
def triangular(rng):
    """Well-conditioned 7 x 7 upper triangular R."""
    R = np.triu(rng.uniform(-0.5, 0.5, (7, 7)))
    R[np.diag_indices(7)] = rng.uniform(1.0, 2.0, 7) * rng.choice([-1.0, 1.0], 7)
    return R


def build_cache(R, k):
    AB = np.zeros(R.shape, order='F')
    for i in range(k):
        inverse_update(AB, R, i)
    return AB


class TestInverseCache:

    @pytest.mark.parametrize("k", [1, 3, 7])
    def test_built_cache_is_inverse(self, triangular, k):
        AB = build_cache(triangular, k)
        inv = np.linalg.inv(triangular[:k, :k])
        np.testing.assert_allclose(AB[:k, :k], inv, atol=1e-12)
        np.testing.assert_allclose(AB[:k, k:], inv @ triangular[:k, k:], atol=1e-12)
        np.testing.assert_array_equal(AB[k:], 0)

    def test_residual_small(self, triangular):
        inv_err, solve_err = inverse_residual(build_cache(triangular, 5), triangular, 5)
        assert inv_err < 1e-12
        assert solve_err < 1e-12

    def test_empty_cache(self, triangular):
        assert inverse_residual(np.zeros((7, 7)), triangular, 0) == (0.0, 0.0)


class TestUpdateDowndate:

    @pytest.mark.parametrize("k", [0, 2, 6])
    def test_downdate_undoes_update(self, triangular, k):
        AB = build_cache(triangular, k)
        before = AB.copy()
        inverse_update(AB, triangular, k)
        inverse_downdate(AB, triangular, k)
        np.testing.assert_allclose(AB, before, rtol=1e-4, atol=1e-12)

    @pytest.mark.parametrize("k", [1, 4, 7])
    def test_update_undoes_downdate(self, triangular, k):
        AB = build_cache(triangular, k)
        before = AB.copy()
        inverse_downdate(AB, triangular, k - 1)
        inverse_update(AB, triangular, k - 1)
        np.testing.assert_allclose(AB, before, rtol=1e-4, atol=1e-12)

    def test_downdate_matches_smaller_cache(self, triangular):
        AB = build_cache(triangular, 5)
        inverse_downdate(AB, triangular, 4)
        np.testing.assert_allclose(AB, build_cache(triangular, 4), atol=1e-12)


class TestCheckInverse:

    def test_passes_on_valid_cache(self, triangular):
        check_inverse(build_cache(triangular, 4), triangular, 4, INVERSE_CHECK.atol)

    def test_detects_corruption(self, triangular):
        AB = build_cache(triangular, 4)
        AB[1, 2] += 1.0
        with pytest.raises(InternalConsistencyError) as exc_info:
            check_inverse(AB, triangular, 4, INVERSE_CHECK.atol, name='AB0')
        assert exc_info.value.check == 'inverse'
        assert exc_info.value.detail['name'] == 'AB0'
        assert "AB0" in str(exc_info.value)
