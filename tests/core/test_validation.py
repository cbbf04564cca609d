"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, dtype promotion, complex/object rejection
    - check_permutation_array: integer dtype requirement
    - check_min_ndim / check_dim: dimensionality checks
    - check_tolerance: scalar option validation
"""

import numpy as np
import pytest

from pyrrqr.core.exceptions import DimensionError, ValidationError
from pyrrqr.core.validation import (
    check_array,
    check_dim,
    check_min_ndim,
    check_permutation_array,
    check_tolerance,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to a real floating ndarray."""

    def test_nested_list_to_float64(self):
        result = check_array([[1, 2], [3, 4]], "A")
        assert isinstance(result, np.ndarray)
        assert result.dtype == np.float64
        assert result.shape == (2, 2)

    def test_int_promoted_to_float64(self):
        result = check_array(np.arange(4, dtype=np.int32), "A")
        assert result.dtype == np.float64

    def test_bool_promoted_to_float64(self):
        result = check_array(np.array([True, False]), "A")
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 0.0])

    def test_float32_preserved(self):
        result = check_array(np.ones(3, dtype=np.float32), "A")
        assert result.dtype == np.float32

    def test_complex_rejected(self):
        with pytest.raises(ValidationError, match="complex"):
            check_array(np.ones(3, dtype=complex), "A")

    def test_object_rejected(self):
        with pytest.raises(ValidationError, match="object"):
            check_array(np.array([1, "a", None], dtype=object), "A")

    def test_strings_rejected(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(np.array(["a", "b"]), "A")

    def test_name_in_message(self):
        with pytest.raises(ValidationError, match="my_param"):
            check_array(np.ones(2, dtype=complex), "my_param")


# ═══════════════════════════════════════════════════════════════════════
# check_permutation_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckPermutationArray:

    @pytest.mark.parametrize("dtype", [np.int8, np.int32, np.int64, np.uint16])
    def test_integer_dtypes_accepted(self, dtype):
        result = check_permutation_array(np.array([1, 0, 2], dtype=dtype), "P")
        assert result.dtype == dtype

    def test_float_rejected(self):
        with pytest.raises(ValidationError, match="integer"):
            check_permutation_array(np.array([1.0, 0.0]), "P")

    def test_list_of_ints_accepted(self):
        result = check_permutation_array([2, 0, 1], "P")
        assert np.issubdtype(result.dtype, np.integer)


# ═══════════════════════════════════════════════════════════════════════
# Dimension checks
# ═══════════════════════════════════════════════════════════════════════


class TestDimensions:

    def test_min_ndim_passes(self):
        check_min_ndim(np.zeros((2, 3, 4)), 2, "A")

    def test_min_ndim_fails(self):
        with pytest.raises(DimensionError, match="at least 2D"):
            check_min_ndim(np.zeros(3), 2, "A")

    def test_check_dim_passes(self):
        check_dim(3, 3, "match")

    def test_check_dim_fails_with_values(self):
        with pytest.raises(DimensionError, match=r"got 2, expected 3"):
            check_dim(2, 3, "Q and R don't match")


# ═══════════════════════════════════════════════════════════════════════
# check_tolerance
# ═══════════════════════════════════════════════════════════════════════


class TestCheckTolerance:

    def test_returns_float(self):
        value = check_tolerance(2, "dtol", 1.0)
        assert isinstance(value, float)
        assert value == 2.0

    def test_minimum_inclusive(self):
        assert check_tolerance(1.0, "dtol", 1.0) == 1.0

    def test_numpy_scalar_accepted(self):
        assert check_tolerance(np.float32(0.5), "ztol", 0.0) == 0.5

    def test_below_minimum(self):
        with pytest.raises(ValidationError, match="dtol"):
            check_tolerance(0.9, "dtol", 1.0)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            check_tolerance(float('nan'), "ztol", 0.0)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="real number"):
            check_tolerance(True, "ztol", 0.0)

    def test_string_rejected(self):
        with pytest.raises(ValidationError, match="str"):
            check_tolerance("1e-8", "ztol", 0.0)
