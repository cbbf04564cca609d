"""
Input validation utilities for PyRRQR.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent. Everything here runs before
any factorization work starts.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numbers
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyrrqr.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a real floating point numpy array.

    Accepts any array-like. Integer and boolean data is promoted to
    float64, float32 is kept as is (single precision opt-in).

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with real floating dtype

    Raises:
        ValidationError: If input cannot be converted to a real numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if np.issubdtype(result.dtype, np.complexfloating):
        raise ValidationError(
            f"{name}: complex dtype {result.dtype} is not supported, expected real data"
        )

    if result.dtype != np.bool_ and not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_permutation_array(array: ArrayLike, name: str) -> NDArray[np.integer[Any]]:
    """
    Validate and convert a permutation vector (or batch of them).

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with integer dtype

    Raises:
        ValidationError: If input does not have an integer dtype
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if not np.issubdtype(result.dtype, np.integer):
        raise ValidationError(
            f"{name}: expected integer dtype, got {result.dtype}"
        )
    return result


def check_min_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has at least the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Minimum number of dimensions
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has too few dimensions
    """
    if array.ndim < ndim:
        raise DimensionError(
            f"{name}: expected at least {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_dim(actual: int, expected: int, message: str) -> None:
    """
    Verify that two dimensions agree.

    Args:
        actual: Observed dimension
        expected: Required dimension
        message: Description used as error prefix

    Raises:
        DimensionError: If the dimensions differ
    """
    if actual != expected:
        raise DimensionError(f"{message} (got {actual}, expected {expected})")


def check_tolerance(value: Any, name: str, minimum: float) -> float:
    """
    Validate a scalar tolerance option.

    NaN fails the comparison and is therefore rejected too.

    Args:
        value: The option value
        name: Option name for error messages
        minimum: Smallest admissible value (inclusive)

    Returns:
        The tolerance as a Python float

    Raises:
        ValidationError: If value is not a real number >= minimum
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(
            f"{name}: expected a real number, got {type(value).__name__}"
        )
    value = float(value)
    if not value >= minimum:
        raise ValidationError(f"{name}: invalid value {value}, must be >= {minimum}")
    return value
