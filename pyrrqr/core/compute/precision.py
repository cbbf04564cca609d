"""
Numerical precision constants and utilities.

Provides machine epsilon and the working-precision rule shared by all
kernels: float32 input opts into single precision, everything else is
computed in double precision.
"""

import numpy as np


# Machine epsilon for float64
EPSILON_64: float = float(np.finfo(np.float64).eps)  # ~2.22e-16

# Machine epsilon for float32
EPSILON_32: float = float(np.finfo(np.float32).eps)  # ~1.19e-7


def machine_epsilon(dtype: np.dtype | type = np.float64) -> float:
    """
    Get machine epsilon for a given dtype.

    Args:
        dtype: NumPy dtype or type

    Returns:
        Machine epsilon for the dtype
    """
    return float(np.finfo(dtype).eps)


def working_dtype(*dtypes: np.dtype | type) -> np.dtype:
    """
    Select the dtype factorizations are carried out in.

    Single precision is used only if every operand is float32.

    Args:
        *dtypes: Dtypes of the operands

    Returns:
        np.dtype('float32') or np.dtype('float64')
    """
    if dtypes and all(np.dtype(d) == np.float32 for d in dtypes):
        return np.dtype(np.float32)
    return np.dtype(np.float64)
