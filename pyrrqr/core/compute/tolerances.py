"""
Tolerance tiers for numerical validation.

Defines precision expectations for the two working precisions:
- FP64: factorization identity and orthogonality at a small multiple of eps
- FP32: relaxed for single-precision arithmetic

Used by the test suite and by the strong RRQR invariant checks.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Double precision factor checks (‖AΠ − QR‖, ‖QᵗQ − I‖)
CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU double precision : identity holds to O(n eps)',
)

# Single precision opt-in
CPU_FP32 = ToleranceTier(
    rtol=1e-4,
    atol=1e-5,
    name='cpu_fp32',
    description='CPU single precision : identity holds to O(n eps32)',
)

# Cached triangular inverse vs. R (AB·R ≈ I). Errors grow with cond(R11).
INVERSE_CHECK = ToleranceTier(
    rtol=1e-4,
    atol=1e-4,
    name='inverse_check',
    description='update/downdate round trip and AB·R consistency',
)

# Running column norms vs. freshly computed ones
COLUMN_NORM_CHECK_FP64 = ToleranceTier(
    rtol=1e-8,
    atol=1e-8,
    name='column_norm_check_fp64',
    description='incremental column norms, double precision',
)

COLUMN_NORM_CHECK_FP32 = ToleranceTier(
    rtol=1e-3,
    atol=1e-4,
    name='column_norm_check_fp32',
    description='incremental column norms, single precision',
)

# Predicted vs. actual log2|det R11| after a strong swap
LOGDET_CHECK_ATOL: float = 1e-6


def select_tolerance(dtype: np.dtype | type) -> ToleranceTier:
    """Select the factor-check tolerance tier for a working dtype."""
    if np.dtype(dtype) == np.float32:
        return CPU_FP32
    return CPU_FP64


def select_norm_tolerance(dtype: np.dtype | type) -> ToleranceTier:
    """Select the column-norm check tolerance tier for a working dtype."""
    if np.dtype(dtype) == np.float32:
        return COLUMN_NORM_CHECK_FP32
    return COLUMN_NORM_CHECK_FP64
