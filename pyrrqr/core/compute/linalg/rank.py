"""
Numerical rank of a triangular factor.

The rank is the size of the leading block whose trailing remainder is
not negligible. Working upwards from the last diagonal row, the norm of
the trailing trapezoid R[i:, i:] is accumulated. The threshold is
sqrt(eps) times the norm of the whole trapezoid, which serves as a cheap
stand-in for ‖R‖. The rank is the largest r for which the trailing
norm from row r-1 still exceeds it.

References:
    Golub, G. H., & Van Loan, C. F. (2013). Matrix Computations, 4th ed.
    Section 5.4.3 (Numerical rank and AΠ = QR).
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.exceptions import NumericalError
from pyrrqr.core.compute.precision import machine_epsilon
from pyrrqr.core.compute.linalg.norms import ScaledNorm


def trailing_norms(R: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """
    Norms of the trailing trapezoids R[i:, i:] for i < min(m, n).

    Raises:
        NumericalError: If any of the norms is not finite
    """
    m, n = R.shape
    L = min(m, n)
    norm = ScaledNorm()
    out = np.empty(L, dtype=R.dtype)
    for i in range(L - 1, -1, -1):
        norm.include_many(R[i, i:])
        out[i] = norm.result
        if not np.isfinite(out[i]):
            raise NumericalError(
                f"Infinity or NaN encountered during rank estimation (row {i})."
            )
    return out


def estimate_rank(R: NDArray[np.floating[Any]]) -> int:
    """
    Estimate the numerical rank of an upper triangular (trapezoidal) R.

    Args:
        R: (m, n) triangular factor of a pivoted QR decomposition

    Returns:
        Rank r in [0, min(m, n)]

    Raises:
        NumericalError: If R contains NaN or Inf in its upper trapezoid
    """
    tail = trailing_norms(R)
    r = tail.shape[0]
    if r == 0:
        return 0

    threshold = np.sqrt(machine_epsilon(R.dtype)) * tail[0]

    while r > 0 and tail[r - 1] <= threshold:
        r -= 1
    return r


def estimate_ranks(R: NDArray[np.floating[Any]]) -> NDArray[np.int32]:
    """
    Estimate the rank of every matrix in a batch [..., M, N].

    Returns:
        int32 array shaped like the batch dimensions
    """
    *batch, m, n = R.shape
    size = int(np.prod(batch, dtype=np.int64))
    flat = R.reshape(size, m, n)
    ranks = np.array([estimate_rank(r) for r in flat], dtype=np.int32)
    return ranks.reshape(tuple(batch))
