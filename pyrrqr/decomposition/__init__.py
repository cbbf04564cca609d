"""
Rank-revealing QR decompositions.

Public API:
    rrqr_decomp_full(A, ...) -> QRSolution
    rrqr_decomp(A, ...) -> QRSolution
    srrqr_decomp_full(A, ...) -> StrongQRSolution
    rrqr_rank(R) -> int32 array

All functions accept batches [..., M, N] and handle:
    - Input validation
    - Design construction
    - Backend selection
    - Result wrapping

Example:
    >>> from pyrrqr.decomposition import srrqr_decomp_full
    >>> Q, R, P, rank = srrqr_decomp_full(A)
    >>> print(srrqr_decomp_full(A).summary())
"""

from pyrrqr.decomposition.design import DecompositionDesign
from pyrrqr.decomposition.solution import (
    QRParams,
    QRSolution,
    StrongQRParams,
    StrongQRSolution,
)
from pyrrqr.decomposition.solvers import (
    rrqr_decomp_full,
    rrqr_decomp,
    srrqr_decomp_full,
    rrqr_rank,
)

__all__ = [
    "rrqr_decomp_full",
    "rrqr_decomp",
    "srrqr_decomp_full",
    "rrqr_rank",
    "DecompositionDesign",
    "QRParams",
    "QRSolution",
    "StrongQRParams",
    "StrongQRSolution",
]
