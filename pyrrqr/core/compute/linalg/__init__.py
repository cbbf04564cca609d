"""
Linear algebra kernels for PyRRQR.

All kernels operate in place on explicit 2D numpy buffers owned by the
caller and handle exactly one matrix; batching is done by the domain
backends.

All functions follow these conventions:
    - Q is accumulated transposed and transposed once at the end
    - P is a permutation vector: column i of A Π is column P[i] of A
    - Scratch (norms, inverse caches) is passed in or owned by an engine
      object and reset before reuse

Submodules:
    norms: Overflow-safe scaled norms
    givens: Givens rotations
    pivoted_qr: Column-pivoted QR, full and economic
    rank: Numerical rank of a triangular factor
    inverse: Rank-one update/downdate of the triangular inverse
    strong_rrqr: Strong rank-revealing QR engine
    permute: In-place row un-permutation
"""

from pyrrqr.core.compute.linalg.norms import ScaledNorm, ColumnNorms
from pyrrqr.core.compute.linalg.givens import givens, rotate_rows
from pyrrqr.core.compute.linalg.pivoted_qr import (
    pivoted_qr_full,
    pivoted_qr_economic,
)
from pyrrqr.core.compute.linalg.rank import (
    estimate_rank,
    estimate_ranks,
    trailing_norms,
)
from pyrrqr.core.compute.linalg.inverse import (
    inverse_update,
    inverse_downdate,
    check_inverse,
)
from pyrrqr.core.compute.linalg.strong_rrqr import StrongRRQR
from pyrrqr.core.compute.linalg.permute import unpermute_rows

__all__ = [
    # Norms
    "ScaledNorm",
    "ColumnNorms",
    # Rotations
    "givens",
    "rotate_rows",
    # Pivoted QR
    "pivoted_qr_full",
    "pivoted_qr_economic",
    # Rank
    "estimate_rank",
    "estimate_ranks",
    "trailing_norms",
    # Strong RRQR
    "inverse_update",
    "inverse_downdate",
    "check_inverse",
    "StrongRRQR",
    # Solve
    "unpermute_rows",
]
