"""
PyRRQR: rank-revealing QR decompositions for Python.

Batched column-pivoted and strong rank-revealing QR factorizations
built on Givens rotations, together with rank-aware least squares on
the resulting factors.

Submodules:
    decomposition: rrqr_decomp_full, rrqr_decomp, srrqr_decomp_full, rrqr_rank
    lstsq: rrqr_lstsq, rrqr_solve
"""

__version__ = "0.1.0"

from pyrrqr import decomposition
from pyrrqr import lstsq
from pyrrqr.decomposition import (
    rrqr_decomp_full,
    rrqr_decomp,
    srrqr_decomp_full,
    rrqr_rank,
)
from pyrrqr.lstsq import rrqr_lstsq, rrqr_solve

__all__ = [
    "__version__",
    "decomposition",
    "lstsq",
    "rrqr_decomp_full",
    "rrqr_decomp",
    "srrqr_decomp_full",
    "rrqr_rank",
    "rrqr_lstsq",
    "rrqr_solve",
]
