"""
Least squares and linear solves on rank-revealing QR factors.

Public API:
    rrqr_lstsq(Q, R, P, y) -> LstsqSolution
    rrqr_solve(Q, R, P, y) -> LstsqSolution

Both also accept (factors, y), where factors is the result of any
decomposition in pyrrqr.decomposition.

Example:
    >>> from pyrrqr.decomposition import rrqr_decomp
    >>> from pyrrqr.lstsq import rrqr_lstsq
    >>> solution = rrqr_lstsq(rrqr_decomp(A), y)
    >>> print(solution.x)
    >>> print(solution.summary())
"""

from pyrrqr.lstsq.design import LstsqDesign
from pyrrqr.lstsq.solution import LstsqParams, LstsqSolution
from pyrrqr.lstsq.solvers import rrqr_lstsq, rrqr_solve

__all__ = [
    "rrqr_lstsq",
    "rrqr_solve",
    "LstsqDesign",
    "LstsqParams",
    "LstsqSolution",
]
