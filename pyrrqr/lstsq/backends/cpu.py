"""
CPU backend for rank-aware least squares on pivoted QR factors.

For every batch element:

    1. r = estimated rank of R
    2. x[:r] = R[:r, :r]⁻¹ Q[:, :r]ᵗ y      (back substitution)
    3. x[r:] = 0                            (basic solution)
    4. undo the column permutation on the rows of x

Back substitution uses SciPy's triangular solver (LAPACK trtrs) rather
than a hand-written loop.
"""

from typing import Any

import numpy as np
from scipy.linalg import solve_triangular

from pyrrqr.core.result import Result
from pyrrqr.core.compute.timing import Timer
from pyrrqr.core.compute.linalg.rank import estimate_rank
from pyrrqr.core.compute.linalg.permute import unpermute_rows
from pyrrqr.lstsq.design import LstsqDesign
from pyrrqr.lstsq.solution import LstsqParams


class CPURRQRLstsqBackend:
    """
    CPU backend for broadcast least squares.

    Implements the Backend protocol for LstsqDesign -> LstsqParams.
    """

    @property
    def name(self) -> str:
        return 'cpu_rrqr_lstsq'

    def solve(self, design: LstsqDesign) -> Result[LstsqParams]:
        """
        Solve every system of the batch in the least-squares sense.

        Args:
            design: Validated, broadcast least-squares design

        Returns:
            Result containing LstsqParams

        Raises:
            NumericalError: If an R contains NaN or Inf
            PermutationError: If a P is not a permutation
        """
        timer = Timer()
        timer.start()

        batch_shape = design.batch_shape
        I, J = design.n_unknowns, design.n_rhs

        x = np.zeros(batch_shape + (I, J), dtype=design.dtype)
        rank = np.zeros(batch_shape, dtype=np.int32)
        scratch = np.empty(I, dtype=np.intp)

        for idx in np.ndindex(*batch_shape):
            Q, R, P, y = design.Q[idx], design.R[idx], design.P[idx], design.y[idx]
            x_i = x[idx]

            with timer.section('rank'):
                r = estimate_rank(R)
            rank[idx] = r

            if r > 0:
                with timer.section('back_substitution'):
                    rhs = Q[:, :r].T @ y
                    x_i[:r] = solve_triangular(
                        R[:r, :r], rhs, lower=False, check_finite=False
                    )

            with timer.section('permutation'):
                unpermute_rows(x_i, P, scratch)

        timer.stop()

        deficient = int(np.sum(rank < I))
        warnings: tuple[str, ...] = ()
        if deficient:
            warnings = (
                f"{deficient} of {rank.size} systems are rank-deficient "
                f"(rank < {I}); basic solutions returned",
            )

        info: dict[str, Any] = {
            'method': 'rrqr_lstsq',
            'dtype': str(design.dtype),
            'n_systems': int(rank.size),
            'n_rank_deficient': deficient,
        }

        return Result(
            params=LstsqParams(x=x, rank=rank),
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=warnings,
        )
