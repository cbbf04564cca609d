"""
Strong rank-revealing QR decomposition.

Extends column-pivoted QR with column swaps between the leading
("kept") block and the trailing ("rest") block, in the spirit of Gu and
Eisenstat. A swap of kept column i with rest column j changes |det R11|
by the factor

    F(i, j) = hypot( (inv(R11) R12)[i, j], ‖row i of inv(R11)‖ · ‖R22[:, j]‖ )

so any swap with F > dtol strictly grows the determinant. The engine
performs such swaps until none is left, while at the same time searching
for the smallest rank whose remainder ‖R22‖ is below ztol.

The rank search keeps two pointers:

    k0  validated rank; AB0 holds the inverse cache for it
    k   tentative rank; AB holds the inverse cache for it
    K   current upper bound for the rank

with k0 <= k <= K. Growing k runs ordinary pivoted elimination steps,
bisecting towards (k0 + K) // 2. Finding a negligible remainder narrows
K down to k and rolls back to the checkpoint.

All buffers except R, Q and P are owned by the engine and reused for
every matrix of a batch.

References:
    Gu, M., & Eisenstat, S. C. (1996). Efficient algorithms for computing
    a strong rank-revealing QR factorization. SIAM J. Sci. Comput., 17(4).
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.exceptions import InternalConsistencyError, NumericalError
from pyrrqr.core.compute.tolerances import (
    INVERSE_CHECK,
    LOGDET_CHECK_ATOL,
    select_norm_tolerance,
)
from pyrrqr.core.compute.linalg.givens import givens, rotate_rows
from pyrrqr.core.compute.linalg.inverse import (
    check_inverse,
    cycle_rows,
    inverse_downdate,
    inverse_update,
)
from pyrrqr.core.compute.linalg.norms import ColumnNorms, ScaledNorm


class StrongRRQR:
    """
    Strong RRQR engine for matrices of one fixed shape.

    Usage:
        engine = StrongRRQR(m, n, np.float64)
        for R, Q, P in batch:
            rank = engine.factor(R, Q, P, dtol=1.01, ztol=1e-8)

    Args:
        m, n: Matrix shape
        dtype: Working dtype
        check_invariants: Verify the inverse caches, column norms, rank
            bracket and swap progress after every step (slow)
    """

    def __init__(
        self,
        m: int,
        n: int,
        dtype: np.dtype | type = np.float64,
        *,
        check_invariants: bool = False,
    ):
        self.m = m
        self.n = n
        self.dtype = np.dtype(dtype)
        self.check_invariants = check_invariants

        # column-major: columns of AB are walked, rows of R are walked
        self.AB = np.zeros((m, n), dtype=self.dtype, order='F')
        self.AB0 = np.zeros((m, n), dtype=self.dtype, order='F')
        self.norms = ColumnNorms(n, self.dtype)
        self._rest = ScaledNorm()

        self.k0 = 0
        self.k = 0
        self.K = 0
        self.swaps = 0
        self.dtol = 1.0
        self.ztol = 0.0

        self.R: NDArray[np.floating[Any]] | None = None
        self.Q: NDArray[np.floating[Any]] | None = None
        self.P: NDArray[np.integer[Any]] | None = None

    # === Driver ===

    def factor(
        self,
        R: NDArray[np.floating[Any]],
        Q: NDArray[np.floating[Any]],
        P: NDArray[np.integer[Any]],
        dtol: float,
        ztol: float,
    ) -> int:
        """
        Factor one matrix in place.

        Args:
            R: (m, n) working copy of A; overwritten with the triangular factor
            Q: (m, m) output buffer for the orthogonal factor
            P: (n,) output buffer for the column permutation
            dtol: Largest tolerated determinant growth factor (>= 1)
            ztol: Remainder norm below which the rank is capped (>= 0)

        Returns:
            The estimated numerical rank

        Raises:
            NumericalError: If a non-finite remainder norm is encountered
            InternalConsistencyError: On violated invariants (checked mode)
        """
        m, n = self.m, self.n
        self.R, self.Q, self.P = R, Q, P
        self.dtol, self.ztol = dtol, ztol

        P[:] = np.arange(n)
        Q[...] = 0
        np.fill_diagonal(Q, 1)
        self.AB.fill(0)
        self.AB0.fill(0)

        self.k0 = self.k = 0
        self.K = min(m, n)
        self.swaps = 0
        self._update_col_norms()

        while True:
            if self.check_invariants:
                self._check_state()

            if self._rest_norm() <= self.ztol:
                self.K = self.k
                if self.k0 < self.k:
                    self._adjust_k(increase=False)
                elif self.k == n:
                    break

            p, q, F = self._best_swap()

            if not F > self.dtol:
                if self.k0 >= self.K:
                    break
                self._adjust_k(increase=True)
                continue

            logdet = self._logdet() + math.log2(F) if self.check_invariants else None
            self._swap(p, q)
            self.swaps += 1
            if logdet is not None:
                self._check_progress(logdet, F)

        # Qᵗ was accumulated
        Q[...] = Q.T.copy()
        return self.k

    # === Elimination ===

    def _swap_elim(self, p: int) -> None:
        """Swap column p into position k and rotate away its subdiagonal."""
        R, Q, k = self.R, self.Q, self.k

        R[:, [k, p]] = R[:, [p, k]]
        self.AB0[:k, [k, p]] = self.AB0[:k, [p, k]]
        self.AB[:k, [k, p]] = self.AB[:k, [p, k]]
        self.P[[k, p]] = self.P[[p, k]]

        self.norms.reset()
        for j in range(k + 1, self.m):
            if R[j, k] != 0:
                c, s, r = givens(R[k, k], R[j, k])
                R[j, k] = 0
                if s != 0:
                    R[k, k] = r
                    rotate_rows(R, k, j, c, s, start=k + 1)
                    rotate_rows(Q, k, j, c, s)
            self.norms.include(R[j, k + 1:], start=k + 1)

    def _pivot_elim(self) -> None:
        """Ordinary pivoting step at position k."""
        k = self.k
        p = k + int(np.argmax(self.norms.values(k)))
        self._swap_elim(p)

    def _update_col_norms(self) -> None:
        """Recompute the remainder norms of columns k.. from scratch."""
        k = self.k
        self.norms.reset()
        for i in range(k, self.m):
            self.norms.include(self.R[i, k:], start=k)

    def _rest_norm(self) -> float:
        """Frobenius norm of the untreated remainder R22."""
        self._rest.reset()
        self._rest.include_many(self.norms.values(self.k))
        rest = self._rest.result
        if not math.isfinite(rest):
            raise NumericalError(
                f"Infinity or NaN encountered in the remainder norm at rank {self.k}."
            )
        return rest

    # === Rank search ===

    def _copy(self, src: NDArray[np.floating[Any]], dst: NDArray[np.floating[Any]]) -> None:
        dst[:self.k] = src[:self.k]

    def _adjust_k(self, increase: bool) -> None:
        """
        Move the tentative rank towards the middle of [k0, K].

        increase=True grows the validated rank by one pivot step first.
        increase=False rolls back to the validated checkpoint. Hitting a
        negligible remainder on the way narrows K and rolls back again.
        """
        if self.check_invariants:
            self._check_bracket()

        if increase:
            if self.check_invariants and not self.k < self.K:
                raise InternalConsistencyError(
                    f"cannot grow rank {self.k} beyond bound {self.K}",
                    check='bracket',
                    detail={'k0': self.k0, 'k': self.k, 'K': self.K},
                )
            self._pivot_elim()
            inverse_update(self.AB, self.R, self.k)
            self.k += 1
            self._copy(self.AB, self.AB0)
            self.k0 = self.k
        else:
            self._copy(self.AB0, self.AB)
            self.k = self.k0
            self._update_col_norms()

        mid = (self.k0 + self.K) // 2

        while self.k < mid:
            if self._rest_norm() <= self.ztol:
                self.K = self.k
                if self.k0 < self.k:
                    self._copy(self.AB0, self.AB)
                    self.k = self.k0
                    self._update_col_norms()
                    mid = (self.k0 + self.K) // 2
                    increase = False
                    continue
                break

            if increase:
                self._pivot_elim()

            inverse_update(self.AB, self.R, self.k)
            self.k += 1

            if not increase:
                self._update_col_norms()

    # === Swapping ===

    def _best_swap(self) -> tuple[int, int, float]:
        """
        Find the kept/rest pair with the largest growth factor.

        Returns:
            (p, q, F); F is -inf if either block is empty
        """
        k, n = self.k, self.n
        if k == 0 or k == n:
            return -1, -1, -math.inf

        # row norms of inv(R11) go into the (otherwise unused) leading slots
        self.norms.reset(0, k)
        for j in range(k):
            self.norms.include(self.AB[:j + 1, j])

        rows = self.norms.values(0, k)
        cols = self.norms.values(k)
        growth = np.hypot(self.AB[:k, k:], np.outer(rows, cols))

        # NaN wins argmax and then fails the F > dtol test
        flat = int(np.argmax(growth))
        p, j = divmod(flat, n - k)
        return p, k + j, float(growth[p, j])

    def _retriangulate(
        self,
        p: int,
        last: int,
        buffers: tuple[NDArray[np.floating[Any]], ...],
    ) -> None:
        """
        Rotate the Hessenberg block R[p:last+1, p:last+1] back to triangular.

        The same rotations go to Q (rows) and to the inverse caches
        (columns). Row `last` of each cache, which received the moved
        column's entries, is rotated separately because it lies outside
        the triangular part.
        """
        R, Q = self.R, self.Q
        for i in range(p, last):
            if R[i + 1, i] != 0:
                c, s, r = givens(R[i, i], R[i + 1, i])
                R[i + 1, i] = 0
                if s != 0:
                    R[i, i] = r
                    rotate_rows(R, i, i + 1, c, s, start=i + 1)
                    rotate_rows(Q, i, i + 1, c, s)
                    for AB in buffers:
                        rotate_rows(AB.T, i, i + 1, c, s, stop=i + 1)
                        AB[last, i + 1] = -s * AB[last, i] + c * AB[last, i + 1]
            for AB in buffers:
                AB[last, i] = 0

    def _cycle_columns(self, p: int, last: int) -> None:
        """Move column p of R (and entry p of P) to position last."""
        self.R[:, p:last + 1] = np.roll(self.R[:, p:last + 1], -1, axis=1)
        self.P[p:last + 1] = np.roll(self.P[p:last + 1], -1)

    def _swap(self, p: int, q: int) -> None:
        """Exchange kept column p with rest column q."""
        AB, AB0 = self.AB, self.AB0

        # the validated block loses column p, too
        if p < self.k0:
            self.k0 -= 1
            k0 = self.k0
            self._cycle_columns(p, k0)
            cycle_rows(AB, p, k0)
            cycle_rows(AB0, p, k0)
            self._retriangulate(p, k0, (AB, AB0))
            inverse_downdate(AB0, self.R, k0)
            p = k0
            self.k0 += 1

        self.k -= 1
        k = self.k

        self._cycle_columns(p, k)
        cycle_rows(AB, p, k)
        # AB0 only sees columns p..k as part of its rest block
        AB0[:self.k0, p:k + 1] = np.roll(AB0[:self.k0, p:k + 1], -1, axis=1)
        self._retriangulate(p, k, (AB,))

        inverse_downdate(AB, self.R, k)
        self._swap_elim(q)

        if p < self.k0:
            inverse_update(AB0, self.R, p)

        inverse_update(AB, self.R, k)
        self.k += 1

    # === Invariant checks ===

    def _check_bracket(self) -> None:
        if not 0 <= self.k0 <= self.k <= self.K <= min(self.m, self.n):
            raise InternalConsistencyError(
                f"rank bracket violated: k0={self.k0}, k={self.k}, K={self.K}",
                check='bracket',
                detail={'k0': self.k0, 'k': self.k, 'K': self.K},
            )

    def _check_state(self) -> None:
        """Full consistency check of R, the inverse caches and the norms."""
        R, k = self.R, self.k
        self._check_bracket()

        below = np.tril(R[:, :k], -1)
        if np.any(below != 0):
            raise InternalConsistencyError(
                f"R is not triangular in its first {k} columns",
                check='triangular',
                detail={'k': k, 'max_below_diagonal': float(np.abs(below).max())},
            )

        check_inverse(self.AB, R, k, INVERSE_CHECK.atol, name='AB')
        check_inverse(self.AB0, R, self.k0, INVERSE_CHECK.atol, name='AB0')

        tier = select_norm_tolerance(self.dtype)
        running = self.norms.values(k)
        fresh = np.linalg.norm(R[k:, k:], axis=0)
        if not np.allclose(running, fresh, rtol=tier.rtol, atol=tier.atol):
            raise InternalConsistencyError(
                f"running column norms drifted at rank {k}",
                check='column_norms',
                detail={'k': k, 'max_error': float(np.abs(running - fresh).max())},
            )

    def _logdet(self) -> float:
        """log2 |det R11| at the current tentative rank."""
        d = np.abs(np.diag(self.R)[:self.k])
        return float(np.sum(np.log2(d)))

    def _check_progress(self, predicted: float, F: float) -> None:
        """A committed swap must grow |det R11| by exactly F."""
        actual = self._logdet()
        if not abs(actual - predicted) <= LOGDET_CHECK_ATOL * max(1.0, abs(predicted)):
            raise InternalConsistencyError(
                f"swap did not grow log2|det R11| as predicted: "
                f"{actual} != {predicted} (F={F})",
                check='progress',
                detail={'predicted': predicted, 'actual': actual, 'F': F},
            )
