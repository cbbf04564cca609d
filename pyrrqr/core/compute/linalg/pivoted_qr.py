"""
Column-pivoted QR decomposition via Givens rotations.

Computes A Π = Q R for a single matrix, where Π is encoded by the
permutation vector P (column i of A Π is column P[i] of A). At every
step the remaining column with the largest trailing norm is moved to
the front and the entries below its diagonal are rotated away row by
row.

Two layouts are provided:
    pivoted_qr_full:     Q is (m, m), R is (m, n)
    pivoted_qr_economic: m > n only, Q is (m, n), R is (n, n)

The economic path records every rotation during elimination and
replays them, last to first, against [I; 0] afterwards. Each rotation
then only touches the n columns of the thin Q instead of m columns of
a full one.

All kernels work in place on caller-owned buffers. Q is accumulated
transposed (rotations act on rows, exactly like on R) and is transposed
once at the end.

References:
    Golub, G. H., & Van Loan, C. F. (2013). Matrix Computations, 4th ed.
    Section 5.4.2 (QR with column pivoting).
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.exceptions import InternalConsistencyError
from pyrrqr.core.compute.linalg.givens import givens, rotate_rows
from pyrrqr.core.compute.linalg.norms import ColumnNorms


def _eliminate(
    A: NDArray[np.floating[Any]],
    P: NDArray[np.integer[Any]],
    norms: ColumnNorms,
    Q: NDArray[np.floating[Any]] | None,
    rotations: list[tuple[float, float]] | None,
) -> None:
    """
    Shared elimination loop of both layouts.

    Rotations are either applied to Q right away (full layout) or
    appended to `rotations` (economic layout).
    """
    m, n = A.shape

    norms.reset()
    for row in A:
        norms.include(row)

    for i in range(min(m, n)):
        # argmax returns the first NaN if there is one, so corrupted
        # columns are pivoted to the front instead of being skipped
        p = i + int(np.argmax(norms.values(i, n)))
        if p != i:
            A[:, [i, p]] = A[:, [p, i]]
            P[[i, p]] = P[[p, i]]

        norms.reset(i)

        for j in range(i + 1, m):
            if A[j, i] != 0:
                c, s, r = givens(A[i, i], A[j, i])
                A[i, i] = r
                A[j, i] = 0
                rotate_rows(A, i, j, c, s, start=i + 1)
                if Q is not None:
                    # rows i and j of Qᵗ are still zero beyond column j
                    rotate_rows(Q, i, j, c, s, stop=j + 1)
            else:
                c, s = 1.0, 0.0
            if rotations is not None:
                rotations.append((c, s))
            norms.include(A[j, i + 1:], start=i + 1)


def pivoted_qr_full(
    R: NDArray[np.floating[Any]],
    Q: NDArray[np.floating[Any]],
    P: NDArray[np.integer[Any]],
    norms: ColumnNorms,
) -> None:
    """
    Full column-pivoted QR of one matrix, in place.

    Args:
        R: (m, n) working copy of A; overwritten with the triangular factor
        Q: (m, m) output buffer for the orthogonal factor
        P: (n,) output buffer for the column permutation
        norms: Scratch with at least n slots, reset here
    """
    m, n = R.shape

    P[:] = np.arange(n)
    Q[...] = 0
    np.fill_diagonal(Q, 1)

    _eliminate(R, P, norms, Q=Q, rotations=None)

    Q[...] = Q.T.copy()


def pivoted_qr_economic(
    Q: NDArray[np.floating[Any]],
    R: NDArray[np.floating[Any]],
    P: NDArray[np.integer[Any]],
    norms: ColumnNorms,
) -> None:
    """
    Thin column-pivoted QR of one tall matrix (m > n), in place.

    Args:
        Q: (m, n) working copy of A; overwritten with the thin orthogonal factor
        R: (n, n) output buffer for the triangular factor
        P: (n,) output buffer for the column permutation
        norms: Scratch with at least n slots, reset here

    Raises:
        InternalConsistencyError: If the rotation replay does not consume
            exactly the recorded rotations
    """
    m, n = Q.shape

    P[:] = np.arange(n)

    # phase 1: eliminate, recording (c, s) of every row pair
    rotations: list[tuple[float, float]] = []
    _eliminate(Q, P, norms, Q=None, rotations=rotations)

    expected = n * (2 * m - n - 1) // 2
    if len(rotations) != expected:
        raise InternalConsistencyError(
            f"recorded {len(rotations)} rotations, expected {expected}",
            check='rotation_cache',
            detail={'recorded': len(rotations), 'expected': expected},
        )

    R[...] = np.triu(Q[:n])
    Q[...] = 0
    np.fill_diagonal(Q, 1)

    # phase 2: replay the transposed rotations in reverse order
    for i in range(n - 1, -1, -1):
        for j in range(m - 1, i, -1):
            c, s = rotations.pop()
            rotate_rows(Q, i, j, c, -s, start=i)

    if rotations:
        raise InternalConsistencyError(
            f"{len(rotations)} rotations left after replay",
            check='rotation_cache',
            detail={'remaining': len(rotations)},
        )
