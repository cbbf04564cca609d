"""
Incrementally maintained inverse of the leading triangular block.

Strong RRQR keeps, for the current rank k, an (m, n) column-major buffer
AB holding

    AB[:k, :k] = inv(R11)          (upper triangular)
    AB[:k, k:] = inv(R11) @ R12    (the triangular solve against the rest)
    AB[k:, :]  = 0

with R11 = R[:k, :k] and R12 = R[:k, k:]. Rows of AB follow the columns
of R, columns of AB follow the rows of R. Growing or shrinking k by one
pivot is a rank-one update, so the full inverse is never recomputed.

AB is column-major on purpose: every operation below walks down columns
of AB while R is walked along rows.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.exceptions import InternalConsistencyError


def inverse_update(
    AB: NDArray[np.floating[Any]],
    R: NDArray[np.floating[Any]],
    k: int,
) -> None:
    """
    Add pivot k of R to the cached inverse (rank k -> k + 1), in place.

    Requires column k of R to be triangularized, i.e. R[k+1:, k] == 0.
    """
    r_kk = R[k, k]
    AB[k, k] = 1 / r_kk
    AB[:k, k] /= -r_kk
    AB[:k + 1, k + 1:] += np.outer(AB[:k + 1, k], R[k, k + 1:])


def inverse_downdate(
    AB: NDArray[np.floating[Any]],
    R: NDArray[np.floating[Any]],
    k: int,
) -> None:
    """
    Remove pivot k from the cached inverse (rank k + 1 -> k), in place.

    Exact algebraic inverse of inverse_update.
    """
    AB[k, k + 1:] = 0
    AB[:k, k + 1:] -= np.outer(AB[:k, k], R[k, k + 1:])
    AB[k, k] = 0
    AB[:k, k] *= -R[k, k]


def cycle_rows(AB: NDArray[np.floating[Any]], p: int, k: int) -> None:
    """
    Move row p of the cached inverse to row k, shifting rows p+1..k up.

    Mirrors moving column p of R to position k. Within the inverse block
    (columns p..k-1) the diagonal entry becomes zero and the old row p
    entry ends up in row k, which leaves the block upper Hessenberg in
    the same way as R.
    """
    for j in range(p, AB.shape[1]):
        head = AB[p, j]
        if j < k:
            AB[p:j, j] = AB[p + 1:j + 1, j]
            AB[j, j] = 0
        else:
            AB[p:k, j] = AB[p + 1:k + 1, j]
        AB[k, j] = head


def inverse_residual(
    AB: NDArray[np.floating[Any]],
    R: NDArray[np.floating[Any]],
    k: int,
) -> tuple[float, float]:
    """
    Deviation of the cached inverse from the triangular factor.

    Returns:
        (max |AB11 @ R11 - I|, max |AB11 @ R12 - AB12|)
    """
    inv = AB[:k, :k]
    inv_err = np.abs(inv @ R[:k, :k] - np.eye(k, dtype=R.dtype))
    solve_err = np.abs(inv @ R[:k, k:] - AB[:k, k:])
    return (
        float(inv_err.max()) if inv_err.size else 0.0,
        float(solve_err.max()) if solve_err.size else 0.0,
    )


def check_inverse(
    AB: NDArray[np.floating[Any]],
    R: NDArray[np.floating[Any]],
    k: int,
    atol: float,
    name: str = 'AB',
) -> None:
    """
    Verify that AB is the cached inverse of R at rank k.

    Raises:
        InternalConsistencyError: If either residual exceeds atol
    """
    inv_err, solve_err = inverse_residual(AB, R, k)
    if not (inv_err <= atol and solve_err <= atol):
        raise InternalConsistencyError(
            f"{name} is not the inverse of R11 at rank {k}: "
            f"|{name}·R11 - I| = {inv_err:.3e}, |{name}·R12 - {name}12| = {solve_err:.3e}",
            check='inverse',
            detail={'name': name, 'k': k, 'inverse_error': inv_err, 'solve_error': solve_err},
        )
