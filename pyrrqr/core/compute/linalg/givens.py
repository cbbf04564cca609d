"""
Givens rotations.

One orientation is used everywhere: rotating rows i and j of a buffer by
(c, s) maps

    new_i =  c * old_i + s * old_j
    new_j = -s * old_i + c * old_j

so that givens(a, b) followed by rotate_rows zeroes the second entry of
the 2-vector (a, b). Column rotations of a column-major buffer (the
cached inverse in strong RRQR) are row rotations of its transpose view.
"""

from __future__ import annotations

import math
from typing import Any

from numpy.typing import NDArray


def givens(a: float, b: float) -> tuple[float, float, float]:
    """
    Compute the rotation that zeroes b against a.

    Args:
        a: Pivot entry
        b: Entry to eliminate

    Returns:
        (c, s, r) with c = a/r, s = b/r, r = hypot(a, b). For b == 0 the
        identity rotation (1, 0, a) is returned without evaluating hypot.
    """
    if b == 0:
        return 1.0, 0.0, a
    r = math.hypot(a, b)
    return a / r, b / r, r


def rotate_rows(
    A: NDArray[Any],
    i: int,
    j: int,
    c: float,
    s: float,
    start: int = 0,
    stop: int | None = None,
) -> None:
    """
    Apply a Givens rotation jointly to rows i and j of A, in place.

    Args:
        A: 2D buffer (any memory order; views are fine)
        i, j: Row indices
        c, s: Cosine and sine from givens()
        start, stop: Column span to update
    """
    a_i = A[i, start:stop].copy()
    a_j = A[j, start:stop]
    A[i, start:stop] = c * a_i + s * a_j
    A[j, start:stop] = c * a_j - s * a_i
