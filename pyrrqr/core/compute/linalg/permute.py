"""
In-place row un-permutation.

Given z solving the pivoted system (A Π) z = y, the solution of A x = y
is x = Π z, i.e. x[P[i]] = z[i]. The rows are moved by following the
cycles of P with a scratch copy of P, so every row is swapped at most
once and no second output buffer is needed.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.exceptions import PermutationError


def unpermute_rows(
    x: NDArray[Any],
    P: NDArray[np.integer[Any]],
    scratch: NDArray[np.integer[Any]] | None = None,
) -> None:
    """
    Apply the permutation P to the rows of x in place (x[P[i]] <- x[i]).

    Args:
        x: (n, ...) array whose rows are in pivoted order
        P: (n,) permutation vector
        scratch: Optional (n,) integer buffer, overwritten

    Raises:
        PermutationError: If P has a duplicate or out-of-range entry
    """
    n = P.shape[0]
    if scratch is None:
        scratch = np.empty(n, dtype=np.intp)
    perm = scratch
    perm[:] = P

    for i in range(n - 1, -1, -1):
        k = int(perm[i])
        while k != i:
            if not 0 <= k < n:
                raise PermutationError(
                    f"Invalid index {k} in P at position {i} (must be in [0, {n}))",
                    index=i,
                    value=k,
                )
            if perm[k] == k:
                raise PermutationError(
                    f"Duplicate index {k} in P (found again at position {i})",
                    index=i,
                    value=k,
                )
            perm[i] = perm[k]
            perm[k] = k
            x[[i, k]] = x[[k, i]]
            k = int(perm[i])
