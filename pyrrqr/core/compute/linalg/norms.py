"""
Underflow/overflow-safe Euclidean norms.

A norm is carried as a pair (max, sum) with ‖v‖ = sqrt(sum) * max, where
max is the largest magnitude seen so far and sum is the sum of squares
of all entries scaled by max. Squares are therefore never taken of raw
magnitudes, which keeps huge entries from overflowing and tiny ones
from underflowing (the same scaling LAPACK uses in dnrm2).

Update rule for a new entry s = |value|:
    s == 0       -> no-op
    s > max      -> sum *= (max/s)**2; max = s
    always after -> sum += (s/max)**2

NaN entries are never skipped: they poison the pair so that the norm
itself becomes NaN. An infinite max is reported as the norm directly.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray


class ScaledNorm:
    """
    Running scaled norm of a stream of scalars.

    Example:
        >>> acc = ScaledNorm()
        >>> acc.include(3.0)
        >>> acc.include(4.0)
        >>> acc.result
        5.0
    """

    __slots__ = ('_max', '_sum')

    def __init__(self) -> None:
        self._max = 0.0
        self._sum = 0.0

    def reset(self) -> None:
        """Return to the zero state."""
        self._max = 0.0
        self._sum = 0.0

    def include(self, value: float) -> None:
        """Fold one scalar into the norm."""
        s = abs(float(value))
        if s != 0:
            if not s <= self._max:  # also taken for NaN
                self._sum *= (self._max / s) ** 2
                self._max = s
            self._sum += (s / self._max) ** 2

    def include_many(self, values: ArrayLike) -> None:
        """
        Fold a block of values into the norm.

        The block is rescaled once by its own maximum instead of entry by
        entry, which gives the same result up to rounding.
        """
        s = np.abs(np.asarray(values, dtype=np.float64)).ravel()
        if s.size == 0:
            return
        with np.errstate(invalid='ignore', divide='ignore', over='ignore'):
            block_max = float(np.max(s))  # NaN if any entry is NaN
            if block_max == 0:
                return
            if not block_max <= self._max:
                self._sum *= (self._max / block_max) ** 2
                self._max = block_max
            self._sum += float(np.sum((s / self._max) ** 2))

    @property
    def result(self) -> float:
        """Current value of the norm."""
        if not math.isfinite(self._max):
            return self._max
        return math.sqrt(self._sum) * self._max

    def __repr__(self) -> str:
        return f"ScaledNorm(max={self._max!r}, sum={self._sum!r})"


class ColumnNorms:
    """
    One scaled norm per slot, updated a row at a time.

    The pivoted QR engines keep the norms of the trailing part of every
    column here. The strong RRQR engine additionally reuses the leading
    slots for the row norms of the cached triangular inverse.

    Attributes:
        max: Running maximum magnitude per slot
        sum: Scaled sum of squares per slot
    """

    def __init__(self, n: int, dtype: np.dtype | type = np.float64):
        self.max: NDArray[np.floating[Any]] = np.zeros(n, dtype=dtype)
        self.sum: NDArray[np.floating[Any]] = np.zeros(n, dtype=dtype)

    def __len__(self) -> int:
        return self.max.shape[0]

    def reset(self, start: int = 0, stop: int | None = None) -> None:
        """Zero the slots start:stop."""
        self.max[start:stop] = 0
        self.sum[start:stop] = 0

    def include(self, values: NDArray[np.floating[Any]], start: int = 0) -> None:
        """
        Fold values[i] into slot start + i.

        Args:
            values: One entry per slot, typically a row segment of R
            start: First slot to update
        """
        n = values.shape[0]
        if n == 0:
            return
        s = np.abs(values)
        mx = self.max[start:start + n]
        sm = self.sum[start:start + n]
        with np.errstate(invalid='ignore', divide='ignore'):
            nonzero = s != 0
            grow = nonzero & ~(s <= mx)  # NaN grows the max, too
            sm[grow] *= (mx[grow] / s[grow]) ** 2
            mx[grow] = s[grow]
            sm[nonzero] += (s[nonzero] / mx[nonzero]) ** 2

    def values(self, start: int = 0, stop: int | None = None) -> NDArray[np.floating[Any]]:
        """Norms of the slots start:stop."""
        mx = self.max[start:stop]
        with np.errstate(invalid='ignore'):
            return np.where(np.isfinite(mx), np.sqrt(self.sum[start:stop]) * mx, mx)

    def value(self, j: int) -> float:
        """Norm of a single slot."""
        return float(self.values(j, j + 1)[0])
