"""
Decomposition Design.

Design wraps a batch of matrices [...batch, M, N] and owns the working
copy every factorization overwrites. The batch dimensions are flattened
to a single leading axis so that backends only ever see (B, M, N); the
original batch shape is kept to restore it on output.

The caller's array is never aliased: the working copy is made here, in
the working precision, exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyrrqr.core.validation import check_array, check_min_ndim
from pyrrqr.core.compute.precision import working_dtype


@dataclass(frozen=True)
class DecompositionDesign:
    """
    Batch of matrices to be factored.

    Immutable after construction (the buffer contents are handed to the
    backend, which factors them in place).

    Construction:
        DecompositionDesign.from_array(A)
    """
    _A: NDArray[np.floating[Any]]
    _batch_shape: tuple[int, ...]
    _finite: bool

    @classmethod
    def from_array(cls, A: ArrayLike, name: str = 'A') -> DecompositionDesign:
        """
        Validate A and copy it into a (B, M, N) working buffer.

        Args:
            A: Array-like of shape [...batch, M, N]
            name: Parameter name for error messages

        Returns:
            DecompositionDesign ready for a backend

        Raises:
            ValidationError: If A is not real numeric data
            DimensionError: If A has fewer than 2 dimensions
        """
        arr = check_array(A, name)
        check_min_ndim(arr, 2, name)

        *batch, m, n = arr.shape
        batch_shape = tuple(batch)
        size = int(np.prod(batch_shape, dtype=np.int64))

        work = np.array(arr, dtype=working_dtype(arr.dtype), order='C')
        work = work.reshape(size, m, n)

        return cls(
            _A=work,
            _batch_shape=batch_shape,
            _finite=bool(np.all(np.isfinite(work))),
        )

    # === Properties ===

    @property
    def A(self) -> NDArray[np.floating[Any]]:
        """Working buffer (B x M x N), overwritten by backends."""
        return self._A

    @property
    def batch_shape(self) -> tuple[int, ...]:
        return self._batch_shape

    @property
    def batch_size(self) -> int:
        return self._A.shape[0]

    @property
    def m(self) -> int:
        """Number of rows per matrix."""
        return self._A.shape[1]

    @property
    def n(self) -> int:
        """Number of columns per matrix."""
        return self._A.shape[2]

    @property
    def dtype(self) -> np.dtype:
        """Working dtype (float32 or float64)."""
        return self._A.dtype

    @property
    def is_finite(self) -> bool:
        """False if the input held any NaN or Inf."""
        return self._finite

    def unflatten(self, array: NDArray[Any]) -> NDArray[Any]:
        """Restore the batch shape on a (B, ...) output array."""
        return array.reshape(self._batch_shape + array.shape[1:])
