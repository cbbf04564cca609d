"""
Least-squares Design.

Design takes the factors of a rank-revealing decomposition together
with right-hand sides and resolves the broadcast between them:

    Q [..., N, M]   R [..., M, I]   P [..., I]   y [..., N, J]
                            ->      x [..., I, J]

Every array is presented to the backend as a read-only broadcast view
with the common batch shape in front, so backends index all four with
the same batch index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyrrqr.core.exceptions import DimensionError
from pyrrqr.core.validation import (
    check_array,
    check_permutation_array,
    check_min_ndim,
    check_dim,
)
from pyrrqr.core.compute.precision import working_dtype


@dataclass(frozen=True)
class LstsqDesign:
    """
    Broadcast least-squares problem Q R Πᵗ x = y.

    Construction:
        LstsqDesign.build(Q, R, P, y)
    """
    _Q: NDArray[np.floating[Any]]
    _R: NDArray[np.floating[Any]]
    _P: NDArray[np.integer[Any]]
    _y: NDArray[np.floating[Any]]
    _batch_shape: tuple[int, ...]

    @classmethod
    def build(
        cls,
        Q: ArrayLike,
        R: ArrayLike,
        P: ArrayLike,
        y: ArrayLike,
    ) -> LstsqDesign:
        """
        Validate the factors and right-hand sides and broadcast them.

        Raises:
            ValidationError: If an input is not numeric or P is not integer
            DimensionError: If ndims are too small, inner dimensions do not
                chain, or batch dimensions cannot be broadcast
        """
        Q = check_array(Q, 'Q')
        R = check_array(R, 'R')
        P = check_permutation_array(P, 'P')
        y = check_array(y, 'y')

        check_min_ndim(Q, 2, 'Q')
        check_min_ndim(R, 2, 'R')
        check_min_ndim(P, 1, 'P')
        check_min_ndim(y, 2, 'y')

        N, M = Q.shape[-2:]
        I = R.shape[-1]
        J = y.shape[-1]
        check_dim(y.shape[-2], N, "Q and y don't match")
        check_dim(R.shape[-2], M, "Q and R don't match")
        check_dim(P.shape[-1], I, "R and P don't match")

        try:
            batch_shape = np.broadcast_shapes(
                Q.shape[:-2], R.shape[:-2], P.shape[:-1], y.shape[:-2]
            )
        except ValueError as e:
            raise DimensionError(
                f"Q, R, P, y not broadcast-compatible: batch shapes "
                f"{Q.shape[:-2]}, {R.shape[:-2]}, {P.shape[:-1]}, {y.shape[:-2]}"
            ) from e

        dtype = working_dtype(Q.dtype, R.dtype, y.dtype)

        return cls(
            _Q=np.broadcast_to(Q.astype(dtype, copy=False), batch_shape + (N, M)),
            _R=np.broadcast_to(R.astype(dtype, copy=False), batch_shape + (M, I)),
            _P=np.broadcast_to(P, batch_shape + (I,)),
            _y=np.broadcast_to(y.astype(dtype, copy=False), batch_shape + (N, J)),
            _batch_shape=batch_shape,
        )

    # === Properties ===

    @property
    def Q(self) -> NDArray[np.floating[Any]]:
        """Orthogonal factors (... x N x M), broadcast view."""
        return self._Q

    @property
    def R(self) -> NDArray[np.floating[Any]]:
        """Triangular factors (... x M x I), broadcast view."""
        return self._R

    @property
    def P(self) -> NDArray[np.integer[Any]]:
        """Column permutations (... x I), broadcast view."""
        return self._P

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Right-hand sides (... x N x J), broadcast view."""
        return self._y

    @property
    def batch_shape(self) -> tuple[int, ...]:
        return self._batch_shape

    @property
    def n_rows(self) -> int:
        """Rows of the system (N)."""
        return self._Q.shape[-2]

    @property
    def n_unknowns(self) -> int:
        """Unknowns per right-hand side (I)."""
        return self._R.shape[-1]

    @property
    def n_rhs(self) -> int:
        """Right-hand sides per system (J)."""
        return self._y.shape[-1]

    @property
    def dtype(self) -> np.dtype:
        return self._Q.dtype

    @property
    def is_square(self) -> bool:
        """True if Q R is square and R is square."""
        return self.n_rows == self.n_unknowns and self._R.shape[-2] == self.n_unknowns
