"""
Decomposition solution types.

Contains the parameter payloads and user-facing solution wrappers.
Solutions unpack like the factor tuples they wrap:

    Q, R, P = rrqr_decomp_full(A)
    Q, R, P, rank = srrqr_decomp_full(A)
"""

from dataclasses import dataclass
from typing import Any, Iterator, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.result import Result
from pyrrqr.core.compute.linalg.rank import estimate_ranks

if TYPE_CHECKING:
    from pyrrqr.decomposition.design import DecompositionDesign


@dataclass(frozen=True)
class QRParams:
    """
    Parameter payload for column-pivoted QR.

    All arrays carry the batch shape of the input in front.
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    P: NDArray[np.int32]


@dataclass(frozen=True)
class StrongQRParams(QRParams):
    """Parameter payload for strong RRQR: factors plus the estimated rank."""
    rank: NDArray[np.int32]


@dataclass
class QRSolution:
    """
    User-facing result of a column-pivoted QR decomposition.

    Wraps the backend Result and provides the factors together with
    convenience accessors. The factorization satisfies

        A[..., :, P] = Q @ R
    """
    _result: Result[QRParams]
    _design: 'DecompositionDesign'

    # Cached computations
    _rank: NDArray[np.int32] | None = None

    @property
    def Q(self) -> NDArray[np.floating[Any]]:
        return self._result.params.Q

    @property
    def R(self) -> NDArray[np.floating[Any]]:
        return self._result.params.R

    @property
    def P(self) -> NDArray[np.int32]:
        return self._result.params.P

    @property
    def rank(self) -> NDArray[np.int32]:
        """
        Numerical rank per batch element, estimated from R.

        Raises:
            NumericalError: If R contains NaN or Inf
        """
        if self._rank is None:
            self._rank = estimate_ranks(self.R)
        return self._rank

    def permutation_matrix(self) -> NDArray[np.floating[Any]]:
        """
        Permutation matrices Π with A Π = Q R.

        Returns:
            Array [..., N, N] with Π[..., P[i], i] = 1
        """
        n = self.P.shape[-1]
        return (np.arange(n)[:, None] == self.P[..., None, :]).astype(self.R.dtype)

    def reconstruct(self) -> NDArray[np.floating[Any]]:
        """Reassemble A from the factors (undoing the column permutation)."""
        QR = self.Q @ self.R
        inverse = np.argsort(self.P, axis=-1)
        return np.take_along_axis(QR, inverse[..., None, :], axis=-1)

    def __iter__(self) -> Iterator[NDArray[Any]]:
        return iter((self.Q, self.R, self.P))

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def _title(self) -> str:
        return "Column-Pivoted QR Decomposition"

    def _detail_lines(self) -> list[str]:
        return []

    def summary(self) -> str:
        """Generate a short text summary of the decomposition."""
        design = self._design
        lines = [
            self._title(),
            "=" * 60,
            f"Batch shape: {design.batch_shape}",
            f"Matrix shape: {design.m} x {design.n}",
            f"Mode: {self.info.get('mode', 'full')}",
            f"Precision: {design.dtype}",
            f"Q: {self.Q.shape}   R: {self.R.shape}",
        ]
        if design.is_finite:
            ranks = np.atleast_1d(self.rank)
            if ranks.size:
                lines.append(f"Rank: min {ranks.min()}, max {ranks.max()}")
        else:
            lines.append("Rank: NA (non-finite input)")
        lines.extend(self._detail_lines())

        lines.append("-" * 60)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        for w in self.warnings:
            lines.append(f"Warning: {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(batch_shape={self._design.batch_shape}, "
            f"m={self._design.m}, n={self._design.n}, mode={self.info.get('mode')!r})"
        )


@dataclass
class StrongQRSolution(QRSolution):
    """
    User-facing result of a strong rank-revealing QR decomposition.

    The rank is the one found by the engine itself (not re-estimated
    from R), and the solution unpacks as (Q, R, P, rank).
    """
    _result: Result[StrongQRParams]

    @property
    def rank(self) -> NDArray[np.int32]:
        return self._result.params.rank

    @property
    def swaps(self) -> NDArray[np.int64]:
        """Number of strong column swaps per batch element."""
        return self._result.info['swaps']

    def __iter__(self) -> Iterator[NDArray[Any]]:
        return iter((self.Q, self.R, self.P, self.rank))

    def _title(self) -> str:
        return "Strong Rank-Revealing QR Decomposition"

    def _detail_lines(self) -> list[str]:
        return [
            f"dtol: {self.info['dtol']}",
            f"ztol: {self.info['ztol']}",
            f"Strong swaps: {int(np.sum(self.swaps))}",
        ]
