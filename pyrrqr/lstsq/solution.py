"""
Least-squares solution types.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.result import Result

if TYPE_CHECKING:
    from pyrrqr.lstsq.design import LstsqDesign


@dataclass(frozen=True)
class LstsqParams:
    """
    Parameter payload for rank-aware least squares.

    x holds the basic solution: unknowns beyond the estimated rank (in
    pivoted order) are zero.
    """
    x: NDArray[np.floating[Any]]
    rank: NDArray[np.int32]


@dataclass
class LstsqSolution:
    """
    User-facing least-squares results.

    Wraps the backend Result and provides the solution and the rank
    used for every batch element.
    """
    _result: Result[LstsqParams]
    _design: 'LstsqDesign'

    @property
    def x(self) -> NDArray[np.floating[Any]]:
        return self._result.params.x

    @property
    def rank(self) -> NDArray[np.int32]:
        return self._result.params.rank

    @property
    def rank_deficient(self) -> bool:
        """True if any batch element has fewer than I independent columns."""
        return bool(np.any(self.rank < self._design.n_unknowns))

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

    def summary(self) -> str:
        """Generate a short text summary of the solve."""
        design = self._design
        ranks = np.atleast_1d(self.rank)
        lines = [
            "Rank-Revealing QR Least Squares",
            "=" * 60,
            f"Batch shape: {design.batch_shape}",
            f"System: {design.n_rows} x {design.n_unknowns}, "
            f"{design.n_rhs} right-hand side(s)",
            f"Precision: {design.dtype}",
        ]
        if ranks.size:
            lines.append(f"Rank: min {ranks.min()}, max {ranks.max()}")
        lines.append(f"Rank-deficient systems: {int(np.sum(ranks < design.n_unknowns))}")

        lines.append("-" * 60)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        for w in self.warnings:
            lines.append(f"Warning: {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LstsqSolution(batch_shape={self._design.batch_shape}, "
            f"x_shape={self.x.shape}, rank_deficient={self.rank_deficient})"
        )
