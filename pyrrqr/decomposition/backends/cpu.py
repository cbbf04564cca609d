"""
CPU backends for rank-revealing QR decompositions.

Both backends loop over the flattened batch and call the single-matrix
kernels from pyrrqr.core.compute.linalg. Scratch buffers are allocated
once per call and reset by the kernels for every batch element.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Literal, Union

import numpy as np
from numpy.typing import NDArray

from pyrrqr.core.result import Result
from pyrrqr.core.exceptions import NumericalError
from pyrrqr.core.validation import check_tolerance
from pyrrqr.core.compute.timing import Timer
from pyrrqr.core.compute.precision import machine_epsilon
from pyrrqr.core.compute.linalg.norms import ColumnNorms, ScaledNorm
from pyrrqr.core.compute.linalg.pivoted_qr import pivoted_qr_full, pivoted_qr_economic
from pyrrqr.core.compute.linalg.strong_rrqr import StrongRRQR
from pyrrqr.decomposition.design import DecompositionDesign
from pyrrqr.decomposition.solution import QRParams, StrongQRParams


QRMode = Literal['full', 'economic']
ZeroTolerance = Union[float, Callable[[NDArray[np.floating[Any]]], float], None]


class CPUPivotedQRBackend:
    """
    CPU backend using column-pivoted Givens QR.

    Implements the Backend protocol for DecompositionDesign -> QRParams.

    mode='economic' only changes the result for tall matrices (M > N);
    all other shapes are factored with the full layout.
    """

    def __init__(self, mode: QRMode = 'full'):
        self.mode = mode

    @property
    def name(self) -> str:
        return 'cpu_pivoted_qr'

    def solve(self, design: DecompositionDesign) -> Result[QRParams]:
        """
        Factor every matrix of the batch as A Π = Q R.

        Args:
            design: Validated decomposition design (its buffer is consumed)

        Returns:
            Result containing QRParams

        Raises:
            InternalConsistencyError: If the economic rotation replay fails
        """
        timer = Timer()
        timer.start()

        A = design.A
        B, m, n = A.shape
        dtype = design.dtype
        economic = self.mode == 'economic' and m > n

        norms = ColumnNorms(n, dtype)
        P = np.empty((B, n), dtype=np.int32)

        if economic:
            # the working copy becomes the thin Q
            Q = A
            R = np.zeros((B, n, n), dtype=dtype)
            with timer.section('factorization'):
                for b in range(B):
                    pivoted_qr_economic(Q[b], R[b], P[b], norms)
        else:
            Q = np.empty((B, m, m), dtype=dtype)
            R = A
            with timer.section('factorization'):
                for b in range(B):
                    pivoted_qr_full(R[b], Q[b], P[b], norms)

        timer.stop()

        params = QRParams(
            Q=design.unflatten(Q),
            R=design.unflatten(R),
            P=design.unflatten(P),
        )

        info: dict[str, Any] = {
            'method': 'givens_pivoted_qr',
            'mode': 'economic' if economic else 'full',
            'requested_mode': self.mode,
            'dtype': str(dtype),
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=_input_warnings(design),
        )


class CPUStrongRRQRBackend:
    """
    CPU backend using strong rank-revealing QR.

    Implements the Backend protocol for DecompositionDesign -> StrongQRParams.

    Args:
        dtol: Largest tolerated determinant growth factor (>= 1)
        ztol: Remainder tolerance. A number, a callable evaluated on
            every matrix of the batch, or None for the default
            sqrt(eps) * ‖A‖_F * max(M, N)
        check_invariants: Run the engine's internal consistency checks
    """

    def __init__(
        self,
        dtol: float = 1.01,
        ztol: ZeroTolerance = None,
        check_invariants: bool = False,
    ):
        self.dtol = dtol
        self.ztol = ztol
        self.check_invariants = check_invariants

    @property
    def name(self) -> str:
        return 'cpu_strong_rrqr'

    def _zero_tolerance(self, matrix: NDArray[np.floating[Any]]) -> float:
        """
        Resolve ztol for one matrix (before it is factored).

        Raises:
            NumericalError: If the default tolerance is not finite
            ValidationError: If a callable ztol returns an invalid value
        """
        if self.ztol is None:
            norm = ScaledNorm()
            norm.include_many(matrix)
            m, n = matrix.shape
            ztol = math.sqrt(machine_epsilon(matrix.dtype)) * norm.result * max(m, n)
            if not math.isfinite(ztol):
                raise NumericalError(
                    "Infinity or NaN encountered while computing the default ztol."
                )
            return ztol
        if callable(self.ztol):
            return check_tolerance(self.ztol(matrix.copy()), 'ztol', 0.0)
        return float(self.ztol)

    def solve(self, design: DecompositionDesign) -> Result[StrongQRParams]:
        """
        Factor every matrix of the batch and estimate its rank.

        Args:
            design: Validated decomposition design (its buffer is consumed)

        Returns:
            Result containing StrongQRParams

        Raises:
            NumericalError: On non-finite tolerances or remainder norms
            InternalConsistencyError: On violated invariants (checked mode)
        """
        timer = Timer()
        timer.start()

        R = design.A
        B, m, n = R.shape
        dtype = design.dtype

        Q = np.empty((B, m, m), dtype=dtype)
        P = np.empty((B, n), dtype=np.int32)
        rank = np.empty(B, dtype=np.int32)
        swaps = np.zeros(B, dtype=np.int64)
        ztols = np.empty(B, dtype=np.float64)

        engine = StrongRRQR(m, n, dtype, check_invariants=self.check_invariants)

        for b in range(B):
            with timer.section('tolerance'):
                ztols[b] = self._zero_tolerance(R[b])
            with timer.section('factorization'):
                rank[b] = engine.factor(R[b], Q[b], P[b], self.dtol, float(ztols[b]))
            swaps[b] = engine.swaps

        timer.stop()

        params = StrongQRParams(
            Q=design.unflatten(Q),
            R=design.unflatten(R),
            P=design.unflatten(P),
            rank=design.unflatten(rank),
        )

        info: dict[str, Any] = {
            'method': 'strong_rrqr',
            'mode': 'full',
            'dtype': str(dtype),
            'dtol': self.dtol,
            'ztol': 'default' if self.ztol is None else (
                'callable' if callable(self.ztol) else self.ztol
            ),
            'ztol_values': design.unflatten(ztols),
            'swaps': design.unflatten(swaps),
            'check_invariants': self.check_invariants,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=_input_warnings(design),
        )


def _input_warnings(design: DecompositionDesign) -> tuple[str, ...]:
    if design.is_finite:
        return ()
    return ("input contains NaN or Inf; factors are not meaningful",)
