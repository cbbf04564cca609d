"""
Solver dispatch for rank-revealing decompositions.

This module provides the public decomposition functions and backend
selection. Validation happens here, at the boundary; backends and
kernels trust their inputs.
"""

import warnings
from typing import Any, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyrrqr.core.exceptions import ValidationError
from pyrrqr.core.protocols import Backend
from pyrrqr.core.validation import check_array, check_min_ndim, check_tolerance
from pyrrqr.core.compute.linalg.rank import estimate_ranks
from pyrrqr.decomposition.design import DecompositionDesign
from pyrrqr.decomposition.solution import QRSolution, StrongQRSolution
from pyrrqr.decomposition.backends.cpu import (
    CPUPivotedQRBackend,
    CPUStrongRRQRBackend,
    ZeroTolerance,
)


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu']


def rrqr_decomp_full(
    A: ArrayLike,
    *,
    backend: BackendChoice = 'auto',
) -> QRSolution:
    """
    Column-pivoted QR decomposition with full Q.

    Computes A[..., :, P] = Q @ R for every matrix of a batch using
    Givens rotations, always pivoting the remaining column of largest
    norm to the front.

    Args:
        A: Matrices [..., M, N]. Can be any real array-like.
        backend: Computational backend to use ('auto' or 'cpu')

    Returns:
        QRSolution with Q [..., M, M], R [..., M, N] and P [..., N] (int32)

    Raises:
        ValidationError: If A is not real numeric data
        DimensionError: If A has fewer than 2 dimensions

    Example:
        >>> import numpy as np
        >>> from pyrrqr.decomposition import rrqr_decomp_full
        >>>
        >>> A = np.random.randn(5, 3)
        >>> Q, R, P = rrqr_decomp_full(A)
        >>> np.allclose(A[:, P], Q @ R)
        True
    """
    backend_impl = _get_backend(backend, CPUPivotedQRBackend, mode='full')
    design = _build_design(A)
    result = backend_impl.solve(design)
    return QRSolution(_result=result, _design=design)


def rrqr_decomp(
    A: ArrayLike,
    *,
    backend: BackendChoice = 'auto',
) -> QRSolution:
    """
    Column-pivoted QR decomposition with economic Q.

    For tall matrices (M > N) only the first N columns of Q and the
    leading N x N block of R are formed. Any other shape falls back to
    the full decomposition.

    Args:
        A: Matrices [..., M, N]. Can be any real array-like.
        backend: Computational backend to use ('auto' or 'cpu')

    Returns:
        QRSolution with Q [..., M, N], R [..., N, N] if M > N, otherwise
        the same shapes as rrqr_decomp_full

    Raises:
        ValidationError: If A is not real numeric data
        DimensionError: If A has fewer than 2 dimensions
    """
    backend_impl = _get_backend(backend, CPUPivotedQRBackend, mode='economic')
    design = _build_design(A)
    result = backend_impl.solve(design)
    return QRSolution(_result=result, _design=design)


def srrqr_decomp_full(
    A: ArrayLike,
    *,
    dtol: float = 1.01,
    ztol: ZeroTolerance = None,
    check_invariants: bool = False,
    backend: BackendChoice = 'auto',
) -> StrongQRSolution:
    """
    Strong rank-revealing QR decomposition with full Q.

    Starts like column-pivoted QR and then swaps columns between the
    leading block and the rest for as long as a swap grows |det R11| by
    more than dtol. At the same time the numerical rank is searched as
    the smallest leading block whose remainder has a norm <= ztol.

    Args:
        A: Matrices [..., M, N]. Can be any real array-like.
        dtol: Determinant growth threshold for swaps, >= 1 (default 1.01)
        ztol: Remainder tolerance for the rank. Either a number >= 0, a
            callable mapping each (M, N) matrix to such a number, or None
            for sqrt(eps) * ‖A‖_F * max(M, N)
        check_invariants: Verify the engine's internal invariants after
            every step (much slower, for debugging)
        backend: Computational backend to use ('auto' or 'cpu')

    Returns:
        StrongQRSolution with Q [..., M, M], R [..., M, N], P [..., N] and
        rank [...] (both int32)

    Raises:
        ValidationError: If A or one of the options is invalid
        DimensionError: If A has fewer than 2 dimensions
        NumericalError: If NaN or Inf prevents the rank search
        InternalConsistencyError: If check_invariants detects a fault

    Example:
        >>> Q, R, P, rank = srrqr_decomp_full(A, dtol=1.5)
    """
    dtol = check_tolerance(dtol, 'dtol', 1.0)
    if ztol is not None and not callable(ztol):
        ztol = check_tolerance(ztol, 'ztol', 0.0)
    if not isinstance(check_invariants, (bool, np.bool_)):
        raise ValidationError(
            f"check_invariants: expected bool, got {type(check_invariants).__name__}"
        )

    backend_impl = _get_backend(
        backend,
        CPUStrongRRQRBackend,
        dtol=dtol,
        ztol=ztol,
        check_invariants=bool(check_invariants),
    )
    design = _build_design(A)
    result = backend_impl.solve(design)
    return StrongQRSolution(_result=result, _design=design)


def rrqr_rank(R: ArrayLike) -> NDArray[np.int32]:
    """
    Estimate the numerical rank of triangular factors.

    Args:
        R: Upper triangular factors [..., M, N], typically the R of a
           pivoted QR decomposition

    Returns:
        int32 array of shape [...] with one rank per matrix

    Raises:
        ValidationError: If R is not real numeric data
        DimensionError: If R has fewer than 2 dimensions
        NumericalError: If R contains NaN or Inf
    """
    R_arr = check_array(R, 'R')
    check_min_ndim(R_arr, 2, 'R')

    return estimate_ranks(R_arr)


def _build_design(A: ArrayLike) -> DecompositionDesign:
    design = DecompositionDesign.from_array(A, 'A')
    if not design.is_finite:
        warnings.warn(
            "A contains NaN or Inf. The decomposition is carried out, "
            "but the factors and any rank derived from them are not meaningful.",
            RuntimeWarning,
            stacklevel=3,
        )
    return design


def _get_backend(choice: BackendChoice, backend_cls: type, **options: Any) -> Backend:
    """
    Select and instantiate the appropriate backend.

    Args:
        choice: User's backend preference
        backend_cls: CPU backend class of the requested algorithm
        **options: Constructor arguments of the backend

    Returns:
        Backend instance ready to solve

    Raises:
        ValidationError: If an unknown backend is specified
    """
    if choice in ('auto', 'cpu'):
        return backend_cls(**options)
    raise ValidationError(f"Unknown backend: {choice!r} (expected 'auto' or 'cpu')")
