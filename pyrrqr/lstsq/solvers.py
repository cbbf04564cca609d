"""
Solver dispatch for least squares on rank-revealing QR factors.

Both entry points accept two call shapes:

    rrqr_lstsq(Q, R, P, y)
    rrqr_lstsq(factors, y)      # factors: (Q, R, P), (Q, R, P, rank)
                                # or a decomposition solution
"""

from typing import Any, Literal

from numpy.typing import ArrayLike

from pyrrqr.core.exceptions import SingularSystemError, ValidationError
from pyrrqr.core.validation import check_dim
from pyrrqr.lstsq.design import LstsqDesign
from pyrrqr.lstsq.solution import LstsqSolution
from pyrrqr.lstsq.backends.cpu import CPURRQRLstsqBackend


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu']


def rrqr_lstsq(*args: Any, backend: BackendChoice = 'auto') -> LstsqSolution:
    """
    Rank-aware least squares using pivoted QR factors.

    Solves min ‖A x - y‖ for every batch element, given A[..., :, P] = Q R.
    Columns beyond the numerical rank of R get zero coefficients (basic
    solution). Batch dimensions of Q, R, P and y broadcast.

    Args:
        *args: Either (Q, R, P, y) or (factors, y)
            Q: [..., N, M]
            R: [..., M, I]
            P: [..., I], integer dtype
            y: [..., N, J]
        backend: Computational backend to use ('auto' or 'cpu')

    Returns:
        LstsqSolution with x [..., I, J] and rank [...]

    Raises:
        ValidationError: On a wrong number of arguments or invalid inputs
        DimensionError: If the shapes do not chain or broadcast
        PermutationError: If P is not a permutation
        NumericalError: If R contains NaN or Inf

    Example:
        >>> from pyrrqr.decomposition import rrqr_decomp
        >>> from pyrrqr.lstsq import rrqr_lstsq
        >>>
        >>> x = rrqr_lstsq(rrqr_decomp(A), y).x
    """
    Q, R, P, y = _unpack_args(args, 'rrqr_lstsq')
    backend_impl = _get_backend(backend)
    design = LstsqDesign.build(Q, R, P, y)
    result = backend_impl.solve(design)
    return LstsqSolution(_result=result, _design=design)


def rrqr_solve(*args: Any, backend: BackendChoice = 'auto') -> LstsqSolution:
    """
    Solve square systems using pivoted QR factors.

    Same call shapes as rrqr_lstsq, but Q R and R must be square and
    every system must have full rank.

    Returns:
        LstsqSolution with x [..., N, J]

    Raises:
        ValidationError: On a wrong number of arguments or invalid inputs
        DimensionError: If Q R or R is not square
        SingularSystemError: If any system is rank-deficient. The
            least-squares solution is attached as `x`, the ranks as `rank`.
    """
    Q, R, P, y = _unpack_args(args, 'rrqr_solve')
    backend_impl = _get_backend(backend)
    design = LstsqDesign.build(Q, R, P, y)

    N = design.n_rows
    check_dim(design.n_unknowns, N, "rrqr_solve: Q @ R not square")
    check_dim(design.R.shape[-2], design.R.shape[-1], "rrqr_solve: R not square")

    result = backend_impl.solve(design)
    solution = LstsqSolution(_result=result, _design=design)

    if solution.rank_deficient:
        raise SingularSystemError(
            f"rrqr_solve: {result.info['n_rank_deficient']} of "
            f"{result.info['n_systems']} systems are singular (rank < {N})",
            x=solution.x,
            rank=solution.rank,
            expected_rank=N,
        )

    return solution


def _unpack_args(args: tuple[Any, ...], caller: str) -> tuple[Any, Any, Any, ArrayLike]:
    """Normalize the (Q, R, P, y) and (factors, y) call shapes."""
    if len(args) == 4:
        return tuple(args)

    if len(args) == 2:
        factors, y = args
        try:
            parts = tuple(factors)
        except TypeError as e:
            raise ValidationError(
                f"{caller}: factors must be (Q, R, P), (Q, R, P, rank) "
                f"or a decomposition solution, got {type(factors).__name__}"
            ) from e
        if len(parts) not in (3, 4):
            raise ValidationError(
                f"{caller}: factors must have 3 or 4 entries, got {len(parts)}"
            )
        Q, R, P = parts[:3]
        return Q, R, P, y

    raise ValidationError(
        f"{caller}(Q,R,P, y): Either 2 ([Q,R,P], y) or 4 arguments (Q,R,P, y) "
        f"expected, got {len(args)}."
    )


def _get_backend(choice: BackendChoice) -> CPURRQRLstsqBackend:
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValidationError: If an unknown backend is specified
    """
    if choice in ('auto', 'cpu'):
        return CPURRQRLstsqBackend()
    raise ValidationError(f"Unknown backend: {choice!r} (expected 'auto' or 'cpu')")
