"""
Exception hierarchy for PyRRQR.

All exceptions inherit from PyRRQRError to allow catching any
library-specific error. Each failure kind of the factorizations maps
onto exactly one branch of this tree.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from typing import Any


class PyRRQRError(Exception):
    """Base exception for all PyRRQR errors."""
    pass


class ValidationError(PyRRQRError):
    """
    Input validation failed.

    Raised eagerly, before any factorization work starts, when
    user-provided inputs or options violate the call contract.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when an array has too few dimensions, when the inner
    dimensions of the factors do not chain, or when batch dimensions
    cannot be broadcast against each other.
    """
    pass


class PermutationError(ValidationError):
    """
    A permutation vector is not a bijection.

    Detected while following the cycles of P, so a duplicate entry or
    an entry outside [0, n) is reported at the first position where it
    becomes visible.

    Attributes:
        index: Position in P where the problem was found
        value: Offending entry of P
    """

    def __init__(
        self,
        message: str,
        index: int | None = None,
        value: int | None = None,
    ):
        super().__init__(message)
        self.index = index
        self.value = value


class NumericalError(PyRRQRError):
    """
    Numerical computation failed.

    Raised when a non-finite value shows up where a finite norm or
    tolerance is required (e.g. during rank estimation).
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or numerically rank-deficient.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Numerical rank, if computed
        expected_rank: Rank required by the operation
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: Any = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank


class SingularSystemError(SingularMatrixError):
    """
    A square solve was requested on a rank-deficient system.

    The least-squares solution is still computed and attached, so the
    caller can decide whether it is good enough.

    Attributes:
        x: Best-effort least-squares solution, same shape as a regular
           solve result
        rank: Estimated rank per batch element (int array)
        expected_rank: Size of the square system
    """

    def __init__(
        self,
        message: str,
        x: Any = None,
        rank: Any = None,
        expected_rank: int | None = None,
        matrix_name: str | None = 'R',
    ):
        super().__init__(
            message,
            matrix_name=matrix_name,
            rank=rank,
            expected_rank=expected_rank,
        )
        self.x = x


class InternalConsistencyError(PyRRQRError):
    """
    An internal invariant of a factorization engine was violated.

    This indicates an algorithm bug rather than bad data. It is only
    raised by the optional invariant-checking mode and by a few cheap
    always-on guards.

    Attributes:
        check: Short name of the failed check (e.g. 'inverse', 'bracket')
        detail: Free-form diagnostic values
    """

    def __init__(
        self,
        message: str,
        check: str | None = None,
        detail: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.check = check
        self.detail = detail if detail is not None else {}
