"""
Core infrastructure for PyRRQR.

This module provides shared abstractions, utilities, and numerical
kernels used by the decomposition and least-squares domains.

Key components:
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, precision, tolerances and linear algebra kernels
"""

from pyrrqr.core.protocols import Backend
from pyrrqr.core.result import Result
from pyrrqr.core.exceptions import (
    PyRRQRError,
    ValidationError,
    DimensionError,
    PermutationError,
    NumericalError,
    SingularMatrixError,
    SingularSystemError,
    InternalConsistencyError,
)

__all__ = [
    # Protocols
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyRRQRError",
    "ValidationError",
    "DimensionError",
    "PermutationError",
    "NumericalError",
    "SingularMatrixError",
    "SingularSystemError",
    "InternalConsistencyError",
]
