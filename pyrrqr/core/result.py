"""
Generic result container for all PyRRQR computations.

The Result class is the envelope every backend returns. It lets the
decomposition and least-squares domains share timing and warning
plumbing while defining their own parameter payloads.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, mode, swap counts)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) so factors cannot be swapped out later
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for factorizations and solves.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (factors, solutions)
        info: Structured metadata (method, mode, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=QRParams(Q=Q, R=R, P=P),
        ...     info={'method': 'givens_pivoted_qr', 'mode': 'full'},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_pivoted_qr'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
