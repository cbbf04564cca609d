"""
Core protocols for PyRRQR.

We use Protocol (structural typing) rather than ABC (nominal typing) so
that backends only have to look right, not inherit from anything.
"""

from typing import Protocol, TypeVar, runtime_checkable

from pyrrqr.core.result import Result

# Type variables for generic payloads
P = TypeVar('P', covariant=True)  # Parameter payload type
D = TypeVar('D', contravariant=True)  # Design type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend takes a validated design (a batch of matrices, or a
    broadcast least-squares problem) and produces a parameter payload
    wrapped in a Result. Per-call options (tolerances, modes) are fixed
    at construction time, so solve() takes nothing but the design.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_pivoted_qr', 'cpu_strong_rrqr', 'cpu_rrqr_lstsq'
        """
        ...

    def solve(self, design: D) -> Result[P]:
        """
        Execute the computation.

        Raises:
            NumericalError: If non-finite values prevent a result
            ValidationError: If the design is invalid for this backend
        """
        ...
