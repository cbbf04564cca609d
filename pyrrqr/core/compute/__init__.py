"""
Shared compute infrastructure for PyRRQR.

This module provides timing utilities, precision rules and the linear
algebra kernels shared by all domain backends.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    precision: Machine epsilon and working dtype selection
    tolerances: Tolerance tiers for numerical checks
    linalg: Givens QR, strong RRQR and related kernels
"""

from pyrrqr.core.compute.timing import Timer, timed
from pyrrqr.core.compute.precision import machine_epsilon, working_dtype

__all__ = [
    # Timing
    "Timer",
    "timed",
    # Precision
    "machine_epsilon",
    "working_dtype",
]
