"""
Decomposition backends.

Available backends:
    CPUPivotedQRBackend: Column-pivoted Givens QR (full or economic)
    CPUStrongRRQRBackend: Strong rank-revealing QR
"""

from pyrrqr.decomposition.backends.cpu import (
    CPUPivotedQRBackend,
    CPUStrongRRQRBackend,
)

__all__ = [
    "CPUPivotedQRBackend",
    "CPUStrongRRQRBackend",
]
