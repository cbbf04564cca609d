"""
Least-squares backends.

Available backends:
    CPURRQRLstsqBackend: Rank-aware back substitution on pivoted QR factors
"""

from pyrrqr.lstsq.backends.cpu import CPURRQRLstsqBackend

__all__ = [
    "CPURRQRLstsqBackend",
]
