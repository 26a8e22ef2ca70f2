"""Convolution, correlation and brute-force Fourier transforms for sampled signals."""

from .core import Vandermonde, convolve, convolved, correlate, correlated
from .errors import DspError, PreconditionError, UnsupportedOperationError
from .signal import Signal
from .types import CapacityPolicy, OverlapMode, Span

__version__ = "0.1.0"

__all__ = [
    "Signal",
    "Vandermonde",
    "convolve",
    "convolved",
    "correlate",
    "correlated",
    "CapacityPolicy",
    "OverlapMode",
    "Span",
    "DspError",
    "PreconditionError",
    "UnsupportedOperationError",
]
