"""Core algorithms for dspkit."""

from .fourier import Vandermonde, vandermonde_matrix
from .overlap import convolve, convolved, correlate, correlated, overlap_kernel

__all__ = [
    "Vandermonde",
    "vandermonde_matrix",
    "convolve",
    "convolved",
    "correlate",
    "correlated",
    "overlap_kernel",
]
