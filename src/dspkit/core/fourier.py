"""Brute-force discrete Fourier transform via a Vandermonde matrix.

The transform matrix ``M[r, c] = exp(-2j * pi * r * c / n)`` is built once
and applied by dense matrix-vector products, so construction and every
application cost ``O(n**2)``.  It is intended for verification of other
transforms and small signals, not as a replacement for :mod:`numpy.fft`.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from ..errors import PreconditionError
from ..signal import Signal

logger = logging.getLogger(__name__)

PRECISIONS = {
    "single": np.complex64,
    "double": np.complex128,
}


def _resolve_precision(precision: str | Any) -> np.dtype:
    if isinstance(precision, str):
        try:
            return np.dtype(PRECISIONS[precision.lower()])
        except KeyError:
            raise PreconditionError(
                f"unknown precision {precision!r}; expected one of {', '.join(PRECISIONS)}"
            ) from None
    return np.result_type(precision, np.complex64)


def _resolve_length(dft_length: int | None, capacity: int | None) -> int:
    """Validate the runtime length against the optional fixed capacity."""

    if capacity is None:
        if dft_length is None:
            raise PreconditionError(
                "dynamically sized transform needs an explicit dft_length"
            )
    else:
        if capacity <= 0:
            raise PreconditionError("capacity must be positive")
        if dft_length is None:
            dft_length = capacity
        elif dft_length > capacity:
            raise PreconditionError(
                f"dft_length {dft_length} exceeds the fixed capacity {capacity}"
            )
        elif dft_length != capacity:
            raise PreconditionError(
                f"fixed-capacity transform of size {capacity} cannot be built with "
                f"dft_length {dft_length}"
            )
    if dft_length <= 0:
        raise PreconditionError("dft_length must be positive")
    return int(dft_length)


def vandermonde_matrix(n: int, dtype: Any = np.complex128) -> np.ndarray:
    """Return the ``n`` x ``n`` matrix of roots-of-unity powers."""

    idx = np.arange(n)
    # Reduce the exponent modulo n so large r*c products keep full accuracy.
    powers = np.outer(idx, idx) % n
    return np.exp(-2j * np.pi * powers / n).astype(dtype)


class Vandermonde:
    """Dense DFT operator of a fixed length.

    Parameters
    ----------
    dft_length:
        Number of samples the transform operates on.  Required unless
        ``capacity`` is given, in which case it defaults to it.
    capacity:
        Declared fixed size.  A runtime ``dft_length`` larger than the
        capacity, or different from it, is rejected.
    precision:
        ``"single"`` (``complex64``) or ``"double"`` (``complex128``).
    """

    def __init__(
        self,
        dft_length: int | None = None,
        *,
        capacity: int | None = None,
        precision: str = "double",
    ) -> None:
        self._size = _resolve_length(dft_length, capacity)
        self._dtype = _resolve_precision(precision)
        self._matrix = vandermonde_matrix(self._size, self._dtype)
        self._matrix.flags.writeable = False
        logger.debug("built %dx%d Vandermonde matrix (%s)", self._size, self._size, self._dtype)

    @property
    def size(self) -> int:
        return self._size

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def matrix(self) -> np.ndarray:
        """The read-only transform matrix."""

        return self._matrix

    def _check_length(self, n: int, what: str) -> None:
        if n != self._size:
            raise PreconditionError(
                f"{what} length {n} does not match transform size {self._size}"
            )

    def apply(self, samples: Signal | Any) -> np.ndarray:
        """Return the Fourier coefficients ``M @ samples``.

        ``coefficients[k] = sum_j samples[j] * exp(-2j*pi*j*k/n)``.  When a
        :class:`~dspkit.signal.Signal` is given the coefficients are also
        stored on its ``fourier`` attribute.
        """

        arr = np.asarray(samples)
        self._check_length(arr.size, "sample")
        coefficients = self._matrix @ arr.reshape(-1).astype(self._dtype, copy=False)
        if isinstance(samples, Signal):
            samples.fourier = coefficients
        return coefficients

    def inverse(self, coefficients: Signal | Any) -> np.ndarray:
        """Return ``(M^H @ coefficients) / n``.

        The result is complex even when the original samples were real; the
        imaginary parts are then at the level of rounding error.  A
        :class:`~dspkit.signal.Signal` argument contributes the coefficients
        stored by a previous :meth:`apply`.
        """

        if isinstance(coefficients, Signal):
            if coefficients.fourier is None:
                raise PreconditionError("signal has no Fourier coefficients; call apply() first")
            coefficients = coefficients.fourier
        arr = np.asarray(coefficients).reshape(-1)
        self._check_length(arr.size, "coefficient")
        return (self._matrix.conj().T @ arr.astype(self._dtype, copy=False)) / self._size

    def frequencies(self, sample_rate: float) -> np.ndarray:
        """Return the frequency of each bin, ``k * sample_rate / n``."""

        return np.arange(self._size) * (sample_rate / self._size)


__all__ = ["Vandermonde", "vandermonde_matrix", "PRECISIONS"]
