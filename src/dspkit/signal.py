"""Container for a discretely sampled signal.

A :class:`Signal` wraps a one-dimensional :class:`numpy.ndarray` together
with the acquisition sample rate.  Samples may be real or complex.  Each
instance carries a :class:`~dspkit.types.CapacityPolicy`: growable signals
support positional insertion and resizing, fixed signals keep the length
they were created with and raise
:class:`~dspkit.errors.UnsupportedOperationError` when asked to grow.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator

import numpy as np

from .errors import PreconditionError, UnsupportedOperationError
from .types import CapacityPolicy, Span


def _as_samples(values: Any, dtype: Any = None) -> np.ndarray:
    arr = np.array(values, dtype=dtype, copy=True)
    if arr.ndim != 1:
        arr = arr.reshape(-1)
    if dtype is None and not np.issubdtype(arr.dtype, np.inexact):
        arr = arr.astype(np.float64)
    return arr


class Signal:
    """Ordered, indexable collection of samples with a sample rate.

    Parameters
    ----------
    samples:
        Any array-like holding the initial samples.  The values are copied.
    sample_rate:
        Acquisition rate in samples per unit time.  Must be positive.
    capacity:
        ``CapacityPolicy.GROWABLE`` (default) or ``CapacityPolicy.FIXED``.
    dtype:
        Optional numpy dtype for the samples.  Integer input is promoted to
        ``float64`` when omitted.
    """

    def __init__(
        self,
        samples: Any,
        sample_rate: float,
        *,
        capacity: CapacityPolicy | str = CapacityPolicy.GROWABLE,
        dtype: Any = None,
    ) -> None:
        if not sample_rate > 0:
            raise PreconditionError("sample_rate must be positive")
        self._data = _as_samples(samples, dtype)
        self._sample_rate = float(sample_rate)
        self._capacity = CapacityPolicy(capacity)
        self.fourier: np.ndarray | None = None

    # ------------------------------------------------------------------
    # Alternative constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_values(cls, *values: complex, sample_rate: float, **kwargs: Any) -> "Signal":
        """Build a signal from literal sample values."""

        return cls(list(values), sample_rate, **kwargs)

    @classmethod
    def from_function(
        cls,
        func: Callable[[int], complex],
        num_samples: int,
        sample_rate: float,
        **kwargs: Any,
    ) -> "Signal":
        """Build a signal whose ``i``-th sample is ``func(i)``."""

        if num_samples < 0:
            raise PreconditionError("num_samples must not be negative")
        return cls([func(i) for i in range(num_samples)], sample_rate, **kwargs)

    @classmethod
    def zeros(cls, num_samples: int, sample_rate: float, **kwargs: Any) -> "Signal":
        if num_samples < 0:
            raise PreconditionError("num_samples must not be negative")
        dtype = kwargs.pop("dtype", np.float64)
        return cls(np.zeros(num_samples, dtype=dtype), sample_rate, **kwargs)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return int(self._data.size)

    def __getitem__(self, idx):
        return self._data[idx]

    def __setitem__(self, idx, value) -> None:
        self._data[idx] = value

    def __iter__(self) -> Iterator:
        return iter(self._data)

    def __reversed__(self) -> Iterator:
        return iter(self._data[::-1])

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None or np.dtype(dtype) == self.dtype:
            return self._data.copy() if copy else self._data
        return self._data.astype(dtype)

    def __repr__(self) -> str:
        return (
            f"Signal(num_samples={len(self)}, sample_rate={self._sample_rate:g}, "
            f"dtype={self.dtype}, capacity={self._capacity.value})"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """Backing sample array.  Replaced, not resized, when the signal grows."""

        return self._data

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def is_complex(self) -> bool:
        return bool(np.iscomplexobj(self._data))

    @property
    def precision(self) -> np.dtype:
        """Real working precision of the samples (``float32`` for ``complex64``)."""

        if np.issubdtype(self.dtype, np.inexact):
            return np.finfo(self.dtype).dtype
        return np.dtype(np.float64)

    @property
    def fourier_dtype(self) -> np.dtype:
        return np.result_type(self.precision, np.complex64)

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def capacity(self) -> CapacityPolicy:
        return self._capacity

    @property
    def resizable(self) -> bool:
        return self._capacity is CapacityPolicy.GROWABLE

    @property
    def resolution(self) -> float:
        """Frequency resolution ``sample_rate / len(self)``."""

        if len(self) == 0:
            raise PreconditionError("resolution is undefined for an empty signal")
        return self._sample_rate / len(self)

    @property
    def duration(self) -> float:
        return len(self) / self._sample_rate

    def times(self) -> np.ndarray:
        """Return the acquisition time of every sample."""

        return np.arange(len(self), dtype=self.precision) / self._sample_rate

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _require_resizable(self, operation: str) -> None:
        if not self.resizable:
            raise UnsupportedOperationError(
                f"signal has fixed capacity ({len(self)} samples) and is not resizable",
                operation=operation,
            )

    def insert(self, position: int, count: int, value: complex = 0) -> None:
        """Insert ``count`` copies of ``value`` before ``position``."""

        self._require_resizable("insert")
        if count < 0:
            raise PreconditionError("count must not be negative")
        if not 0 <= position <= len(self):
            raise PreconditionError(f"insert position {position} out of range")
        if count == 0:
            return
        run = np.full(count, value, dtype=self.dtype)
        self._data = np.concatenate((self._data[:position], run, self._data[position:]))

    def resize(self, num_samples: int) -> None:
        """Resize to ``num_samples``, keeping the prefix and zero-filling growth."""

        self._require_resizable("resize")
        if num_samples < 0:
            raise PreconditionError("num_samples must not be negative")
        out = np.zeros(num_samples, dtype=self.dtype)
        keep = min(num_samples, len(self))
        out[:keep] = self._data[:keep]
        self._data = out

    def view(self, span: Span) -> np.ndarray:
        """Return the samples delimited by ``span``."""

        return self._data[span.slice()]

    def describe(self) -> str:
        """Condensed summary of the allocation policy and datatypes."""

        if self.resizable:
            head = "Signal Data is dynamically allocated: "
        else:
            head = "Signal Data is statically allocated: "
        return (
            f"{head}Supports {len(self)} samples.\n"
            f"Signal Datatype: {self.dtype}\n"
            f"Fourier Datatype: {self.fourier_dtype}"
        )


__all__ = ["Signal"]
