"""Convolution and correlation of a signal with a shorter filter.

Both operations share one sliding-window kernel: convolution walks the
signal backwards so that the filter taps are applied time-reversed, while
correlation walks it forwards.  :func:`convolve` and :func:`correlate`
overwrite their first argument and, for Full and Same modes, grow it with
zero padding.  The padding slots that remain after the kernel has run are
left in place; the returned :class:`~dspkit.types.Span` delimits the
result.  :func:`convolved` and :func:`correlated` are non-destructive
counterparts that return a fresh array and leave both inputs untouched.
"""

from __future__ import annotations

import logging
from typing import Any, MutableSequence

import numpy as np

from ..errors import PreconditionError, UnsupportedOperationError
from ..signal import Signal
from ..types import OverlapMode, Span

logger = logging.getLogger(__name__)


def overlap_kernel(
    signal: np.ndarray,
    taps: np.ndarray,
    out: np.ndarray | None = None,
    *,
    reverse: bool = False,
) -> int:
    """Slide ``taps`` over ``signal`` and write one sum per alignment.

    For alignment ``p`` the value ``sum(taps[k] * signal[p + k])`` is written
    to ``out[p]``, with both ``signal`` and ``out`` traversed from the end
    when ``reverse`` is true.  ``out`` defaults to ``signal`` itself; the
    in-place update is safe because each alignment only reads samples that
    have not been overwritten yet.

    Returns the number of values written.
    """

    src = signal[::-1] if reverse else signal
    if out is None:
        dst = src
    else:
        dst = out[::-1] if reverse else out
    width = taps.size
    count = src.size - width + 1
    for pos in range(count):
        dst[pos] = np.dot(taps, src[pos : pos + width])
    return max(count, 0)


# ---------------------------------------------------------------------------
# Sequence adapters
# ---------------------------------------------------------------------------


def _resizable(seq: Any) -> bool:
    if isinstance(seq, Signal):
        return seq.resizable
    if isinstance(seq, np.ndarray):
        return False
    return isinstance(seq, list)


def _insert(seq: Any, position: int, count: int) -> None:
    if isinstance(seq, Signal):
        seq.insert(position, count, 0)
    else:
        seq[position:position] = [0] * count


def _working_dtype(a: Any, b: Any) -> np.dtype:
    """Dtype the result is computed in, rejecting lossy in-place storage."""

    b_dtype = np.asarray(b).dtype
    if isinstance(a, (Signal, np.ndarray)):
        a_dtype = a.dtype
        if not np.can_cast(b_dtype, a_dtype, casting="same_kind"):
            raise PreconditionError(
                f"signal dtype {a_dtype} cannot hold results for filter dtype {b_dtype}"
            )
        return a_dtype
    # Python lists hold any numeric type so the result is promoted instead.
    return np.result_type(np.asarray(a), b_dtype, np.float64)


def _conjugate(b: Any) -> None:
    if isinstance(b, Signal):
        b[:] = np.conj(b.data)
    elif isinstance(b, np.ndarray):
        np.conjugate(b, out=b)
    else:
        b[:] = [np.conj(v) for v in b]


def _check(a: Any, b: Any, *, conjugates: bool) -> np.dtype:
    if len(a) <= len(b):
        raise PreconditionError(
            f"filter length ({len(b)}) must be smaller than signal length ({len(a)})"
        )
    if len(b) == 0:
        raise PreconditionError("filter must contain at least one tap")
    dtype = _working_dtype(a, b)
    if isinstance(a, np.ndarray) and not a.flags.writeable:
        raise UnsupportedOperationError("signal is read-only", operation="overwrite")
    if conjugates and np.iscomplexobj(np.asarray(b)):
        if isinstance(b, np.ndarray) and not b.flags.writeable:
            raise UnsupportedOperationError("filter is read-only", operation="conjugate")
        if not isinstance(b, (Signal, np.ndarray, list)):
            raise UnsupportedOperationError(
                f"cannot conjugate a {type(b).__name__} filter in place", operation="conjugate"
            )
    return dtype


def _resolve_mode(mode: Any) -> OverlapMode | None:
    try:
        return OverlapMode.parse(mode)
    except ValueError:
        return None


def _require_padding(a: Any, mode: OverlapMode, filter_delay: int) -> bool:
    """Return whether ``mode`` pads ``a``, failing if ``a`` cannot grow."""

    if mode is OverlapMode.VALID or filter_delay == 0:
        return False
    if not _resizable(a):
        raise UnsupportedOperationError(
            f"{mode.value} mode needs padding but the sequence is not resizable",
            operation="insert",
        )
    return True


def _pad(a: Any, mode: OverlapMode, filter_delay: int) -> None:
    _insert(a, 0, filter_delay)
    if mode is OverlapMode.FULL:
        _insert(a, len(a), filter_delay)


def _run(a: Any, taps: np.ndarray, dtype: np.dtype, *, reverse: bool) -> None:
    if isinstance(a, Signal):
        overlap_kernel(a.data, taps, reverse=reverse)
    elif isinstance(a, np.ndarray):
        overlap_kernel(a, taps, reverse=reverse)
    else:
        buf = np.array(a, dtype=dtype)
        overlap_kernel(buf, taps, reverse=reverse)
        a[:] = buf.tolist()


def _overlap(a: Any, b: Any, mode: Any, *, correlation: bool) -> Span:
    name = "correlate" if correlation else "convolve"
    dtype = _check(a, b, conjugates=correlation)
    resolved = _resolve_mode(mode)
    if resolved is None:
        logger.warning("%s: unrecognised overlap mode %r; leaving signal unmodified", name, mode)
        return Span(0, len(a))

    filter_delay = len(b) - 1
    logger.debug(
        "%s: mode=%s signal_length=%d filter_length=%d", name, resolved.value, len(a), len(b)
    )
    padded = _require_padding(a, resolved, filter_delay)
    if correlation and np.iscomplexobj(np.asarray(b)):
        _conjugate(b)
    if padded:
        _pad(a, resolved, filter_delay)

    taps = np.asarray(b.data if isinstance(b, Signal) else b)
    if correlation:
        _run(a, taps, dtype, reverse=False)
        return Span(0, len(a) - filter_delay)
    _run(a, taps, dtype, reverse=True)
    return Span(filter_delay, len(a))


def convolve(
    a: MutableSequence | Signal | np.ndarray,
    b: Any,
    mode: OverlapMode | str = OverlapMode.VALID,
) -> Span:
    """Convolve ``a`` with ``b`` in place and return the span of the result.

    Parameters
    ----------
    a:
        Signal to overwrite.  Must be strictly longer than ``b``.  Full and
        Same modes insert ``len(b) - 1`` zeros and therefore need a growable
        :class:`~dspkit.signal.Signal` or a ``list``.
    b:
        Filter taps.  Not modified.
    mode:
        Boundary handling, see :class:`~dspkit.types.OverlapMode`.

    Returns
    -------
    Span
        Indices of the result inside the (possibly grown) ``a``.  The width
        is ``N + M - 1`` for Full, ``N - M + 1`` for Valid and ``N`` for Same.
    """

    return _overlap(a, b, mode, correlation=False)


def correlate(
    a: MutableSequence | Signal | np.ndarray,
    b: Any,
    mode: OverlapMode | str = OverlapMode.VALID,
) -> Span:
    """Correlate ``a`` with ``b`` in place and return the span of the result.

    When ``b`` is complex its taps are conjugated in place before use, so the
    caller's filter is modified.  Padding and the returned span otherwise
    follow :func:`convolve`.
    """

    return _overlap(a, b, mode, correlation=True)


def _copy_pair(a: Any, b: Any) -> tuple[Signal, np.ndarray]:
    a_arr = np.asarray(a)
    b_arr = np.array(b, copy=True)
    dtype = np.result_type(a_arr, b_arr, np.float64)
    return Signal(a_arr, 1.0, dtype=dtype), b_arr


def convolved(a: Any, b: Any, mode: OverlapMode | str = OverlapMode.VALID) -> np.ndarray:
    """Return the convolution of ``a`` and ``b`` without modifying either."""

    work, taps = _copy_pair(a, b)
    span = convolve(work, taps, mode)
    return work.view(span).copy()


def correlated(a: Any, b: Any, mode: OverlapMode | str = OverlapMode.VALID) -> np.ndarray:
    """Return the correlation of ``a`` with ``b`` without modifying either."""

    work, taps = _copy_pair(a, b)
    span = correlate(work, taps, mode)
    return work.view(span).copy()


__all__ = [
    "overlap_kernel",
    "convolve",
    "correlate",
    "convolved",
    "correlated",
]
