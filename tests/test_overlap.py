import logging

import numpy as np
import pytest

from dspkit import (
    CapacityPolicy,
    OverlapMode,
    PreconditionError,
    Signal,
    Span,
    UnsupportedOperationError,
)
from dspkit.core import convolve, convolved, correlate, correlated, overlap_kernel

TAPS = [0.1, 0.2, 0.3]


def ramp(n=5, **kwargs):
    return Signal.from_function(lambda idx: idx + 1, n, 5, **kwargs)


def test_valid_convolution_matches_known_values():
    sig = ramp()
    span = convolve(sig, TAPS, OverlapMode.VALID)
    assert span == Span(2, 5)
    np.testing.assert_allclose(sig.view(span), [1.0, 1.6, 2.2])


def test_valid_mode_works_on_fixed_capacity():
    sig = ramp(capacity=CapacityPolicy.FIXED)
    span = convolve(sig, TAPS, "valid")
    assert len(sig) == 5
    np.testing.assert_allclose(sig.view(span), [1.0, 1.6, 2.2])


@pytest.mark.parametrize("mode", [OverlapMode.FULL, OverlapMode.SAME])
@pytest.mark.parametrize("operation", [convolve, correlate])
def test_padding_modes_reject_fixed_capacity(mode, operation):
    sig = ramp(capacity=CapacityPolicy.FIXED)
    before = sig.data.copy()
    with pytest.raises(UnsupportedOperationError, match="not resizable"):
        operation(sig, TAPS, mode)
    np.testing.assert_array_equal(sig.data, before)


def test_padding_modes_reject_numpy_arrays():
    arr = np.arange(1.0, 6.0)
    with pytest.raises(UnsupportedOperationError):
        convolve(arr, TAPS, OverlapMode.FULL)
    np.testing.assert_array_equal(arr, [1, 2, 3, 4, 5])


def test_failed_correlation_leaves_filter_untouched():
    sig = Signal(np.arange(6), 1.0, dtype=complex, capacity="fixed")
    taps = np.array([1 + 2j, 3 - 1j])
    with pytest.raises(UnsupportedOperationError):
        correlate(sig, taps, OverlapMode.SAME)
    np.testing.assert_array_equal(taps, [1 + 2j, 3 - 1j])


def test_read_only_signal_is_rejected_before_conjugation():
    arr = np.arange(1.0, 7.0).astype(complex)
    arr.flags.writeable = False
    taps = [1 + 2j, 3 - 1j]
    with pytest.raises(UnsupportedOperationError, match="read-only") as info:
        correlate(arr, taps, OverlapMode.VALID)
    assert info.value.operation == "overwrite"
    assert taps == [1 + 2j, 3 - 1j]
    np.testing.assert_array_equal(arr, np.arange(1.0, 7.0))


def test_read_only_filter_cannot_be_conjugated():
    arr = np.arange(1.0, 7.0).astype(complex)
    taps = np.array([1 + 2j, 3 - 1j])
    taps.flags.writeable = False
    with pytest.raises(UnsupportedOperationError, match="read-only") as info:
        correlate(arr, taps, OverlapMode.VALID)
    assert info.value.operation == "conjugate"
    np.testing.assert_array_equal(taps, [1 + 2j, 3 - 1j])
    np.testing.assert_array_equal(arr, np.arange(1.0, 7.0))


@pytest.mark.parametrize("n", [4, 7, 10])
@pytest.mark.parametrize("m", [1, 2, 3])
@pytest.mark.parametrize(
    "mode, expected",
    [
        (OverlapMode.FULL, lambda n, m: n + m - 1),
        (OverlapMode.VALID, lambda n, m: n - m + 1),
        (OverlapMode.SAME, lambda n, m: n),
    ],
)
@pytest.mark.parametrize("operation", [convolve, correlate])
def test_result_length(n, m, mode, expected, operation):
    sig = Signal(np.linspace(-1.0, 1.0, n), 1.0)
    span = operation(sig, np.ones(m), mode)
    assert span.width == expected(n, m)
    assert 0 <= span.begin <= span.end <= len(sig)


@pytest.mark.parametrize("mode", list(OverlapMode))
def test_convolution_matches_numpy(mode):
    rng = np.random.default_rng(0)
    a = rng.normal(size=9)
    b = rng.normal(size=4)
    full = np.convolve(a, b, mode="full")
    expected = {
        OverlapMode.FULL: full,
        OverlapMode.VALID: np.convolve(a, b, mode="valid"),
        OverlapMode.SAME: full[: a.size],
    }[mode]
    sig = Signal(a, 1.0)
    span = convolve(sig, b, mode)
    np.testing.assert_allclose(sig.view(span), expected)


@pytest.mark.parametrize("mode", list(OverlapMode))
def test_correlation_matches_numpy(mode):
    rng = np.random.default_rng(1)
    a = rng.normal(size=8) + 1j * rng.normal(size=8)
    b = rng.normal(size=3) + 1j * rng.normal(size=3)
    full = np.correlate(a, b, mode="full")
    expected = {
        OverlapMode.FULL: full,
        OverlapMode.VALID: np.correlate(a, b, mode="valid"),
        OverlapMode.SAME: full[: a.size],
    }[mode]
    sig = Signal(a, 1.0)
    span = correlate(sig, b.copy(), mode)
    np.testing.assert_allclose(sig.view(span), expected)


def test_correlation_agrees_with_scipy():
    signal = pytest.importorskip("scipy.signal")
    a = np.sin(np.linspace(0, 3, 12))
    b = np.array([0.5, -1.0, 0.25])
    np.testing.assert_allclose(
        correlated(a, b, OverlapMode.FULL), signal.correlate(a, b, mode="full")
    )
    np.testing.assert_allclose(
        convolved(a, b, OverlapMode.FULL), signal.convolve(a, b, mode="full")
    )


def test_correlation_conjugates_complex_filter_in_place():
    a = [1.0, 2.0, 3.0, 4.0]
    b = [1 + 1j, 2 - 1j]
    conj_b = [1 - 1j, 2 + 1j]
    expected = [conj_b[0] * a[p] + conj_b[1] * a[p + 1] for p in range(3)]

    span = correlate(a, b, OverlapMode.VALID)

    assert b == conj_b
    np.testing.assert_allclose(a[span.slice()], expected)


def test_correlation_equals_convolution_with_reversed_conjugate():
    a = np.array([0.5, -1.0, 2.0, 3.0, 1.5], dtype=complex)
    b = np.array([1 + 2j, -1j, 0.5])
    conv = Signal(a, 1.0)
    corr = Signal(a, 1.0)
    conv_span = convolve(conv, np.conj(b)[::-1], OverlapMode.VALID)
    corr_span = correlate(corr, b.copy(), OverlapMode.VALID)
    np.testing.assert_allclose(corr.view(corr_span), conv.view(conv_span))


def test_real_signal_cannot_hold_complex_results():
    sig = ramp()
    taps = np.array([1 + 1j, 1 - 1j])
    with pytest.raises(PreconditionError):
        correlate(sig, taps)
    np.testing.assert_array_equal(taps, [1 + 1j, 1 - 1j])
    np.testing.assert_array_equal(sig.data, [1, 2, 3, 4, 5])


@pytest.mark.parametrize("length", [5, 6])
def test_filter_must_be_shorter_than_signal(length):
    sig = ramp()
    with pytest.raises(PreconditionError):
        convolve(sig, np.ones(length))
    assert len(sig) == 5


def test_full_mode_grows_python_list():
    a = [1.0, 2.0, 3.0, 4.0, 5.0]
    span = convolve(a, TAPS, OverlapMode.FULL)
    assert len(a) == 5 + 2 * 2
    assert span == Span(2, 9)
    np.testing.assert_allclose(a[span.slice()], np.convolve([1, 2, 3, 4, 5], TAPS))


def test_same_mode_pads_front_only():
    sig = ramp()
    span = convolve(sig, TAPS, OverlapMode.SAME)
    assert len(sig) == 7
    assert span == Span(2, 7)
    np.testing.assert_allclose(sig.view(span), [0.1, 0.4, 1.0, 1.6, 2.2])


def test_unrecognised_mode_is_a_noop(caplog):
    sig = ramp()
    with caplog.at_level(logging.WARNING, logger="dspkit"):
        span = convolve(sig, TAPS, "circular")
    assert span == Span(0, 5)
    np.testing.assert_array_equal(sig.data, [1, 2, 3, 4, 5])
    assert "unrecognised overlap mode" in caplog.text


def test_unrecognised_mode_does_not_conjugate_filter():
    sig = Signal(np.arange(1, 7), 1.0, dtype=complex)
    taps = np.array([1 + 2j, 3 - 1j])
    assert correlate(sig, taps, "circular") == Span(0, 6)
    np.testing.assert_array_equal(taps, [1 + 2j, 3 - 1j])
    np.testing.assert_array_equal(sig.data, np.arange(1, 7))


def test_non_mutating_variants_leave_inputs_alone():
    a = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    b = np.array([1j, 2.0])
    out = correlated(a, b, "full")
    assert out.size == 6
    np.testing.assert_array_equal(a, [1, 2, 3, 4, 5])
    np.testing.assert_array_equal(b, [1j, 2.0])
    np.testing.assert_allclose(out, np.correlate(a, b, mode="full"))

    out = convolved(a, [0.1, 0.2, 0.3])
    np.testing.assert_allclose(out, [1.0, 1.6, 2.2])


def test_kernel_writes_to_separate_destination():
    signal = np.array([1.0, 2.0, 3.0, 4.0])
    out = np.zeros(4)
    written = overlap_kernel(signal, np.array([1.0, 10.0]), out)
    assert written == 3
    np.testing.assert_array_equal(out, [21.0, 32.0, 43.0, 0.0])

    out = np.zeros(4)
    overlap_kernel(signal, np.array([1.0, 10.0]), out, reverse=True)
    np.testing.assert_array_equal(out, [0.0, 12.0, 23.0, 34.0])
    np.testing.assert_array_equal(signal, [1.0, 2.0, 3.0, 4.0])
