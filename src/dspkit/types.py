"""Common type helpers for dspkit.

This module defines the small enumerations and containers exchanged between
the signal container and the numerical routines.  They are intentionally
minimal but add clarity around boundary handling and buffer policies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OverlapMode(str, Enum):
    """Boundary handling for convolution and correlation.

    ``FULL`` pads the signal with ``len(filter) - 1`` zeros at both ends,
    ``SAME`` pads only the front and ``VALID`` never resizes the signal.
    """

    FULL = "full"
    VALID = "valid"
    SAME = "same"

    @classmethod
    def parse(cls, value: "OverlapMode | str") -> "OverlapMode":
        """Return the member matching ``value`` (case-insensitive)."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"unknown overlap mode {value!r}; expected one of {choices}") from None


class CapacityPolicy(str, Enum):
    """Whether a sample buffer may change length after construction."""

    FIXED = "fixed"
    GROWABLE = "growable"


@dataclass(frozen=True)
class Span:
    """Half-open index range delimiting a result inside a sequence."""

    begin: int
    end: int

    @property
    def width(self) -> int:
        """Return the number of elements covered by the span."""

        return self.end - self.begin

    def slice(self) -> slice:
        return slice(self.begin, self.end)
