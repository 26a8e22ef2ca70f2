"""Exceptions raised by dspkit."""

from __future__ import annotations


class DspError(Exception):
    """Base class for all dspkit errors."""


class PreconditionError(DspError, ValueError):
    """Raised when arguments violate a documented precondition.

    Nothing has been modified when this is raised.
    """


class UnsupportedOperationError(DspError, RuntimeError):
    """Raised when a sequence lacks a capability an operation needs."""

    def __init__(self, message: str, *, operation: str | None = None):
        self.operation = operation
        super().__init__(message)
