"""Small helpers shared by the Typer commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional

import numpy as np
import typer


def bad_parameter(message: str, *, param_hint: Optional[str] = None) -> NoReturn:
    """Raise :class:`typer.BadParameter`, attaching ``param_hint`` when given."""

    if param_hint is not None:
        raise typer.BadParameter(message, param_hint=param_hint)
    raise typer.BadParameter(message)


def parse_float_list(raw: str, *, param_hint: str) -> list[float]:
    """Parse a comma or whitespace separated list of numbers."""

    items = [item for item in raw.replace(",", " ").split() if item]
    try:
        return [float(item) for item in items]
    except ValueError:
        bad_parameter(f"expected a list of numbers, got {raw!r}", param_hint=param_hint)


def load_array(path: Path, *, param_hint: str) -> np.ndarray:
    """Load a one-dimensional array from ``.npy``, ``.csv`` or whitespace text."""

    if not path.exists():
        bad_parameter(f"file not found: {path}", param_hint=param_hint)
    suffix = path.suffix.lower()
    try:
        if suffix == ".npy":
            data = np.load(path)
        elif suffix == ".csv":
            data = np.loadtxt(path, delimiter=",", ndmin=1)
        else:
            data = np.loadtxt(path, ndmin=1)
    except ValueError as exc:
        bad_parameter(f"could not read {path}: {exc}", param_hint=param_hint)
    return np.asarray(data).reshape(-1)


def save_array(path: Path, data: np.ndarray) -> None:
    if path.suffix.lower() == ".csv":
        np.savetxt(path, data, delimiter=",")
    else:
        np.save(path, data)
