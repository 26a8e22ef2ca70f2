from __future__ import annotations

"""Command line interface for dspkit using Typer."""

from pathlib import Path
from typing import Dict, List, Optional

import json
import logging

import numpy as np
import typer
from pydantic import ValidationError

from ._typer import bad_parameter, load_array, parse_float_list, save_array
from .config import Settings, load_settings
from .core.fourier import PRECISIONS, Vandermonde
from .core.overlap import convolved, correlated
from .errors import DspError
from .signal import Signal
from .types import OverlapMode
from .utils.logging import get_logger

app = typer.Typer(help="Convolution, correlation and brute-force DFT utilities")
logger = logging.getLogger(__name__)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"invalid JSON override value: {raw}") from None
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys[:-1]:
        if not hasattr(current, key):
            raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)
    if not hasattr(current, keys[-1]):
        raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. overlap.mode=full",
    ),
) -> None:
    """Initialise the Typer context with validated settings."""

    if isinstance(ctx.obj, Settings):
        settings = ctx.obj
    else:
        if config is not None and not config.exists():
            raise typer.BadParameter(f"configuration file not found: {config}")
        try:
            settings = load_settings(config) if config else Settings()
        except (FileNotFoundError, RuntimeError, TypeError, json.JSONDecodeError) as exc:
            raise typer.BadParameter(f"failed to load configuration: {exc}") from exc
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration: {exc}") from exc

    if set_overrides:
        data = settings.model_dump(mode="json")
        for override in set_overrides:
            if "=" not in override:
                raise typer.BadParameter(
                    "overrides must be of the form --set section.key=value"
                )
            key, raw_value = override.split("=", 1)
            if not key:
                raise typer.BadParameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            _apply_override(data, keys, _parse_override_value(raw_value))
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration override: {exc}") from exc

    get_logger("dspkit", settings.logging.level, settings.logging.format)
    ctx.obj = settings


def _resolve_taps(cfg: Settings, filter_path: Optional[Path], taps: Optional[str]) -> np.ndarray:
    if filter_path is not None and taps is not None:
        bad_parameter("use either --filter or --taps, not both", param_hint="--filter")
    if filter_path is not None:
        return load_array(filter_path, param_hint="--filter")
    if taps is not None:
        values = parse_float_list(taps, param_hint="--taps")
    else:
        values = list(cfg.overlap.taps)
    if not values:
        bad_parameter("no filter taps given", param_hint="--taps")
    return np.asarray(values, dtype=float)


def _resolve_mode(cfg: Settings, mode: Optional[str]) -> OverlapMode:
    if mode is None:
        return cfg.overlap.mode
    try:
        return OverlapMode.parse(mode)
    except ValueError as exc:
        bad_parameter(str(exc), param_hint="--mode")


def _emit(result: np.ndarray, output: Optional[Path]) -> None:
    if output is not None:
        save_array(output, result)
        typer.echo(f"saved {result.size} values to {output}")
    else:
        typer.echo(" ".join(map(str, result.tolist())))


def _run_overlap(
    ctx: typer.Context,
    operation: str,
    input: Path,
    filter_path: Optional[Path],
    taps: Optional[str],
    mode: Optional[str],
    output: Optional[Path],
) -> None:
    cfg: Settings = ctx.obj
    signal = load_array(input, param_hint="INPUT")
    kernel = _resolve_taps(cfg, filter_path, taps)
    resolved = _resolve_mode(cfg, mode)
    func = convolved if operation == "convolve" else correlated
    try:
        result = func(signal, kernel, resolved)
    except DspError as exc:
        bad_parameter(str(exc), param_hint="INPUT")
    logger.debug("%s (%s): %d samples -> %d", operation, resolved.value, signal.size, result.size)
    _emit(result, output)


@app.command()
def convolve(
    ctx: typer.Context,
    input: Path = typer.Argument(..., dir_okay=False),
    filter_path: Optional[Path] = typer.Option(None, "--filter", "-f", dir_okay=False),
    taps: Optional[str] = typer.Option(None, "--taps", "-t", help="Comma separated filter taps"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="full, valid or same"),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    """Convolve the samples in ``INPUT`` with a filter."""

    _run_overlap(ctx, "convolve", input, filter_path, taps, mode, output)


@app.command()
def correlate(
    ctx: typer.Context,
    input: Path = typer.Argument(..., dir_okay=False),
    filter_path: Optional[Path] = typer.Option(None, "--filter", "-f", dir_okay=False),
    taps: Optional[str] = typer.Option(None, "--taps", "-t", help="Comma separated filter taps"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="full, valid or same"),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    """Correlate the samples in ``INPUT`` with a filter."""

    _run_overlap(ctx, "correlate", input, filter_path, taps, mode, output)


def _transform(cfg: Settings, size: int, precision: Optional[str]) -> Vandermonde:
    precision = (precision or cfg.fourier.precision).strip().lower()
    if precision not in PRECISIONS:
        bad_parameter(
            f"unknown precision {precision!r}; expected one of {', '.join(PRECISIONS)}",
            param_hint="--precision",
        )
    try:
        return Vandermonde(size, capacity=cfg.fourier.capacity, precision=precision)
    except DspError as exc:
        bad_parameter(str(exc), param_hint="INPUT")


def _default_tolerance(transform: Vandermonde, samples: np.ndarray) -> float:
    """Round-trip error bound scaled by length, precision and signal magnitude."""

    eps = float(np.finfo(transform.dtype).eps)
    scale = max(1.0, float(np.max(np.abs(samples))))
    return 4.0 * transform.size * eps * scale


@app.command()
def dft(
    ctx: typer.Context,
    input: Path = typer.Argument(..., dir_okay=False),
    precision: Optional[str] = typer.Option(None, "--precision", "-p", help="single or double"),
    magnitude: bool = typer.Option(False, "--magnitude/--complex", help="Emit |X[k]|"),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    """Compute the Fourier coefficients of ``INPUT`` by brute force.

    The Vandermonde matrix scales quadratically with the number of samples;
    use it to verify other transforms on short signals.
    """

    cfg: Settings = ctx.obj
    samples = load_array(input, param_hint="INPUT")
    coefficients = _transform(cfg, samples.size, precision).apply(samples)
    if magnitude:
        _emit(np.abs(coefficients), output)
    else:
        _emit(coefficients, output)


@app.command()
def roundtrip(
    ctx: typer.Context,
    input: Path = typer.Argument(..., dir_okay=False),
    precision: Optional[str] = typer.Option(None, "--precision", "-p"),
) -> None:
    """Check that the inverse transform reconstructs ``INPUT``."""

    cfg: Settings = ctx.obj
    samples = load_array(input, param_hint="INPUT")
    transform = _transform(cfg, samples.size, precision)
    reconstructed = transform.inverse(transform.apply(samples))
    error = float(np.max(np.abs(reconstructed - samples)))
    tolerance = cfg.fourier.tolerance
    if tolerance is None:
        tolerance = _default_tolerance(transform, samples)
    typer.echo(f"max_abs_error={error:.3e} tolerance={tolerance:.1e}")
    if error > tolerance:
        typer.secho("round trip exceeded tolerance", err=True)
        raise typer.Exit(code=1)


@app.command()
def info(
    ctx: typer.Context,
    input: Path = typer.Argument(..., dir_okay=False),
    sample_rate: Optional[float] = typer.Option(None, "--sample-rate", "-r"),
) -> None:
    """Print a condensed summary of the signal stored in ``INPUT``."""

    cfg: Settings = ctx.obj
    rate = sample_rate if sample_rate is not None else cfg.signal.sample_rate
    try:
        signal = Signal(load_array(input, param_hint="INPUT"), rate, capacity=cfg.signal.capacity)
    except DspError as exc:
        bad_parameter(str(exc), param_hint="--sample-rate")
    typer.echo(signal.describe())
    if len(signal):
        typer.echo(f"Sample rate: {signal.sample_rate:g}, resolution: {signal.resolution:g}")


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
