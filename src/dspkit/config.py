from __future__ import annotations

"""Configuration utilities for dspkit.

Settings are grouped into small sections (overlap, fourier, signal and
logging) held by the :class:`Settings` container.  Instances can be
populated from ``DSPKIT_`` prefixed environment variables, using ``__`` to
reach nested keys, or from YAML/JSON files with matching nested keys.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import EnvSettingsSource

from .core.fourier import PRECISIONS
from .types import CapacityPolicy, OverlapMode

try:  # pragma: no cover - optional dependency
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _split_floats(value: str) -> list[float]:
    value = value.strip().lstrip("[").rstrip("]")
    return [float(item) for item in value.split(",") if item.strip()]


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class OverlapSettings(SectionModel):
    """Defaults for convolution and correlation."""

    mode: OverlapMode = OverlapMode.VALID
    taps: list[float] = Field(default_factory=list)

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            return OverlapMode.parse(value)
        return value

    @field_validator("taps", mode="before")
    @classmethod
    def _coerce_float_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _split_floats(value)
        if isinstance(value, (int, float)):
            return [float(value)]
        if isinstance(value, (list, tuple)):
            return [float(item) for item in value]
        return value


class FourierSettings(SectionModel):
    """Parameters for the Vandermonde transform."""

    precision: str = "double"
    capacity: int | None = None
    tolerance: float | None = None

    @field_validator("precision")
    @classmethod
    def _check_precision(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in PRECISIONS:
            raise ValueError(f"precision must be one of {', '.join(PRECISIONS)}")
        return value


class SignalSettings(SectionModel):
    """Defaults applied when building signals from files."""

    sample_rate: float = Field(default=1.0, gt=0)
    capacity: CapacityPolicy = CapacityPolicy.GROWABLE


class LoggingSettings(SectionModel):
    """Logging level and format for the command line tools."""

    level: str = "INFO"
    format: str = "%(levelname)s:%(name)s:%(message)s"


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    overlap: OverlapSettings = Field(default_factory=OverlapSettings)
    fourier: FourierSettings = Field(default_factory=FourierSettings)
    signal: SignalSettings = Field(default_factory=SignalSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="DSPKIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        class LegacyEnvSettingsSource(EnvSettingsSource):
            def decode_complex_value(self, field_name, target_field, value):  # type: ignore[override]
                try:
                    return super().decode_complex_value(field_name, target_field, value)
                except json.JSONDecodeError:
                    return value

        env_settings.__class__ = LegacyEnvSettingsSource
        return init_settings, env_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``DSPKIT_`` environment variables only."""

        return cls()


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file."""

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAML is required to load YAML files")
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings.model_validate(data)


__all__ = [
    "OverlapSettings",
    "FourierSettings",
    "SignalSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
]
