"""Simulator configuration loaded from YAML."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    """Raised when a configuration value is missing or out of range."""


@dataclass
class SimConfig:
    cube_size: float = 1.0
    gap: float = 0.05
    tolerance: float | None = None  # None -> half the layer spacing
    snap_every: int = 16  # 0 disables periodic snapping
    scramble_steps: int = 20
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def spacing(self) -> float:
        return self.cube_size + self.gap

    def validate(self) -> SimConfig:
        if self.cube_size <= 0:
            raise ConfigError(f"cube_size must be positive, got {self.cube_size}")
        if self.gap < 0:
            raise ConfigError(f"gap must be non-negative, got {self.gap}")
        if self.tolerance is not None and not 0 < self.tolerance <= self.spacing / 2:
            raise ConfigError(f"tolerance must be in (0, {self.spacing / 2}], got {self.tolerance}")
        if self.snap_every < 0:
            raise ConfigError(f"snap_every must be non-negative, got {self.snap_every}")
        if self.scramble_steps < 0:
            raise ConfigError(f"scramble_steps must be non-negative, got {self.scramble_steps}")
        if not 0 <= self.port <= 65535:
            raise ConfigError(f"port must be in 0..65535, got {self.port}")
        return self

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_FIELD_TYPES = {
    "cube_size": float,
    "gap": float,
    "tolerance": float,
    "snap_every": int,
    "scramble_steps": int,
    "host": str,
    "port": int,
}


def load_config(path: str | Path) -> dict:
    """Load YAML config. Returns dict with optional 'cube' and 'server' keys."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def config_from_dict(data: dict[str, Any]) -> SimConfig:
    """Build a validated SimConfig from a flat dict or one split into 'cube' / 'server' sections."""
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping")

    flat: dict[str, Any] = {}
    for key, value in data.items():
        if key in ("cube", "server"):
            if not isinstance(value, dict):
                raise ConfigError(f"Config section '{key}' must be a mapping")
            flat.update(value)
        else:
            flat[key] = value

    known = {f.name for f in fields(SimConfig)}
    unknown = sorted(set(flat) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    kwargs: dict[str, Any] = {}
    for key, value in flat.items():
        if value is None:
            if key != "tolerance":
                raise ConfigError(f"{key} must not be null")
            kwargs[key] = None
            continue
        try:
            kwargs[key] = _FIELD_TYPES[key](value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid value for {key}: {value!r}") from exc
    return SimConfig(**kwargs).validate()


def resolve_config(path: str | Path | None = None, **overrides: Any) -> SimConfig:
    """Load ``path`` (if given) and apply non-None overrides on top."""
    data = load_config(path) if path is not None else {}
    config = config_from_dict(data)
    values = config.to_dict()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return config_from_dict(values)
