"""Flyover configuration: YAML defaults, env overrides, validation.

Precedence (lowest to highest):
  1. config/flyover.yaml (``flyover:`` section)
  2. Environment: FFMPEG_BIN, FLYOVER_WORKERS (a .env file is honored)
  3. Explicit overrides passed by the caller (CLI flags)

Everything is validated before any scoring starts.
"""

import logging
import math
import os
from dataclasses import dataclass, fields, replace

import yaml
from dotenv import load_dotenv

from src.pipeline.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

CONFIG_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "config")
DEFAULT_CONFIG_PATH = os.path.join(CONFIG_DIR, "flyover.yaml")

ENV_OVERRIDES = {
    "FFMPEG_BIN": "ffmpeg_bin",
    "FLYOVER_WORKERS": "workers",
}


@dataclass(frozen=True)
class FlyoverConfig:
    """All tunables for one flyover run."""

    grid: int = 10
    top_k: int = 5
    frames_per_segment: int = 60
    fps: int = 30
    zoom_medium: float = 1.4
    workers: int = 1
    ffmpeg_bin: str = "ffmpeg"


def _require_int(name, value, minimum):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidConfiguration(f"{name} must be >= {minimum}, got {value}")


def validate_config(config):
    """Check every option is in range.

    Args:
        config: FlyoverConfig.

    Returns:
        The same config, for chaining.

    Raises:
        InvalidConfiguration: the first bad option found.
    """
    _require_int("grid", config.grid, 1)
    _require_int("top_k", config.top_k, 0)
    _require_int("frames_per_segment", config.frames_per_segment, 1)
    _require_int("fps", config.fps, 1)
    _require_int("workers", config.workers, 1)

    zoom = config.zoom_medium
    if isinstance(zoom, bool) or not isinstance(zoom, (int, float)):
        raise InvalidConfiguration(f"zoom_medium must be a number, got {zoom!r}")
    if not math.isfinite(zoom):
        raise InvalidConfiguration(f"zoom_medium must be finite, got {zoom}")
    if zoom < 1.0:
        raise InvalidConfiguration(f"zoom_medium must be >= 1.0, got {zoom}")

    if not isinstance(config.ffmpeg_bin, str) or not config.ffmpeg_bin.strip():
        raise InvalidConfiguration("ffmpeg_bin must be a non-empty string")
    return config


def _coerce(name, value):
    """Convert a YAML/env/CLI value to the field's type where unambiguous."""
    if value is None:
        return None
    if name == "ffmpeg_bin":
        return str(value)
    if name == "zoom_medium":
        if isinstance(value, bool):
            raise InvalidConfiguration(f"zoom_medium must be a number, got {value!r}")
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"zoom_medium must be a number, got {value!r}") from e
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise InvalidConfiguration(f"{name} must be an integer, got {value!r}") from e
    return value


def _load_yaml(path):
    if not os.path.exists(path):
        logger.debug("No config file at %s, using built-in defaults", path)
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    section = data.get("flyover", {}) or {}
    if not isinstance(section, dict):
        raise InvalidConfiguration(f"{path}: 'flyover' must be a mapping")
    return section


def load_config(path=None, overrides=None, use_env=True):
    """Build and validate a FlyoverConfig.

    Args:
        path: YAML file. Defaults to config/flyover.yaml.
        overrides: Dict of option -> value; None values are ignored.
        use_env: Read FFMPEG_BIN / FLYOVER_WORKERS (and .env).

    Returns:
        Validated FlyoverConfig.

    Raises:
        InvalidConfiguration: unknown option or bad value.
    """
    known = {f.name for f in fields(FlyoverConfig)}
    values = {}

    section = _load_yaml(path or DEFAULT_CONFIG_PATH)
    unknown = set(section) - known
    if unknown:
        raise InvalidConfiguration(f"Unknown config option(s): {', '.join(sorted(unknown))}")
    values.update(section)

    if use_env:
        load_dotenv()
        for env_name, option in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw:
                logger.debug("Config override from env %s=%s", env_name, raw)
                values[option] = raw

    for name, value in (overrides or {}).items():
        if name not in known:
            raise InvalidConfiguration(f"Unknown config option: {name}")
        if value is not None:
            values[name] = value

    coerced = {k: _coerce(k, v) for k, v in values.items() if v is not None}
    return validate_config(replace(FlyoverConfig(), **coerced))
