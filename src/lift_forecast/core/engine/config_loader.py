"""
YAML → ForecastSettings loader.

Loads defaults from forecast.yaml (bundled with the package) and
optionally merges user overrides from ~/.lift-forecast/forecast.yaml.

Usage:
    from lift_forecast.core.engine.config_loader import load_settings
    settings = load_settings()
    predict_performance(..., settings=settings)

The engine itself never calls this; callers load settings once and pass
them in.  A user override file that cannot be parsed is logged and
ignored.
"""

from __future__ import annotations

import importlib.resources
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_SETTINGS, ForecastSettings

log = logging.getLogger(__name__)

# (section, key) in YAML -> ForecastSettings field
_FIELD_MAP: dict[tuple[str, str], str] = {
    ("projection", "horizon_days"): "horizon_days",
    ("projection", "gain_fraction"): "gain_fraction",
    ("projection", "logistic_rate"): "logistic_rate",
    ("projection", "inflection_days"): "inflection_days",
    ("goals", "fallback_months"): "goal_fallback_months",
    ("recommendations", "stall_days"): "stall_days",
    ("recommendations", "max_insights"): "max_insights",
    ("display", "unit"): "unit",
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} (and log) if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        log.warning("Ignoring settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled forecast.yaml, or None if not found."""
    ref = importlib.resources.files("lift_forecast").joinpath("forecast.yaml")
    candidate = Path(str(ref))
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.lift-forecast/forecast.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".lift-forecast" / "forecast.yaml"
    return p if p.exists() else None


def settings_from_dict(data: dict[str, Any]) -> ForecastSettings:
    """
    Build ForecastSettings from a sectioned config dict.

    Missing keys keep their defaults; unknown keys are ignored.

    Raises:
        ValueError: If a value has the wrong type or fails validation
    """
    defaults = DEFAULT_SETTINGS
    values: dict[str, Any] = {}
    for (section, key), field_name in _FIELD_MAP.items():
        section_data = data.get(section)
        if not isinstance(section_data, dict) or key not in section_data:
            continue
        default = getattr(defaults, field_name)
        try:
            values[field_name] = type(default)(section_data[key])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {section}.{key}: {section_data[key]!r}") from e
    return ForecastSettings(**values)


def load_model_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_forecast/forecast.yaml
    2. User override (``user_path`` or ~/.lift-forecast/forecast.yaml)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def load_settings(user_path: Path | None = None) -> ForecastSettings:
    """
    Load ForecastSettings from the bundled and user YAML files.

    An override that fails validation is logged and the defaults are used.
    """
    try:
        return settings_from_dict(load_model_config(user_path))
    except ValueError as e:
        log.warning("Invalid forecast settings, using defaults: %s", e)
        return DEFAULT_SETTINGS
