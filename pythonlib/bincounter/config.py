"""YAML configuration for the bincounter demo driver."""

from __future__ import annotations

import copy
import logging
import operator
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import yaml

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for unreadable, malformed or invalid configuration."""


# ---- Base template for a demo run ----
def default_cfg() -> Dict[str, Any]:
    return {
        "bins": 30,
        "range_min": 0.0,
        "range_max": 2.0,
        "samples": 10000,
        "seed": None,
        "outliers": [5.0, -3.0],
        "include_stats": True,
    }


def _deep_merge(base: Dict[str, Any], upd: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge upd into base."""
    for k, v in upd.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _as_int(name: str, value: Any) -> int:
    # yaml gives bools for yes/no/true/false, never count them as numbers
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return operator.index(value)
    except TypeError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def validate_cfg(cfg: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(cfg) - set(default_cfg()))
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(map(str, unknown))}")

    try:
        range_min = float(cfg["range_min"])
        range_max = float(cfg["range_max"])
        outliers = [float(v) for v in (cfg["outliers"] or [])]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"bad config value: {e}") from e

    bins = _as_int("bins", cfg["bins"])
    samples = _as_int("samples", cfg["samples"])

    if bins <= 0:
        raise ConfigError(f"bins must be positive, got {bins}")
    # BinCounter works in single precision, so check the range there
    with np.errstate(over="ignore"):
        lo, hi = np.float32(range_min), np.float32(range_max)
    if not (np.isfinite(lo) and np.isfinite(hi)):
        raise ConfigError(f"range [{range_min}, {range_max}] does not fit in single precision")
    if not lo < hi:
        raise ConfigError(
            f"range_min ({range_min}) must be below range_max ({range_max}) "
            "in single precision"
        )
    with np.errstate(over="ignore"):
        width = (hi - lo) / np.float32(bins)
    if not width > 0:
        raise ConfigError(f"range [{range_min}, {range_max}] too narrow for {bins} bins")
    if samples < 0:
        raise ConfigError(f"samples must be non-negative, got {samples}")

    if not isinstance(cfg["include_stats"], bool):
        raise ConfigError(
            f"include_stats must be true or false, got {cfg['include_stats']!r}"
        )

    seed = cfg["seed"]
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise ConfigError(f"seed must be a non-negative integer or null, got {seed!r}")

    cfg.update(
        bins=bins,
        range_min=range_min,
        range_max=range_max,
        samples=samples,
        outliers=outliers,
    )
    return cfg


def load_config(path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None):
    """
    Build the effective config: defaults, then the YAML file, then overrides.

    ``None`` values in ``overrides`` are ignored so unset CLI flags don't
    clobber the file.
    """
    cfg = default_cfg()

    if path is not None:
        path = Path(path)
        try:
            with path.open("r") as f:
                user = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"bad YAML {path}: {e}") from e
        if not isinstance(user, dict):
            raise ConfigError(f"config {path} must be a mapping, got {type(user).__name__}")
        _deep_merge(cfg, user)
        logger.debug("loaded config from %s", path)

    if overrides:
        _deep_merge(cfg, {k: v for k, v in overrides.items() if v is not None})

    return validate_cfg(copy.deepcopy(cfg))
