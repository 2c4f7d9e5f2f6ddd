"""YAML configuration loader with environment variable overrides.

Configuration is layered, later layers winning:

    1. ``config/config.yaml``: static defaults checked into the repo
    2. ``.env`` file: local developer overrides
    3. Environment variables set at deploy time

Only the settings listed in :data:`SETTINGS_OVERRIDES` can come from the
environment; freshness policies are product requirements and live in YAML.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from tradelens.config.settings import Settings
from tradelens.models.cache import FreshnessPolicy

# Product defaults, used for any store the YAML file does not mention.
DEFAULT_FRESHNESS: dict[str, dict[str, float | None]] = {
    "snapshot": {"cache_window": 60, "stale_warning_threshold": 120},
    "history": {"cache_window": 300, "stale_warning_threshold": 600},
    "ai_response": {"cache_window": 300, "stale_warning_threshold": None},
    "outlook": {"cache_window": 300, "stale_warning_threshold": None},
    "news": {"cache_window": 600, "stale_warning_threshold": 1800},
}

# (section, key) in the YAML layout -> Settings field that overrides it.
SETTINGS_OVERRIDES: dict[tuple[str, str], str] = {
    ("app", "env"): "app_env",
    ("backend", "base_url"): "backend_base_url",
    ("backend", "timeout_seconds"): "backend_timeout_seconds",
    ("logging", "level"): "log_level",
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge environment-based Settings on top.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
              an empty base layer.
        settings: Settings to merge; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ValueError: If the file does not hold a mapping at the top level.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}
    if not isinstance(yaml_config, Mapping):
        raise ValueError(f"{path} must contain a mapping, got {type(yaml_config).__name__}")

    settings = settings or Settings()
    env_overrides: dict[str, dict[str, Any]] = {}
    for (section, key), field_name in SETTINGS_OVERRIDES.items():
        env_overrides.setdefault(section, {})[key] = getattr(settings, field_name)

    return _merged(yaml_config, env_overrides)


def freshness_policies_from_config(config: dict[str, Any]) -> dict[str, FreshnessPolicy]:
    """Build one :class:`FreshnessPolicy` per store name.

    Each store's section under ``freshness`` may set ``cache_window`` and/or
    ``stale_warning_threshold`` in seconds; unset values fall back to
    :data:`DEFAULT_FRESHNESS`.

    Raises:
        ValueError: If a configured threshold is below its cache window.
    """
    section = config.get("freshness") or {}
    policies: dict[str, FreshnessPolicy] = {}
    for store_name, defaults in DEFAULT_FRESHNESS.items():
        merged = {**defaults, **(section.get(store_name) or {})}
        policies[store_name] = FreshnessPolicy(**merged)
    return policies


def _merged(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return *base* with *overrides* applied section by section.

    Nested mappings are merged recursively; any other override value
    replaces the base value.  Neither argument is modified.
    """
    result = dict(base)
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = _merged(current, value)
        else:
            result[key] = value
    return result
