"""Configuration module — exports Settings and the YAML loader helpers."""

from tradelens.config.loader import DEFAULT_FRESHNESS, freshness_policies_from_config, load_config
from tradelens.config.settings import Settings

__all__ = ["DEFAULT_FRESHNESS", "Settings", "freshness_policies_from_config", "load_config"]
