"""
Centralized rule table loading.
load_table parses a YAML table under config/; frozen_table caches a read-only
copy that services may hold without exposing shared mutable state.
"""

import yaml
from pathlib import Path
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping

from farmer_agent import config


def load_table(name: str) -> dict:
    """
    Loads a rule table (e.g. "lexicon", "responses") from the config directory.
    Every call returns a freshly parsed document.

    Args:
        name: File name without the .yaml extension

    Returns:
        Parsed YAML document

    Raises:
        FileNotFoundError: If the table does not exist
    """
    path = Path(config.RULES_PATH) / f"{name}.yaml"
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def freeze(value: Any) -> Any:
    """Recursively turns dicts into read-only mappings and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


@lru_cache(maxsize=None)
def frozen_table(name: str) -> Mapping[str, Any]:
    """Read-only rule table, parsed once and shared."""
    return freeze(load_table(name))
