"""Loader for the JSON rule files that sit next to this module."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

SETTINGS_DIR = Path(__file__).parent
RULES_NAME = 'rules'


def load_config(config_name: str) -> Dict[str, Any]:
    """Read ``<config_name>.json`` from the settings directory.

    Raises:
        FileNotFoundError: If there is no such rule file
    """
    path = SETTINGS_DIR / f"{config_name}.json"
    if not path.is_file():
        raise FileNotFoundError(f"No rule file named '{config_name}' in {SETTINGS_DIR}")
    return json.loads(path.read_text(encoding='utf-8'))


@lru_cache(maxsize=None)
def get_rules_config() -> Dict[str, Any]:
    # Read once per process; treat the result as read-only
    return load_config(RULES_NAME)


def get_config_value(config_name: str, *keys: str, default: Any = None) -> Any:
    """Look up a nested rule value, e.g. ``('rules', 'evaluator', 'warning_percent')``.

    Missing files or keys give ``default``.  The ``rules`` file is served
    from the process-wide cache.
    """
    try:
        node: Any = get_rules_config() if config_name == RULES_NAME else load_config(config_name)
        for key in keys:
            node = node[key]
    except (KeyError, TypeError, FileNotFoundError):
        return default
    return node
