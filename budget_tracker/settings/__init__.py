"""Rule settings and loaders.

Thresholds used by the evaluator and the monthly summary rules are
stored in JSON files next to this module so they can be tuned without
code changes.
"""

from .defaults import load_config, get_rules_config, get_config_value

__all__ = ['load_config', 'get_rules_config', 'get_config_value']
