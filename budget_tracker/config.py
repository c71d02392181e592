"""Configuration management for the budget tracker.

This module centralizes all configuration values including paths,
rule defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

from .settings import get_config_value

# Base project root - assumes this file is in budget_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("BUDGET_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORTS_DIR = DATA_DIR / "exports"

# Database
DB_PATH = Path(
    os.getenv("BUDGET_TRACKER_DB_PATH", DATA_DIR / "budget.db")
).resolve()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {'1', 'true', 'yes', 'on'}


# Percentage of a category budget at which a warning fires
WARNING_THRESHOLD = _env_float(
    "BUDGET_TRACKER_WARNING_THRESHOLD",
    float(get_config_value('rules', 'evaluator', 'warning_percent', default=90)),
)

# Percentage at which a warning escalates to "over budget"
OVER_BUDGET_THRESHOLD = float(get_config_value('rules', 'evaluator', 'over_percent', default=100))

# Materialize every missed recurring occurrence instead of one per run
RECURRENCE_BACKFILL = _env_flag("BUDGET_TRACKER_RECURRENCE_BACKFILL", False)


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORTS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)
