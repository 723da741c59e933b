"""Configuration management for the expense tracker.

This module centralizes all configuration values including paths,
display defaults, logging, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORTS_DIR = DATA_DIR / "exports"

# Remote store (SQLite) and local cache document
DB_PATH = Path(
    os.getenv("EXPENSE_TRACKER_DB_PATH", DATA_DIR / "expenses.db")
).resolve()
CACHE_PATH = Path(
    os.getenv("EXPENSE_TRACKER_CACHE_PATH", DATA_DIR / "local_cache.json")
).resolve()

# Key under which the collection is mirrored into the local cache
STORAGE_KEY = "expenses"

# Display
LOCALE = os.getenv("EXPENSE_TRACKER_LOCALE", "id_ID")
CURRENCY = os.getenv("EXPENSE_TRACKER_CURRENCY", "IDR")
DATE_DISPLAY_LOCALE = os.getenv("EXPENSE_TRACKER_DATE_LOCALE", "en_US")

# Logging
LOG_LEVEL = os.getenv("EXPENSE_TRACKER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORTS_DIR, DB_PATH.parent, CACHE_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a console handler to the package logger.

    Calling this more than once does not stack handlers.
    """
    logger = logging.getLogger("expense_tracker")
    logger.setLevel((level or LOG_LEVEL).upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
