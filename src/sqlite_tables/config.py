"""Configuration for sqlite_tables.

Module-level settings, each overridable through the environment.
"""

import logging
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database configuration
DEFAULT_DB_PATH = os.getenv("SQLITE_TABLES_DB_PATH", "sqlite_tables.db")
DB_TIMEOUT = float(os.getenv("SQLITE_TABLES_TIMEOUT", "10.0"))  # seconds
# Off by default: a join may reference a related table without a primary key.
FOREIGN_KEYS = _env_flag("SQLITE_TABLES_FOREIGN_KEYS", False)

# Query behavior
VALIDATE_ON_SAVE = _env_flag("SQLITE_TABLES_VALIDATE_ON_SAVE", True)

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


def get_log_level() -> int:
    """Get the configured log level."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(LOG_LEVEL.upper(), logging.WARNING)
