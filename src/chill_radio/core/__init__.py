"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Database operations (SQLite)
- Logging (Loguru)
- Error taxonomy
"""

from .config import (
    Config,
    DatabaseConfig,
    LoggingConfig,
    RadioConfig,
    create_default_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)
from .database import get_db_connection, init_database, migrate_database
from .exceptions import (
    ChillRadioError,
    ConfigurationError,
    InvariantViolation,
    PersistenceError,
)
from .logging import setup_logging

__all__ = [
    "Config",
    "DatabaseConfig",
    "LoggingConfig",
    "RadioConfig",
    "create_default_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    "get_db_connection",
    "init_database",
    "migrate_database",
    "ChillRadioError",
    "ConfigurationError",
    "InvariantViolation",
    "PersistenceError",
    "setup_logging",
]
