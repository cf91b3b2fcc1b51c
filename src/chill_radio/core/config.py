"""
Configuration management for Chill Radio
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigurationError


@dataclass
class RadioConfig:
    """Configuration for station rotation."""

    playlist_length: int = 10  # Target number of scheduled tracks per station
    polling_interval_ms: int = 1000  # 0 disables the recurring timer
    min_shuffle_timeout_ms: int = 60 * 60 * 1000  # Rest period between repeats

    def validate(self) -> None:
        """Validate rotation settings.

        Raises:
            ConfigurationError: If any value is missing or out of range
        """
        if not _is_int(self.playlist_length) or self.playlist_length < 1:
            raise ConfigurationError(
                f"Invalid playlist_length: {self.playlist_length!r}. "
                "Must be an integer >= 1"
            )
        if not _is_int(self.polling_interval_ms) or self.polling_interval_ms < 0:
            raise ConfigurationError(
                f"Invalid polling_interval_ms: {self.polling_interval_ms!r}. "
                "Must be an integer >= 0"
            )
        if not _is_int(self.min_shuffle_timeout_ms) or self.min_shuffle_timeout_ms < 0:
            raise ConfigurationError(
                f"Invalid min_shuffle_timeout_ms: {self.min_shuffle_timeout_ms!r}. "
                "Must be an integer >= 0"
            )


@dataclass
class DatabaseConfig:
    """Configuration for the SQLite schedule store."""

    path: Optional[str] = None  # Default: ~/.local/share/chill-radio/chill-radio.db

    def resolve_path(self) -> Path:
        """Return the database file path, falling back to the data directory."""
        if self.path:
            return Path(self.path).expanduser()
        return get_data_dir() / "chill-radio.db"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/chill-radio/chill-radio.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = True  # Also output to stderr


@dataclass
class Config:
    """Main configuration object."""

    radio: RadioConfig = field(default_factory=RadioConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "chill-radio"
    return Path.home() / ".config" / "chill-radio"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "chill-radio"
    return Path.home() / ".local" / "share" / "chill-radio"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/chill-radio (or ~/.config/chill-radio)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Chill Radio Configuration

[radio]
# Number of tracks kept scheduled ahead on every station
playlist_length = 10

# Milliseconds between reconciliation passes (0 = single pass on start)
polling_interval_ms = 1000

# Minimum milliseconds before a track may be scheduled again
min_shuffle_timeout_ms = 3600000

[database]
# SQLite database file (default: ~/.local/share/chill-radio/chill-radio.db)
# path = "/var/lib/chill-radio/chill-radio.db"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/chill-radio/chill-radio.log)
# log_file = "/path/to/custom/chill-radio.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to stderr
console_output = true
""".strip()


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - CHILL_RADIO_DATABASE

    Args:
        path: Explicit config file; no default file is written for it

    Returns:
        Parsed configuration (unvalidated, see RadioConfig.validate)

    Raises:
        ConfigurationError: If the file cannot be parsed
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = path if path is not None else get_config_path()
    config = Config()

    if not config_path.exists():
        if path is None:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
    else:
        try:
            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Cannot read config {config_path}: {e}") from e

        if "radio" in toml_data:
            radio_data = toml_data["radio"]
            config.radio = RadioConfig(
                playlist_length=radio_data.get(
                    "playlist_length", config.radio.playlist_length
                ),
                polling_interval_ms=radio_data.get(
                    "polling_interval_ms", config.radio.polling_interval_ms
                ),
                min_shuffle_timeout_ms=radio_data.get(
                    "min_shuffle_timeout_ms", config.radio.min_shuffle_timeout_ms
                ),
            )

        if "database" in toml_data:
            config.database = DatabaseConfig(path=toml_data["database"].get("path"))

        if "logging" in toml_data:
            logging_data = toml_data["logging"]
            config.logging = LoggingConfig(
                level=logging_data.get("level", config.logging.level),
                log_file=logging_data.get("log_file"),
                max_file_size_mb=logging_data.get(
                    "max_file_size_mb", config.logging.max_file_size_mb
                ),
                backup_count=logging_data.get(
                    "backup_count", config.logging.backup_count
                ),
                console_output=logging_data.get(
                    "console_output", config.logging.console_output
                ),
            )

    database_override = os.environ.get("CHILL_RADIO_DATABASE")
    if database_override:
        config.database.path = database_override

    return config
