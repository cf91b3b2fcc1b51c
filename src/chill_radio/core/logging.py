"""
Centralized logging configuration for Chill Radio
"""

import sys
from pathlib import Path

from loguru import logger

from .config import LoggingConfig, get_data_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def get_log_file_path() -> Path:
    """Get the path to the log file."""
    return get_data_dir() / "chill-radio.log"


def setup_logging(config: LoggingConfig) -> Path:
    """
    Configure loguru sinks for the application.

    Args:
        config: Logging section of the application config

    Returns:
        Path of the log file in use
    """
    log_file = Path(config.log_file).expanduser() if config.log_file else get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    level = config.level.upper()

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation=f"{config.max_file_size_mb} MB",
        retention=config.backup_count,
        level=level,
        format=LOG_FORMAT,
        enqueue=False,
    )

    if config.console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(
        f"Logging initialized: {log_file} (level={level}, "
        f"max_size={config.max_file_size_mb}MB, backups={config.backup_count})"
    )
    return log_file
