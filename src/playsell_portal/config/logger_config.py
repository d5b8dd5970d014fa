"""Logger configuration for the login portal."""

import sys
from typing import Optional

from loguru import logger

from .settings import LoggingConfig


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure loguru logger for both console and file output.

    Sets up structured logging with:
    - Console output with colored output
    - File output with rotation and retention based on settings
    - Configurable log level from settings
    """
    config = config or LoggingConfig()

    # Remove default loguru handler
    logger.remove()

    if config.to_console:
        logger.add(
            sink=sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=config.level,
            colorize=True,
        )

    if config.to_file:
        logger.add(
            sink=str(config.file_path),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=config.level,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",  # Compress rotated logs
            enqueue=True,
        )

        logger.info(f"File logging enabled: {config.file_path}")
        logger.info(f"Log level: {config.level}")
