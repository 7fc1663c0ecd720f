"""
Logging utility with loguru.
Provides console logging and optional file rotation.
"""

import sys
from pathlib import Path

from loguru import logger

from interview_chat.config.settings import settings, PROJECT_ROOT


def setup_logger(level: str = None, log_to_file: bool = None):
    """
    Configure loguru logger with console and (optionally) file outputs.

    Args:
        level: Console log level (defaults to settings.log_level)
        log_to_file: Add the rotating file sink (defaults to settings.log_to_file)
    """
    level = level or settings.log_level
    if log_to_file is None:
        log_to_file = settings.log_to_file

    # Remove default handler
    logger.remove()

    # Console handler with colors
    logger.add(
        sys.stdout,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )

    if log_to_file:
        log_dir = Path(settings.log_dir)
        if not log_dir.is_absolute():
            log_dir = PROJECT_ROOT / log_dir
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_dir / "interview_chat.log",
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
        )

    logger.debug("Logger initialized")
    return logger
