"""
Logger setup - loguru configuration for the API process.

Console output always; file output when LOG_FILE is set.
Call setup_logging() once at startup, then `from loguru import logger` anywhere.
"""

import sys
from pathlib import Path

from loguru import logger

from resume_studio.core.config import get_settings

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"


def setup_logging(level: str = None, log_file: str = None) -> None:
    """
    Replace loguru's default sink with the app's console (+ optional file) sinks.

    Args:
        level: Minimum console level; defaults to LOG_LEVEL
        log_file: Path for a DEBUG-level file sink; defaults to LOG_FILE
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_file = log_file if log_file is not None else settings.log_file

    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>",
        level=level,
        colorize=not settings.is_production,
    )

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(exist_ok=True, parents=True)
        logger.add(path, format=LOG_FORMAT, level="DEBUG", rotation="10 MB", retention=5)

    logger.debug(f"Logging configured (level={level}, file={log_file or 'none'})")
