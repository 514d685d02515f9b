import sys
from pathlib import Path
from typing import Optional

import loguru

def setup_logger(log_level="WARNING", log_file: Optional[str] = None):
    """
    Set up a logger with console and file handlers.

    Args:
        log_level (str): The minimum level of logs to display on the console.
        log_file (str): The file to which debug logs should be written. Disabled when empty.
    """
    loguru.logger.remove()  # Remove default handler

    # Console logger
    loguru.logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True,
    )

    # File logger
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        loguru.logger.add(
            str(path),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="7 days",
            enqueue=True,
            backtrace=True,
            diagnose=True,
        )

    return loguru.logger

# Initialize a default logger instance; the CLI reconfigures it once settings are loaded.
logger = setup_logger()
