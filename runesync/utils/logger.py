"""Logging configuration using loguru."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

# Remove default handler
logger.remove()

# Every record carries a scope (champion, role or operation); "-" when unscoped
logger.configure(extra={"scope": "-"})


def setup_logger(
    level: str = "INFO",
    log_dir: str = "logs",
    console: bool = True,
    file: bool = True,
) -> None:
    """
    Configure the logger with console and file outputs.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        console: Enable console output
        file: Enable file output
    """
    logger.remove()

    console_format = (
        "<green>{time:HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>{extra[scope]}</magenta> | "
        "<level>{message}</level>"
    )

    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
        "{level: <8} | "
        "{name}:{function}:{line} | "
        "{extra[scope]} | "
        "{message}"
    )

    if console:
        logger.add(
            sys.stderr,
            format=console_format,
            level=level,
            colorize=True,
        )

    if file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / "runesync_{time:YYYY-MM-DD}.log",
            format=file_format,
            level=level,
            rotation="00:00",
            retention="7 days",
            compression="zip",
        )

        # Failed fetches, dropped records and failed ticks
        logger.add(
            log_path / "errors_{time:YYYY-MM-DD}.log",
            format=file_format,
            level="WARNING",
            rotation="00:00",
            retention="30 days",
            compression="zip",
        )


def get_logger(scope: Optional[str] = None):
    """
    Get the configured logger instance.

    Args:
        scope: Optional label (e.g. "Ahri Mid" or "pages") bound to every
            record emitted through the returned logger
    """
    if scope:
        return logger.bind(scope=scope)
    return logger
