"""Logging configuration for ani-track using loguru.

Everything goes to a rotating file at DEBUG; the console only shows warnings
unless debug is on. Records from the standard library loggers of our HTTP
stack (requests, urllib3) and asyncio are forwarded into loguru so they end
up in the same file.

Use get_logger() to get a logger instance for any module.
"""

import logging
import sys

from loguru import logger as _base_logger

from models.config import settings
from utils.exceptions import ConfigError

CONSOLE_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# Third-party loggers forwarded into loguru, kept at WARNING
THIRD_PARTY_LOGGERS = ("urllib3", "requests", "asyncio")

_initialized = False


class _ForwardHandler(logging.Handler):
    """Re-emit standard library log records through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _base_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _base_logger.opt(exception=record.exc_info).log(
            level, "[{}] {}", record.name, record.getMessage()
        )


def _forward_third_party() -> None:
    handler = _ForwardHandler()
    for name in THIRD_PARTY_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False
        std_logger.setLevel(logging.WARNING)


def configure_logging(debug: bool | None = None, force: bool = False) -> None:
    """Configure loguru for the entire application.

    Args:
        debug: Console at DEBUG instead of WARNING. Defaults to settings.logging.debug.
        force: Reconfigure even if an earlier import already set logging up
    """
    global _initialized

    if _initialized and not force:
        return

    config = settings.logging
    if debug is None:
        debug = config.debug

    try:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Cannot create log directory {config.log_file.parent}: {e}") from e

    _base_logger.remove()
    _base_logger.add(sys.stderr, format=CONSOLE_FORMAT, level="DEBUG" if debug else "WARNING")
    _base_logger.add(
        config.log_file,
        format=FILE_FORMAT,
        level="DEBUG",
        rotation=config.rotation,
        retention=config.retention,
        compression="zip",
    )
    _forward_third_party()

    _initialized = True


def get_logger(name: str):
    """Get a logger for a module, configuring logging on first use.

    Args:
        name: Logger name (typically __name__)
    """
    if not _initialized:
        configure_logging()
    return _base_logger.bind(name=name)
