"""
Centralized logging configuration for the translation core.

The library modules only call `logging.getLogger(__name__)`. An application
that embeds them calls `setup_service_logging(name)` once at startup, which
quiets third-party loggers and routes the `common`, `cache` and `translator`
loggers to the console and, optionally, a dated log file.

Example:
    logger = setup_service_logging("subtitle-worker", enable_file_logging=True)
    logger.info("Worker started")
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from common.config import settings
from common.utils import DateTimeUtils

# Top-level packages whose module loggers are configured together
PACKAGE_LOGGERS = ("common", "cache", "translator")


def setup_logging(
    service_name: str,
    log_file: Optional[str] = None,
    log_level: Optional[str] = None,
    packages: Iterable[str] = PACKAGE_LOGGERS,
) -> logging.Logger:
    """
    Configure logging for a service embedding the translation core.

    Every module logs through `logging.getLogger(__name__)`, so handlers are
    attached to the package loggers and to one logger named after the service.

    Args:
        service_name: Name of the service (e.g., 'translator')
        log_file: Optional log file path. If None, logs only to console
        log_level: Optional log level override. If None, uses settings.log_level
        packages: Package loggers that share the same handlers

    Returns:
        Configured service logger
    """
    level = log_level or settings.log_level
    log_level_value = getattr(logging, level.upper(), logging.INFO)

    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    simple_formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level_value)
    console_handler.setFormatter(simple_formatter)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(log_level_value)
        file_handler.setFormatter(detailed_formatter)
        handlers.append(file_handler)

    service_logger = logging.getLogger(service_name)
    for name in (service_name, *packages):
        target = logging.getLogger(name)
        target.setLevel(log_level_value)
        # Remove existing handlers to avoid duplicates
        target.handlers.clear()
        for handler in handlers:
            target.addHandler(handler)
        target.propagate = False

    return service_logger


def get_log_file_path(service_name: str, log_dir: str = "./logs") -> str:
    """
    Generate a dated log file path.

    Example:
        >>> get_log_file_path("translate").startswith("./logs/translate_")
        True
    """
    date_string = DateTimeUtils.get_date_string_for_log_file()
    return f"{log_dir}/{service_name}_{date_string}.log"


def configure_third_party_loggers(level: str = "WARNING") -> None:
    """
    Configure logging levels for third-party libraries to reduce noise.

    Args:
        level: Log level for third-party libraries
    """
    third_party_loggers = [
        "openai",
        "httpx",
        "httpcore",
        "redis",
        "asyncio",
    ]

    log_level = getattr(logging, level.upper(), logging.WARNING)

    for logger_name in third_party_loggers:
        logging.getLogger(logger_name).setLevel(log_level)


class ServiceLogger:
    """Thin wrapper that owns a configured service logger."""

    def __init__(self, service_name: str, enable_file_logging: bool = False):
        """
        Initialize service logger.

        Args:
            service_name: Name of the service
            enable_file_logging: Whether to also write a dated log file
        """
        self.service_name = service_name
        self.log_file = (
            get_log_file_path(service_name) if enable_file_logging else None
        )
        self.logger = setup_logging(service_name, self.log_file)

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        self.logger.exception(message, **kwargs)


def setup_service_logging(
    service_name: str, enable_file_logging: bool = False
) -> ServiceLogger:
    """
    Quiet third-party loggers, then set up ours.

    Args:
        service_name: Name of the service
        enable_file_logging: Whether to also write a dated log file

    Returns:
        ServiceLogger instance
    """
    configure_third_party_loggers()
    return ServiceLogger(service_name, enable_file_logging)
