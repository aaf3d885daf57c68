"""Logging setup for inspectra.

The package logs through the ``inspectra`` logger hierarchy. Modules call
``logging.getLogger(__name__)``; the API process configures the root of the
hierarchy once with ``configure_logging`` so every module shares the same
rotating log file and console output.
"""

import logging
import logging.handlers
import os
from typing import List, Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
ISO_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "httpx")


def _parse_level(level: str) -> int:
    level_upper = level.upper()
    if level_upper not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LOG_LEVELS)}")
    return getattr(logging, level_upper)


def _build_handlers(
    name: str,
    log_dir: str,
    formatter: logging.Formatter,
    file_logging: bool,
    console_logging: bool,
    max_bytes: int,
    backup_count: int,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, f"{name}.log"), maxBytes=max_bytes, backupCount=backup_count
        ))
    if console_logging:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logger(
    name: str,
    log_dir: str = "./logs",
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    file_logging: bool = True,
    console_logging: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Attach file and console handlers to the logger called ``name``.

    Calling it again for a logger that already has handlers only updates
    the level, so app factories can run more than once per process.

    Args:
        name: Logger name; "inspectra" configures the whole package
        log_dir: Directory for ``<name>.log``
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: Custom log format string
        date_format: Custom date format string (ISO 8601 by default)
        file_logging: Write to a rotating log file
        console_logging: Write to stderr
        max_bytes: Log file size that triggers rotation
        backup_count: Rotated files to keep

    Raises:
        ValueError: unknown level name
    """
    logger = logging.getLogger(name)
    logger.setLevel(_parse_level(level))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(log_format or DEFAULT_FORMAT, datefmt=date_format or ISO_DATE_FORMAT)
    for handler in _build_handlers(
        name, log_dir, formatter, file_logging, console_logging, max_bytes, backup_count
    ):
        logger.addHandler(handler)
    return logger


def configure_logging(settings) -> logging.Logger:
    """Configure the ``inspectra`` hierarchy from application settings."""
    logger = setup_logger(
        "inspectra",
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.log_to_file,
    )
    if not settings.debug:
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
