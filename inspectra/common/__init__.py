"""Common utilities for inspectra."""

from .logger import configure_logging, setup_logger, get_logger
from .config import load_config

__all__ = ["configure_logging", "get_logger", "load_config", "setup_logger"]
