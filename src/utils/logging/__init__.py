"""
Logging configuration for dbdiff

Usage:
    from utils.logging import setup_logging

    # Once at startup
    setup_logging(level="INFO", json_format=False)

    logger = logging.getLogger(__name__)
    logger.warning("Skipping table", extra={"table_name": "documents"})
"""

from .config import setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
]
