"""
Logging Utilities

This module provides structlog-based logging for the view tree.
"""

import logging
import sys
from typing import Any, Optional

import structlog

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def get_logger(name: str) -> Any:
    """
    Get a logger for the specified name

    Args:
        name: Logger name (usually the module name)

    Returns:
        structlog BoundLogger backed by the standard library logger
    """
    if not structlog.is_configured():
        structlog.configure(
            processors=_SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer()],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    return structlog.get_logger(name)


def configure_logging(level: str = "INFO", format_string: Optional[str] = None) -> None:
    """
    Configure logging for nestview components

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for the stdlib handler
    """
    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.dev.ConsoleRenderer()],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_view_logger(full_name: str) -> Any:
    """
    Create a logger bound to a single view

    Args:
        full_name: Slash separated path of the view from the tree root

    Returns:
        View-specific logger
    """
    return get_logger("nestview.view").bind(view=full_name)


def setup_logging(config: Any) -> None:
    """Apply the logging settings of a NestViewConfig"""
    level = "DEBUG" if config.debug else config.log_level
    configure_logging(level, config.log_format)
