"""nestview utilities"""

from .logging import get_logger, configure_logging, create_view_logger, setup_logging

__all__ = ["get_logger", "configure_logging", "create_view_logger", "setup_logging"]
