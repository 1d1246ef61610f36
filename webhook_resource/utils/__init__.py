"""Utility modules for webhook-resource."""

from .logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
