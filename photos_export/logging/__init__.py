"""Logging package with Rich-based progress reporting."""

from .rich_logger import RichProgressReporter, QuietProgressReporter
from .debug_log import configure_debug_logging

__all__ = ["RichProgressReporter", "QuietProgressReporter", "configure_debug_logging"]
