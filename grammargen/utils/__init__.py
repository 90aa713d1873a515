"""
Utilities module - Logging helpers shared by all components.
"""

from .logger import (
    setup_logging,
    get_logger,
    LogContext,
)

__all__ = [
    'setup_logging',
    'get_logger',
    'LogContext',
]
