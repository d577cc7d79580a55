"""
Alchemy Logging Infrastructure

Exports the queue-backed logging setup and the log context helpers.
"""

from alchemy.core.logging.logger import (
    LogContext,
    get_log_context,
    get_logger,
    get_logging_health,
    set_log_context,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "get_logging_health",
    "LogContext",
    "get_log_context",
    "set_log_context",
]
