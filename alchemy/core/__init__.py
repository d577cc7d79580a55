"""
Core infrastructure layer for Alchemy.

- Configuration (Config from the environment, ConfigManager from YAML)
- Database subsystem (DatabaseService, declarative Base)
- Logging (structured logging, logger factory, LogContext)
- Event bus, input validation and error response formatting live in their
  own subpackages (`alchemy.core.event`, `alchemy.core.validation`,
  `alchemy.core.services`).
"""

from alchemy.core.config import Config, ConfigError, ConfigValidationError
from alchemy.core.database.service import DatabaseService
from alchemy.core.logging.logger import LogContext, get_logger, setup_logging

__all__ = [
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DatabaseService",
    "LogContext",
    "get_logger",
    "setup_logging",
]
