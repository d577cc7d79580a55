"""
Configuration error hierarchy for Alchemy (2025).

Purpose
-------
Provides dedicated exceptions for configuration loading and validation so
callers can tell a broken config file apart from a domain failure.

Non-Responsibilities
--------------------
- Error logging (handled by the caller's logger)
- Recovery (ConfigManager falls back to defaults where that is safe)

Exception Hierarchy
-------------------
ConfigError (base)
├── ConfigValidationError (schema/type/ordering failures)
└── ConfigInitializationError (YAML could not be read or parsed)
"""


class ConfigError(Exception):
    """
    Base exception for all configuration-related errors.

    Example
    -------
    >>> try:
    ...     ConfigManager.load()
    ... except ConfigError as e:
    ...     logger.error(f"Config operation failed: {e}")
    """
    pass


class ConfigValidationError(ConfigError):
    """
    Raised when a configuration value has the wrong shape.

    This exception is raised when:
    - A tier table does not start at 0 or does not ascend
    - A value has the wrong type for its key
    - Required fields are missing
    """
    pass


class ConfigInitializationError(ConfigError):
    """
    Raised when the configuration files cannot be loaded.

    Example
    -------
    >>> try:
    ...     ConfigManager.load()
    ... except ConfigInitializationError:
    ...     logger.critical("Balance config unreadable")
    """
    pass
