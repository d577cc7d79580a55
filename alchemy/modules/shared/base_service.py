"""
Base Service Foundation

Purpose
-------
Provides the foundational class for all domain services in Alchemy.
Services implement business logic, run every mutation inside one unit of
work, enforce business rules, and emit domain events after commit.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Event emission helpers
- Validation helpers that raise domain `ValidationError`
- Injected unit-of-work factories (transactional and read-only)

What this class does NOT do:
- Open sessions or commit directly (the unit of work does that)
- Contain feature-specific logic

Usage
-----
    class RewardsLedgerService(BaseService):
        async def add_points(self, user_id, points, description):
            async with self.unit_of_work() as uow:
                ledger = await uow.points.get_or_create_for_update(user_id)
                ...
            await self.emit_event("rewards.points_added", {...})
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from alchemy.core.config.errors import ConfigValidationError

from .exceptions import ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from alchemy.core.config.manager import ConfigManager
    from alchemy.core.event.bus import EventBus
    from alchemy.modules.shared.unit_of_work import UnitOfWorkFactory


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Balance configuration manager (class or instance)
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
        unit_of_work: Factory opening a transactional unit of work
        read_only_unit_of_work: Factory opening a unit of work that never commits
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        unit_of_work: Optional[UnitOfWorkFactory] = None,
        read_only_unit_of_work: Optional[UnitOfWorkFactory] = None,
    ) -> None:
        # Deferred: the unit of work imports every module's repositories
        from alchemy.modules.shared.unit_of_work import (
            read_only_unit_of_work as default_read_only,
            transactional_unit_of_work as default_transactional,
        )

        self._config = config_manager
        self._events = event_bus
        self.log = logger
        self.unit_of_work: UnitOfWorkFactory = unit_of_work or default_transactional
        self.read_only_unit_of_work: UnitOfWorkFactory = (
            read_only_unit_of_work or default_read_only
        )

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve configuration value.

        Raises:
            ConfigValidationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigValidationError(f"Required configuration key '{key}' is missing")
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Emit a domain event for cross-module communication.

        Call only after the unit of work has committed.
        """
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(
        self,
        operation: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """
        Log a service error with full context.

        Expected domain errors are logged at INFO; anything else at ERROR
        with the traceback.
        """
        from .exceptions import AlchemyDomainException

        extra = {
            "operation": operation,
            "error_type": type(error).__name__,
            "error_message": str(error),
            **context,
        }

        if isinstance(error, AlchemyDomainException):
            self.log.info(f"Service rejected {operation}: {error.message}", extra=extra)
        else:
            self.log.error(
                f"Service error during {operation}: {error}",
                extra=extra,
                exc_info=error,
            )

    def validate_positive_int(self, value: int, name: str) -> None:
        """
        Raises:
            ValidationError: If value is not a positive integer
        """
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError(
                name, f"{name} must be a positive integer, got {value}"
            )

    def validate_non_negative_int(self, value: int, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(
                name, f"{name} must be a non-negative integer, got {value}"
            )

    def validate_range(
        self, value: int, name: str, min_val: int, max_val: int
    ) -> None:
        """
        Raises:
            ValidationError: If value is outside [min_val, max_val]
        """
        if isinstance(value, bool) or not isinstance(value, int) or not (min_val <= value <= max_val):
            raise ValidationError(
                name,
                f"{name} must be between {min_val} and {max_val}, got {value}",
            )
