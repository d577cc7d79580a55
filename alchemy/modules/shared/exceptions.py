"""
Domain exceptions for the Alchemy progression engine.

Purpose
-------
Define the closed, structured exception hierarchy raised by services for
business rule violations. Each class is one error kind. Callers at the
boundary translate them into transport responses through
`ErrorResponseService`; the core never attaches status codes itself.

Design Notes
------------
- All domain exceptions inherit from `AlchemyDomainException`.
- Each exception carries:
  - `kind`: the `ErrorKind` tag (closed set)
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: always False here; retries belong to the caller
  - `error_code`: short, stable identifier for programmatic use
- Helper functions (`is_transient_error`, `get_error_severity`, `should_alert`)
  centralize common exception handling patterns.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning (e.g., repeated claims)
    INFO = "info"  # Normal operation (e.g., validation failures)
    WARNING = "warning"  # Concerning but handled
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # System-level failures requiring immediate action


class ErrorKind(str, Enum):
    """The closed set of domain error kinds."""

    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    ALREADY_CLAIMED = "already_claimed"
    VALIDATION = "validation"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    OUT_OF_STOCK = "out_of_stock"
    TIER_TOO_LOW = "tier_too_low"
    COSMETIC_LOCKED = "cosmetic_locked"


class AlchemyDomainException(Exception):
    """
    Base exception for all Alchemy domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
    """

    KIND: Optional[ErrorKind] = None
    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.INFO
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.KIND

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.KIND.value if self.KIND else None,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class NotFoundError(AlchemyDomainException):
    """
    Raised when a player state, quest, player quest or reward is missing.

    Args:
        resource_type: Type of resource (e.g., "PlayerQuest", "Reward")
        identifier: Optional identifier for the missing resource
    """

    KIND = ErrorKind.NOT_FOUND

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class InvalidStateError(AlchemyDomainException):
    """
    Raised when an entity is not in the state an operation requires.

    Args:
        action: Operation that was attempted (e.g., "claim_quest")
        reason: Short explanation, e.g. "not completed"

    Example:
        >>> raise InvalidStateError("claim_quest", "not completed", current_status="active")
    """

    KIND = ErrorKind.INVALID_STATE

    def __init__(self, action: str, reason: str, **context: Any) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Cannot {action.replace('_', ' ')}: {reason}",
            details={"action": action, "reason": reason, **context},
            error_code="INVALID_STATE",
        )


class AlreadyClaimedError(AlchemyDomainException):
    """
    Raised on a repeated claim of the same quest.

    This is the idempotency guard firing: nothing was re-awarded.
    """

    KIND = ErrorKind.ALREADY_CLAIMED
    DEFAULT_SEVERITY = ErrorSeverity.DEBUG

    def __init__(self, quest_id: str, claimed_at: Optional[Any] = None) -> None:
        self.quest_id = quest_id
        self.claimed_at = claimed_at
        super().__init__(
            f"Quest rewards already claimed: {quest_id}",
            details={
                "quest_id": quest_id,
                "claimed_at": claimed_at.isoformat() if hasattr(claimed_at, "isoformat") else claimed_at,
            },
            error_code="ALREADY_CLAIMED",
        )


class ValidationError(AlchemyDomainException):
    """
    Raised when caller input fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    KIND = ErrorKind.VALIDATION

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=f"VALIDATION_{field.upper()}",
        )


class InsufficientBalanceError(AlchemyDomainException):
    """
    Raised when a player's points balance cannot cover a deduction.

    Args:
        required: Amount required for the action
        current: Amount the player currently has
        resource: Name of the balance (defaults to "points")
    """

    KIND = ErrorKind.INSUFFICIENT_BALANCE

    def __init__(self, required: int, current: int, resource: str = "points") -> None:
        self.resource = resource
        self.required = required
        self.current = current
        super().__init__(
            f"Insufficient {resource}: need {required:,}, have {current:,}",
            details={
                "resource": resource,
                "required": required,
                "current": current,
                "deficit": required - current,
            },
            error_code=f"INSUFFICIENT_{resource.upper()}",
        )


class OutOfStockError(AlchemyDomainException):
    """Raised when a catalog reward has no stock left."""

    KIND = ErrorKind.OUT_OF_STOCK

    def __init__(self, reward_id: str, reward_name: Optional[str] = None) -> None:
        self.reward_id = reward_id
        self.reward_name = reward_name
        super().__init__(
            f"Reward is out of stock: {reward_name or reward_id}",
            details={"reward_id": reward_id, "reward_name": reward_name},
            error_code="OUT_OF_STOCK",
        )


class TierTooLowError(AlchemyDomainException):
    """
    Raised when a reward requires a higher loyalty tier.

    The message names the required tier so it can be shown to the player.
    """

    KIND = ErrorKind.TIER_TOO_LOW

    def __init__(self, required_tier: str, current_tier: str) -> None:
        self.required_tier = required_tier
        self.current_tier = current_tier
        super().__init__(
            f"This reward requires {required_tier} tier or higher",
            details={"required_tier": required_tier, "current_tier": current_tier},
            error_code="TIER_TOO_LOW",
        )


class CosmeticLockedError(AlchemyDomainException):
    """
    Raised when equipping a theme or table skin the player has neither
    unlocked nor reached the level for.
    """

    KIND = ErrorKind.COSMETIC_LOCKED

    def __init__(
        self, cosmetic_type: str, cosmetic_id: str, required_level: int, current_level: int
    ) -> None:
        self.cosmetic_type = cosmetic_type
        self.cosmetic_id = cosmetic_id
        self.required_level = required_level
        self.current_level = current_level
        label = cosmetic_type.replace("_", " ").capitalize()
        super().__init__(
            f"{label} not unlocked. Required level: {required_level}",
            details={
                "cosmetic_type": cosmetic_type,
                "cosmetic_id": cosmetic_id,
                "required_level": required_level,
                "current_level": current_level,
            },
            error_code="COSMETIC_LOCKED",
        )


# Utility functions for exception handling patterns


def is_transient_error(exc: Exception) -> bool:
    if isinstance(exc, AlchemyDomainException):
        return exc.is_retryable
    return False


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """
    Get the severity level of an exception for logging.

    Unknown (non-domain) exceptions are treated as ERROR.
    """
    if isinstance(exc, AlchemyDomainException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """True if severity is ERROR or CRITICAL."""
    severity = get_error_severity(exc)
    return severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
