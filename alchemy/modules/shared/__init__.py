"""
Shared building blocks for Alchemy domain modules.

- exceptions: closed domain error taxonomy
- base_service / base_repository: service and data-access foundations
- formulas: leveling curve
- constants: game-wide constants

`unit_of_work` is imported from its own module: it depends on every
module's repositories.
"""

from .base_repository import BaseRepository
from .base_service import BaseService
from .exceptions import (
    AlchemyDomainException,
    AlreadyClaimedError,
    CosmeticLockedError,
    ErrorKind,
    ErrorSeverity,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    OutOfStockError,
    TierTooLowError,
    ValidationError,
    get_error_severity,
    is_transient_error,
    should_alert,
)
from .formulas import (
    LevelProgress,
    calculate_level_from_total_xp,
    calculate_level_progress,
    calculate_total_xp_for_level,
    calculate_xp_for_level,
)

__all__ = [
    "BaseRepository",
    "BaseService",
    "AlchemyDomainException",
    "AlreadyClaimedError",
    "CosmeticLockedError",
    "ErrorKind",
    "ErrorSeverity",
    "InsufficientBalanceError",
    "InvalidStateError",
    "NotFoundError",
    "OutOfStockError",
    "TierTooLowError",
    "ValidationError",
    "get_error_severity",
    "is_transient_error",
    "should_alert",
    "LevelProgress",
    "calculate_level_from_total_xp",
    "calculate_level_progress",
    "calculate_total_xp_for_level",
    "calculate_xp_for_level",
]
