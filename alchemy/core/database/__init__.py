"""
Database subsystem for Alchemy (2025).

Provides the async SQLAlchemy engine, session and transaction management,
and the ORM base classes and mixins for model definitions.
"""

from alchemy.core.database.base import (
    Base,
    IdMixin,
    TimestampMixin,
    ensure_utc,
    utc_now,
)
from alchemy.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    # ORM Base & Mixins
    "Base",
    "IdMixin",
    "TimestampMixin",
    "ensure_utc",
    "utc_now",
    # Main service
    "DatabaseService",
    # Exceptions
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
]
