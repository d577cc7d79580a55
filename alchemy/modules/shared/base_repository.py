"""
Base Repository Pattern

Purpose
-------
Provides a type-safe, generic repository abstraction for database operations
following SQLAlchemy 2.0 async patterns. Repositories encapsulate data access
logic and provide a consistent interface for CRUD operations.

Design Notes
------------
This base repository provides:
- Type-safe CRUD operations
- Pessimistic locking support (get_for_update, for_update=True)
- Race-free lazy creation (insert_if_absent)
- Ordering and paging for list queries
- Eager loading helpers
- Existence/counting utilities
- Full structured logging

Each repository instance is bound to the session of one `UnitOfWork`, so
every read and write it performs belongs to that unit's transaction.

What this class does NOT do:
- Manage transactions (UnitOfWork/DatabaseService handle that)
- Contain business logic
- Perform validation beyond type safety

Usage
-----
    class InventoryRepository(BaseRepository[InventoryItem]):
        async def list_for_user(self, user_id: str) -> list[InventoryItem]:
            return await self.find_many_where(
                InventoryItem.user_id == user_id,
                order_by=[InventoryItem.item_type.asc()],
            )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import selectinload

if TYPE_CHECKING:
    from logging import Logger
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

T = TypeVar("T")

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_CONFLICT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class BaseRepository(Generic[T]):
    """
    Generic base repository for type-safe database operations.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages
    """

    def __init__(self, session: AsyncSession, model_class: Type[T], logger: Logger) -> None:
        """
        Args:
            session: Session of the owning unit of work
            model_class: The SQLAlchemy model class
            logger: Structured logger instance
        """
        self.session = session
        self.model_class = model_class
        self.log = logger

    def _apply_eager_load(self, stmt, eager_load: Optional[List[InstrumentedAttribute]]):
        if eager_load:
            for relationship in eager_load:
                stmt = stmt.options(selectinload(relationship))
        return stmt

    async def get(
        self,
        id_value: Any,
        eager_load: Optional[List[InstrumentedAttribute]] = None,
    ) -> Optional[T]:
        """
        Get a single record by primary key (no lock).

        Args:
            id_value: Primary key value
            eager_load: Optional list of relationships to eagerly load

        Returns:
            Model instance or None if not found
        """
        stmt = select(self.model_class).where(
            self.model_class.id == id_value  # type: ignore[attr-defined]
        )
        stmt = self._apply_eager_load(stmt, eager_load)

        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.get: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": id_value,
                "found": instance is not None,
            },
        )

        return instance

    async def get_for_update(
        self,
        id_value: Any,
        eager_load: Optional[List[InstrumentedAttribute]] = None,
    ) -> Optional[T]:
        """
        Get a single record by primary key with SELECT FOR UPDATE lock.

        The row stays locked until the unit of work commits or rolls back.
        """
        stmt = (
            select(self.model_class)
            .where(self.model_class.id == id_value)  # type: ignore[attr-defined]
            .with_for_update()
        )
        stmt = self._apply_eager_load(stmt, eager_load)

        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.get_for_update: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": id_value,
                "found": instance is not None,
                "locked": True,
            },
        )

        return instance

    async def find_one_where(
        self,
        *conditions: ColumnElement[bool],
        eager_load: Optional[List[InstrumentedAttribute]] = None,
        for_update: bool = False,
    ) -> Optional[T]:
        """
        Find a single record matching conditions.

        Args:
            *conditions: SQLAlchemy filter conditions
            eager_load: Optional list of relationships to eagerly load
            for_update: If True, use SELECT FOR UPDATE

        Returns:
            Model instance or None if not found
        """
        stmt = select(self.model_class).where(*conditions)

        if for_update:
            stmt = stmt.with_for_update()

        stmt = self._apply_eager_load(stmt, eager_load)

        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.find_one_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found": instance is not None,
                "locked": for_update,
            },
        )

        return instance

    async def find_many_where(
        self,
        *conditions: ColumnElement[bool],
        eager_load: Optional[List[InstrumentedAttribute]] = None,
        for_update: bool = False,
        order_by: Optional[Sequence[Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[T]:
        """
        Find multiple records matching conditions.

        Args:
            *conditions: SQLAlchemy filter conditions
            eager_load: Optional list of relationships to eagerly load
            for_update: If True, use SELECT FOR UPDATE
            order_by: Optional ordering clauses
            limit: Optional maximum number of results
            offset: Optional number of rows to skip

        Returns:
            List of model instances
        """
        stmt = select(self.model_class).where(*conditions)

        if for_update:
            stmt = stmt.with_for_update()

        stmt = self._apply_eager_load(stmt, eager_load)

        if order_by:
            stmt = stmt.order_by(*order_by)

        if limit is not None:
            stmt = stmt.limit(limit)

        if offset:
            stmt = stmt.offset(offset)

        result = await self.session.execute(stmt)
        instances = list(result.scalars().all())

        self.log.debug(
            f"Repository.find_many_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found_count": len(instances),
                "locked": for_update,
                "limit": limit,
                "offset": offset,
            },
        )

        return instances

    async def exists(self, *conditions: ColumnElement[bool]) -> bool:
        """True if at least one record matches."""
        return await self.count(*conditions) > 0

    async def count(self, *conditions: ColumnElement[bool]) -> int:
        """
        Count records matching conditions.

        Args:
            *conditions: SQLAlchemy filter conditions

        Returns:
            Number of matching records
        """
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        result = await self.session.execute(stmt)
        count = result.scalar_one()

        self.log.debug(
            f"Repository.count: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "count": count,
            },
        )

        return count

    def add(self, instance: T) -> T:
        """
        Add a new instance to the session.

        The row is written on the next flush or at commit.
        """
        self.session.add(instance)

        self.log.debug(
            f"Repository.add: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )

        return instance

    async def insert_if_absent(
        self, conflict_columns: Sequence[str], **values: Any
    ) -> bool:
        """
        Insert a row unless one already exists for `conflict_columns`.

        Uses INSERT ... ON CONFLICT DO NOTHING, so a concurrent creator
        never surfaces as an IntegrityError: the loser waits for the
        winner's row and inserts nothing. Callers re-select the row
        afterwards.

        Returns:
            True if this call inserted the row
        """
        dialect_name = self.session.get_bind().dialect.name
        insert_factory = _CONFLICT_INSERTS.get(dialect_name)
        if insert_factory is None:
            raise NotImplementedError(
                f"insert_if_absent is not supported on dialect '{dialect_name}'"
            )

        stmt = (
            insert_factory(self.model_class)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
        )
        result = await self.session.execute(stmt)
        inserted = result.rowcount == 1  # type: ignore[attr-defined]

        self.log.debug(
            f"Repository.insert_if_absent: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "conflict_columns": list(conflict_columns),
                "inserted": inserted,
            },
        )

        return inserted

    async def flush(self) -> None:
        """Flush pending changes so generated values and constraints apply now."""
        await self.session.flush()

    async def refresh(self, instance: T) -> T:
        await self.session.refresh(instance)
        return instance
