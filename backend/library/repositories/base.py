"""Generic CRUD Helper - shared SQL for save/find/update/delete/exists by primary key.

Invariants:
    - save() flushes so the store-assigned id is on the returned record
    - update()/delete_by_id() raise ResourceNotFoundError when rowcount is 0
    - find_all() orders by id
    - find_by_id_for_update() locks the row where the engine supports row locks
      (SQLite ignores the clause and serializes writers instead)

Design Decisions:
    - ORM-enabled update/delete statements keep already-loaded rows in the
      session synchronized with what was written
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import InstrumentedAttribute

from library.core.errors import ResourceNotFoundError

RowT = TypeVar("RowT")
EntityT = TypeVar("EntityT")


class SqlRepository(Generic[RowT, EntityT]):
    """Base for one-table repositories keyed by an integer `id`."""

    model: type[RowT]
    resource_type: str

    # ─── Mapping hooks ──────────────────────────────────────────

    def to_entity(self, row: RowT) -> EntityT:
        raise NotImplementedError

    def to_row(self, entity: EntityT) -> RowT:
        raise NotImplementedError

    def update_values(self, entity: EntityT) -> dict[InstrumentedAttribute, Any]:
        raise NotImplementedError

    # ─── CRUD ───────────────────────────────────────────────────

    async def save(self, db: AsyncSession, entity: EntityT) -> EntityT:
        row = self.to_row(entity)
        db.add(row)
        await db.flush()
        return self.to_entity(row)

    async def find_by_id(self, db: AsyncSession, entity_id: int) -> EntityT | None:
        result = await db.execute(
            select(self.model).where(self.model.id == entity_id),
        )
        row = result.scalar_one_or_none()
        return self.to_entity(row) if row is not None else None

    async def find_by_id_for_update(
        self, db: AsyncSession, entity_id: int, shared: bool = False,
    ) -> EntityT | None:
        """Read and row-lock (FOR UPDATE, or FOR SHARE when shared) until commit/rollback."""
        result = await db.execute(
            select(self.model)
            .where(self.model.id == entity_id)
            .with_for_update(read=shared)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return self.to_entity(row) if row is not None else None

    async def find_all(self, db: AsyncSession) -> list[EntityT]:
        return await self._find_where(db, order_by=self.model.id)

    async def update(self, db: AsyncSession, entity: EntityT) -> None:
        entity_id = getattr(entity, "id")
        result = await db.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .values(self.update_values(entity)),
        )
        if result.rowcount == 0:
            raise ResourceNotFoundError(self.resource_type, entity_id)

    async def delete_by_id(self, db: AsyncSession, entity_id: int) -> None:
        result = await db.execute(
            delete(self.model).where(self.model.id == entity_id),
        )
        if result.rowcount == 0:
            raise ResourceNotFoundError(self.resource_type, entity_id)

    async def exists_by_id(self, db: AsyncSession, entity_id: int) -> bool:
        return await self._exists_where(db, self.model.id == entity_id)

    # ─── Query helpers for subclasses ───────────────────────────

    async def _find_where(
        self, db: AsyncSession, *criteria: Any, order_by: Any = None,
    ) -> list[EntityT]:
        query = select(self.model).where(*criteria)
        query = query.order_by(order_by if order_by is not None else self.model.id)
        result = await db.execute(query)
        return [self.to_entity(row) for row in result.scalars().all()]

    async def _find_one_where(self, db: AsyncSession, *criteria: Any) -> EntityT | None:
        result = await db.execute(select(self.model).where(*criteria))
        row = result.scalar_one_or_none()
        return self.to_entity(row) if row is not None else None

    async def _exists_where(self, db: AsyncSession, *criteria: Any) -> bool:
        result = await db.execute(
            select(self.model.id).where(*criteria).limit(1),
        )
        return result.scalar_one_or_none() is not None
