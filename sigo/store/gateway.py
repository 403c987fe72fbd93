"""
Data store gateway: thin table access over an AsyncSession.

Services talk to the relational store exclusively through this class:
select-with-filter, insert, update and delete, each taking plain
SQLAlchemy column predicates (`==`, `!=`, `in_`, `is_(None)`, `>=`,
`<=`).  Rows come back as plain dicts so they can be enriched and
serialised without touching ORM state.

Every write commits immediately.  A multi-step operation built from
several gateway calls is therefore NOT transactional: a failure halfway
leaves the earlier writes in place.

Any SQLAlchemy failure rolls the session back and is re-raised as a
`StoreError`, which callers either classify or let propagate (500).
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from fastapi import Depends
from sqlalchemy import ColumnElement, Table, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sigo.core.database import get_db
from sigo.core.exceptions import StoreError

logger = logging.getLogger(__name__)

Row = dict[str, Any]


def _table(target: Any) -> Table:
    """Accept either a mapped class or a Core `Table`."""
    return target if isinstance(target, Table) else target.__table__


class StoreGateway:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Reads ────────────────────────────────────────────────────────

    async def select(
        self,
        target: Any,
        *where: ColumnElement[bool],
        columns: Sequence[str] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        table = _table(target)
        cols = [table.c[name] for name in columns] if columns else [table]
        stmt = select(*cols).where(*where)
        if order_by is not None:
            col = table.c[order_by]
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        result = await self._execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def select_one(
        self,
        target: Any,
        *where: ColumnElement[bool],
        columns: Sequence[str] | None = None,
    ) -> Row | None:
        """First matching row, or None."""
        rows = await self.select(target, *where, columns=columns)
        return rows[0] if rows else None

    async def select_in(
        self,
        target: Any,
        ids: Iterable[Any],
        *,
        key: str = "id",
        columns: Sequence[str] | None = None,
    ) -> list[Row]:
        """Membership lookup; short-circuits without a query when `ids` is empty."""
        ids = list(ids)
        if not ids:
            return []
        table = _table(target)
        return await self.select(table, table.c[key].in_(ids), columns=columns)

    async def exists(self, target: Any, *where: ColumnElement[bool]) -> bool:
        table = _table(target)
        stmt = select(func.count()).select_from(table).where(*where)
        result = await self._execute(stmt)
        return (result.scalar() or 0) > 0

    # ── Writes ───────────────────────────────────────────────────────

    async def insert(self, target: Any, values: Row) -> Row:
        table = _table(target)
        stmt = insert(table).values(**values).returning(*table.c)
        result = await self._execute(stmt)
        row = dict(result.mappings().one())
        await self._commit()
        return row

    async def insert_many(self, target: Any, values: list[Row]) -> int:
        if not values:
            return 0
        table = _table(target)
        await self._execute(insert(table), values)
        await self._commit()
        return len(values)

    async def update(self, target: Any, values: Row, *where: ColumnElement[bool]) -> list[Row]:
        """Apply `values` to every matching row; returns the rows as updated."""
        table = _table(target)
        stmt = update(table).where(*where).values(**values).returning(*table.c)
        result = await self._execute(stmt)
        rows = [dict(row) for row in result.mappings().all()]
        await self._commit()
        return rows

    async def delete(self, target: Any, *where: ColumnElement[bool]) -> int:
        table = _table(target)
        result = await self._execute(delete(table).where(*where))
        await self._commit()
        return result.rowcount or 0

    # ── Internals ────────────────────────────────────────────────────

    async def _execute(self, stmt: Any, params: Any = None):
        try:
            if params is None:
                return await self.session.execute(stmt)
            return await self.session.execute(stmt, params)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Store call failed: %s", exc)
            raise StoreError(error=str(exc.orig if getattr(exc, "orig", None) else exc))

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Store commit failed: %s", exc)
            raise StoreError(error=str(exc))


async def get_store(db: AsyncSession = Depends(get_db)) -> StoreGateway:
    """FastAPI dependency: one gateway per request session."""
    return StoreGateway(db)
