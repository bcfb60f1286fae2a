from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Protocol, Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession


class RecordStore(Protocol):
    """The relational operations a cleaner needs; each call handles a single chunk of keys."""

    async def set_field_list(self, table: str, field: str, value: Any, key: str, values: Sequence[Any]) -> None: ...

    async def get_fieldset_list(self, table: str, field: str, key: str, values: Sequence[Any]) -> list[Any]: ...

    async def delete_records_list(self, table: str, key: str, values: Sequence[Any]) -> None: ...

    async def table_exists(self, table: str) -> bool: ...

    def transaction(self) -> Any: ...


def _table(name: str, *columns: str) -> sa.TableClause:
    unique = list(dict.fromkeys(columns))
    return sa.table(name, *(sa.column(column) for column in unique))


def key_matches(column: sa.ColumnClause, values: Sequence[Any], *, dialect_name: str) -> sa.ColumnElement[bool]:
    """``column IN values``, bound so a whole chunk fits the driver's parameter limit.

    PostgreSQL drivers cap a statement at 32767 parameters, so there the chunk travels as one
    array parameter. Other backends get a plain expanding IN list.
    """
    items = list(values)
    if dialect_name != "postgresql":
        return column.in_(items)
    element_type = sa.BigInteger() if all(isinstance(item, int) for item in items) else sa.String()
    return column == sa.any_(
        sa.bindparam(f"{column.name}_values", items, type_=postgresql.ARRAY(element_type))
    )


class SqlRecordStore:
    """RecordStore over an AsyncSession using lightweight table constructs.

    Tables are addressed by name so optional tables that are not mapped as models can still be
    cleaned once ``table_exists`` confirms they are present.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._known_tables: dict[str, bool] = {}

    def _where_key(self, tbl: sa.TableClause, key: str, values: Sequence[Any]) -> sa.ColumnElement[bool]:
        return key_matches(tbl.c[key], values, dialect_name=self.session.get_bind().dialect.name)

    async def set_field_list(self, table: str, field: str, value: Any, key: str, values: Sequence[Any]) -> None:
        if not values:
            return
        tbl = _table(table, field, key)
        await self.session.execute(sa.update(tbl).where(self._where_key(tbl, key, values)).values({field: value}))

    async def get_fieldset_list(self, table: str, field: str, key: str, values: Sequence[Any]) -> list[Any]:
        if not values:
            return []
        tbl = _table(table, field, key)
        rows = await self.session.execute(sa.select(tbl.c[field]).where(self._where_key(tbl, key, values)))
        return list(rows.scalars().all())

    async def delete_records_list(self, table: str, key: str, values: Sequence[Any]) -> None:
        if not values:
            return
        tbl = _table(table, key)
        await self.session.execute(sa.delete(tbl).where(self._where_key(tbl, key, values)))

    async def table_exists(self, table: str) -> bool:
        cached = self._known_tables.get(table)
        if cached is not None:
            return cached
        conn = await self.session.connection()
        exists = bool(await conn.run_sync(lambda sync_conn: sa.inspect(sync_conn).has_table(table)))
        self._known_tables[table] = exists
        return exists

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit whatever is pending, then run the block in a fresh transaction."""
        if self.session.in_transaction():
            await self.session.commit()
        async with self.session.begin():
            yield
