"""Set-at-a-time INSERT helpers.

A batch is serialised to one JSON array and expanded server side, so N rows
cost one parametrised statement regardless of N: ``json_array_elements`` on
PostgreSQL, ``json_each`` on SQLite. Each element carries an ``ord`` key and
the SELECT is ordered by it, so rows are inserted in input order.
"""

import json
from typing import Any, Callable, Protocol

from sqlalchemy import JSON, Integer, cast, func, literal, literal_column
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.selectable import TableValuedAlias


class Executor(Protocol):
    """Anything that can run a statement: an AsyncSession or an AsyncConnection."""

    async def execute(self, statement: Any) -> Any: ...


def dialect_name(db: Executor) -> str:
    if isinstance(db, AsyncConnection):
        return db.dialect.name
    return db.get_bind().dialect.name


FieldGetter = Callable[[str], ColumnElement]


def json_rows(db: Executor, rows: list[dict[str, Any]]) -> tuple[TableValuedAlias, FieldGetter]:
    """Return a FROM-able element set for ``rows`` and an accessor for its fields.

    ``field(key)`` yields the text/scalar value of ``key`` in the current
    element; callers cast it to the column type.
    """
    payload = json.dumps([{"ord": i, **row} for i, row in enumerate(rows)])

    if dialect_name(db) == "postgresql":
        elements = func.json_array_elements(cast(literal(payload), JSON)).table_valued("value")

        def field(key: str) -> ColumnElement:
            return elements.c.value.op("->>")(literal_column(f"'{key}'"))

    else:
        elements = func.json_each(literal(payload)).table_valued("value")

        def field(key: str) -> ColumnElement:
            return func.json_extract(elements.c.value, f"$.{key}")

    return elements, field


def ordinal(field: FieldGetter) -> ColumnElement:
    return cast(field("ord"), Integer)
