"""Persistence for the spatial tree: the batch writer and the traversal reader."""

import logging
from dataclasses import asdict, dataclass

from sqlalchemy import Integer, cast, func, insert, literal, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import aliased

from planets.errors import AppError
from planets.models.spatial_entity import EntityType, SpatialEntity
from planets.services.batch_sql import Executor, json_rows, ordinal

logger = logging.getLogger(__name__)

_INSERT_COLUMNS = [
    "run_id",
    "parent_id",
    "entity_type",
    "level",
    "x_coord",
    "y_coord",
    "name",
    "child_count",
]


@dataclass(frozen=True)
class SpatialRow:
    run_id: int
    parent_id: int | None
    entity_type: EntityType
    level: int
    x_coord: int
    y_coord: int
    name: str

    def to_json(self) -> dict:
        data = asdict(self)
        data["entity_type"] = self.entity_type.value
        return data

    @property
    def key(self) -> tuple[int | None, int, int]:
        return (self.parent_id, self.x_coord, self.y_coord)


async def insert_spatial_batch(db: Executor, rows: list[SpatialRow]) -> list[int]:
    """Insert ``rows`` in one statement and return their ids in input order.

    RETURNING order is not guaranteed by every engine, so ids are matched back
    to their rows through the unique (parent_id, x_coord, y_coord) key.
    """
    if not rows:
        return []

    table = SpatialEntity.__table__
    elements, field = json_rows(db, [row.to_json() for row in rows])
    source = (
        select(
            cast(field("run_id"), Integer),
            cast(field("parent_id"), Integer),
            cast(field("entity_type"), table.c.entity_type.type),
            cast(field("level"), Integer),
            cast(field("x_coord"), Integer),
            cast(field("y_coord"), Integer),
            field("name"),
            literal(0),
        )
        .select_from(elements)
        .order_by(ordinal(field))
    )
    stmt = (
        insert(table)
        .from_select(_INSERT_COLUMNS, source, include_defaults=False)
        .returning(table.c.id, table.c.parent_id, table.c.x_coord, table.c.y_coord)
    )

    try:
        result = await db.execute(stmt)
        returned = result.all()
    except SQLAlchemyError as exc:
        logger.error("Spatial batch insert of %d rows failed: %s", len(rows), exc)
        raise AppError.wrap_internal("failed to insert spatial batch", exc)

    ids_by_key = {(r.parent_id, r.x_coord, r.y_coord): r.id for r in returned}
    if len(ids_by_key) != len(rows):
        raise AppError.internal(
            f"spatial batch returned {len(ids_by_key)} ids for {len(rows)} rows"
        )
    try:
        return [ids_by_key[row.key] for row in rows]
    except KeyError as exc:
        raise AppError.wrap_internal("spatial batch returned an unknown row", exc)


async def refresh_child_counts(db: Executor, run_id: int, level: int) -> None:
    """Set child_count of every entity at ``level`` of the run to its real child count."""
    table = SpatialEntity.__table__
    child = table.alias("child")
    child_total = (
        select(func.count(child.c.id)).where(child.c.parent_id == table.c.id).scalar_subquery()
    )
    stmt = (
        update(table)
        .where(table.c.run_id == run_id, table.c.level == level)
        .values(child_count=child_total)
    )
    try:
        await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal("failed to update child counts", exc)


async def get_by_id(db: Executor, entity_id: int) -> SpatialEntity:
    try:
        result = await db.execute(select(SpatialEntity).where(SpatialEntity.id == entity_id))
        entity = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal(f"failed to load spatial entity {entity_id}", exc)
    if entity is None:
        raise AppError.not_found(f"spatial entity {entity_id} not found")
    return entity


async def get_children(db: Executor, parent_id: int) -> list[SpatialEntity]:
    """Children of an existing entity ordered by (x_coord, y_coord); [] for leaves."""
    await get_by_id(db, parent_id)
    try:
        result = await db.execute(
            select(SpatialEntity)
            .where(SpatialEntity.parent_id == parent_id)
            .order_by(SpatialEntity.x_coord, SpatialEntity.y_coord)
        )
        return list(result.scalars().all())
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal(f"failed to load children of spatial entity {parent_id}", exc)


async def get_ancestors(db: Executor, entity_id: int) -> list[SpatialEntity]:
    """The entity and every ancestor up to the universe, root first.

    The walk is a single recursive query over (id, parent_id). If the topmost
    row found still has a parent, a parent pointer dangles and the tree is
    corrupt.
    """
    lineage = (
        select(SpatialEntity.id, SpatialEntity.parent_id)
        .where(SpatialEntity.id == entity_id)
        .cte("lineage", recursive=True)
    )
    parent = aliased(SpatialEntity, name="parent")
    lineage = lineage.union_all(
        select(parent.id, parent.parent_id).where(parent.id == lineage.c.parent_id)
    )
    try:
        result = await db.execute(
            select(SpatialEntity)
            .join(lineage, SpatialEntity.id == lineage.c.id)
            .order_by(SpatialEntity.level)
        )
        chain = list(result.scalars().all())
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal(f"failed to load ancestors of spatial entity {entity_id}", exc)
    if not chain:
        raise AppError.not_found(f"spatial entity {entity_id} not found")
    if chain[0].parent_id is not None:
        logger.error(
            "Spatial entity %s has dangling parent %s", chain[0].id, chain[0].parent_id
        )
        raise AppError.internal(f"ancestor chain of spatial entity {entity_id} is broken")
    return chain
