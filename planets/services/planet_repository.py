import logging
from dataclasses import dataclass

from sqlalchemy import BigInteger, Integer, cast, insert, literal, select
from sqlalchemy.exc import SQLAlchemyError

from planets.errors import AppError
from planets.models.planet import Planet, PlanetType
from planets.models.spatial_entity import EntityType
from planets.services import spatial_repository
from planets.services.batch_sql import Executor, json_rows, ordinal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanetRow:
    system_id: int
    planet_index: int
    name: str
    type: PlanetType
    size: int
    max_population: int

    def to_json(self) -> dict:
        return {
            "system_id": self.system_id,
            "planet_index": self.planet_index,
            "name": self.name,
            "type": self.type.value,
            "size": self.size,
            "max_population": self.max_population,
        }


async def insert_planet_batch(db: Executor, rows: list[PlanetRow]) -> list[Planet]:
    """Insert ``rows`` in one statement and return the stored planets in input order.

    The returned objects carry every column, ids and timestamps included. New
    planets start unowned with population 0.
    """
    if not rows:
        return []

    table = Planet.__table__
    elements, field = json_rows(db, [row.to_json() for row in rows])
    source = (
        select(
            cast(field("system_id"), Integer),
            cast(field("planet_index"), Integer),
            field("name"),
            cast(field("type"), table.c.type.type),
            cast(field("size"), Integer),
            literal(0, BigInteger),
            cast(field("max_population"), BigInteger),
        )
        .select_from(elements)
        .order_by(ordinal(field))
    )
    stmt = (
        insert(table)
        .from_select(
            ["system_id", "planet_index", "name", "type", "size", "population", "max_population"],
            source,
            include_defaults=False,
        )
        .returning(*table.c)
    )

    try:
        result = await db.execute(stmt)
        returned = result.all()
    except SQLAlchemyError as exc:
        logger.error("Planet batch insert of %d rows failed: %s", len(rows), exc)
        raise AppError.wrap_internal("failed to insert planet batch", exc)

    by_position = {(r.system_id, r.planet_index): Planet(**r._mapping) for r in returned}
    if len(by_position) != len(rows):
        raise AppError.internal(
            f"planet batch returned {len(by_position)} rows for {len(rows)} inputs"
        )
    return [by_position[(row.system_id, row.planet_index)] for row in rows]


async def get_planets_by_system(db: Executor, system_id: int) -> list[Planet]:
    entity = await spatial_repository.get_by_id(db, system_id)
    if entity.entity_type != EntityType.system:
        raise AppError.not_found(f"system {system_id} not found")
    try:
        result = await db.execute(
            select(Planet).where(Planet.system_id == system_id).order_by(Planet.planet_index)
        )
        return list(result.scalars().all())
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal(f"failed to load planets of system {system_id}", exc)
