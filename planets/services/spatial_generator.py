"""Spatial generator: lays one level of the tree out on square grids.

Every parent of a level gets ``count`` children placed on the smallest square
grid that holds them, walked x-major. The whole level is written with a single
batch insert and the returned ids keep the parent grouping, so they can be fed
straight back in as the next level's parents.
"""

import logging
import math

from planets.data.names import NAME_POOLS
from planets.errors import AppError
from planets.models.spatial_entity import ENTITY_LEVELS, EntityType
from planets.services.batch_sql import Executor
from planets.services.cancellation import CancellationToken, OperationCancelled
from planets.services.spatial_repository import SpatialRow, insert_spatial_batch

logger = logging.getLogger(__name__)


def grid_positions(count: int) -> list[tuple[int, int]]:
    """First ``count`` cells of a ceil(sqrt(count)) square grid, x outer, y inner."""
    if count <= 0:
        return []
    side = math.isqrt(count - 1) + 1
    return [(x, y) for x in range(side) for y in range(side)][:count]


def names_for(entity_type: EntityType, count: int) -> list[str]:
    pool = NAME_POOLS[entity_type]
    return [pool[i % len(pool)] for i in range(count)]


def build_level_rows(
    run_id: int,
    parent_ids: list[int | None],
    entity_type: EntityType,
    count_per_parent: int,
    cancel_token: CancellationToken | None = None,
) -> list[SpatialRow]:
    level = ENTITY_LEVELS[entity_type]
    positions = grid_positions(count_per_parent)
    names = names_for(entity_type, count_per_parent)

    rows: list[SpatialRow] = []
    for parent_id in parent_ids:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        for (x, y), name in zip(positions, names):
            rows.append(
                SpatialRow(
                    run_id=run_id,
                    parent_id=parent_id,
                    entity_type=entity_type,
                    level=level,
                    x_coord=x,
                    y_coord=y,
                    name=name,
                )
            )
    return rows


async def generate_entities(
    db: Executor,
    run_id: int,
    parent_ids: list[int | None],
    entity_type: EntityType,
    count_per_parent: int,
    cancel_token: CancellationToken | None = None,
) -> list[int]:
    """Create ``count_per_parent`` children under each parent and return their ids.

    ids[i * n:(i + 1) * n] are the children of parent_ids[i]. Cancellation is
    checked before each parent; once cancelled nothing is written.
    """
    try:
        rows = build_level_rows(run_id, parent_ids, entity_type, count_per_parent, cancel_token)
    except OperationCancelled as exc:
        logger.info("Generation of %s level for run %s cancelled: %s", entity_type.value, run_id, exc)
        raise AppError.wrap_internal("entity generation cancelled", exc)

    ids = await insert_spatial_batch(db, rows)
    logger.debug(
        "Run %s: created %d %s entities under %d parents",
        run_id,
        len(ids),
        entity_type.value,
        len(parent_ids),
    )
    return ids
