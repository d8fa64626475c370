"""Planet generator: fills every system with seeded, weighted random planets."""

import logging
import random

from planets.data.names import (
    PLANET_MAX_POPULATION_RANGE,
    PLANET_SIZE_RANGE,
    PLANET_SUFFIXES,
    PLANET_TYPE_WEIGHTS,
)
from planets.errors import AppError
from planets.models.planet import Planet, PlanetType
from planets.services.batch_sql import Executor
from planets.services.cancellation import CancellationToken, OperationCancelled
from planets.services.planet_repository import PlanetRow, insert_planet_batch

logger = logging.getLogger(__name__)

_TOTAL_WEIGHT = sum(weight for _, weight in PLANET_TYPE_WEIGHTS)


def pick_planet_type(rng: random.Random) -> PlanetType:
    roll = rng.randrange(_TOTAL_WEIGHT)
    for planet_type, weight in PLANET_TYPE_WEIGHTS:
        if roll < weight:
            return planet_type
        roll -= weight
    return PLANET_TYPE_WEIGHTS[-1][0]


def planet_name(index: int) -> str:
    return f"Planet {PLANET_SUFFIXES[index % len(PLANET_SUFFIXES)]}"


def build_planet_rows(
    system_ids: list[int],
    min_planets: int,
    max_planets: int,
    rng: random.Random,
    cancel_token: CancellationToken | None = None,
) -> list[PlanetRow]:
    """Draw the planets of every system, in system order then planet order.

    Draw order per system: count, then per planet type, size, max population.
    Gas giants still consume the max population draw so the stream stays
    aligned whatever the type mix.
    """
    size_low, size_high = PLANET_SIZE_RANGE
    pop_low, pop_high = PLANET_MAX_POPULATION_RANGE

    rows: list[PlanetRow] = []
    for system_id in system_ids:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        count = min_planets + rng.randrange(max_planets - min_planets + 1)
        for index in range(count):
            planet_type = pick_planet_type(rng)
            size = rng.randint(size_low, size_high)
            max_population = rng.randint(pop_low, pop_high)
            if planet_type == PlanetType.gas_giant:
                max_population = 0
            rows.append(
                PlanetRow(
                    system_id=system_id,
                    planet_index=index,
                    name=planet_name(index),
                    type=planet_type,
                    size=size,
                    max_population=max_population,
                )
            )
    return rows


async def generate_planets(
    db: Executor,
    system_ids: list[int],
    min_planets: int,
    max_planets: int,
    rng: random.Random,
    cancel_token: CancellationToken | None = None,
) -> list[Planet]:
    try:
        rows = build_planet_rows(system_ids, min_planets, max_planets, rng, cancel_token)
    except OperationCancelled as exc:
        logger.info("Planet generation cancelled: %s", exc)
        raise AppError.wrap_internal("planet generation cancelled", exc)

    planets = await insert_planet_batch(db, rows)
    logger.debug("Created %d planets across %d systems", len(planets), len(system_ids))
    return planets
