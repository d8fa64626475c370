"""Run lifecycle: the generation pipeline plus run queries and status changes.

create_run is all or nothing. Everything after the purge happens in one
transaction that is rolled back on any failure, so readers never see a run
that is still ``creating``.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from planets.errors import AppError
from planets.models.planet import Planet
from planets.models.run import Run, RunStatus
from planets.models.spatial_entity import ENTITY_LEVELS, EntityType, SpatialEntity
from planets.services.cancellation import CancellationToken, OperationCancelled
from planets.services.generation_plan import GenerationConfig, build_generation_plan
from planets.services.planet_generator import generate_planets
from planets.services.random_source import generate_run_name, resolve_seed, seeded_random
from planets.services.spatial_generator import generate_entities
from planets.services.spatial_repository import refresh_child_counts

logger = logging.getLogger(__name__)

DEFAULT_MAX_PLAYERS = 10
DEFAULT_TURN_INTERVAL_HOURS = 1

# Serialises purge-then-create within this process.
_run_create_lock = asyncio.Lock()

_STATUS_TRANSITIONS: dict[RunStatus, set[RunStatus]] = {
    RunStatus.active: {RunStatus.paused, RunStatus.completed},
    RunStatus.paused: {RunStatus.active, RunStatus.completed},
}


@dataclass
class RunStats:
    run_id: int
    galaxy_count: int
    sector_count: int
    system_count: int
    planet_count: int


def next_whole_hour(now: datetime | None = None) -> datetime:
    """One hour from ``now`` truncated to the hour."""
    now = now or datetime.now(timezone.utc)
    return (now + timedelta(hours=1)).replace(minute=0, second=0, microsecond=0)


async def insert_run(
    db: AsyncSession, name: str, seed: str, max_players: int, turn_interval_hours: int
) -> Run:
    run = Run(
        name=name,
        seed=seed,
        status=RunStatus.creating,
        current_turn=0,
        planet_count=0,
        max_players=max_players,
        turn_interval_hours=turn_interval_hours,
    )
    db.add(run)
    await db.flush()  # need run.id for the spatial rows
    return run


async def set_root(db: AsyncSession, run_id: int, root_spatial_id: int) -> None:
    await db.execute(
        update(Run)
        .where(Run.id == run_id)
        .values(root_spatial_id=root_spatial_id)
        .execution_options(synchronize_session=False)
    )


async def update_planet_count(db: AsyncSession, run_id: int, planet_count: int) -> None:
    await db.execute(
        update(Run)
        .where(Run.id == run_id)
        .values(planet_count=planet_count)
        .execution_options(synchronize_session=False)
    )


async def activate_run(db: AsyncSession, run_id: int, now: datetime | None = None) -> None:
    """Flip a ``creating`` run to active at turn 1; conflict if it is not creating."""
    result = await db.execute(
        update(Run)
        .where(Run.id == run_id, Run.status == RunStatus.creating)
        .values(status=RunStatus.active, current_turn=1, next_turn_at=next_whole_hour(now))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise AppError.conflict(f"run {run_id} is not in creating state")


async def _delete_run_rows(db: AsyncSession, run_ids: list[int]) -> None:
    system_ids = select(SpatialEntity.id).where(SpatialEntity.run_id.in_(run_ids))
    for stmt in (
        delete(Planet).where(Planet.system_id.in_(system_ids)),
        delete(SpatialEntity).where(SpatialEntity.run_id.in_(run_ids)),
        delete(Run).where(Run.id.in_(run_ids)),
    ):
        await db.execute(stmt.execution_options(synchronize_session=False))


async def purge_runs(db: AsyncSession) -> int:
    """Delete every existing run with its spatial tree and planets; returns how many."""
    try:
        result = await db.execute(select(Run.id))
        run_ids = list(result.scalars().all())
        if run_ids:
            await _delete_run_rows(db, run_ids)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise AppError.wrap_internal("failed to purge existing runs", exc)
    if run_ids:
        logger.info("Purged %d existing run(s): %s", len(run_ids), run_ids)
    return len(run_ids)


async def create_run(
    db: AsyncSession,
    *,
    name: str | None = None,
    seed: str | None = None,
    max_players: int = DEFAULT_MAX_PLAYERS,
    turn_interval_hours: int = DEFAULT_TURN_INTERVAL_HOURS,
    universe: GenerationConfig | None = None,
    cancel_token: CancellationToken | None = None,
) -> Run:
    seed = resolve_seed(seed)
    config = (universe or GenerationConfig()).with_defaults()
    plan = build_generation_plan(config)
    if max_players < 1:
        raise AppError.validation("max_players must be at least 1")
    if turn_interval_hours < 1:
        raise AppError.validation("turn_interval_hours must be at least 1")
    name = name or generate_run_name()
    cancel_token = cancel_token or CancellationToken()

    async with _run_create_lock:
        try:
            cancel_token.raise_if_cancelled()
        except OperationCancelled as exc:
            logger.warning("Run generation cancelled before purge: %s", exc)
            raise AppError.wrap_internal("run generation cancelled", exc)
        await purge_runs(db)
        try:
            run = await insert_run(db, name, seed, max_players, turn_interval_hours)
            root_ids = await generate_entities(db, run.id, [None], EntityType.universe, 1, cancel_token)
            await set_root(db, run.id, root_ids[0])

            parent_ids: list[int] = root_ids
            for level in plan:
                cancel_token.raise_if_cancelled()
                parent_ids = await generate_entities(
                    db, run.id, parent_ids, level.entity_type, level.count, cancel_token
                )
                await refresh_child_counts(db, run.id, ENTITY_LEVELS[level.entity_type] - 1)

            cancel_token.raise_if_cancelled()
            planets = await generate_planets(
                db,
                parent_ids,
                config.min_planets_per_system,
                config.max_planets_per_system,
                seeded_random(seed),
                cancel_token,
            )
            await update_planet_count(db, run.id, len(planets))
            await activate_run(db, run.id)
            await db.commit()
        except OperationCancelled as exc:
            await db.rollback()
            logger.warning("Run generation cancelled: %s", exc)
            raise AppError.wrap_internal("run generation cancelled", exc)
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Run generation failed: %s", exc, exc_info=True)
            raise AppError.wrap_internal("run generation failed", exc)
        except Exception:
            await db.rollback()
            raise

    await db.refresh(run)
    logger.info(
        "Created run %s %r (seed=%s): %d spatial entities, %d planets",
        run.id,
        run.name,
        run.seed,
        config.spatial_entity_count,
        run.planet_count,
    )
    return run


async def list_runs(db: AsyncSession) -> list[Run]:
    try:
        result = await db.execute(select(Run).order_by(Run.created_at.desc(), Run.id.desc()))
        return list(result.scalars().all())
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal("failed to list runs", exc)


async def get_run(db: AsyncSession, run_id: int) -> Run:
    try:
        result = await db.execute(select(Run).where(Run.id == run_id))
        run = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal(f"failed to load run {run_id}", exc)
    if run is None:
        raise AppError.not_found(f"run {run_id} not found")
    return run


async def get_run_stats(db: AsyncSession, run_id: int) -> RunStats:
    await get_run(db, run_id)
    try:
        result = await db.execute(
            select(SpatialEntity.entity_type, func.count(SpatialEntity.id))
            .where(SpatialEntity.run_id == run_id)
            .group_by(SpatialEntity.entity_type)
        )
        by_type = {entity_type: count for entity_type, count in result.all()}
        planet_total = await db.scalar(
            select(func.count(Planet.id))
            .join(SpatialEntity, Planet.system_id == SpatialEntity.id)
            .where(SpatialEntity.run_id == run_id)
        )
    except SQLAlchemyError as exc:
        raise AppError.wrap_internal(f"failed to count entities of run {run_id}", exc)
    return RunStats(
        run_id=run_id,
        galaxy_count=by_type.get(EntityType.galaxy, 0),
        sector_count=by_type.get(EntityType.sector, 0),
        system_count=by_type.get(EntityType.system, 0),
        planet_count=planet_total or 0,
    )


async def delete_run(db: AsyncSession, run_id: int) -> None:
    await get_run(db, run_id)
    try:
        await _delete_run_rows(db, [run_id])
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise AppError.wrap_internal(f"failed to delete run {run_id}", exc)
    logger.info("Deleted run %s", run_id)


async def update_run_status(db: AsyncSession, run_id: int, status: RunStatus) -> Run:
    """Move a run between active, paused and completed.

    next_turn_at is scheduled when the run becomes active and cleared otherwise.
    """
    run = await get_run(db, run_id)
    if status not in _STATUS_TRANSITIONS.get(run.status, set()):
        raise AppError.conflict(
            f"cannot change run {run_id} from {run.status.value} to {status.value}"
        )
    run.status = status
    run.next_turn_at = next_whole_hour() if status == RunStatus.active else None
    try:
        await db.commit()
        await db.refresh(run)
    except SQLAlchemyError as exc:
        await db.rollback()
        raise AppError.wrap_internal(f"failed to update status of run {run_id}", exc)
    logger.info("Run %s is now %s", run_id, status.value)
    return run
