from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from planets.config import settings
from planets.database import get_db
from planets.dependencies import require_admin
from planets.models.player import Player
from planets.schemas.run import RunCreate, RunResponse, RunStatsResponse, RunStatusUpdate
from planets.services.cancellation import CancellationToken
from planets.services.run_service import (
    create_run,
    delete_run,
    get_run,
    get_run_stats,
    list_runs,
    update_run_status,
)

router = APIRouter(prefix="/runs", tags=["runs"])


@router.get("", response_model=list[RunResponse])
async def list_all(db: AsyncSession = Depends(get_db)):
    return await list_runs(db)


@router.post("", response_model=RunResponse, status_code=status.HTTP_201_CREATED)
async def create(
    body: RunCreate,
    db: AsyncSession = Depends(get_db),
    admin: Player = Depends(require_admin),
):
    return await create_run(
        db,
        name=body.game.name,
        seed=body.game.seed,
        max_players=body.game.max_players,
        turn_interval_hours=body.game.turn_interval_hours,
        universe=body.universe.to_config(),
        cancel_token=CancellationToken(timeout=settings.generation_timeout_seconds),
    )


@router.get("/{run_id}", response_model=RunResponse)
async def get_one(run_id: int, db: AsyncSession = Depends(get_db)):
    return await get_run(db, run_id)


@router.get("/{run_id}/stats", response_model=RunStatsResponse)
async def stats(run_id: int, db: AsyncSession = Depends(get_db)):
    return await get_run_stats(db, run_id)


@router.patch("/{run_id}/status", response_model=RunResponse)
async def change_status(
    run_id: int,
    body: RunStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Player = Depends(require_admin),
):
    return await update_run_status(db, run_id, body.status)


@router.delete("/{run_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove(
    run_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Player = Depends(require_admin),
):
    await delete_run(db, run_id)
    return None
