from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from planets.database import get_db
from planets.schemas.spatial import PlanetResponse, SpatialEntityResponse
from planets.services.planet_repository import get_planets_by_system
from planets.services.spatial_repository import get_ancestors, get_by_id, get_children

router = APIRouter(prefix="/spatial", tags=["spatial"])

# Planets hang off systems, which get their own prefix.
systems_router = APIRouter(prefix="/systems", tags=["spatial"])


@router.get("/{entity_id}", response_model=SpatialEntityResponse)
async def get_entity(entity_id: int, db: AsyncSession = Depends(get_db)):
    return await get_by_id(db, entity_id)


@router.get("/{entity_id}/children", response_model=list[SpatialEntityResponse])
async def children(entity_id: int, db: AsyncSession = Depends(get_db)):
    return await get_children(db, entity_id)


@router.get("/{entity_id}/ancestors", response_model=list[SpatialEntityResponse])
async def ancestors(entity_id: int, db: AsyncSession = Depends(get_db)):
    return await get_ancestors(db, entity_id)


@systems_router.get("/{system_id}/planets", response_model=list[PlanetResponse])
async def planets(system_id: int, db: AsyncSession = Depends(get_db)):
    return await get_planets_by_system(db, system_id)
