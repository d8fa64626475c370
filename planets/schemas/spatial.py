from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from planets.models.planet import PlanetType
from planets.models.spatial_entity import EntityType


class SpatialEntityResponse(BaseModel):
    id: int
    run_id: int
    parent_id: Optional[int]
    entity_type: EntityType
    level: int
    x_coord: int
    y_coord: int
    name: str
    child_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class PlanetResponse(BaseModel):
    id: int
    system_id: int
    planet_index: int
    name: str
    type: PlanetType
    size: int
    population: int
    max_population: int
    owner_id: Optional[int]

    model_config = {"from_attributes": True}
