from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from planets.models.run import RunStatus
from planets.services.generation_plan import GenerationConfig


class RunSettings(BaseModel):
    name: Optional[str] = None
    seed: Optional[str] = None
    max_players: int = 10
    turn_interval_hours: int = 1

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 100:
            raise ValueError("name must be at most 100 characters")
        return v

    @field_validator("max_players", "turn_interval_hours")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v


class UniverseSettings(BaseModel):
    """Zero means "use the default" for every field."""

    galaxy_count: int = 0
    sectors_per_galaxy: int = 0
    systems_per_sector: int = 0
    min_planets_per_system: int = 0
    max_planets_per_system: int = 0

    def to_config(self) -> GenerationConfig:
        return GenerationConfig(**self.model_dump())


class RunCreate(BaseModel):
    game: RunSettings = RunSettings()
    universe: UniverseSettings = UniverseSettings()


class RunResponse(BaseModel):
    id: int
    name: str
    seed: str
    root_spatial_id: Optional[int]
    planet_count: int
    status: RunStatus
    current_turn: int
    max_players: int
    turn_interval_hours: int
    next_turn_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RunStatsResponse(BaseModel):
    run_id: int
    galaxy_count: int
    sector_count: int
    system_count: int
    planet_count: int

    model_config = {"from_attributes": True}


class RunStatusUpdate(BaseModel):
    status: RunStatus

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: RunStatus) -> RunStatus:
        if v == RunStatus.creating:
            raise ValueError("a run cannot be moved back to creating")
        return v
