"""Generation planner: turns a universe config into the ordered level list."""

from dataclasses import dataclass

from planets.errors import AppError
from planets.models.spatial_entity import EntityType

DEFAULT_GALAXY_COUNT = 1
DEFAULT_SECTORS_PER_GALAXY = 10
DEFAULT_SYSTEMS_PER_SECTOR = 10
DEFAULT_MIN_PLANETS_PER_SYSTEM = 1
DEFAULT_MAX_PLANETS_PER_SYSTEM = 8


@dataclass(frozen=True)
class SpatialLevel:
    entity_type: EntityType
    count: int


@dataclass(frozen=True)
class GenerationConfig:
    galaxy_count: int = 0
    sectors_per_galaxy: int = 0
    systems_per_sector: int = 0
    min_planets_per_system: int = 0
    max_planets_per_system: int = 0

    def with_defaults(self) -> "GenerationConfig":
        """Replace zero fields with their defaults."""
        return GenerationConfig(
            galaxy_count=self.galaxy_count or DEFAULT_GALAXY_COUNT,
            sectors_per_galaxy=self.sectors_per_galaxy or DEFAULT_SECTORS_PER_GALAXY,
            systems_per_sector=self.systems_per_sector or DEFAULT_SYSTEMS_PER_SECTOR,
            min_planets_per_system=self.min_planets_per_system or DEFAULT_MIN_PLANETS_PER_SYSTEM,
            max_planets_per_system=self.max_planets_per_system or DEFAULT_MAX_PLANETS_PER_SYSTEM,
        )

    def validate(self) -> None:
        for field_name in (
            "galaxy_count",
            "sectors_per_galaxy",
            "systems_per_sector",
            "min_planets_per_system",
            "max_planets_per_system",
        ):
            if getattr(self, field_name) < 1:
                raise AppError.validation(f"{field_name} must be at least 1")
        if self.min_planets_per_system > self.max_planets_per_system:
            raise AppError.validation(
                "min_planets_per_system must not exceed max_planets_per_system"
            )

    @property
    def system_count(self) -> int:
        return self.galaxy_count * self.sectors_per_galaxy * self.systems_per_sector

    @property
    def spatial_entity_count(self) -> int:
        g, s = self.galaxy_count, self.sectors_per_galaxy
        return 1 + g + g * s + self.system_count


def build_generation_plan(config: GenerationConfig) -> list[SpatialLevel]:
    """Default and validate ``config``, then return levels below the universe root."""
    config = config.with_defaults()
    config.validate()
    return [
        SpatialLevel(EntityType.galaxy, config.galaxy_count),
        SpatialLevel(EntityType.sector, config.sectors_per_galaxy),
        SpatialLevel(EntityType.system, config.systems_per_sector),
    ]
