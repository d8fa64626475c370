from planets.models.base import Base  # noqa: F401
from planets.models.auth_provider import PlayerAuthProvider  # noqa: F401
from planets.models.planet import Planet, PlanetType  # noqa: F401
from planets.models.player import Player, PlayerRole  # noqa: F401
from planets.models.run import Run, RunStatus  # noqa: F401
from planets.models.spatial_entity import ENTITY_LEVELS, EntityType, SpatialEntity  # noqa: F401
