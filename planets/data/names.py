"""Fixed literal pools used when naming generated entities and planets.

The order of every list is part of the generated output: entity i of a parent
gets pool[i % len(pool)], planet i of a system gets PLANET_SUFFIXES[i % 18].
"""

from planets.models.planet import PlanetType
from planets.models.spatial_entity import EntityType

NAME_POOLS: dict[EntityType, list[str]] = {
    EntityType.universe: ["Universe"],
    EntityType.galaxy: ["Andromeda", "Milky Way", "Centaurus", "Pegasus", "Cygnus", "Draco"],
    EntityType.sector: ["Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta", "Eta", "Theta"],
    EntityType.system: ["Altair", "Vega", "Sirius", "Arcturus", "Capella", "Rigel", "Procyon"],
}

PLANET_SUFFIXES: list[str] = [
    "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X",
    "Prime", "Alpha", "Beta", "Gamma", "Major", "Minor", "Core", "Outer",
]

# Cumulative-weight order matters for reproducibility: a roll in [0, 100)
# walks this list front to back.
PLANET_TYPE_WEIGHTS: list[tuple[PlanetType, int]] = [
    (PlanetType.barren, 15),
    (PlanetType.terrestrial, 40),
    (PlanetType.gas_giant, 20),
    (PlanetType.ice, 15),
    (PlanetType.volcanic, 10),
]

PLANET_SIZE_RANGE = (50, 200)
PLANET_MAX_POPULATION_RANGE = (100_000, 999_999)
