"""Pure tests for grid layout, naming and planet drawing."""

import random

import pytest

from planets.data.names import NAME_POOLS, PLANET_SUFFIXES
from planets.errors import AppError, ErrorType
from planets.models.planet import PlanetType
from planets.models.spatial_entity import EntityType
from planets.services.cancellation import CancellationToken
from planets.services.planet_generator import (
    build_planet_rows,
    generate_planets,
    pick_planet_type,
    planet_name,
)
from planets.services.spatial_generator import (
    build_level_rows,
    generate_entities,
    grid_positions,
    names_for,
)


class RecordingExecutor:
    """Executor stand-in that fails the test if a statement is issued."""

    def __init__(self):
        self.statements = []

    async def execute(self, statement):
        self.statements.append(statement)
        raise AssertionError("no statement expected")


class FixedRoll:
    def __init__(self, value: int):
        self.value = value

    def randrange(self, n: int) -> int:
        return self.value


# ---------------------------------------------------------------------------
# Grid layout
# ---------------------------------------------------------------------------

class TestGridPositions:
    def test_single_cell(self):
        assert grid_positions(1) == [(0, 0)]

    def test_zero(self):
        assert grid_positions(0) == []

    def test_perfect_square_fills_grid(self):
        assert grid_positions(4) == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert len(set(grid_positions(9))) == 9
        assert max(max(x, y) for x, y in grid_positions(9)) == 2

    def test_row_major_x_outer(self):
        assert grid_positions(2) == [(0, 0), (0, 1)]
        assert grid_positions(5) == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1)]

    def test_side_is_ceil_sqrt(self):
        for n in (3, 10, 17, 26):
            side = max(max(x, y) for x, y in grid_positions(n)) + 1
            assert (side - 1) ** 2 < n <= side**2


class TestNames:
    def test_galaxy_pool_wraps(self):
        names = names_for(EntityType.galaxy, 8)
        assert names[:6] == NAME_POOLS[EntityType.galaxy]
        assert names[6:] == ["Andromeda", "Milky Way"]

    def test_universe(self):
        assert names_for(EntityType.universe, 1) == ["Universe"]

    def test_planet_names(self):
        assert planet_name(0) == "Planet I"
        assert planet_name(9) == "Planet X"
        assert planet_name(10) == "Planet Prime"
        assert planet_name(17) == "Planet Outer"
        assert planet_name(18) == "Planet I"
        assert len(PLANET_SUFFIXES) == 18


class TestBuildLevelRows:
    def test_grouping_follows_parents(self):
        rows = build_level_rows(7, [10, 20], EntityType.sector, 3)
        assert [row.parent_id for row in rows] == [10, 10, 10, 20, 20, 20]
        assert [(row.x_coord, row.y_coord) for row in rows[:3]] == [(0, 0), (0, 1), (1, 0)]
        assert [row.name for row in rows[3:]] == ["Alpha", "Beta", "Gamma"]
        assert all(row.level == 2 and row.run_id == 7 for row in rows)

    def test_empty_parent_vector(self):
        assert build_level_rows(1, [], EntityType.galaxy, 4) == []

    async def test_empty_parents_skip_store(self):
        db = RecordingExecutor()
        assert await generate_entities(db, 1, [], EntityType.galaxy, 4) == []
        assert db.statements == []

    async def test_cancelled_before_batch(self):
        db = RecordingExecutor()
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AppError) as exc_info:
            await generate_entities(db, 1, [1, 2], EntityType.galaxy, 2, token)
        assert exc_info.value.type == ErrorType.internal
        assert exc_info.value.message == "entity generation cancelled"
        assert db.statements == []


# ---------------------------------------------------------------------------
# Planets
# ---------------------------------------------------------------------------

class TestPickPlanetType:
    @pytest.mark.parametrize(
        "roll,expected",
        [
            (0, PlanetType.barren),
            (14, PlanetType.barren),
            (15, PlanetType.terrestrial),
            (54, PlanetType.terrestrial),
            (55, PlanetType.gas_giant),
            (74, PlanetType.gas_giant),
            (75, PlanetType.ice),
            (89, PlanetType.ice),
            (90, PlanetType.volcanic),
            (99, PlanetType.volcanic),
        ],
    )
    def test_weight_boundaries(self, roll, expected):
        assert pick_planet_type(FixedRoll(roll)) == expected

    def test_all_types_appear(self):
        rng = random.Random(1)
        seen = {pick_planet_type(rng) for _ in range(500)}
        assert seen == set(PlanetType)


class TestBuildPlanetRows:
    def test_fixed_count_per_system(self):
        rows = build_planet_rows([1, 2, 3], 2, 2, random.Random(42))
        assert len(rows) == 6
        assert [row.planet_index for row in rows] == [0, 1, 0, 1, 0, 1]
        assert [row.system_id for row in rows] == [1, 1, 2, 2, 3, 3]

    def test_count_within_band(self):
        rows = build_planet_rows(list(range(50)), 1, 8, random.Random(7))
        per_system = {}
        for row in rows:
            per_system[row.system_id] = per_system.get(row.system_id, 0) + 1
        assert len(per_system) == 50
        assert all(1 <= count <= 8 for count in per_system.values())

    def test_value_ranges(self):
        rows = build_planet_rows(list(range(30)), 3, 5, random.Random(3))
        for row in rows:
            assert 50 <= row.size <= 200
            if row.type == PlanetType.gas_giant:
                assert row.max_population == 0
            else:
                assert 100_000 <= row.max_population <= 999_999
            assert row.name == planet_name(row.planet_index)

    def test_deterministic_for_same_seed(self):
        a = build_planet_rows([5, 6], 1, 8, random.Random(99))
        b = build_planet_rows([5, 6], 1, 8, random.Random(99))
        assert a == b

    async def test_cancelled_before_batch(self):
        db = RecordingExecutor()
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AppError) as exc_info:
            await generate_planets(db, [1], 1, 1, random.Random(1), token)
        assert exc_info.value.type == ErrorType.internal
        assert db.statements == []
