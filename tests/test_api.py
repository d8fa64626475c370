"""HTTP tests for the run, spatial and system endpoints."""

from httpx import AsyncClient


SMALL_UNIVERSE = {
    "galaxy_count": 1,
    "sectors_per_galaxy": 1,
    "systems_per_sector": 1,
    "min_planets_per_system": 1,
    "max_planets_per_system": 1,
}


async def create_run(client: AsyncClient, headers: dict, seed: str = "feedface", **universe) -> dict:
    resp = await client.post(
        "/runs",
        json={
            "game": {"name": "Test Run", "seed": seed},
            "universe": {**SMALL_UNIVERSE, **universe},
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---- health ----------------------------------------------------------------

class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ---- run creation ----------------------------------------------------------

class TestCreateRun:
    async def test_create_run(self, db_client: AsyncClient, admin_headers: dict):
        run = await create_run(db_client, admin_headers)
        assert run["name"] == "Test Run"
        assert run["seed"] == "feedface"
        assert run["status"] == "active"
        assert run["current_turn"] == 1
        assert run["planet_count"] == 1
        assert run["next_turn_at"] is not None
        assert run["root_spatial_id"] is not None

    async def test_defaults_when_body_empty(self, db_client: AsyncClient, admin_headers: dict):
        resp = await db_client.post(
            "/runs",
            json={"universe": {"sectors_per_galaxy": 1, "systems_per_sector": 1}},
            headers=admin_headers,
        )
        assert resp.status_code == 201, resp.text
        run = resp.json()
        assert len(run["seed"]) == 16
        assert run["max_players"] == 10
        assert run["turn_interval_hours"] == 1
        assert 1 <= run["planet_count"] <= 8

    async def test_short_seed_is_400(self, db_client: AsyncClient, admin_headers: dict):
        resp = await db_client.post(
            "/runs",
            json={"game": {"seed": "xy"}, "universe": SMALL_UNIVERSE},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "validation"
        assert body["code"] == 400
        assert "seed" in body["message"]

    async def test_min_above_max_is_400(self, db_client: AsyncClient, admin_headers: dict):
        resp = await db_client.post(
            "/runs",
            json={"universe": {**SMALL_UNIVERSE, "min_planets_per_system": 3}},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "validation"

    async def test_bad_max_players_is_400(self, db_client: AsyncClient, admin_headers: dict):
        resp = await db_client.post(
            "/runs",
            json={"game": {"max_players": 0}, "universe": SMALL_UNIVERSE},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "validation"

    async def test_requires_authentication(self, db_client: AsyncClient):
        resp = await db_client.post("/runs", json={"universe": SMALL_UNIVERSE})
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthorized"

    async def test_invalid_token(self, db_client: AsyncClient):
        resp = await db_client.post(
            "/runs",
            json={"universe": SMALL_UNIVERSE},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert resp.status_code == 401

    async def test_requires_admin(self, db_client: AsyncClient, user_headers: dict):
        resp = await db_client.post("/runs", json={"universe": SMALL_UNIVERSE}, headers=user_headers)
        assert resp.status_code == 403
        assert resp.json() == {"error": "forbidden", "message": "admin role required", "code": 403}

    async def test_wrong_method(self, db_client: AsyncClient):
        resp = await db_client.put("/runs")
        assert resp.status_code == 405
        assert resp.json()["error"] == "method_not_allowed"


# ---- run queries -----------------------------------------------------------

class TestRunQueries:
    async def test_list_and_get(self, db_client: AsyncClient, admin_headers: dict):
        run = await create_run(db_client, admin_headers)

        resp = await db_client.get("/runs")
        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()] == [run["id"]]

        resp = await db_client.get(f"/runs/{run['id']}")
        assert resp.status_code == 200
        assert resp.json()["seed"] == "feedface"

    async def test_get_missing(self, db_client: AsyncClient):
        resp = await db_client.get("/runs/9999")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    async def test_stats(self, db_client: AsyncClient, admin_headers: dict):
        run = await create_run(
            db_client, admin_headers, galaxy_count=2, sectors_per_galaxy=2, systems_per_sector=2
        )
        resp = await db_client.get(f"/runs/{run['id']}/stats")
        assert resp.status_code == 200
        assert resp.json() == {
            "run_id": run["id"],
            "galaxy_count": 2,
            "sector_count": 4,
            "system_count": 8,
            "planet_count": 8,
        }

    async def test_status_transitions(self, db_client: AsyncClient, admin_headers: dict):
        run = await create_run(db_client, admin_headers)
        url = f"/runs/{run['id']}/status"

        resp = await db_client.patch(url, json={"status": "paused"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "paused"
        assert resp.json()["next_turn_at"] is None

        resp = await db_client.patch(url, json={"status": "creating"}, headers=admin_headers)
        assert resp.status_code == 400

        resp = await db_client.patch(url, json={"status": "completed"}, headers=admin_headers)
        assert resp.status_code == 200

        resp = await db_client.patch(url, json={"status": "active"}, headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json()["error"] == "conflict"

    async def test_delete(self, db_client: AsyncClient, admin_headers: dict):
        run = await create_run(db_client, admin_headers)
        resp = await db_client.delete(f"/runs/{run['id']}", headers=admin_headers)
        assert resp.status_code == 204
        resp = await db_client.get(f"/runs/{run['id']}")
        assert resp.status_code == 404

    async def test_delete_requires_admin(self, db_client: AsyncClient, user_headers: dict):
        resp = await db_client.delete("/runs/1", headers=user_headers)
        assert resp.status_code == 403


# ---- spatial traversal -----------------------------------------------------

class TestSpatialEndpoints:
    async def test_walk_down_and_up(self, db_client: AsyncClient, admin_headers: dict):
        run = await create_run(db_client, admin_headers, galaxy_count=2)
        root_id = run["root_spatial_id"]

        resp = await db_client.get(f"/spatial/{root_id}")
        assert resp.status_code == 200
        root = resp.json()
        assert root["entity_type"] == "universe"
        assert root["level"] == 0
        assert root["child_count"] == 2

        resp = await db_client.get(f"/spatial/{root_id}/children")
        galaxies = resp.json()
        assert [(g["x_coord"], g["y_coord"]) for g in galaxies] == [(0, 0), (0, 1)]
        assert [g["name"] for g in galaxies] == ["Andromeda", "Milky Way"]

        sector = (await db_client.get(f"/spatial/{galaxies[1]['id']}/children")).json()[0]
        system = (await db_client.get(f"/spatial/{sector['id']}/children")).json()[0]
        assert system["entity_type"] == "system"

        resp = await db_client.get(f"/spatial/{system['id']}/ancestors")
        assert resp.status_code == 200
        chain = resp.json()
        assert [e["level"] for e in chain] == [0, 1, 2, 3]
        assert chain[0]["id"] == root_id
        assert chain[1]["id"] == galaxies[1]["id"]

        resp = await db_client.get(f"/systems/{system['id']}/planets")
        assert resp.status_code == 200
        planets = resp.json()
        assert len(planets) == 1
        assert planets[0]["planet_index"] == 0
        assert planets[0]["name"] == "Planet I"
        assert planets[0]["population"] == 0
        assert planets[0]["owner_id"] is None

    async def test_missing_entity(self, db_client: AsyncClient):
        for path in ("/spatial/404", "/spatial/404/children", "/spatial/404/ancestors", "/systems/404/planets"):
            resp = await db_client.get(path)
            assert resp.status_code == 404, path
            assert resp.json()["error"] == "not_found"

    async def test_planets_of_galaxy_is_404(self, db_client: AsyncClient, admin_headers: dict):
        run = await create_run(db_client, admin_headers)
        galaxies = (await db_client.get(f"/spatial/{run['root_spatial_id']}/children")).json()
        resp = await db_client.get(f"/systems/{galaxies[0]['id']}/planets")
        assert resp.status_code == 404
