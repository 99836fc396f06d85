"""Admin HTTP surface routes."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from _fakes import FakeTransport, fr24_position, opencage
from aiohttp.test_utils import TestClient, TestServer

from regionsync.config import RegionSyncConfig
from regionsync.models.fleet import Aircraft, Fleet
from regionsync.models.state import AircraftState
from regionsync.regions import Region
from regionsync.state.store import MemoryStateStore
from regionsync.tracker import FleetTracker
from regionsync.web import create_app

AIRCRAFT = Aircraft(registration="9V-SGC", resolver_ip="183.0.1.100")
CONFIG = RegionSyncConfig(
    fr24_api_key="fr24-key",
    opencage_api_key="oc-key",
    fr24_base_url="https://fr24.test",
    opencage_base_url="https://oc.test",
)


@pytest.fixture
def store() -> MemoryStateStore:
    return MemoryStateStore()


@pytest_asyncio.fixture
async def client(store: MemoryStateStore) -> AsyncIterator[TestClient]:
    transport = FakeTransport()
    transport.on("GET", "/flight-positions/light", fr24_position(1.35, 103.99))
    transport.on("GET", "/geocode/", opencage(country_code="sg", country="Singapore"))
    tracker = FleetTracker(CONFIG, fleet=Fleet([AIRCRAFT]), store=store, transport=transport)
    async with tracker:
        async with TestClient(TestServer(create_app(tracker))) as test_client:
            yield test_client


async def _seed(store: MemoryStateStore) -> None:
    await store.put(
        AircraftState(
            registration=AIRCRAFT.registration,
            resolver_ip=AIRCRAFT.resolver_ip,
            region=Region.SEA,
            updated_at=datetime(2026, 10, 19, 7, 0, tzinfo=UTC),
        )
    )


@pytest.mark.asyncio
async def test_track_requires_registration(client: TestClient) -> None:
    resp = await client.get("/track")
    assert resp.status == 400
    assert await resp.json() == {"error": "Please provide registration parameter"}


@pytest.mark.asyncio
async def test_track_returns_region_and_ip(client: TestClient, store: MemoryStateStore) -> None:
    resp = await client.get("/track", params={"registration": "9V-SGC"})
    assert resp.status == 200
    body = await resp.json()
    assert body["region"] == "SEA"
    assert body["resolver_ip"] == "183.0.1.100"
    assert body["geo"]["country_code"] == "SG"
    assert await store.get("9V-SGC") is None


@pytest.mark.asyncio
async def test_state_single_missing(client: TestClient) -> None:
    resp = await client.get("/state", params={"registration": "9V-SGC"})
    assert await resp.json() == {"message": "No state found"}


@pytest.mark.asyncio
async def test_state_lists_and_clear(client: TestClient, store: MemoryStateStore) -> None:
    await _seed(store)

    body = await (await client.get("/state")).json()
    assert [s["registration"] for s in body] == ["9V-SGC"]
    assert body[0]["region"] == "SEA"

    single = await (await client.get("/state", params={"registration": "9V-SGC"})).json()
    assert single["resolver_ip"] == "183.0.1.100"

    cleared = await (await client.get("/clear-state", params={"registration": "9V-SGC"})).json()
    assert cleared == {"cleared": "9V-SGC"}
    assert await store.get("9V-SGC") is None


@pytest.mark.asyncio
async def test_clear_all(client: TestClient, store: MemoryStateStore) -> None:
    await _seed(store)
    assert await (await client.get("/clear-state")).json() == {"cleared": "all"}
    assert await store.registrations() == []


@pytest.mark.asyncio
async def test_fleet_and_index(client: TestClient) -> None:
    fleet = await (await client.get("/fleet")).json()
    assert fleet == [{"registration": "9V-SGC", "resolver_ip": "183.0.1.100"}]

    index = await (await client.get("/anything")).json()
    assert "endpoints" in index
    assert any(line.startswith("GET /track") for line in index["endpoints"])
