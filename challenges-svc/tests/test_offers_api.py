import pytest
from sqlalchemy.exc import OperationalError

from app.routers import offers as offers_router

PARIS_Q = {"lat": 48.8566, "lng": 2.3522}


@pytest.mark.asyncio
async def test_nearby_sorted_nearest_first(client, offers):
    r = await client.get("/api/offers/nearby", params=PARIS_Q)
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 3
    titles = [o["title"] for o in body["offers"]]
    assert titles == ["Café dash", "Boulangerie sprint", "Lyon run"]
    dists = [o["distanceMeters"] for o in body["offers"]]
    assert all(isinstance(d, int) for d in dists)
    assert dists == sorted(dists)
    assert abs(dists[0] - 74) <= 3
    first = body["offers"][0]
    assert first["city"] == "Paris"
    assert first["durationLimitSeconds"] == 300
    assert first["active"] is True


@pytest.mark.asyncio
async def test_radius_does_not_filter_by_default(client, offers):
    r = await client.get("/api/offers/nearby", params={**PARIS_Q, "radius": 10})
    assert r.status_code == 200
    assert r.json()["count"] == 3


@pytest.mark.asyncio
async def test_radius_filters_when_enforced(client, app, offers):
    app.state.settings.enforce_radius = True
    r = await client.get("/api/offers/nearby", params={**PARIS_Q, "radius": 1000})
    assert [o["title"] for o in r.json()["offers"]] == ["Café dash", "Boulangerie sprint"]

    r = await client.get("/api/offers/nearby", params=PARIS_Q)  # default 2000 m
    assert r.json()["count"] == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [
    {"lng": 2.35},
    {"lat": 48.85},
    {},
    {"lat": "abc", "lng": 2.35},
    {"lat": 48.85, "lng": "nan"},
    {"lat": "inf", "lng": 2.35},
])
async def test_bad_coordinates(client, offers, params):
    r = await client.get("/api/offers/nearby", params=params)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_nearby_degrades_to_empty_on_storage_error(client, offers, monkeypatch):
    async def boom(_db):
        raise OperationalError("SELECT offers", {}, Exception("connection lost"))

    monkeypatch.setattr(offers_router, "fetch_active_offers", boom)
    r = await client.get("/api/offers/nearby", params=PARIS_Q)
    assert r.status_code == 200
    assert r.json() == {"count": 0, "offers": []}


@pytest.mark.asyncio
async def test_list_active_offers(client, offers):
    r = await client.get("/api/offers")
    assert r.status_code == 200
    assert {o["title"] for o in r.json()} == {"Café dash", "Boulangerie sprint", "Lyon run"}
