import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.models import User
from app.routers import stats as stats_router


@pytest.mark.asyncio
async def test_user_upsert_is_idempotent(client, app):
    r1 = await client.post("/api/users", json={"userId": "device-abc", "pseudo": "runner"})
    assert r1.status_code == 200
    assert r1.json()["user"]["id"] == "device-abc"
    assert r1.json()["user"]["pseudo"] == "runner"

    r2 = await client.post("/api/users", json={"userId": "device-abc", "pseudo": "sprinter"})
    assert r2.status_code == 200
    assert r2.json()["status"] == "ok"
    assert r2.json()["user"]["pseudo"] == "sprinter"

    async with app.state.db.session_maker() as db:
        count = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_user_upsert_requires_fields(client):
    assert (await client.post("/api/users", json={"pseudo": "x"})).status_code == 400
    assert (await client.post("/api/users", json={"userId": "x"})).status_code == 400


@pytest.mark.asyncio
async def test_user_challenge_history(client, offers):
    for offer in offers[:2]:
        await client.post("/api/challenges/complete", json={
            "offerId": offer.id, "userId": "u-hist", "startedAt": "2026-05-01T12:00:00Z", "success": True,
        })
    await client.post("/api/challenges/complete", json={
        "offerId": offers[0].id, "userId": "someone-else", "startedAt": "2026-05-01T12:00:00Z",
    })
    r = await client.get("/api/users/u-hist/challenges")
    assert r.status_code == 200
    runs = r.json()
    assert len(runs) == 2
    assert {run["userId"] for run in runs} == {"u-hist"}
    assert runs[0]["id"] > runs[1]["id"]


@pytest.mark.asyncio
async def test_stats_zeroed_without_runs(client, offers):
    r = await client.get(f"/api/stats/offers/{offers[0].id}")
    assert r.status_code == 200
    assert r.json() == {
        "offerId": offers[0].id,
        "totalRuns": 0,
        "successfulRuns": 0,
        "validatedRuns": 0,
        "suspectedRuns": 0,
        "firstRunAt": None,
        "lastRunAt": None,
    }


@pytest.mark.asyncio
async def test_stats_counts(client, offers):
    oid = offers[0].id
    ok = await client.post("/api/challenges/complete", json={
        "offerId": oid, "startedAt": "2026-05-01T12:00:00Z", "completedAt": "2026-05-01T12:05:00Z",
        "success": True, "distanceMeters": 300,
    })
    await client.post("/api/challenges/complete", json={
        "offerId": oid, "startedAt": "2026-05-02T12:00:00Z", "completedAt": "2026-05-02T12:00:02Z",
        "success": True, "distanceMeters": 20,
    })
    await client.post("/api/challenges/complete", json={"offerId": oid, "startedAt": "2026-05-03T09:00:00Z"})
    await client.post("/api/challenges/validate", json={"qrCode": ok.json()["run"]["qrCode"]})

    body = (await client.get(f"/api/stats/offers/{oid}")).json()
    assert body["totalRuns"] == 3
    assert body["successfulRuns"] == 2
    assert body["validatedRuns"] == 1
    assert body["suspectedRuns"] == 1
    assert body["firstRunAt"].startswith("2026-05-01T12:00:00")
    assert body["lastRunAt"].startswith("2026-05-03T09:00:00")
    assert body["firstRunAt"].endswith(("Z", "+00:00"))


@pytest.mark.asyncio
async def test_stats_rejects_non_numeric_offer(client):
    assert (await client.get("/api/stats/offers/abc")).status_code == 400


@pytest.mark.asyncio
async def test_storage_failure_is_internal_error(client, monkeypatch):
    async def boom(_db, _offer_id):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(stats_router, "offer_stats", boom)
    r = await client.get("/api/stats/offers/1")
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}
