from __future__ import annotations

from typing import Any

import httpx
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager

from app.core.config import Settings
from app.core.nats import EventPublisher
from app.main import create_app
from app.models import Offer

PARIS = (48.8566, 2.3522)


class RecordingPublisher(EventPublisher):
    """Keeps published events in memory instead of sending them to NATS."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self.sent: list[tuple[str, dict[str, Any]]] = []

    async def publish(self, subject: str, evt: dict) -> bool:
        self.sent.append((subject, evt))
        return True

    async def close(self) -> None:
        return None


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'challenges-test.db'}",
        metrics_enabled=False,
        rl_enabled=False,
        nats_events_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def events(settings: Settings) -> RecordingPublisher:
    return RecordingPublisher(settings)


@pytest_asyncio.fixture
async def app(settings: Settings, events: RecordingPublisher):
    application = create_app(settings, events=events)
    async with LifespanManager(application):
        yield application


@pytest_asyncio.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


@pytest_asyncio.fixture
async def offers(app) -> list[Offer]:
    """Three active offers around central Paris plus one inactive one."""
    lat, lon = PARIS
    rows = [
        Offer(title="Boulangerie sprint", category="food", latitude=lat, longitude=lon + 0.010, city="Paris",
              duration_limit_seconds=600, reward="free croissant"),
        Offer(title="Café dash", category="drinks", latitude=lat, longitude=lon + 0.001, city="Paris",
              duration_limit_seconds=300, reward="espresso"),
        Offer(title="Closed shop", category="retail", latitude=lat, longitude=lon, city="Paris", active=False),
        Offer(title="Lyon run", category="sport", latitude=45.7640, longitude=4.8357, city="Lyon",
              duration_limit_seconds=900, reward="t-shirt"),
    ]
    async with app.state.db.session_maker() as db:
        db.add_all(rows)
        await db.commit()
        for r in rows:
            await db.refresh(r)
    return rows

