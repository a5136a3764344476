from __future__ import annotations
from typing import AsyncGenerator
from fastapi import HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import Settings
from .core.nats import EventPublisher
from .core.redis import allow_request
from .db import Database

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings

def get_database(request: Request) -> Database:
    return request.app.state.db

def get_events(request: Request) -> EventPublisher:
    return request.app.state.events

async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    # one session per request, released on every exit path
    async for s in get_database(request).get_session():
        yield s

def rate_limited(route_key: str):
    async def _check(request: Request) -> None:
        settings: Settings = request.app.state.settings
        if not settings.rl_enabled:
            return
        ip = request.client.host if request.client else "unknown"
        ok = await allow_request(
            request.app.state.redis, ip, route_key,
            window_seconds=settings.rl_window_seconds, max_reqs=settings.rl_max_reqs,
        )
        if not ok:
            raise HTTPException(status_code=429, detail="Too many requests")
    return _check
