from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import SQLAlchemyError

from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.nats import EventPublisher
from .core.redis import make_redis, ping_redis
from .db import Database
from .routers import challenges, offers, stats, users

logger = logging.getLogger(__name__)

def _describe(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:]) or "request"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)

def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    events: EventPublisher | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.db.init_db()
        # best-effort: the service still runs without NATS
        try:
            await app.state.events.connect()
        except Exception:
            logger.warning("NATS unreachable at startup; events will be dropped", exc_info=True)
        if app.state.redis is not None and not await ping_redis(app.state.redis):
            logger.warning("redis unreachable at startup; rate limiting fails open")
        yield
        try:
            await app.state.events.close()
        except Exception:
            logger.warning("error while draining NATS", exc_info=True)
        if app.state.redis is not None:
            await app.state.redis.aclose()
        await app.state.db.dispose()

    app = FastAPI(title=settings.service_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database or Database(settings.database_url)
    app.state.events = events or EventPublisher(settings)
    app.state.redis = make_redis(settings) if settings.rl_enabled else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_argument(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _describe(exc)})

    async def storage_error(request: Request, exc: Exception):
        logger.error("storage error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # asyncpg connection failures are raised unwrapped, as OSError
    app.add_exception_handler(SQLAlchemyError, storage_error)
    app.add_exception_handler(OSError, storage_error)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(offers.router)
    app.include_router(challenges.router)
    app.include_router(users.router)
    app.include_router(stats.router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return f"{settings.service_name} OK"

    @app.get("/health")
    async def health():
        if await app.state.db.ping():
            return {"status": "ok", "service": settings.service_name, "database": "up"}
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "service": settings.service_name, "database": "down"},
        )

    if settings.metrics_enabled:
        Instrumentator().instrument(app).expose(app)
    return app

app = create_app()
