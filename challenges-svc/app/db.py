from __future__ import annotations
from typing import AsyncGenerator
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .models import Base

def _sqlite_on_connect(dbapi_conn, _record):
    # driver must not emit its own BEGIN; see _sqlite_on_begin
    dbapi_conn.isolation_level = None
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()

def _sqlite_on_begin(conn):
    # take the write lock up front so concurrent conditional updates queue
    # on the busy timeout instead of failing with "database is locked"
    conn.exec_driver_sql("BEGIN IMMEDIATE")

class Database:
    """Storage-access handle: one engine (connection pool) plus its session factory."""

    def __init__(self, url: str, *, echo: bool = False, engine: AsyncEngine | None = None):
        self.engine = engine or create_async_engine(url, echo=echo, future=True)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _sqlite_on_connect)
            event.listen(self.engine.sync_engine, "begin", _sqlite_on_begin)
        self.session_maker = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    async def init_db(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_maker() as session:
            yield session
