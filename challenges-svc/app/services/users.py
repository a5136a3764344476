from __future__ import annotations
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..models import User

async def upsert_user(db: AsyncSession, *, user_id: str, pseudo: str) -> User:
    # idempotent on user_id: a repeat call only refreshes the pseudo
    existing = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if existing:
        existing.pseudo = pseudo
        await db.commit()
        await db.refresh(existing)
        return existing

    obj = User(id=user_id, pseudo=pseudo)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        # lost an insert race with another request for the same id
        await db.rollback()
        obj = (await db.execute(select(User).where(User.id == user_id))).scalar_one()
        obj.pseudo = pseudo
        await db.commit()
    await db.refresh(obj)
    return obj
