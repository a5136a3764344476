from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..models import Offer

async def fetch_active_offers(db: AsyncSession) -> list[Offer]:
    # id order gives the ranker a deterministic input sequence for ties
    rows = (await db.execute(
        select(Offer).where(Offer.active == True).order_by(Offer.id.asc())
    )).scalars().all()
    return list(rows)

async def list_active_offers(db: AsyncSession) -> list[Offer]:
    rows = (await db.execute(
        select(Offer).where(Offer.active == True).order_by(Offer.created_at.desc(), Offer.id.desc())
    )).scalars().all()
    return list(rows)
