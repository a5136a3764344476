from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db
from ..schemas import OfferStatsRead
from ..services.stats import offer_stats

router = APIRouter(prefix="/api/stats", tags=["stats"])

# non-numeric offer_id fails path validation -> 400 via the app's handler
@router.get("/offers/{offer_id}", response_model=OfferStatsRead)
async def stats_for_offer(offer_id: int, db: AsyncSession = Depends(get_db)):
    return OfferStatsRead(**await offer_stats(db, offer_id))
