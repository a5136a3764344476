from __future__ import annotations
import logging
import math
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..deps import get_db, get_settings_dep
from ..schemas import NearbyOffersResponse, NearbyOfferRead, OfferRead
from ..services.offers import fetch_active_offers, list_active_offers
from ..services.ranking import rank_offers

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/offers", tags=["offers"])

@router.get("", response_model=list[OfferRead])
async def list_offers(db: AsyncSession = Depends(get_db)):
    rows = await list_active_offers(db)
    return [OfferRead.model_validate(o) for o in rows]

@router.get("/nearby", response_model=NearbyOffersResponse)
async def nearby_offers(
    lat: float | None = Query(default=None),
    lng: float | None = Query(default=None),
    radius: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="lat and lng query parameters are required")
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise HTTPException(status_code=400, detail="lat and lng must be finite numbers")
    radius_m = radius if radius is not None else settings.default_radius_meters

    try:
        offers = await fetch_active_offers(db)
    except (SQLAlchemyError, OSError):
        # driver-level outages (e.g. asyncpg connection refused) surface as OSError
        # availability over correctness: an empty list instead of a 500
        logger.exception("failed to fetch offers for nearby search")
        offers = []

    ranked = rank_offers(lat, lng, offers, radius_m, enforce_radius=settings.enforce_radius)
    items = [
        NearbyOfferRead(**OfferRead.model_validate(r.offer).model_dump(), distance_meters=r.distance_meters)
        for r in ranked
    ]
    return NearbyOffersResponse(count=len(items), offers=items)
