from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..core.errors import InvalidArgument, NotFound
from ..core.nats import EventPublisher
from ..core.qr import render_png
from ..deps import get_db, get_events, get_settings_dep, rate_limited
from ..models import ChallengeRun, utcnow
from ..schemas import ChallengeComplete, ChallengeValidate, RunEnvelope, RunRead
from ..services.challenges import get_run, record_completion, validate_code

router = APIRouter(prefix="/api/challenges", tags=["challenges"])

def _event(run: ChallengeRun) -> dict:
    return {
        "run_id": run.id,
        "offer_id": run.offer_id,
        "user_id": run.user_id,
        "suspected_fraud": run.suspected_fraud,
        "at": utcnow().isoformat().replace("+00:00", "Z"),
    }

# --- 1) User reports a finished attempt (start + completion together)
@router.post("/complete", response_model=RunEnvelope, status_code=201)
async def complete_challenge(
    payload: ChallengeComplete,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    events: EventPublisher = Depends(get_events),
):
    try:
        run = await record_completion(
            db,
            offer_id=payload.offer_id,
            user_id=payload.user_id,
            started_at=payload.started_at,
            completed_at=payload.completed_at,
            success=payload.success,
            distance_meters=payload.distance_meters,
            qr_code=payload.qr_code,
            code_bytes=settings.qr_code_bytes,
        )
    except InvalidArgument as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    await events.publish(events.subject_reported, _event(run))
    return RunEnvelope(run=RunRead.model_validate(run))

# --- 2) Merchant scans the redemption code
@router.post(
    "/validate",
    response_model=RunEnvelope,
    dependencies=[Depends(rate_limited("challenges.validate"))],
)
async def validate_challenge(
    payload: ChallengeValidate,
    db: AsyncSession = Depends(get_db),
    events: EventPublisher = Depends(get_events),
):
    try:
        run = await validate_code(db, payload.qr_code)
    except NotFound:
        # unknown, already validated, or not a successful run: caller is not told which
        raise HTTPException(status_code=404, detail="No unvalidated successful run for this code")

    await events.publish(events.subject_validated, _event(run))
    return RunEnvelope(run=RunRead.model_validate(run))

# --- 3) Redemption code as a scannable PNG
@router.get("/{run_id}/qr.png")
async def run_qr_png(run_id: int, db: AsyncSession = Depends(get_db)):
    try:
        run = await get_run(db, run_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Run not found")
    if not run.qr_code:
        raise HTTPException(status_code=404, detail="Run has no redemption code")
    return Response(content=render_png(run.qr_code), media_type="image/png")
