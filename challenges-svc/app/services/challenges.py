from __future__ import annotations
import logging
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from ..core import fraud
from ..core.errors import InvalidArgument, NotFound
from ..core.qr import new_redemption_code
from ..models import ChallengeRun, utcnow

logger = logging.getLogger(__name__)

async def record_completion(
    db: AsyncSession,
    *,
    offer_id: int,
    user_id: str | None,
    started_at: datetime,
    completed_at: datetime | None = None,
    success: bool = False,
    distance_meters: float | None = None,
    qr_code: str | None = None,
    code_bytes: int = 12,
) -> ChallengeRun:
    """
    Persist a reported attempt. The fraud verdict is computed here, once, and
    stored with the run. Only successful runs carry a redemption code.
    """
    verdict = fraud.evaluate(
        started_at=started_at,
        completed_at=completed_at,
        distance_meters=distance_meters,
        success=success,
    )
    code = (qr_code or new_redemption_code(code_bytes)) if success else None

    run = ChallengeRun(
        offer_id=offer_id,
        user_id=user_id,
        started_at=started_at,
        completed_at=completed_at,
        success=success,
        distance_meters=distance_meters,
        qr_code=code,
        suspected_fraud=verdict.suspected,
        fraud_reason=verdict.reason,
    )
    db.add(run)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise InvalidArgument("unknown offerId or qrCode already in use") from exc
    await db.refresh(run)

    if verdict.suspected:
        logger.info("run %s on offer %s flagged: %s", run.id, offer_id, verdict.reason)
    return run

async def validate_code(db: AsyncSession, code: str, *, now: datetime | None = None) -> ChallengeRun:
    """
    Consume a redemption code: Reported -> Validated.

    A single conditional UPDATE decides the winner; concurrent scans of the
    same code see zero affected rows and get NotFound, as do unknown codes,
    already-validated codes and codes of failed runs.
    """
    stmt = (
        update(ChallengeRun)
        .where(
            ChallengeRun.qr_code == code,
            ChallengeRun.success == True,
            ChallengeRun.validated_at.is_(None),
        )
        .values(validated_at=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    if res.rowcount != 1:
        await db.rollback()
        raise NotFound("no unvalidated successful run for this code")
    await db.commit()

    return (await db.execute(select(ChallengeRun).where(ChallengeRun.qr_code == code))).scalar_one()

async def get_run(db: AsyncSession, run_id: int) -> ChallengeRun:
    run = (await db.execute(select(ChallengeRun).where(ChallengeRun.id == run_id))).scalar_one_or_none()
    if run is None:
        raise NotFound(f"run {run_id} not found")
    return run

async def list_user_runs(db: AsyncSession, user_id: str) -> list[ChallengeRun]:
    rows = (await db.execute(
        select(ChallengeRun).where(ChallengeRun.user_id == user_id)
        .order_by(ChallengeRun.created_at.desc(), ChallengeRun.id.desc())
    )).scalars().all()
    return list(rows)
