from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case

from ..models import ChallengeRun

async def offer_stats(db: AsyncSession, offer_id: int) -> dict:
    row = (await db.execute(
        select(
            func.count(ChallengeRun.id),
            func.count(case((ChallengeRun.success == True, 1))),
            func.count(ChallengeRun.validated_at),
            func.count(case((ChallengeRun.suspected_fraud == True, 1))),
            func.min(ChallengeRun.started_at),
            func.max(ChallengeRun.started_at),
        ).where(ChallengeRun.offer_id == offer_id)
    )).one()
    total, successes, validations, suspected, first_at, last_at = row
    # no runs -> all zeros, null timestamps
    return {
        "offer_id": offer_id,
        "total_runs": int(total or 0),
        "successful_runs": int(successes or 0),
        "validated_runs": int(validations or 0),
        "suspected_runs": int(suspected or 0),
        "first_run_at": first_at,
        "last_run_at": last_at,
    }
