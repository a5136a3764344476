from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db
from ..schemas import RunRead, UserEnvelope, UserRead, UserUpsert
from ..services.challenges import list_user_runs
from ..services.users import upsert_user

router = APIRouter(prefix="/api/users", tags=["users"])

@router.post("", response_model=UserEnvelope)
async def create_or_update_user(payload: UserUpsert, db: AsyncSession = Depends(get_db)):
    user = await upsert_user(db, user_id=payload.user_id, pseudo=payload.pseudo)
    return UserEnvelope(user=UserRead.model_validate(user))

@router.get("/{user_id}/challenges", response_model=list[RunRead])
async def user_challenges(user_id: str, db: AsyncSession = Depends(get_db)):
    rows = await list_user_runs(db, user_id)
    return [RunRead.model_validate(r) for r in rows]
