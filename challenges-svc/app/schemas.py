from __future__ import annotations
from datetime import datetime, timezone
from typing import Annotated, Literal
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Pseudo64 = Annotated[str, Field(min_length=1, max_length=64)]
Code128  = Annotated[str, Field(min_length=1, max_length=128)]
Meters   = Annotated[float, Field(ge=0, allow_inf_nan=False)]

class CamelModel(BaseModel):
    # JSON bodies use camelCase (offerId, startedAt, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

def _as_utc(v: datetime | None) -> datetime | None:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v

# naive values (input without offset, SQLite reads) are UTC
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

# --- offers
class OfferRead(CamelModel):
    id: int
    title: str
    description: str | None = None
    category: str | None = None
    latitude: float
    longitude: float
    duration_limit_seconds: int | None = None
    reward: str | None = None
    city: str | None = None
    created_at: UtcDatetime | None = None
    active: bool

class NearbyOfferRead(OfferRead):
    distance_meters: int

class NearbyOffersResponse(CamelModel):
    count: int
    offers: list[NearbyOfferRead]

# --- challenge runs
class ChallengeComplete(CamelModel):
    offer_id: int
    user_id: str | None = None  # absent = anonymous run
    started_at: UtcDatetime
    completed_at: UtcDatetime | None = None
    success: bool = False
    distance_meters: Meters | None = None
    qr_code: Code128 | None = None

class ChallengeValidate(CamelModel):
    qr_code: Code128

class RunRead(CamelModel):
    id: int
    offer_id: int
    user_id: str | None = None
    started_at: UtcDatetime
    completed_at: UtcDatetime | None = None
    success: bool
    distance_meters: float | None = None
    qr_code: str | None = None
    suspected_fraud: bool
    fraud_reason: str | None = None
    validated_at: UtcDatetime | None = None
    created_at: UtcDatetime | None = None

class RunEnvelope(CamelModel):
    status: Literal["ok"] = "ok"
    run: RunRead

# --- users
class UserUpsert(CamelModel):
    user_id: Code128
    pseudo: Pseudo64

class UserRead(CamelModel):
    id: str
    pseudo: str
    created_at: UtcDatetime | None = None
    updated_at: UtcDatetime | None = None

class UserEnvelope(CamelModel):
    status: Literal["ok"] = "ok"
    user: UserRead

# --- stats
class OfferStatsRead(CamelModel):
    offer_id: int
    total_runs: int = 0
    successful_runs: int = 0
    validated_runs: int = 0
    suspected_runs: int = 0
    first_run_at: UtcDatetime | None = None
    last_run_at: UtcDatetime | None = None
