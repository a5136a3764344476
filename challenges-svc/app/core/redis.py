from __future__ import annotations
import logging
import redis.asyncio as redis
from redis.exceptions import RedisError

from .config import Settings

logger = logging.getLogger(__name__)

def make_redis(settings: Settings) -> redis.Redis:
    return redis.from_url(settings.redis_url, decode_responses=True)

async def ping_redis(r: redis.Redis) -> bool:
    try:
        return bool(await r.ping())
    except RedisError:
        return False

# ---- Simple fixed-window rate limit per IP/route ----
async def allow_request(r: redis.Redis, ip: str, route_key: str, *, window_seconds: int, max_reqs: int) -> bool:
    """
    Fixed window: increment a counter key; allow if <= max.
    Fails open when Redis is unreachable.
    """
    key = f"rl:{route_key}:{ip}"
    try:
        pipe = r.pipeline()
        pipe.incr(key)
        pipe.expire(key, window_seconds)
        count, _ = await pipe.execute()
    except RedisError as exc:
        logger.warning("rate limiter unavailable, allowing %s on %s: %s", ip, route_key, exc)
        return True
    return int(count) <= max_reqs
