from typing import Optional
from redis import Redis, ConnectionPool
from app.core.config import settings

# Redis-backed fixed-window rate limiter, shared across worker processes
_pool: Optional[ConnectionPool] = None
_client: Optional[Redis] = None


def get_client() -> Redis:
    global _pool, _client
    if _client is None:
        _pool = ConnectionPool.from_url(settings.REDIS_URL, decode_responses=True)
        _client = Redis(connection_pool=_pool)
    return _client


def allow(key: str, limit: int, window_seconds: int) -> bool:
    """Return True if action under key is allowed within window, else False.

    SET NX EX opens the window with its TTL on the first hit only, then INCR
    counts the request. INCR keeps the existing TTL.
    """
    r = get_client()
    with r.pipeline() as pipe:
        pipe.set(key, 0, ex=window_seconds, nx=True)
        pipe.incr(key, 1)
        _, count = pipe.execute()
    return int(count) <= limit


def allow_for_address(action: str, address: str, limit: int, window_seconds: int) -> bool:
    key = f"ratelimit:{action}:{address or 'unknown'}"
    return allow(key, limit, window_seconds)
