"""
Database Module - Upstash Redis client

The cart snapshot is the only state this core persists itself; products,
orders and customers live in the hosted backend.
"""
from typing import Optional

from upstash_redis import Redis

from bakery.config import get_settings

_redis_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN.
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        if not settings.redis_url or not settings.redis_token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = Redis(url=settings.redis_url, token=settings.redis_token)

    return _redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    @staticmethod
    def cart_key(session_id: str) -> str:
        return f"{get_settings().cart_key_prefix}{session_id}"


class TTL:
    """Time-to-live values for Redis keys."""

    @staticmethod
    def cart() -> int:
        return get_settings().cart_ttl_seconds
