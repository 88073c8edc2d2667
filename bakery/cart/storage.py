"""Cart snapshot storage: the whole cart is read and written as one blob."""
import json
from typing import List, Optional, Protocol

from pydantic import ValidationError

from bakery.db import RedisKeys, TTL, get_redis
from bakery.logging import get_logger, sanitize_id_for_logging
from .models import CartLineItem

logger = get_logger(__name__)


class SnapshotStorage(Protocol):
    def load_snapshot(self) -> List[CartLineItem]:
        ...

    def save_snapshot(self, items: List[CartLineItem]) -> None:
        ...


def dump_snapshot(items: List[CartLineItem]) -> str:
    return json.dumps([item.to_dict() for item in items])


def parse_snapshot(data: Optional[str]) -> List[CartLineItem]:
    """Decode a stored blob; raises ValueError when it is corrupted."""
    if not data:
        return []
    try:
        raw = json.loads(data)
        if not isinstance(raw, list):
            raise TypeError("cart snapshot must be a list")
        return [CartLineItem.from_dict(entry) for entry in raw]
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ValueError(f"Corrupted cart snapshot: {e}") from e


class MemorySnapshotStorage:
    """Keeps the serialized cart in memory, like browser local storage."""

    def __init__(self, data: Optional[str] = None):
        self.data = data

    def load_snapshot(self) -> List[CartLineItem]:
        try:
            return parse_snapshot(self.data)
        except ValueError as e:
            logger.warning(f"{e}; starting with an empty cart")
            self.data = None
            return []

    def save_snapshot(self, items: List[CartLineItem]) -> None:
        self.data = dump_snapshot(items) if items else None


class RedisSnapshotStorage:
    """Cart snapshot in Upstash Redis, one key per shopper session with a TTL."""

    def __init__(self, session_id: str, redis=None):
        self.session_id = session_id
        self._redis = redis

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    @property
    def key(self) -> str:
        return RedisKeys.cart_key(self.session_id)

    def load_snapshot(self) -> List[CartLineItem]:
        data = self.redis.get(self.key)
        try:
            return parse_snapshot(data)
        except ValueError as e:
            logger.warning(f"{e} (session {sanitize_id_for_logging(self.session_id)}); clearing it")
            self.redis.delete(self.key)
            return []

    def save_snapshot(self, items: List[CartLineItem]) -> None:
        if not items:
            self.redis.delete(self.key)
            return
        self.redis.set(self.key, dump_snapshot(items), ex=TTL.cart())
