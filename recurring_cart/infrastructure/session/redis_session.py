"""
Redis-backed session store.

Values are JSON serialized under ``<prefix>:<session id>:<key>``.
"""
import json
import logging
from typing import Any, Optional

import redis

from ...application.interfaces import SessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """Session store for one customer session, kept in Redis."""

    def __init__(
        self,
        client: redis.Redis,
        session_id: str,
        prefix: str = "cart_session",
        expire: Optional[int] = None,
    ):
        self._client = client
        self.session_id = session_id
        self.prefix = prefix
        self.expire = expire

    @classmethod
    def from_url(
        cls,
        url: str,
        session_id: str,
        prefix: str = "cart_session",
        expire: Optional[int] = None,
    ) -> 'RedisSessionStore':
        """Create a store with its own Redis client."""
        client = redis.from_url(url, encoding='utf-8', decode_responses=True)
        return cls(client, session_id, prefix=prefix, expire=expire)

    def _key(self, key: str) -> str:
        """Build session key with prefix."""
        return f"{self.prefix}:{self.session_id}:{key}"

    def get(self, key: str, default: Any = None) -> Any:
        value = self._client.get(self._key(key))
        if value is None:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Session value %s is not valid JSON", self._key(key))
            return value

    def set(self, key: str, value: Any) -> None:
        serialized = json.dumps(value, default=str)
        if self.expire is not None:
            self._client.setex(self._key(key), self.expire, serialized)
        else:
            self._client.set(self._key(key), serialized)

    def delete(self, key: str) -> None:
        self._client.delete(self._key(key))

    def clear(self) -> int:
        """Delete every value of this session."""
        keys = self._client.keys(self._key("*"))
        if keys:
            return self._client.delete(*keys)
        return 0
