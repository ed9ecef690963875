"""Redis state store implementation.

Keeps one state value per session ID with a TTL, for deployments
where the callback may land on a different worker than the one that
built the authorization URL.
"""

from __future__ import annotations

import logging

from redis import Redis
from redis.exceptions import RedisError

from ..exceptions import StorageError
from .base import StateStore


logger = logging.getLogger("socialite.state")


class RedisStateStore(StateStore):
    """Redis-backed state store keyed by session ID.

    Parameters
    ----------
    session_id : str
        Identifies the user session this store serves.
    redis_url : str
        Redis connection URL.
    prefix : str
        Key prefix for namespacing (default "socialite").
    ttl : int
        Seconds a pending state survives (default 600).
    redis_client : Redis, optional
        Pre-configured Redis client (for testing with fakeredis).
    """

    backend = "redis"

    def __init__(
        self,
        session_id: str,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "socialite",
        ttl: int = 600,
        *,
        redis_client: Redis | None = None,
    ) -> None:
        """Initialize the Redis state store."""
        if redis_client is None:
            redis_client = Redis.from_url(redis_url, decode_responses=True)
        self._redis = redis_client
        self._session_id = session_id
        self._prefix = prefix
        self._ttl = ttl

    @property
    def key(self) -> str:
        """The Redis key holding this session's state."""
        return f"{self._prefix}:oauth:state:{self._session_id}"

    def get_state(self) -> str | None:
        """Read the state from Redis."""
        try:
            value = self._redis.get(self.key)
        except RedisError as exc:
            msg = f"Failed to read state: {exc}"
            raise StorageError(msg, backend=self.backend, key=self.key) from exc
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set_state(self, state: str) -> None:
        """Write the state to Redis with the configured TTL."""
        try:
            self._redis.setex(self.key, self._ttl, state)
        except RedisError as exc:
            msg = f"Failed to write state: {exc}"
            raise StorageError(msg, backend=self.backend, key=self.key) from exc
        logger.debug("Stored state for session %s (ttl=%ss)", self._session_id, self._ttl)

    def clear_state(self) -> None:
        """Delete the state from Redis."""
        try:
            self._redis.delete(self.key)
        except RedisError as exc:
            msg = f"Failed to clear state: {exc}"
            raise StorageError(msg, backend=self.backend, key=self.key) from exc
