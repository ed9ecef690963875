"""CSRF state storage backends.

The flow writes one state value per authorization attempt and reads
it back on the callback. Use one store per user session.

Examples
--------
>>> from socialite.state import SessionStateStore
>>> store = SessionStateStore(request.session)
>>> store.set_state("abc")
>>> store.get_state()
'abc'
"""

from __future__ import annotations

from typing import Any

from .base import StateStore
from .memory import MemoryStateStore, SessionStateStore


def get_state_store(backend: str = "memory", **kwargs: Any) -> StateStore:
    """Factory function for state stores.

    Unlike a token cache, each call returns a new store: state is
    per session, so stores must never be shared between users.

    Parameters
    ----------
    backend : str
        Storage backend: "memory", "session", or "redis".
    **kwargs : Any
        Keyword arguments passed to the store constructor
        (``session``/``key`` for session; ``session_id``, ``redis_url``,
        ``prefix``, ``ttl`` for redis).

    Returns
    -------
    StateStore
        A configured state store instance.
    """
    if backend == "memory":
        return MemoryStateStore()
    if backend == "session":
        return SessionStateStore(kwargs["session"], key=kwargs.get("key", "socialite_state"))
    if backend == "redis":
        from .redis import RedisStateStore

        return RedisStateStore(
            session_id=kwargs["session_id"],
            redis_url=kwargs.get("redis_url", "redis://localhost:6379/0"),
            prefix=kwargs.get("prefix", "socialite"),
            ttl=kwargs.get("ttl", 600),
            redis_client=kwargs.get("redis_client"),
        )
    msg = f"Unknown state store backend: {backend}"
    raise ValueError(msg)


__all__ = [
    "MemoryStateStore",
    "SessionStateStore",
    "StateStore",
    "get_state_store",
]
