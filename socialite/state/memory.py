"""In-process state store implementations."""

from __future__ import annotations

import threading

from typing import TYPE_CHECKING, Any

from ..exceptions import StorageError
from .base import StateStore


if TYPE_CHECKING:
    from collections.abc import MutableMapping


class MemoryStateStore(StateStore):
    """In-memory single-slot store for scripts and single-user processes.

    Thread-safe via threading.Lock.
    """

    backend = "memory"

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._state: str | None = None
        self._lock = threading.Lock()

    def get_state(self) -> str | None:
        """Get the state from memory."""
        with self._lock:
            return self._state

    def set_state(self, state: str) -> None:
        """Store the state in memory."""
        with self._lock:
            self._state = state

    def clear_state(self) -> None:
        """Drop the stored state."""
        with self._lock:
            self._state = None


class SessionStateStore(StateStore):
    """State store backed by a per-user session mapping.

    Wraps any mutable mapping a web framework exposes as the user's
    session, so each user gets their own slot.

    Parameters
    ----------
    session : MutableMapping[str, Any]
        The session object.
    key : str
        Session key holding the state (default ``"socialite_state"``).
    """

    backend = "session"

    def __init__(self, session: MutableMapping[str, Any], key: str = "socialite_state") -> None:
        """Initialize the session-backed store."""
        self._session = session
        self._key = key

    def get_state(self) -> str | None:
        """Read the state from the session."""
        try:
            value = self._session.get(self._key)
        except Exception as exc:
            msg = f"Failed to read state from session: {exc}"
            raise StorageError(msg, backend=self.backend, key=self._key) from exc
        return None if value is None else str(value)

    def set_state(self, state: str) -> None:
        """Write the state to the session."""
        try:
            self._session[self._key] = state
        except Exception as exc:
            msg = f"Failed to write state to session: {exc}"
            raise StorageError(msg, backend=self.backend, key=self._key) from exc

    def clear_state(self) -> None:
        """Remove the state from the session."""
        try:
            self._session.pop(self._key, None)
        except Exception as exc:
            msg = f"Failed to clear state from session: {exc}"
            raise StorageError(msg, backend=self.backend, key=self._key) from exc
