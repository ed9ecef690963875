"""Abstract base class for CSRF state storage.

A StateStore holds the state value of one pending authorization
attempt. Concurrent users need one store instance (or key) each.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class StateStore(ABC):
    """Single-slot storage for the pending authorization state."""

    #: Backend name reported in StorageError context.
    backend: str = "base"

    @abstractmethod
    def get_state(self) -> str | None:
        """Get the stored state.

        Returns
        -------
        str or None
            The state value, or None if none has been set.

        Raises
        ------
        StorageError
            If the backing store cannot be read.
        """

    @abstractmethod
    def set_state(self, state: str) -> None:
        """Store the state, replacing any previous value.

        Parameters
        ----------
        state : str
            The opaque state value.

        Raises
        ------
        StorageError
            If the backing store rejects the write.
        """

    def clear_state(self) -> None:  # noqa: B027
        """Forget the stored state once it has been checked.

        Stores that cannot delete may leave this as a no-op.
        """
