"""Type definitions shared across the OAuth2 flow."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, NamedTuple


# Decoded JSON object returned by a provider's user-data endpoint.
UserProfile = dict[str, Any]


class TransportResponse(NamedTuple):
    """Raw result of an HTTP round trip.

    Attributes
    ----------
    status : int
        HTTP status code.
    body : str
        Decoded response body.
    """

    status: int
    body: str


@dataclass(frozen=True)
class AuthAttempt:
    """A single authorization attempt.

    Attributes
    ----------
    state : str
        Unpredictable anti-forgery token round-tripped through the redirect.
    callback_url : str
        The redirect URI sent to the authorization endpoint.
    """

    state: str
    callback_url: str


class AccessToken(Mapping[str, Any]):
    """Immutable bag of parameters returned by a token endpoint.

    Every parameter the provider returned stays readable by key
    (``expires``, ``refresh_token``, ``stripe_user_id``...). Values are
    kept exactly as parsed.

    Parameters
    ----------
    parameters : Mapping[str, Any], optional
        Parsed token response.
    """

    __slots__ = ("_parameters",)

    def __init__(self, parameters: Mapping[str, Any] | None = None) -> None:
        """Initialize the access token."""
        self._parameters = MappingProxyType(dict(parameters or {}))

    def __getitem__(self, key: str) -> Any:
        return self._parameters[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def __repr__(self) -> str:
        keys = ", ".join(sorted(self._parameters))
        return f"AccessToken(keys=[{keys}])"

    def get_value(self, default: Any = None) -> Any:
        """Get the access token string.

        Parameters
        ----------
        default : Any, optional
            Returned when the response carried no ``access_token``.

        Returns
        -------
        Any
            The ``access_token`` parameter, or ``default``.
        """
        return self._parameters.get("access_token", default)

    @property
    def value(self) -> Any:
        """The access token string, or None."""
        return self.get_value()

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable copy of all parameters."""
        return dict(self._parameters)
