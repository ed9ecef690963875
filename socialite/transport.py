"""HTTP transport abstraction.

The flow talks to providers only through HttpTransport. HttpxTransport
is the shipped implementation; tests and integrators may supply any
object with the same two methods.
"""

# pylint: disable=logging-too-many-args

from __future__ import annotations

import logging

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit, urlunsplit

import httpx

from .exceptions import TransportError
from .log import redact_url
from .types import TransportResponse


if TYPE_CHECKING:
    from collections.abc import Mapping


logger = logging.getLogger("socialite.transport")


def _strip_query(url: str) -> str:
    """Drop query and fragment so secrets never reach logs or errors."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class HttpTransport(ABC):
    """Abstract HTTP client used for token exchange and profile lookup.

    Implementations return every HTTP status as a TransportResponse and
    raise TransportError only when no response was obtained.
    """

    @abstractmethod
    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Issue a GET request.

        Parameters
        ----------
        url : str
            Absolute URL including any query string.
        headers : Mapping[str, str], optional
            Extra request headers.

        Returns
        -------
        TransportResponse
            Status code and decoded body.
        """

    @abstractmethod
    def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> TransportResponse:
        """Issue a POST request with a form-encoded body.

        Parameters
        ----------
        url : str
            Absolute URL.
        headers : Mapping[str, str], optional
            Extra request headers.
        data : Mapping[str, Any], optional
            Form fields sent as ``application/x-www-form-urlencoded``.

        Returns
        -------
        TransportResponse
            Status code and decoded body.
        """


class HttpxTransport(HttpTransport):
    """HttpTransport backed by a synchronous ``httpx.Client``.

    Parameters
    ----------
    timeout : float
        Connect/read timeout in seconds (default 30).
    headers : Mapping[str, str], optional
        Headers sent with every request (e.g. User-Agent).
    client : httpx.Client, optional
        Pre-configured client (for testing with ``httpx.MockTransport``).
        A client passed in is not closed by ``close()``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the httpx transport."""
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, headers=dict(headers or {}))

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client and not self._client.is_closed:
            self._client.close()

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Issue a GET request through httpx."""
        return self._send("GET", url, headers=headers)

    def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> TransportResponse:
        """Issue a form POST request through httpx."""
        return self._send("POST", url, headers=headers, data=data)

    def _send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> TransportResponse:
        safe_url = _strip_query(url)
        try:
            resp = self._client.request(
                method,
                url,
                headers=dict(headers) if headers else None,
                data=dict(data) if data is not None else None,
            )
        except httpx.TimeoutException as exc:
            msg = f"{method} request timed out"
            raise TransportError(msg, url=safe_url) from exc
        except httpx.HTTPError as exc:
            msg = f"{method} request failed: {exc}"
            raise TransportError(msg, url=safe_url) from exc

        logger.debug("%s %s -> %s", method, redact_url(url), resp.status_code)
        return TransportResponse(status=resp.status_code, body=resp.text)
