"""Tests for the httpx-backed transport.

Uses httpx.MockTransport so no network access is needed.
"""

from __future__ import annotations

import logging

import httpx
import pytest

from socialite.exceptions import TransportError
from socialite.transport import HttpxTransport


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHttpxTransport:
    """Tests for HttpxTransport request handling."""

    def test_get(self) -> None:
        """GET keeps the query string and returns status and body."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="access_token=t")

        transport = HttpxTransport(client=_client(handler))
        response = transport.get("http://access.com/token?code=blah&client_id=c")

        assert response.status == 200
        assert response.body == "access_token=t"
        assert seen[0].method == "GET"
        assert seen[0].url.host == "access.com"
        assert seen[0].url.params["code"] == "blah"

    def test_post_form_body_and_headers(self) -> None:
        """POST sends a form-encoded body with the given headers."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "t"})

        transport = HttpxTransport(client=_client(handler))
        response = transport.post(
            "https://connect.stripe.com/oauth/token",
            headers={"Authorization": "Bearer sk_test"},
            data={"code": "ac_1", "grant_type": "authorization_code"},
        )

        request = seen[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer sk_test"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.content == b"code=ac_1&grant_type=authorization_code"
        assert '"access_token"' in response.body

    def test_error_status_is_returned(self) -> None:
        """Non-2xx statuses are responses, not errors."""
        transport = HttpxTransport(
            client=_client(lambda request: httpx.Response(400, text="error=bad_verification_code"))
        )
        response = transport.get("http://access.com/token")
        assert response.status == 400
        assert response.body == "error=bad_verification_code"

    def test_timeout(self) -> None:
        """Timeouts raise TransportError without the query string."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        transport = HttpxTransport(client=_client(handler))
        with pytest.raises(TransportError) as exc_info:
            transport.get("http://access.com/token?client_secret=hunter2")

        assert exc_info.value.url == "http://access.com/token"
        assert "hunter2" not in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    def test_connection_error(self) -> None:
        """Connection failures raise TransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpxTransport(client=_client(handler))
        with pytest.raises(TransportError, match="connection refused"):
            transport.post("http://access.com/token", data={"code": "x"})


class TestHttpxTransportLifecycle:
    """Tests for client ownership and closing."""

    def test_owned_client_closed(self) -> None:
        """A transport closes the client it created."""
        with HttpxTransport(timeout=5.0, headers={"User-Agent": "socialite-test"}) as transport:
            client = transport._client  # pylint: disable=protected-access
            assert client.headers["User-Agent"] == "socialite-test"
            assert client.timeout.read == 5.0
        assert client.is_closed

    def test_injected_client_left_open(self) -> None:
        """A client passed in is the caller's to close."""
        client = _client(lambda request: httpx.Response(204))
        HttpxTransport(client=client).close()
        assert not client.is_closed
        client.close()


class TestHttpxTransportLogging:
    """Tests for transport debug logging."""

    def test_debug_log_redacts_query(self, caplog) -> None:
        """Logged URLs never carry secret query values."""
        transport = HttpxTransport(client=_client(lambda request: httpx.Response(200, text="ok")))

        with caplog.at_level(logging.DEBUG, logger="socialite.transport"):
            transport.get("http://access.com/token?client_id=c&client_secret=hunter2")

        assert "client_id=c" in caplog.text
        assert "hunter2" not in caplog.text
        assert "-> 200" in caplog.text
