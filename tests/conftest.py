"""Pytest configuration and fixtures."""

# pylint: disable=redefined-outer-name

from __future__ import annotations

import os

from typing import TYPE_CHECKING, Any

import pytest

from socialite.config import clear_settings
from socialite.providers import ProviderConfig
from socialite.state import MemoryStateStore
from socialite.transport import HttpTransport
from socialite.types import TransportResponse


if TYPE_CHECKING:
    from collections.abc import Generator, Mapping


class SpyTransport(HttpTransport):
    """HttpTransport that records every call and replays queued responses.

    Each call is recorded as ``(method, url, headers, data)``. When the
    queue is empty an empty 200 response is returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, str], dict[str, Any] | None]] = []
        self.responses: list[TransportResponse] = []

    def queue(self, body: str, status: int = 200) -> None:
        """Queue a response for the next call."""
        self.responses.append(TransportResponse(status=status, body=body))

    def _next(self) -> TransportResponse:
        if self.responses:
            return self.responses.pop(0)
        return TransportResponse(status=200, body="")

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        self.calls.append(("GET", url, dict(headers or {}), None))
        return self._next()

    def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> TransportResponse:
        self.calls.append(("POST", url, dict(headers or {}), dict(data) if data is not None else None))
        return self._next()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Keep user config files and SOCIALITE_* variables out of every test."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    for key in list(os.environ):
        if key.startswith("SOCIALITE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings()
    yield
    clear_settings()


@pytest.fixture()
def transport() -> SpyTransport:
    """A recording transport with an empty response queue."""
    return SpyTransport()


@pytest.fixture()
def store() -> MemoryStateStore:
    """A fresh in-memory state store."""
    return MemoryStateStore()


@pytest.fixture()
def provider() -> ProviderConfig:
    """A provider with the default GET/form-encoded exchange."""
    return ProviderConfig(
        name="test",
        auth_endpoint="http://bar.com",
        token_endpoint="http://access.com",
        user_data_endpoint="http://user.com/me",
        client_id="client",
        client_secret="secret",
    )
