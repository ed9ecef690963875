"""Tests for logging helpers and log output of the flow."""

# pylint: disable=redefined-outer-name

from __future__ import annotations

import dataclasses
import logging

import pytest

from socialite import log
from socialite.config import LogSettings
from socialite.exceptions import StateMismatchError
from socialite.flow import OAuth2Flow
from socialite.log import configure_logging, redact_sensitive_data, redact_url
from socialite.types import AccessToken


@pytest.fixture()
def restore_level():
    """Restore the socialite logger level after the test."""
    logger = log.get_logger()
    level = logger.level
    formatters = [h.formatter for h in logger.handlers]
    yield logger
    logger.setLevel(level)
    for handler, formatter in zip(logger.handlers, formatters):
        handler.setFormatter(formatter)


class TestRedaction:
    """Tests for redact_sensitive_data()."""

    def test_token_request_params(self) -> None:
        """Secrets and codes are redacted, identifiers kept."""
        params = {
            "client_id": "client",
            "client_secret": "secret",
            "redirect_uri": "http://current.com",
            "code": "blah",
            "grant_type": "authorization_code",
        }
        assert redact_sensitive_data(params) == {
            "client_id": "client",
            "client_secret": "[REDACTED]",
            "redirect_uri": "http://current.com",
            "code": "[REDACTED]",
            "grant_type": "authorization_code",
        }

    def test_nested(self) -> None:
        """Nested dicts and lists are traversed."""
        data = {"items": [{"access_token": "t", "id": 1}], "meta": {"State": "s"}}
        assert redact_sensitive_data(data) == {
            "items": [{"access_token": "[REDACTED]", "id": 1}],
            "meta": {"State": "[REDACTED]"},
        }

    def test_input_untouched(self) -> None:
        """The original data is not modified."""
        data = {"client_secret": "secret"}
        redact_sensitive_data(data)
        assert data == {"client_secret": "secret"}

    def test_max_depth(self) -> None:
        """Deep structures are cut off."""
        assert redact_sensitive_data({"a": {"b": {"c": 1}}}, max_depth=2) == {"a": {"b": "[MAX_DEPTH]"}}

    def test_access_token(self) -> None:
        """AccessToken mappings are redacted like dicts."""
        token = AccessToken({"access_token": "t", "expires": "100"})
        assert redact_sensitive_data(token) == {"access_token": "[REDACTED]", "expires": "100"}

    def test_scalars(self) -> None:
        """Scalars and None pass through."""
        assert redact_sensitive_data(None) is None
        assert redact_sensitive_data("plain") == "plain"


class TestLevels:
    """Tests for level helpers."""

    def test_logger_name(self) -> None:
        """The package logger is named socialite."""
        assert log.get_logger().name == "socialite"

    def test_set_level_string(self, restore_level) -> None:
        """Level names are accepted in any case."""
        log.set_level("info")
        assert restore_level.level == logging.INFO

    def test_enable_debug(self, restore_level) -> None:
        """enable_debug switches to DEBUG."""
        log.enable_debug()
        assert restore_level.level == logging.DEBUG

    def test_configure_logging(self, restore_level) -> None:
        """LogSettings sets level and format."""
        logger = configure_logging(LogSettings(level="ERROR", format="%(levelname)s:%(message)s"))
        assert logger.level == logging.ERROR
        for handler in logger.handlers:
            assert handler.formatter._fmt == "%(levelname)s:%(message)s"  # pylint: disable=protected-access

    def test_logging_goes_through_logger(self) -> None:
        """The module exposes the package logger, not per-level helpers."""
        for name in ("debug", "info", "warn", "error"):
            assert not hasattr(log, name)


class TestFlowLogging:
    """Tests for what the flow writes to the log."""

    def test_token_request_logged_without_secrets(self, provider, store, transport, caplog) -> None:
        """The debug record of the token request is redacted."""
        flow = OAuth2Flow(
            dataclasses.replace(provider, client_secret="s3cr3t-value"), store, transport
        )
        store.set_state("bar")
        transport.queue("access_token=token-value")

        with caplog.at_level(logging.DEBUG, logger="socialite.auth"):
            flow.complete_authorization({"state": "bar", "code": "c0de-value"}, "http://current.com")

        assert "Requesting access token" in caplog.text
        assert "s3cr3t-value" not in caplog.text
        assert "c0de-value" not in caplog.text
        assert "token-value" not in caplog.text

    def test_state_mismatch_warning(self, provider, store, transport, caplog) -> None:
        """A mismatch is logged as a warning without the state values."""
        flow = OAuth2Flow(provider, store, transport)
        store.set_state("expected-state")

        with caplog.at_level(logging.WARNING, logger="socialite.auth"), pytest.raises(StateMismatchError):
            flow.complete_authorization({"state": "forged-state", "code": "x"}, "http://current.com")

        assert "State mismatch" in caplog.text
        assert "expected-state" not in caplog.text
        assert "forged-state" not in caplog.text


class TestRedactUrl:
    """Tests for redact_url()."""

    def test_token_request_url(self) -> None:
        """Secret and code query values are masked, others kept."""
        url = (
            "http://access.com?client_id=client&client_secret=secret"
            "&redirect_uri=http%3A%2F%2Fcurrent.com&code=blah&grant_type=authorization_code"
        )
        assert redact_url(url) == (
            "http://access.com?client_id=client&client_secret=[REDACTED]"
            "&redirect_uri=http%3A%2F%2Fcurrent.com&code=[REDACTED]&grant_type=authorization_code"
        )

    def test_profile_url(self) -> None:
        """The access token in a profile URL is masked."""
        assert redact_url("https://graph.facebook.com/me?access_token=abc") == (
            "https://graph.facebook.com/me?access_token=[REDACTED]"
        )

    def test_no_query(self) -> None:
        """A URL without query only loses its fragment."""
        assert redact_url("https://api.github.com/user#x") == "https://api.github.com/user"
