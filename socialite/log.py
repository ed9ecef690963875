"""Logging utilities for Socialite.

Module loggers live under the ``socialite`` namespace (``socialite.auth``,
``socialite.state``, ``socialite.transport``). This module owns the
package logger's handler and the redaction helpers that keep client
secrets, codes, tokens and state values out of log output.
"""

from __future__ import annotations

import logging
import sys

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


if TYPE_CHECKING:
    from .config import LogSettings


LOGGER_NAME = "socialite"
DEFAULT_FORMAT = "%(name)s - %(levelname)s - %(message)s"
REDACTED = "[REDACTED]"

# Substrings of parameter names whose values never reach the log.
_SENSITIVE_KEYS = frozenset(
    {
        "secret",
        "password",
        "token",
        "code",
        "state",
        "auth",
        "credential",
        "key",
    }
)


class _LoggerHolder:
    """Holder for the package logger once its handler is attached."""

    instance: logging.Logger | None = None


def get_logger() -> logging.Logger:
    """Get the socialite package logger.

    The first call attaches a stderr handler (unless the application
    already configured one) and sets the level to WARNING.

    Returns
    -------
    logging.Logger
        The ``socialite`` logger.
    """
    if _LoggerHolder.instance is None:
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.WARNING)
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            logger.addHandler(handler)
        _LoggerHolder.instance = logger
    return _LoggerHolder.instance


def set_level(level: int | str) -> None:
    """Set the package log level.

    Parameters
    ----------
    level : int or str
        A ``logging`` constant or a level name in any case.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    get_logger().setLevel(level)


def enable_debug() -> None:
    """Log every authorization URL, token request and state store write.

    Request parameters are redacted before they are logged.
    """
    set_level(logging.DEBUG)


def configure_logging(settings: LogSettings) -> logging.Logger:
    """Apply level and format from LogSettings to the package logger.

    Parameters
    ----------
    settings : LogSettings
        The logging section of the loaded configuration.

    Returns
    -------
    logging.Logger
        The configured logger.
    """
    logger = get_logger()
    logger.setLevel(settings.level)
    formatter = logging.Formatter(settings.format)
    for handler in logger.handlers:
        handler.setFormatter(formatter)
    return logger


def _is_sensitive(key: Any) -> bool:
    name = str(key).lower()
    return any(fragment in name for fragment in _SENSITIVE_KEYS)


def redact_sensitive_data(data: Any, max_depth: int = 5) -> Any:
    """Redact sensitive values from data for safe logging.

    Mappings (including AccessToken), lists and tuples are copied
    recursively; values under sensitive-looking keys are replaced with
    ``"[REDACTED]"``. Other values are returned as they are.

    Parameters
    ----------
    data : Any
        The data to redact.
    max_depth : int, optional
        Nesting depth after which ``"[MAX_DEPTH]"`` is returned (default 5).

    Returns
    -------
    Any
        A redacted copy of ``data``.
    """
    if max_depth <= 0:
        return "[MAX_DEPTH]"
    if isinstance(data, Mapping):
        return {
            k: REDACTED if _is_sensitive(k) else redact_sensitive_data(v, max_depth - 1)
            for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_sensitive_data(item, max_depth - 1) for item in data]
    return data


def redact_url(url: str) -> str:
    """Mask sensitive query parameters in a URL.

    Parameters
    ----------
    url : str
        An absolute URL, possibly carrying secrets in its query string.

    Returns
    -------
    str
        The URL with sensitive query values replaced and any fragment dropped.
    """
    parts = urlsplit(url)
    if not parts.query:
        return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    pairs = [
        (k, REDACTED if _is_sensitive(k) else v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
    ]
    query = urlencode(pairs, safe="[]")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))
