"""Socialite exception hierarchy.

All Socialite-specific exceptions inherit from SocialiteException, enabling
catch-all handling while supporting specific error types.
"""

from __future__ import annotations

from typing import Any


# Maximum number of body characters kept in ResponseParseError context.
_BODY_PREVIEW_CHARS = 200


class SocialiteException(Exception):
    """Base exception for all Socialite errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize Socialite exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (provider, url, backend, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ConfigurationError(SocialiteException):
    """Invalid provider descriptor or settings.

    Raised when a provider is built with missing or relative endpoint
    URLs, or when settings name an unknown provider.
    """


class StorageError(SocialiteException):
    """State store read or write failed.

    Raised by StateStore implementations when the backing store
    rejects an operation.
    """

    def __init__(self, message: str, backend: str | None = None, **context: Any) -> None:
        """Initialize storage error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        backend : str, optional
            The storage backend name (e.g., "memory", "redis").
        **context : Any
            Additional context.
        """
        super().__init__(message, backend=backend, **context)
        self.backend = backend


class AuthenticationError(SocialiteException):
    """Base exception for all OAuth2 flow failures."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize authentication error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        provider : str, optional
            The OAuth2 provider name (e.g., "google", "github").
        **context : Any
            Additional context.
        """
        super().__init__(message, provider=provider, **context)
        self.provider = provider


class StateMismatchError(AuthenticationError):
    """Callback state does not match the stored state.

    Raised before any token exchange takes place. The flow must be
    restarted with a fresh authorization URL.
    """


class TransportError(AuthenticationError):
    """HTTP interaction with the provider failed.

    Raised on connection errors, timeouts, and other transport-level
    failures. Never retried by the flow.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        provider: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize transport error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        url : str, optional
            The URL being requested, without its query string.
        provider : str, optional
            The OAuth2 provider name.
        **context : Any
            Additional context.
        """
        super().__init__(message, provider=provider, url=url, **context)
        self.url = url


class ResponseParseError(AuthenticationError):
    """Provider response body has an unexpected shape.

    Raised when a token or user-data response cannot be decoded as
    form-encoded parameters or as a JSON object.
    """

    def __init__(
        self,
        message: str,
        body: str | None = None,
        provider: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize parse error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        body : str, optional
            The offending response body (truncated in context).
        provider : str, optional
            The OAuth2 provider name.
        **context : Any
            Additional context.
        """
        preview = body[:_BODY_PREVIEW_CHARS] if body is not None else None
        super().__init__(message, provider=provider, body=preview, **context)
        self.body = body


class ProviderError(AuthenticationError):
    """Provider answered the token request with an OAuth2 error payload."""

    def __init__(
        self,
        message: str,
        error: str | None = None,
        provider: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize provider error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        error : str, optional
            The OAuth2 ``error`` code (e.g., "bad_verification_code").
        provider : str, optional
            The OAuth2 provider name.
        **context : Any
            Additional context.
        """
        super().__init__(message, provider=provider, error=error, **context)
        self.error = error


class UnsupportedOperationError(AuthenticationError):
    """Operation not offered by the provider.

    Raised, for example, when fetching a user profile from a provider
    that has no user-data endpoint.
    """
