"""Socialite - OAuth2 authorization code flow for any provider.

Build authorization URLs, verify the callback state, exchange the code
for an access token and fetch the user's profile, with provider
differences expressed as configuration.
"""

from __future__ import annotations

from .config import SocialiteSettings, create_flow_from_settings, get_settings
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ProviderError,
    ResponseParseError,
    SocialiteException,
    StateMismatchError,
    StorageError,
    TransportError,
    UnsupportedOperationError,
)
from .flow import OAuth2Flow, request_base_url
from .providers import (
    PROVIDER_PRESETS,
    ProviderConfig,
    create_provider_from_settings,
    facebook,
    get_provider,
    github,
    google,
    stripe,
)
from .state import MemoryStateStore, SessionStateStore, StateStore, get_state_store
from .transport import HttpTransport, HttpxTransport
from .types import AccessToken, AuthAttempt, TransportResponse, UserProfile


__version__ = "0.3.0"

__all__ = [
    "PROVIDER_PRESETS",
    "AccessToken",
    "AuthAttempt",
    "AuthenticationError",
    "ConfigurationError",
    "HttpTransport",
    "HttpxTransport",
    "MemoryStateStore",
    "OAuth2Flow",
    "ProviderConfig",
    "ProviderError",
    "ResponseParseError",
    "SessionStateStore",
    "SocialiteException",
    "SocialiteSettings",
    "StateMismatchError",
    "StateStore",
    "StorageError",
    "TransportError",
    "TransportResponse",
    "UnsupportedOperationError",
    "UserProfile",
    "__version__",
    "create_flow_from_settings",
    "create_provider_from_settings",
    "facebook",
    "get_provider",
    "get_settings",
    "get_state_store",
    "github",
    "google",
    "request_base_url",
    "stripe",
]
