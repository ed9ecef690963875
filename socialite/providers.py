"""OAuth2 provider descriptors.

A ProviderConfig is pure configuration: endpoint URLs, scopes and a
handful of hooks that select how the token request is sent and how
its response is read. Presets cover Facebook, Google, GitHub and
Stripe Connect; anything else is a custom descriptor.
"""

from __future__ import annotations

import dataclasses

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from .exceptions import ConfigurationError
from .exchange import (
    create_access_token,
    create_checked_access_token,
    execute_bearer_post,
    execute_post_body,
    execute_query_get,
    no_grant_options,
    parse_form_response,
    parse_json_response,
)
from .types import AccessToken, TransportResponse


if TYPE_CHECKING:
    from .config import OAuth2Settings
    from .transport import HttpTransport


RequestExecutor = Callable[["ProviderConfig", "HttpTransport", Mapping[str, Any]], TransportResponse]
ResponseParser = Callable[[str], dict[str, Any]]
TokenFactory = Callable[[Mapping[str, Any]], AccessToken]
GrantOptionsBuilder = Callable[[str, Mapping[str, Any]], dict[str, Any]]

#: Token request shapes selectable from settings.
REQUEST_EXECUTORS: dict[str, RequestExecutor] = {
    "get": execute_query_get,
    "post": execute_post_body,
    "bearer": execute_bearer_post,
}

#: Token response formats selectable from settings.
RESPONSE_PARSERS: dict[str, ResponseParser] = {
    "form": parse_form_response,
    "json": parse_json_response,
}


def _is_absolute_url(url: str) -> bool:
    parts = urlsplit(url)
    return bool(parts.scheme and parts.netloc)


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoints, credentials and hooks for one OAuth2 provider.

    Parameters
    ----------
    name : str
        Provider identifier used in logs and errors.
    auth_endpoint : str
        Authorization endpoint (absolute URL).
    token_endpoint : str
        Token endpoint (absolute URL).
    user_data_endpoint : str
        Profile endpoint, or empty when the provider has none.
    client_id : str
        The OAuth2 client ID.
    client_secret : str
        The OAuth2 client secret.
    scope_delimiter : str
        Separator used when formatting scopes (default ``","``).
    default_scopes : tuple[str, ...]
        Scopes requested when the flow has no explicit scope list.
    execute_token_request : RequestExecutor
        Sends the token request (default: GET with a query string).
    parse_token_response : ResponseParser
        Decodes the token response body (default: form-encoded).
    create_token : TokenFactory
        Builds the AccessToken from parsed parameters.
    grant_options : GrantOptionsBuilder
        Extra token-request parameters for a grant type.
    verify_state : bool
        Whether the callback state is checked (default ``True``).
    """

    name: str
    auth_endpoint: str
    token_endpoint: str
    user_data_endpoint: str = ""
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    scope_delimiter: str = ","
    default_scopes: tuple[str, ...] = ()
    execute_token_request: RequestExecutor = field(default=execute_query_get, repr=False)
    parse_token_response: ResponseParser = field(default=parse_form_response, repr=False)
    create_token: TokenFactory = field(default=create_access_token, repr=False)
    grant_options: GrantOptionsBuilder = field(default=no_grant_options, repr=False)
    verify_state: bool = True

    def __post_init__(self) -> None:
        """Validate endpoints and normalize scopes."""
        for attr in ("auth_endpoint", "token_endpoint"):
            url = getattr(self, attr)
            if not url or not _is_absolute_url(url):
                msg = f"{attr} must be a non-empty absolute URL"
                raise ConfigurationError(msg, provider=self.name, value=url)
        if self.user_data_endpoint and not _is_absolute_url(self.user_data_endpoint):
            msg = "user_data_endpoint must be empty or an absolute URL"
            raise ConfigurationError(msg, provider=self.name, value=self.user_data_endpoint)
        object.__setattr__(self, "default_scopes", tuple(self.default_scopes))

    @property
    def supports_user_data(self) -> bool:
        """Whether the provider offers a profile lookup."""
        return bool(self.user_data_endpoint)

    def with_credentials(self, client_id: str, client_secret: str) -> ProviderConfig:
        """Return a copy carrying the given client credentials."""
        return dataclasses.replace(self, client_id=client_id, client_secret=client_secret)


# ── Presets ─────────────────────────────────────────────────────────


def facebook(client_id: str = "", client_secret: str = "") -> ProviderConfig:
    """Facebook Login (token request via GET, form-encoded response)."""
    return ProviderConfig(
        name="facebook",
        auth_endpoint="https://www.facebook.com/dialog/oauth",
        token_endpoint="https://graph.facebook.com/oauth/access_token",
        user_data_endpoint="https://graph.facebook.com/me",
        client_id=client_id,
        client_secret=client_secret,
    )


def google(client_id: str = "", client_secret: str = "") -> ProviderConfig:
    """Google OAuth2 (POST body, JSON response, space-delimited scopes)."""
    return ProviderConfig(
        name="google",
        auth_endpoint="https://accounts.google.com/o/oauth2/auth",
        token_endpoint="https://accounts.google.com/o/oauth2/token",
        user_data_endpoint="https://www.googleapis.com/oauth2/v1/userinfo",
        client_id=client_id,
        client_secret=client_secret,
        scope_delimiter=" ",
        default_scopes=(
            "https://www.googleapis.com/auth/userinfo.profile",
            "https://www.googleapis.com/auth/userinfo.email",
        ),
        execute_token_request=execute_post_body,
        parse_token_response=parse_json_response,
    )


def github(client_id: str = "", client_secret: str = "") -> ProviderConfig:
    """GitHub OAuth apps (POST body, form-encoded response).

    State checking is disabled for this provider.
    """
    return ProviderConfig(
        name="github",
        auth_endpoint="https://github.com/login/oauth/authorize",
        token_endpoint="https://github.com/login/oauth/access_token",
        user_data_endpoint="https://api.github.com/user",
        client_id=client_id,
        client_secret=client_secret,
        execute_token_request=execute_post_body,
        verify_state=False,
    )


def stripe(client_id: str = "", client_secret: str = "") -> ProviderConfig:
    """Stripe Connect (bearer-authenticated POST, JSON response, no profile)."""
    return ProviderConfig(
        name="stripe",
        auth_endpoint="https://connect.stripe.com/oauth/authorize",
        token_endpoint="https://connect.stripe.com/oauth/token",
        client_id=client_id,
        client_secret=client_secret,
        default_scopes=("read_write",),
        execute_token_request=execute_bearer_post,
        parse_token_response=parse_json_response,
    )


PROVIDER_PRESETS: dict[str, Callable[[str, str], ProviderConfig]] = {
    "facebook": facebook,
    "github": github,
    "google": google,
    "stripe": stripe,
}


def get_provider(name: str, client_id: str = "", client_secret: str = "") -> ProviderConfig:
    """Build a preset provider by name.

    Raises
    ------
    ConfigurationError
        If no preset has that name.
    """
    try:
        preset = PROVIDER_PRESETS[name.lower()]
    except KeyError:
        available = ", ".join(sorted(PROVIDER_PRESETS))
        msg = f"Unknown OAuth2 provider: {name}. Available: {available}"
        raise ConfigurationError(msg, provider=name) from None
    return preset(client_id, client_secret)


def _split_scopes(scopes: str) -> tuple[str, ...]:
    return tuple(s for s in scopes.replace(",", " ").split() if s)


def create_provider_from_settings(settings: OAuth2Settings) -> ProviderConfig:
    """Create a ProviderConfig from OAuth2Settings.

    Preset providers keep their endpoints and hooks; ``scopes`` and
    ``scope_delimiter`` override the preset when set. The ``custom``
    provider is assembled entirely from settings.

    Parameters
    ----------
    settings : OAuth2Settings
        The OAuth2 configuration section.

    Returns
    -------
    ProviderConfig
        A configured provider descriptor.

    Raises
    ------
    ConfigurationError
        If the provider is unknown or a custom provider lacks endpoints.
    """
    overrides: dict[str, Any] = {}
    if settings.scopes:
        overrides["default_scopes"] = _split_scopes(settings.scopes)
    if settings.scope_delimiter is not None:
        overrides["scope_delimiter"] = settings.scope_delimiter
    if settings.reject_error_responses:
        overrides["create_token"] = create_checked_access_token

    if settings.provider != "custom":
        provider = get_provider(settings.provider, settings.client_id, settings.client_secret)
        return dataclasses.replace(provider, **overrides) if overrides else provider

    if not settings.auth_url or not settings.token_url:
        msg = "Custom provider requires auth_url and token_url"
        raise ConfigurationError(msg, provider="custom")

    return ProviderConfig(
        name=settings.name or "custom",
        auth_endpoint=settings.auth_url,
        token_endpoint=settings.token_url,
        user_data_endpoint=settings.user_data_url,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        execute_token_request=REQUEST_EXECUTORS[settings.token_request],
        parse_token_response=RESPONSE_PARSERS[settings.response_format],
        verify_state=settings.verify_state,
        **overrides,
    )
