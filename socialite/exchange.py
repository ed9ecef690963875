"""Token exchange hooks.

Request executors, response parsers, token factories and grant option
builders that a ProviderConfig plugs into the flow. The first function
of each group is the default.
"""

from __future__ import annotations

import json

from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode

from .exceptions import ProviderError, ResponseParseError
from .types import AccessToken


if TYPE_CHECKING:
    from collections.abc import Mapping

    from .providers import ProviderConfig
    from .transport import HttpTransport
    from .types import TransportResponse


# ── Request executors ───────────────────────────────────────────────


def execute_query_get(
    provider: ProviderConfig,
    transport: HttpTransport,
    params: Mapping[str, Any],
) -> TransportResponse:
    """Send every parameter in the query string of a GET request."""
    url = f"{provider.token_endpoint}?{urlencode(params)}"
    return transport.get(url)


def execute_post_body(
    provider: ProviderConfig,
    transport: HttpTransport,
    params: Mapping[str, Any],
) -> TransportResponse:
    """Send every parameter as a form-encoded POST body."""
    return transport.post(provider.token_endpoint, data=params)


def execute_bearer_post(
    provider: ProviderConfig,
    transport: HttpTransport,
    params: Mapping[str, Any],
) -> TransportResponse:
    """POST the parameters, authenticating with the client secret as a bearer token.

    Used by connect-style providers (Stripe). The secret travels in the
    ``Authorization`` header instead of the body.
    """
    headers = {"Authorization": f"Bearer {provider.client_secret}"}
    data = {k: v for k, v in params.items() if k != "client_secret"}
    return transport.post(provider.token_endpoint, headers=headers, data=data)


# ── Response parsers ────────────────────────────────────────────────


def parse_form_response(body: str) -> dict[str, Any]:
    """Parse a ``key=value&...`` token response.

    Empty fields (a trailing ``&``) are ignored.

    Raises
    ------
    ResponseParseError
        If the body is empty or no field contains ``=``.
    """
    text = body.strip()
    if not text:
        msg = "Empty token response"
        raise ResponseParseError(msg, body=body)
    fields = [f for f in text.split("&") if f]
    if not any("=" in f for f in fields):
        msg = "Token response is not form-encoded"
        raise ResponseParseError(msg, body=body)
    pairs = parse_qsl(text, keep_blank_values=True)
    if not pairs:
        msg = "Token response has no parameters"
        raise ResponseParseError(msg, body=body)
    return dict(pairs)


def parse_json_response(body: str) -> dict[str, Any]:
    """Parse a JSON object response.

    Raises
    ------
    ResponseParseError
        If the body is not valid JSON or not a JSON object.
    """
    try:
        data = json.loads(body)
    except ValueError as exc:
        msg = f"Response is not valid JSON: {exc}"
        raise ResponseParseError(msg, body=body) from exc
    if not isinstance(data, dict):
        msg = f"Expected a JSON object, got {type(data).__name__}"
        raise ResponseParseError(msg, body=body)
    return data


# ── Token factories ─────────────────────────────────────────────────


def create_access_token(parameters: Mapping[str, Any]) -> AccessToken:
    """Wrap the parsed parameters as they are."""
    return AccessToken(parameters)


def create_checked_access_token(parameters: Mapping[str, Any]) -> AccessToken:
    """Wrap the parsed parameters, rejecting OAuth2 error payloads.

    Some providers answer a bad code with a 200 response whose body
    carries ``error`` and ``error_description`` instead of a token.

    Raises
    ------
    ProviderError
        If the parameters contain an ``error`` field.
    """
    if "error" in parameters:
        error_code = str(parameters["error"])
        description = parameters.get("error_description") or error_code
        msg = f"Provider rejected the token request: {description}"
        raise ProviderError(msg, error=error_code)
    return AccessToken(parameters)


# ── Grant options ───────────────────────────────────────────────────


def no_grant_options(grant_type: str, options: Mapping[str, Any]) -> dict[str, Any]:  # pylint: disable=unused-argument
    """Contribute nothing beyond the standard authorization_code parameters."""
    return {}
