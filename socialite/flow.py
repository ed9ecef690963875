"""OAuth2 authorization code flow.

OAuth2Flow drives the three steps every provider shares: build the
authorization URL, verify the callback and exchange the code for an
access token, then fetch the user's profile. Provider differences come
from the ProviderConfig hooks.
"""

# pylint: disable=logging-too-many-args

from __future__ import annotations

import logging
import secrets

from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .exceptions import StateMismatchError, StorageError, UnsupportedOperationError
from .exchange import parse_json_response
from .log import redact_sensitive_data
from .types import AuthAttempt


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .providers import ProviderConfig
    from .state.base import StateStore
    from .transport import HttpTransport
    from .types import AccessToken, UserProfile


logger = logging.getLogger("socialite.auth")

DEFAULT_GRANT_TYPE = "authorization_code"


def request_base_url(request_url: str) -> str:
    """Reduce a request URL to scheme, host and path.

    Parameters
    ----------
    request_url : str
        The full URL of the inbound request.

    Returns
    -------
    str
        The URL without query string or fragment.
    """
    parts = urlsplit(request_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class OAuth2Flow:
    """Runs the OAuth2 authorization code flow for one provider.

    One instance per configured provider per process. The scope list
    and delimiter are the only mutable fields; do not change them while
    another thread is calling ``begin_authorization``.

    Parameters
    ----------
    provider : ProviderConfig
        Endpoints, credentials and hooks of the identity provider.
    state_store : StateStore
        Holds the pending state for the current user session.
    transport : HttpTransport
        HTTP client used for the token and profile requests.
    scopes : Iterable[str], optional
        Explicit scopes; when omitted the provider defaults apply.
    """

    def __init__(
        self,
        provider: ProviderConfig,
        state_store: StateStore,
        transport: HttpTransport,
        scopes: Iterable[str] | None = None,
    ) -> None:
        """Initialize the flow."""
        self.provider = provider
        self.state_store = state_store
        self.transport = transport
        self._scopes: list[str] | None = list(scopes) if scopes is not None else None
        self._scope_delimiter = provider.scope_delimiter

    # ── Scopes ──────────────────────────────────────────────────────

    def get_scope(self) -> list[str]:
        """Get the active scope list, or the provider defaults if none was set."""
        if self._scopes is not None:
            return list(self._scopes)
        return list(self.provider.default_scopes)

    def set_scope(self, scopes: str | Iterable[str]) -> None:
        """Replace the active scope list.

        The provider defaults are not merged in; ``set_scope([])``
        requests no scopes at all.
        """
        self._scopes = [scopes] if isinstance(scopes, str) else list(scopes)

    def add_scope(self, scope: str) -> OAuth2Flow:
        """Append a scope, starting from the provider defaults if none was set."""
        if self._scopes is None:
            self._scopes = list(self.provider.default_scopes)
        self._scopes.append(scope)
        return self

    @property
    def scope_delimiter(self) -> str:
        """Separator used to format the scope list."""
        return self._scope_delimiter

    def set_scope_delimiter(self, delimiter: str) -> None:
        """Change the scope separator for this flow."""
        self._scope_delimiter = delimiter

    def get_formatted_scope(self) -> str:
        """Join the active scopes with the scope delimiter."""
        return self._scope_delimiter.join(self.get_scope())

    # ── Step 1: authorization URL ───────────────────────────────────

    def begin_authorization(
        self,
        callback_url: str,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Start an authorization attempt and return the provider URL.

        A fresh state is generated and written to the state store
        before the URL is built. No network call is made.

        Parameters
        ----------
        callback_url : str
            Where the provider redirects the user afterwards.
        options : Mapping[str, Any], optional
            Extra query parameters; they override the defaults.

        Returns
        -------
        str
            The authorization URL to redirect the user to.

        Raises
        ------
        StorageError
            If the state store rejects the write.
        """
        attempt = AuthAttempt(state=secrets.token_urlsafe(32), callback_url=callback_url)
        self.state_store.set_state(attempt.state)
        url = self.authorization_url(attempt.callback_url, attempt.state, options)
        logger.debug("Authorization URL built for %s", self.provider.name)
        return url

    def authorization_url(
        self,
        callback_url: str,
        state: str,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Build an authorization URL for a state the caller manages.

        Parameters
        ----------
        callback_url : str
            The redirect URI.
        state : str
            The anti-forgery state value.
        options : Mapping[str, Any], optional
            Extra query parameters; they override the defaults.

        Returns
        -------
        str
            The authorization URL.
        """
        query: dict[str, Any] = {
            "client_id": self.provider.client_id,
            "redirect_uri": callback_url,
            "state": state,
            "response_type": "code",
            "scope": self.get_formatted_scope(),
        }
        if options:
            query.update(options)
        return f"{self.provider.auth_endpoint}?{urlencode(query)}"

    # ── Step 2: code exchange ───────────────────────────────────────

    def complete_authorization(
        self,
        callback_params: Mapping[str, Any],
        current_url: str,
        options: Mapping[str, Any] | None = None,
    ) -> AccessToken:
        """Verify the callback and exchange its code for an access token.

        The ``redirect_uri`` sent to the token endpoint is ``current_url``
        reduced to scheme, host and path; it is not the ``callback_url``
        given to ``begin_authorization``. Providers that require the two
        to match byte for byte need the caller to build both the same way.

        Parameters
        ----------
        callback_params : Mapping[str, Any]
            Query parameters of the redirected request (``state``, ``code``).
        current_url : str
            URL of the redirected request.
        options : Mapping[str, Any], optional
            Extra token-request parameters; they override the defaults.
            ``grant_type`` defaults to ``authorization_code``.

        Returns
        -------
        AccessToken
            The parsed token response.

        Raises
        ------
        StateMismatchError
            If the state is missing or wrong. No request is sent.
        TransportError
            If the token request fails.
        ResponseParseError
            If the token response cannot be parsed.
        """
        if self.provider.verify_state:
            self._check_state(callback_params.get("state"))

        options = dict(options or {})
        options.setdefault("grant_type", DEFAULT_GRANT_TYPE)

        params = self._token_request_params(callback_params, current_url, options)
        logger.debug(
            "Requesting access token from %s: %s",
            self.provider.name,
            redact_sensitive_data(params),
        )

        response = self.provider.execute_token_request(self.provider, self.transport, params)
        parameters = self.provider.parse_token_response(response.body)
        token = self.provider.create_token(parameters)
        logger.info("Access token obtained from %s (status %s)", self.provider.name, response.status)
        return token

    def complete_authorization_from_url(
        self,
        request_url: str,
        options: Mapping[str, Any] | None = None,
    ) -> AccessToken:
        """Complete the flow from the full URL of the redirected request.

        Parameters
        ----------
        request_url : str
            The callback URL including its query string.
        options : Mapping[str, Any], optional
            Extra token-request parameters.

        Returns
        -------
        AccessToken
            The parsed token response.
        """
        callback_params = dict(parse_qsl(urlsplit(request_url).query, keep_blank_values=True))
        return self.complete_authorization(callback_params, request_url, options)

    def _check_state(self, received: Any) -> None:
        provider = self.provider.name
        try:
            expected = self.state_store.get_state()
        except StorageError as exc:
            msg = "Stored state could not be read"
            raise StateMismatchError(msg, provider=provider) from exc

        if not received or not expected or not secrets.compare_digest(
            str(received).encode("utf-8"), expected.encode("utf-8")
        ):
            logger.warning("State mismatch on %s callback", provider)
            msg = "State parameter mismatch (possible CSRF attack)"
            raise StateMismatchError(msg, provider=provider)

        self.state_store.clear_state()

    def _token_request_params(
        self,
        callback_params: Mapping[str, Any],
        request_url: str,
        options: Mapping[str, Any],
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "client_id": self.provider.client_id,
            "client_secret": self.provider.client_secret,
            "redirect_uri": request_base_url(request_url),
            "code": callback_params.get("code", ""),
        }
        params.update(self.provider.grant_options(options["grant_type"], options))
        params.update(options)
        return params

    # ── Step 3: user profile ────────────────────────────────────────

    def fetch_user_profile(self, token: AccessToken) -> UserProfile:
        """Fetch the user's profile with an access token.

        Parameters
        ----------
        token : AccessToken
            Token returned by ``complete_authorization``.

        Returns
        -------
        UserProfile
            The decoded JSON profile.

        Raises
        ------
        UnsupportedOperationError
            If the provider has no user-data endpoint.
        TransportError
            If the request fails.
        ResponseParseError
            If the response is not a JSON object.
        """
        if not self.provider.supports_user_data:
            msg = "Provider does not offer a user profile endpoint"
            raise UnsupportedOperationError(msg, provider=self.provider.name)

        query = urlencode({"access_token": token.get_value("")})
        response = self.transport.get(f"{self.provider.user_data_endpoint}?{query}")
        return parse_json_response(response.body)
