"""Configuration system for Socialite using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.socialite] section (project-level)
3. ./socialite.toml (project-level, explicit)
4. ~/.config/socialite/config.toml (user-level, overrides project)
5. The file named by SOCIALITE_CONFIG_FILE
6. Environment variables (highest priority)

Environment variables use SOCIALITE_ prefix with nested delimiter __.
Example: SOCIALITE_OAUTH2__CLIENT_ID, SOCIALITE_HTTP__TIMEOUT
"""

from __future__ import annotations

import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .log import DEFAULT_FORMAT


if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from .flow import OAuth2Flow
    from .state.base import StateStore
    from .transport import HttpTransport


def _find_config_files() -> list[Path]:
    """Find all configuration files in order of precedence (lowest first)."""
    files = []

    # Project-level pyproject.toml [tool.socialite] (lowest file priority)
    pyproject = Path("pyproject.toml")
    if pyproject.exists():
        files.append(pyproject)

    # Explicit socialite.toml (project-level)
    socialite_toml = Path("socialite.toml")
    if socialite_toml.exists():
        files.append(socialite_toml)

    # User-level config (overrides project configs)
    if sys.platform == "win32":
        user_config = Path(os.environ.get("APPDATA", "~")) / "socialite" / "config.toml"
    else:
        user_config = Path("~/.config/socialite/config.toml")
    user_config = user_config.expanduser()
    if user_config.exists():
        files.append(user_config)

    # Environment variable override for config file (highest file priority)
    env_config = os.environ.get("SOCIALITE_CONFIG_FILE")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            files.append(env_path)

    return files


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            continue  # Unreadable or invalid config files are skipped

        # Handle pyproject.toml [tool.socialite] section
        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("socialite", {})

        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Field names that contain sensitive data and must be redacted in output.
_SENSITIVE_FIELDS: set[str] = {
    "client_secret",
    "redis_url",
}

_REDACTED = "********"


class OAuth2Settings(BaseSettings):
    """OAuth2 provider configuration.

    Environment prefix: SOCIALITE_OAUTH2__
    Example: SOCIALITE_OAUTH2__PROVIDER=github
    Example: SOCIALITE_OAUTH2__CLIENT_ID=your-client-id

    TOML section: [tool.socialite.oauth2]
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIALITE_OAUTH2__",
        extra="ignore",
    )

    # Provider selection
    provider: Literal["facebook", "github", "google", "stripe", "custom"] = Field(
        default="custom",
        description="Provider preset: facebook, github, google, stripe, or custom",
    )
    name: str = Field(
        default="",
        description="Display name for a custom provider (used in logs and errors)",
    )

    # Client credentials
    client_id: str = Field(default="", description="OAuth2 client ID from the provider")
    client_secret: str = Field(default="", description="OAuth2 client secret")

    # Scopes
    scopes: str = Field(
        default="",
        description="Scopes to request, space or comma separated (empty keeps provider defaults)",
    )
    scope_delimiter: str | None = Field(
        default=None,
        description="Separator used when formatting scopes (None keeps the provider's)",
    )

    # Endpoint URLs (custom provider only)
    auth_url: str = Field(default="", description="Authorization endpoint URL")
    token_url: str = Field(default="", description="Token endpoint URL")
    user_data_url: str = Field(
        default="",
        description="User profile endpoint URL (empty if the provider has none)",
    )

    # Token exchange shape (custom provider only)
    token_request: Literal["get", "post", "bearer"] = Field(
        default="get",
        description="Token request shape: GET query, POST body, or POST with bearer secret",
    )
    response_format: Literal["form", "json"] = Field(
        default="form",
        description="Token response format: form-encoded or JSON",
    )
    verify_state: bool = Field(
        default=True,
        description="Check the CSRF state on callback (custom provider only)",
    )
    reject_error_responses: bool = Field(
        default=False,
        description="Raise ProviderError when the token response carries an 'error' field",
    )


class StateSettings(BaseSettings):
    """CSRF state storage settings.

    Environment prefix: SOCIALITE_STATE__
    Example: SOCIALITE_STATE__BACKEND=redis
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIALITE_STATE__",
        extra="ignore",
    )

    backend: Literal["memory", "session", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    prefix: str = "socialite"
    ttl: int = Field(default=600, ge=30, description="Seconds a pending state survives (redis)")
    session_key: str = "socialite_state"


class HttpSettings(BaseSettings):
    """HTTP transport settings.

    Environment prefix: SOCIALITE_HTTP__
    Example: SOCIALITE_HTTP__TIMEOUT=10
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIALITE_HTTP__",
        extra="ignore",
    )

    timeout: float = Field(default=30.0, gt=0, description="Connect/read timeout in seconds")
    user_agent: str = "socialite"


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: SOCIALITE_LOG__
    Example: SOCIALITE_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIALITE_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = DEFAULT_FORMAT

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v


_SECTIONS: list[tuple[str, str, str]] = [
    ("OAuth2 Provider", "oauth2", "OAUTH2"),
    ("State Storage", "state", "STATE"),
    ("HTTP Transport", "http", "HTTP"),
    ("Logging", "log", "LOG"),
]

_SECTION_CLASSES: dict[str, type[BaseSettings]] = {
    "oauth2": OAuth2Settings,
    "state": StateSettings,
    "http": HttpSettings,
    "log": LogSettings,
}


def _env_overrides(attr_name: str, env_prefix: str) -> dict[str, Any]:
    """Get the fields of one section that are set through the environment."""
    section_cls = _SECTION_CLASSES[attr_name]
    env_keys = {key.upper() for key in os.environ}
    names = [
        name
        for name in section_cls.model_fields
        if f"SOCIALITE_{env_prefix}__{name.upper()}" in env_keys
    ]
    if not names:
        return {}
    section = section_cls()
    return {name: getattr(section, name) for name in names}


class SocialiteSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Environment prefix: SOCIALITE__

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.socialite] section
    3. ./socialite.toml (project-level)
    4. ~/.config/socialite/config.toml (user-level, overrides project)
    5. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIALITE__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    oauth2: OAuth2Settings = Field(default_factory=OAuth2Settings)
    state: StateSettings = Field(default_factory=StateSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    def __init__(self, **data: Any) -> None:
        # Load TOML configuration first
        toml_config = _load_toml_config()

        # A TOML section skips the section's own env lookup; re-apply it.
        for _, attr_name, env_prefix in _SECTIONS:
            if isinstance(toml_config.get(attr_name), dict):
                toml_config[attr_name] = _deep_merge(
                    toml_config[attr_name], _env_overrides(attr_name, env_prefix)
                )

        # Merge TOML config with explicit data (explicit takes precedence)
        merged = _deep_merge(toml_config, data)

        super().__init__(**merged)

    def _dump(self) -> dict[str, Any]:
        # Dump from top-level model to avoid tainted section instances.
        return self.model_dump(exclude={attr: _SENSITIVE_FIELDS for _, attr, _ in _SECTIONS})

    def _redacted_fields(self, attr_name: str) -> list[str]:
        section_cls = type(getattr(self, attr_name))
        return sorted(_SENSITIVE_FIELDS & section_cls.model_fields.keys())

    def to_toml(self) -> str:
        """Export settings as TOML string."""
        lines = ["# Socialite Configuration", "# Generated by: socialite config --toml", ""]
        all_data = self._dump()

        for _, section_name, _ in _SECTIONS:
            lines.append(f"[{section_name}]")
            for field_name, field_value in all_data.get(section_name, {}).items():
                if field_value is None:
                    continue  # TOML has no null
                if isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                elif isinstance(field_value, str):
                    value_str = f'"{field_value}"'
                else:
                    value_str = str(field_value)
                lines.append(f"{field_name} = {value_str}")
            lines.extend(f'{rn} = "{_REDACTED}"' for rn in self._redacted_fields(section_name))
            lines.append("")

        return "\n".join(lines)

    def to_env(self) -> str:
        """Export settings as shell environment variables."""
        lines = [
            "# Socialite Environment Variables",
            "# Generated by: socialite config --env",
            "",
        ]
        all_data = self._dump()

        for _, attr_name, env_prefix in _SECTIONS:
            for field_name, field_value in all_data.get(attr_name, {}).items():
                if field_value is None:
                    continue
                env_name = f"SOCIALITE_{env_prefix}__{field_name.upper()}"
                if isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                else:
                    value_str = str(field_value)
                lines.append(f'export {env_name}="{value_str}"')
            for redacted_name in self._redacted_fields(attr_name):
                env_name = f"SOCIALITE_{env_prefix}__{redacted_name.upper()}"
                lines.append(f'export {env_name}="{_REDACTED}"')

        return "\n".join(lines)

    def show(self) -> str:
        """Format settings as a readable table."""
        lines = ["Socialite Configuration", "=" * 60, ""]
        all_data = self._dump()

        for display_name, attr_name, _ in _SECTIONS:
            lines.append(f"\n{display_name}")
            lines.append("-" * 40)
            for field_name, field_value in all_data.get(attr_name, {}).items():
                # Truncate long values
                value_str = str(field_value)
                if len(value_str) > 50:
                    value_str = value_str[:47] + "..."
                lines.append(f"  {field_name:22} = {value_str}")
            lines.extend(f"  {rn:22} = {_REDACTED}" for rn in self._redacted_fields(attr_name))

        return "\n".join(lines)


@lru_cache(maxsize=1)
def get_settings() -> SocialiteSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration.
    """
    return SocialiteSettings()


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> SocialiteSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()


def create_transport_from_settings(settings: HttpSettings) -> HttpTransport:
    """Build an HttpxTransport from the HTTP section."""
    from .transport import HttpxTransport

    return HttpxTransport(
        timeout=settings.timeout,
        headers={"User-Agent": settings.user_agent},
    )


def create_state_store_from_settings(
    settings: StateSettings,
    *,
    session: MutableMapping[str, Any] | None = None,
    session_id: str | None = None,
) -> StateStore:
    """Build the configured StateStore for one user session.

    Parameters
    ----------
    settings : StateSettings
        The state section of the configuration.
    session : MutableMapping[str, Any], optional
        The user's session mapping (required for the session backend).
    session_id : str, optional
        The user's session ID (required for the redis backend).

    Returns
    -------
    StateStore
        A new state store.
    """
    from .state import get_state_store

    if settings.backend == "session":
        if session is None:
            msg = "The session state backend requires a session mapping"
            raise ValueError(msg)
        return get_state_store("session", session=session, key=settings.session_key)
    if settings.backend == "redis":
        if not session_id:
            msg = "The redis state backend requires a session_id"
            raise ValueError(msg)
        return get_state_store(
            "redis",
            session_id=session_id,
            redis_url=settings.redis_url,
            prefix=settings.prefix,
            ttl=settings.ttl,
        )
    return get_state_store("memory")


def create_flow_from_settings(
    settings: SocialiteSettings | None = None,
    *,
    state_store: StateStore | None = None,
    transport: HttpTransport | None = None,
    session: MutableMapping[str, Any] | None = None,
    session_id: str | None = None,
) -> OAuth2Flow:
    """Assemble an OAuth2Flow from settings.

    Collaborators passed explicitly win over the ones built from
    settings. The log section is applied to the package logger.

    Parameters
    ----------
    settings : SocialiteSettings, optional
        Loaded settings (defaults to ``get_settings()``).
    state_store : StateStore, optional
        State store to use instead of the configured backend.
    transport : HttpTransport, optional
        Transport to use instead of a new HttpxTransport.
    session : MutableMapping[str, Any], optional
        Session mapping for the session backend.
    session_id : str, optional
        Session ID for the redis backend.

    Returns
    -------
    OAuth2Flow
        A flow ready to begin authorization.
    """
    from .flow import OAuth2Flow
    from .log import configure_logging
    from .providers import create_provider_from_settings

    settings = settings or get_settings()
    configure_logging(settings.log)
    provider = create_provider_from_settings(settings.oauth2)
    if state_store is None:
        state_store = create_state_store_from_settings(
            settings.state, session=session, session_id=session_id
        )
    if transport is None:
        transport = create_transport_from_settings(settings.http)
    return OAuth2Flow(provider, state_store, transport)
