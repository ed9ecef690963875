"""Command-line interface for Socialite configuration and provider checks."""

from __future__ import annotations

import argparse
import os
import sys

from pathlib import Path

from .exceptions import SocialiteException


def main(argv: list[str] | None = None) -> int:
    """Run the main CLI entry point.

    Returns
    -------
    int
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="socialite",
        description="Socialite OAuth2 client configuration tools",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show or export configuration",
    )
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )
    config_group.add_argument(
        "--toml",
        action="store_true",
        help="Export configuration as TOML",
    )
    config_group.add_argument(
        "--env",
        action="store_true",
        help="Export configuration as environment variables",
    )
    config_group.add_argument(
        "--sources",
        action="store_true",
        help="Show configuration file sources",
    )
    config_parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output file path (default: stdout)",
    )

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a socialite.toml configuration file",
    )
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Overwrite existing configuration file",
    )
    init_parser.add_argument(
        "--path",
        "-p",
        type=str,
        default="socialite.toml",
        help="Path for configuration file (default: socialite.toml)",
    )

    # providers command
    subparsers.add_parser(
        "providers",
        help="List preset OAuth2 providers",
    )

    # authorize-url command
    url_parser = subparsers.add_parser(
        "authorize-url",
        help="Print an authorization URL for the configured provider",
    )
    url_parser.add_argument("callback", help="Redirect URI registered with the provider")
    url_parser.add_argument(
        "--provider",
        type=str,
        default=None,
        help="Preset provider to use instead of the configured one",
    )
    url_parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra query parameter (repeatable)",
    )

    args = parser.parse_args(argv)

    if args.command == "config":
        return handle_config(args)
    if args.command == "init":
        return handle_init(args)
    if args.command == "providers":
        return handle_providers(args)
    if args.command == "authorize-url":
        return handle_authorize_url(args)
    parser.print_help()
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """Handle the config command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import SocialiteSettings

    if args.sources:
        return show_config_sources()

    settings = SocialiteSettings()

    if args.toml:
        output = settings.to_toml()
    elif args.env:
        output = settings.to_env()
    else:
        output = settings.show()

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Configuration written to {args.output}")
    else:
        print(output)

    return 0


def handle_init(args: argparse.Namespace) -> int:
    """Handle the init command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import SocialiteSettings

    path = Path(args.path)

    if path.exists() and not args.force:
        print(f"Error: {path} already exists. Use --force to overwrite.", file=sys.stderr)
        return 1

    toml_content = SocialiteSettings().to_toml()

    header = """# Socialite Configuration File
#
# Environment variables can override any setting:
#   SOCIALITE_OAUTH2__PROVIDER=github
#   SOCIALITE_OAUTH2__CLIENT_ID=your-client-id
#   SOCIALITE_OAUTH2__CLIENT_SECRET=your-client-secret
#   SOCIALITE_STATE__BACKEND=redis
#   SOCIALITE_HTTP__TIMEOUT=10
#
# Keep client_secret out of this file; set it through the environment.

"""
    path.write_text(header + toml_content, encoding="utf-8")
    print(f"Created {path}")

    return 0


def handle_providers(args: argparse.Namespace) -> int:  # pylint: disable=unused-argument
    """Handle the providers command.

    Returns
    -------
    int
        Exit code.
    """
    from .providers import PROVIDER_PRESETS

    print(f"{'Provider':<10} {'Delimiter':<10} {'Profile':<8} Default scopes")
    print("-" * 80)
    for name in sorted(PROVIDER_PRESETS):
        provider = PROVIDER_PRESETS[name]("", "")
        profile = "yes" if provider.supports_user_data else "no"
        scopes = ", ".join(provider.default_scopes) or "-"
        print(f"{name:<10} {provider.scope_delimiter!r:<10} {profile:<8} {scopes}")
        print(f"{'':<10} auth:  {provider.auth_endpoint}")
        print(f"{'':<10} token: {provider.token_endpoint}")
    return 0


def handle_authorize_url(args: argparse.Namespace) -> int:
    """Handle the authorize-url command.

    Builds a URL with an in-memory state store and prints the state
    alongside it, so the callback can be checked by hand.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import SocialiteSettings
    from .flow import OAuth2Flow
    from .providers import create_provider_from_settings
    from .state import MemoryStateStore
    from .transport import HttpxTransport

    options: dict[str, str] = {}
    for item in args.option:
        key, sep, value = item.partition("=")
        if not sep or not key:
            print(f"Error: invalid --option {item!r}, expected KEY=VALUE", file=sys.stderr)
            return 2
        options[key] = value

    settings = SocialiteSettings()
    oauth2 = settings.oauth2
    if args.provider is not None:
        oauth2 = oauth2.model_copy(update={"provider": args.provider})

    try:
        provider = create_provider_from_settings(oauth2)
    except SocialiteException as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    store = MemoryStateStore()
    with HttpxTransport(timeout=settings.http.timeout) as transport:
        flow = OAuth2Flow(provider, store, transport)
        url = flow.begin_authorization(args.callback, options)

    print(url)
    print(f"state: {store.get_state()}")
    return 0


def show_config_sources() -> int:
    """Show configuration file sources and their status.

    Returns
    -------
    int
        Exit code.
    """
    sources = [
        ("Built-in defaults", "", True),
        ("pyproject.toml [tool.socialite]", "pyproject.toml", None),
        ("./socialite.toml", "socialite.toml", None),
        ("~/.config/socialite/config.toml", "~/.config/socialite/config.toml", None),
        ("SOCIALITE_CONFIG_FILE", os.environ.get("SOCIALITE_CONFIG_FILE", ""), None),
        ("Environment variables", "SOCIALITE_* vars", None),
    ]

    print("Configuration Sources (in order of precedence):\n")
    print(f"{'Source':<40} {'Status':<15} {'Path'}")
    print("-" * 80)

    for name, path_str, forced_status in sources:
        if forced_status is True:
            status = "✓ Active"
            path_display = ""
        elif name == "Environment variables":
            socialite_vars = sorted(k for k in os.environ if k.startswith("SOCIALITE_"))
            if socialite_vars:
                status = f"✓ {len(socialite_vars)} vars"
                path_display = ", ".join(socialite_vars[:3])
                if len(socialite_vars) > 3:
                    path_display += "..."
            else:
                status = "✗ No vars"
                path_display = ""
        elif not path_str:
            status = "✗ Not set"
            path_display = ""
        else:
            path = Path(path_str).expanduser()
            status = "✓ Found" if path.exists() else "✗ Not found"
            path_display = str(path)

        print(f"{name:<40} {status:<15} {path_display}")

    print("\nNote: Later sources override earlier ones.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
