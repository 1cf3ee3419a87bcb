"""`gtm auth` sub-commands: login, status, logout."""

from __future__ import annotations

import argparse
import json
import webbrowser

from gtm_cli.commands.common import CliContext
from gtm_cli.utils.auth import CLIENT_ID_ENV_VAR, CLIENT_SECRET_ENV_VAR
from gtm_cli.utils.errors import ConfigError
from gtm_cli.utils.output import OUTPUT_FORMATS

MISSING_CLIENT_MESSAGE = (
    "OAuth2 login requires client ID and secret. Provide them via:\n"
    "  --client-id and --client-secret flags\n"
    f"  {CLIENT_ID_ENV_VAR} and {CLIENT_SECRET_ENV_VAR} environment variables\n\n"
    "Or use a service account:\n"
    "  gtm auth login --service-account /path/to/key.json"
)


def auth_login(args: argparse.Namespace, ctx: CliContext) -> None:
    if args.service_account:
        email = ctx.resolver.store_service_account(args.service_account)
        print(f"Service account configured: {email}", file=ctx.stdout)
        return

    client_id = args.client_id or ctx.resolver.environ.get(CLIENT_ID_ENV_VAR)
    client_secret = args.client_secret or ctx.resolver.environ.get(CLIENT_SECRET_ENV_VAR)
    if not client_id or not client_secret:
        raise ConfigError(MISSING_CLIENT_MESSAGE)

    def open_browser(url: str) -> None:
        print("Opening browser for authorization...\n", file=ctx.stdout)
        print(f"If the browser doesn't open, visit:\n{url}\n", file=ctx.stdout, flush=True)
        webbrowser.open(url)

    ctx.resolver.login(client_id, client_secret, open_browser=open_browser)
    print("Authentication successful! Credentials saved.", file=ctx.stdout)


def auth_status(args: argparse.Namespace, ctx: CliContext) -> None:
    status = ctx.resolver.status()
    if status is None:
        if args.output == "json":
            print(json.dumps({"authenticated": False}, indent=2), file=ctx.stdout)
        else:
            print("Not authenticated. Run: gtm auth login", file=ctx.stdout)
        return

    ctx.emit(
        {
            "authenticated": True,
            "method": status.method,
            "details": status.details,
            "config_path": str(ctx.store.path),
        },
        args,
    )


def auth_logout(args: argparse.Namespace, ctx: CliContext) -> None:
    ctx.resolver.clear()
    print("Credentials removed.", file=ctx.stdout)


def register(subparsers: argparse._SubParsersAction) -> None:
    auth = subparsers.add_parser("auth", help="Manage authentication for Google Tag Manager API")
    group = auth.add_subparsers(dest="action", required=True)

    login = group.add_parser(
        "login", help="Authenticate with Google Tag Manager via OAuth2 or service account"
    )
    login.add_argument("--client-id", help="Google OAuth2 client ID")
    login.add_argument("--client-secret", help="Google OAuth2 client secret")
    login.add_argument("--service-account", help="Path to service account JSON key file")
    login.set_defaults(func=auth_login)

    status = group.add_parser("status", help="Show current authentication status")
    status.add_argument(
        "-o", "--output", choices=OUTPUT_FORMATS, default="json", help="Output format"
    )
    status.set_defaults(func=auth_status)

    logout = group.add_parser("logout", help="Remove stored credentials")
    logout.set_defaults(func=auth_logout)
