"""Command-line entry point for the Google Tag Manager CLI (`gtm`)."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Any, Callable, Mapping, Sequence

from gtm_cli.commands import auth, resources, versions, workspace_entities
from gtm_cli.commands.common import CliContext, InvalidOptionError
from gtm_cli.utils.auth import CredentialResolver
from gtm_cli.utils.config import JsonConfigStore
from gtm_cli.utils.errors import (
    AuthExchangeError,
    ConfigError,
    HttpError,
    OAuthCallbackError,
)
from gtm_cli.utils.output import print_error

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gtm",
        description="Manage Google Tag Manager accounts, containers and workspaces.",
    )
    parser.add_argument(
        "--config-path",
        help="Config file path (default: $GTM_CONFIG_PATH or ~/.config/gtm-cli/config.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    auth.register(subparsers)
    resources.register(subparsers)
    workspace_entities.register(subparsers)
    versions.register(subparsers)
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    session: Any = None,
    auth_request: Any = None,
    environ: Mapping[str, str] | None = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> int:
    """Run one CLI invocation and return its exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    with JsonConfigStore.open(args.config_path) as store:
        ctx = CliContext(
            store=store,
            resolver=CredentialResolver(store, environ=environ, auth_request=auth_request),
            session=session,
            sleep=sleep,
        )
        try:
            args.func(args, ctx)
        except HttpError as error:
            log.debug("Request failed with HTTP %s", error.status)
            print_error(error.to_dict(), getattr(args, "output", "json"), ctx.stderr)
            return 1
        except (ConfigError, AuthExchangeError, OAuthCallbackError, InvalidOptionError) as error:
            print(f"Error: {error}", file=ctx.stderr)
            return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
