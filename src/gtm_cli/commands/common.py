"""Shared argparse flags and helpers for the resource sub-commands."""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Callable, TextIO

from gtm_cli.utils.auth import CredentialResolver
from gtm_cli.utils.config import JsonConfigStore
from gtm_cli.utils.gtm_api import GtmApi, workspace_path
from gtm_cli.utils.output import OUTPUT_FORMATS, print_output
from gtm_cli.utils.targets import resolve_target_ids


class InvalidOptionError(ValueError):
    """Raised when a flag value cannot be parsed (e.g. malformed JSON)."""


@dataclass
class CliContext:
    """Everything a command handler needs besides its parsed arguments."""

    store: JsonConfigStore
    resolver: CredentialResolver
    session: Any = None
    sleep: Callable[[float], Any] = time.sleep
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)

    def api(self, args: argparse.Namespace) -> GtmApi:
        token = self.resolver.require(getattr(args, "access_token", None))
        return GtmApi(token, session=self.session, sleep=self.sleep)

    def ids(self, args: argparse.Namespace, *required: str) -> dict[str, str | None]:
        return resolve_target_ids(
            account_id=getattr(args, "account_id", None),
            container_id=getattr(args, "container_id", None),
            workspace_id=getattr(args, "workspace_id", None),
            target_key=getattr(args, "target_key", None),
            targets_path=getattr(args, "targets_path", None),
            defaults=self.store.get("defaults") or {},
            required=required,
            config_hint=str(self.store.path),
        )

    def workspace_path(self, args: argparse.Namespace) -> str:
        ids = self.ids(args, "account_id", "container_id", "workspace_id")
        return workspace_path(ids["account_id"], ids["container_id"], ids["workspace_id"])

    def emit(self, data: Any, args: argparse.Namespace) -> None:
        print_output(data, args.output, self.stdout)

    def warn(self, message: str) -> None:
        print(message, file=self.stderr)


def add_common_args(parser: argparse.ArgumentParser, *, scope: str = "account") -> None:
    """Register auth, identifier and output flags.

    `scope` is the deepest identifier the command needs: "none", "account",
    "container" or "workspace".
    """
    parser.add_argument("--access-token", help="Access token for authentication")
    if scope != "none":
        parser.add_argument("--account-id", help="GTM account ID")
    if scope in ("container", "workspace"):
        parser.add_argument("--container-id", help="GTM container ID")
    if scope == "workspace":
        parser.add_argument("--workspace-id", help="GTM workspace ID")
    if scope != "none":
        parser.add_argument("--target-key", help="Named entry in the target mapping")
        parser.add_argument("--targets-path", help="Path to the target mapping YAML")
    parser.add_argument(
        "-o",
        "--output",
        choices=OUTPUT_FORMATS,
        default="json",
        help="Output format (default: json)",
    )


def add_list_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page-token", help="Page token for pagination")
    parser.add_argument("--all", action="store_true", help="Fetch every page")
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress non-essential output"
    )


def add_dry_run_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run", action="store_true", help="Preview the request without executing"
    )


def parse_json_option(value: str | None, flag: str) -> Any:
    """Parse a JSON flag value; None passes through."""
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        raise InvalidOptionError(f"Invalid JSON for {flag}: {exc}") from exc


def print_dry_run(result: dict[str, Any], ctx: CliContext) -> None:
    target = "" if result["method"] == "DELETE" else " to"
    print(f"Dry run — would {result['method']}{target}:", file=ctx.stdout)
    print(f"  {result['url']}", file=ctx.stdout)
    if "body" in result:
        print("Body:", file=ctx.stdout)
        print(json.dumps(result["body"], indent=2), file=ctx.stdout)


def emit_list(
    args: argparse.Namespace,
    ctx: CliContext,
    *,
    fetch_page: Callable[[str | None], dict[str, Any]],
    fetch_all: Callable[[], list[dict[str, Any]]],
    items_field: str,
    formatter: Callable[[dict[str, Any]], dict[str, Any]],
) -> None:
    """Print one page (with a next-page hint on stderr) or, with --all, every item."""
    if args.all:
        ctx.emit([formatter(item) for item in fetch_all()], args)
        return

    page = fetch_page(args.page_token)
    rows = [formatter(item) for item in page.get(items_field) or []]
    next_token = page.get("nextPageToken")
    if next_token and not args.quiet:
        ctx.warn(f"Next page token: {next_token}")
    ctx.emit(rows, args)


def emit_mutation(
    result: dict[str, Any],
    args: argparse.Namespace,
    ctx: CliContext,
    formatter: Callable[[dict[str, Any]], dict[str, Any]],
) -> None:
    if result.get("dryRun"):
        print_dry_run(result, ctx)
        return
    ctx.emit(formatter(result), args)


def emit_deleted(result: dict[str, Any], label: str, ctx: CliContext) -> None:
    if result.get("dryRun"):
        print_dry_run(result, ctx)
        return
    print(f"{label} deleted.", file=ctx.stdout)


def add_command(
    group: argparse._SubParsersAction,
    name: str,
    help_text: str,
    handler: Callable[[argparse.Namespace, CliContext], None],
    *,
    scope: str,
    kind: str = "read",
) -> argparse.ArgumentParser:
    """Add a sub-command with the common flags; `kind` is "read", "list" or "mutation"."""
    parser = group.add_parser(name, help=help_text)
    add_common_args(parser, scope=scope)
    if kind == "list":
        add_list_args(parser)
    elif kind == "mutation":
        add_dry_run_arg(parser)
    parser.set_defaults(func=handler)
    return parser
