"""Container version commands: list, get, create from a workspace, publish."""

from __future__ import annotations

import argparse

from gtm_cli.commands.common import CliContext, add_command, emit_list, print_dry_run
from gtm_cli.managers.version_manager import (
    VersionManager,
    format_version,
    format_version_header,
    version_body,
)


def versions_list(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    manager = VersionManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=lambda token: manager.list_versions(ids["account_id"], ids["container_id"], token),
        fetch_all=lambda: manager.list_all_versions(ids["account_id"], ids["container_id"]),
        items_field=manager.items_field,
        formatter=format_version_header,
    )


def versions_get(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    version = VersionManager(ctx.api(args)).get_version(
        ids["account_id"], ids["container_id"], args.version_id
    )
    ctx.emit(format_version(version), args)


def versions_create(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    body = version_body(name=args.name, notes=args.notes)
    result = VersionManager(ctx.api(args)).create_version(path, body, dry_run=args.dry_run)
    if result.get("dryRun"):
        print_dry_run(result, ctx)
        return
    if result.get("compilerError"):
        ctx.warn("Warning: Version created with compiler errors.")
    ctx.emit(format_version(result.get("containerVersion") or {}), args)


def versions_publish(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    result = VersionManager(ctx.api(args)).publish_version(
        ids["account_id"], ids["container_id"], args.version_id, dry_run=args.dry_run
    )
    if result.get("dryRun"):
        print_dry_run(result, ctx)
        return
    if result.get("compilerError"):
        ctx.warn("Warning: Published with compiler errors.")
    ctx.emit(format_version(result.get("containerVersion") or {}), args)


def register(subparsers: argparse._SubParsersAction) -> None:
    versions = subparsers.add_parser("versions", help="Manage GTM container versions")
    group = versions.add_subparsers(dest="action", required=True)
    add_command(group, "list", "List container versions", versions_list, scope="container", kind="list")

    get = add_command(group, "get", "Get details of a specific version", versions_get, scope="container")
    get.add_argument("--version-id", required=True, help="Container version ID")

    create = add_command(
        group,
        "create",
        "Create a container version from a workspace",
        versions_create,
        scope="workspace",
        kind="mutation",
    )
    create.add_argument("--name", help="Version name")
    create.add_argument("--notes", help="Version notes")

    publish = add_command(
        group, "publish", "Publish a container version", versions_publish, scope="container", kind="mutation"
    )
    publish.add_argument("--version-id", required=True, help="Container version ID to publish")
