"""Account-, container- and workspace-level resource commands."""

from __future__ import annotations

import argparse

from gtm_cli.commands.common import (
    CliContext,
    add_command,
    emit_deleted,
    emit_list,
    emit_mutation,
)
from gtm_cli.managers.account_manager import AccountManager, format_account
from gtm_cli.managers.container_manager import (
    USAGE_CONTEXTS,
    ContainerManager,
    container_body,
    format_container,
)
from gtm_cli.managers.environment_manager import (
    EnvironmentManager,
    environment_body,
    format_environment,
)
from gtm_cli.managers.workspace_manager import (
    WorkspaceManager,
    format_workspace,
    workspace_body,
)


# accounts


def accounts_list(args: argparse.Namespace, ctx: CliContext) -> None:
    manager = AccountManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=manager.list_accounts,
        fetch_all=manager.list_all_accounts,
        items_field=manager.items_field,
        formatter=format_account,
    )


def accounts_get(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id")
    ctx.emit(format_account(AccountManager(ctx.api(args)).get_account(ids["account_id"])), args)


# containers


def containers_list(args: argparse.Namespace, ctx: CliContext) -> None:
    account_id = ctx.ids(args, "account_id")["account_id"]
    manager = ContainerManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=lambda token: manager.list_containers(account_id, token),
        fetch_all=lambda: manager.list_all_containers(account_id),
        items_field=manager.items_field,
        formatter=format_container,
    )


def containers_get(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    container = ContainerManager(ctx.api(args)).get_container(ids["account_id"], ids["container_id"])
    ctx.emit(format_container(container), args)


def containers_create(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id")
    body = container_body(
        name=args.name,
        usage_context=args.usage_context,
        domain_name=args.domain_name,
        notes=args.notes or None,
    )
    result = ContainerManager(ctx.api(args)).create_container(
        ids["account_id"], body, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_container)


def containers_update(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    changes = container_body(name=args.name or None, domain_name=args.domain_name, notes=args.notes)
    result = ContainerManager(ctx.api(args)).update_container(
        ids["account_id"], ids["container_id"], changes, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_container)


def containers_delete(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    result = ContainerManager(ctx.api(args)).delete_container(
        ids["account_id"], ids["container_id"], dry_run=args.dry_run
    )
    emit_deleted(result, f"Container {ids['container_id']}", ctx)


# workspaces


def workspaces_list(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    manager = WorkspaceManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=lambda token: manager.list_workspaces(
            ids["account_id"], ids["container_id"], token
        ),
        fetch_all=lambda: manager.list_all_workspaces(ids["account_id"], ids["container_id"]),
        items_field=manager.items_field,
        formatter=format_workspace,
    )


def workspaces_get(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id", "workspace_id")
    workspace = WorkspaceManager(ctx.api(args)).get_workspace(
        ids["account_id"], ids["container_id"], ids["workspace_id"]
    )
    ctx.emit(format_workspace(workspace), args)


def workspaces_create(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    body = workspace_body(name=args.name, description=args.description or None)
    result = WorkspaceManager(ctx.api(args)).create_workspace(
        ids["account_id"], ids["container_id"], body, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_workspace)


def workspaces_update(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id", "workspace_id")
    changes = workspace_body(name=args.name or None, description=args.description)
    result = WorkspaceManager(ctx.api(args)).update_workspace(
        ids["account_id"], ids["container_id"], ids["workspace_id"], changes, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_workspace)


def workspaces_delete(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id", "workspace_id")
    result = WorkspaceManager(ctx.api(args)).delete_workspace(
        ids["account_id"], ids["container_id"], ids["workspace_id"], dry_run=args.dry_run
    )
    emit_deleted(result, f"Workspace {ids['workspace_id']}", ctx)


# environments


def environments_list(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    manager = EnvironmentManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=lambda token: manager.list_environments(
            ids["account_id"], ids["container_id"], token
        ),
        fetch_all=lambda: manager.list_all_environments(ids["account_id"], ids["container_id"]),
        items_field=manager.items_field,
        formatter=format_environment,
    )


def environments_get(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    environment = EnvironmentManager(ctx.api(args)).get_environment(
        ids["account_id"], ids["container_id"], args.environment_id
    )
    ctx.emit(format_environment(environment), args)


def environments_create(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    body = environment_body(
        name=args.name,
        description=args.description or None,
        url=args.url or None,
        container_version_id=args.container_version_id or None,
    )
    result = EnvironmentManager(ctx.api(args)).create_environment(
        ids["account_id"], ids["container_id"], body, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_environment)


def environments_update(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    changes = environment_body(
        name=args.name or None,
        description=args.description,
        url=args.url or None,
        container_version_id=args.container_version_id or None,
    )
    result = EnvironmentManager(ctx.api(args)).update_environment(
        ids["account_id"], ids["container_id"], args.environment_id, changes, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_environment)


def environments_delete(args: argparse.Namespace, ctx: CliContext) -> None:
    ids = ctx.ids(args, "account_id", "container_id")
    result = EnvironmentManager(ctx.api(args)).delete_environment(
        ids["account_id"], ids["container_id"], args.environment_id, dry_run=args.dry_run
    )
    emit_deleted(result, f"Environment {args.environment_id}", ctx)


def register(subparsers: argparse._SubParsersAction) -> None:
    accounts = subparsers.add_parser("accounts", help="Manage GTM accounts")
    group = accounts.add_subparsers(dest="action", required=True)
    add_command(group, "list", "List all accessible GTM accounts", accounts_list, scope="none", kind="list")
    add_command(group, "get", "Get details of a specific account", accounts_get, scope="account")

    containers = subparsers.add_parser("containers", help="Manage GTM containers")
    group = containers.add_subparsers(dest="action", required=True)
    add_command(group, "list", "List containers in an account", containers_list, scope="account", kind="list")
    add_command(group, "get", "Get details of a specific container", containers_get, scope="container")
    create = add_command(
        group, "create", "Create a new container", containers_create, scope="account", kind="mutation"
    )
    create.add_argument("--name", required=True, help="Container name")
    create.add_argument(
        "--usage-context", required=True, choices=USAGE_CONTEXTS, help="Usage context"
    )
    create.add_argument("--domain-name", help="Comma-separated domain names")
    create.add_argument("--notes", help="Container notes")
    update = add_command(
        group, "update", "Update a container", containers_update, scope="container", kind="mutation"
    )
    update.add_argument("--name", help="New container name")
    update.add_argument("--notes", help="New container notes")
    update.add_argument("--domain-name", help="Comma-separated domain names")
    add_command(group, "delete", "Delete a container", containers_delete, scope="container", kind="mutation")

    workspaces = subparsers.add_parser("workspaces", help="Manage GTM workspaces")
    group = workspaces.add_subparsers(dest="action", required=True)
    add_command(group, "list", "List workspaces in a container", workspaces_list, scope="container", kind="list")
    add_command(group, "get", "Get details of a specific workspace", workspaces_get, scope="workspace")
    create = add_command(
        group, "create", "Create a new workspace", workspaces_create, scope="container", kind="mutation"
    )
    create.add_argument("--name", required=True, help="Workspace name")
    create.add_argument("--description", help="Workspace description")
    update = add_command(
        group, "update", "Update a workspace", workspaces_update, scope="workspace", kind="mutation"
    )
    update.add_argument("--name", help="New workspace name")
    update.add_argument("--description", help="New workspace description")
    add_command(group, "delete", "Delete a workspace", workspaces_delete, scope="workspace", kind="mutation")

    environments = subparsers.add_parser("environments", help="Manage GTM environments")
    group = environments.add_subparsers(dest="action", required=True)
    add_command(
        group, "list", "List environments in a container", environments_list, scope="container", kind="list"
    )
    get = add_command(group, "get", "Get details of a specific environment", environments_get, scope="container")
    get.add_argument("--environment-id", required=True, help="GTM environment ID")
    create = add_command(
        group, "create", "Create a new environment", environments_create, scope="container", kind="mutation"
    )
    create.add_argument("--name", required=True, help="Environment name")
    create.add_argument("--description", help="Environment description")
    create.add_argument("--url", help="Environment URL")
    create.add_argument("--container-version-id", help="Container version ID to point to")
    update = add_command(
        group, "update", "Update an environment", environments_update, scope="container", kind="mutation"
    )
    update.add_argument("--environment-id", required=True, help="GTM environment ID")
    update.add_argument("--name", help="New environment name")
    update.add_argument("--description", help="New environment description")
    update.add_argument("--url", help="New environment URL")
    update.add_argument("--container-version-id", help="Container version ID to point to")
    delete = add_command(
        group, "delete", "Delete an environment", environments_delete, scope="container", kind="mutation"
    )
    delete.add_argument("--environment-id", required=True, help="GTM environment ID")
