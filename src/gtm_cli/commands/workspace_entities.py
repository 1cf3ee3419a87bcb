"""Tag, trigger and variable commands (resources that live in a workspace)."""

from __future__ import annotations

import argparse

from gtm_cli.commands.common import (
    CliContext,
    add_command,
    emit_deleted,
    emit_list,
    emit_mutation,
    parse_json_option,
)
from gtm_cli.managers.tag_manager import TagManager, format_tag, format_tag_detail, tag_body
from gtm_cli.managers.trigger_manager import (
    TriggerManager,
    format_trigger,
    format_trigger_detail,
    trigger_body,
)
from gtm_cli.managers.variable_manager import (
    VariableManager,
    format_variable,
    format_variable_detail,
    variable_body,
)


# tags


def tags_list(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    manager = TagManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=lambda token: manager.list_tags(path, token),
        fetch_all=lambda: manager.list_all_tags(path),
        items_field=manager.items_field,
        formatter=format_tag,
    )


def tags_get(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    ctx.emit(format_tag_detail(TagManager(ctx.api(args)).get_tag(path, args.tag_id)), args)


def tags_create(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    body = tag_body(
        name=args.name,
        tag_type=args.type,
        parameter=parse_json_option(args.parameter, "--parameter"),
        firing_trigger_id=args.firing_trigger_id,
        blocking_trigger_id=args.blocking_trigger_id,
        notes=args.notes or None,
    )
    result = TagManager(ctx.api(args)).create_tag(path, body, dry_run=args.dry_run)
    emit_mutation(result, args, ctx, format_tag)


def tags_update(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    changes = tag_body(
        name=args.name or None,
        parameter=parse_json_option(args.parameter, "--parameter"),
        firing_trigger_id=args.firing_trigger_id,
        blocking_trigger_id=args.blocking_trigger_id,
        notes=args.notes,
    )
    result = TagManager(ctx.api(args)).update_tag(path, args.tag_id, changes, dry_run=args.dry_run)
    emit_mutation(result, args, ctx, format_tag)


def tags_delete(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    result = TagManager(ctx.api(args)).delete_tag(path, args.tag_id, dry_run=args.dry_run)
    emit_deleted(result, f"Tag {args.tag_id}", ctx)


# triggers


def triggers_list(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    manager = TriggerManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=lambda token: manager.list_triggers(path, token),
        fetch_all=lambda: manager.list_all_triggers(path),
        items_field=manager.items_field,
        formatter=format_trigger,
    )


def triggers_get(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    trigger = TriggerManager(ctx.api(args)).get_trigger(path, args.trigger_id)
    ctx.emit(format_trigger_detail(trigger), args)


def triggers_create(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    body = trigger_body(
        name=args.name,
        trigger_type=args.type,
        filter_conditions=parse_json_option(args.filter, "--filter"),
        custom_event_filter=parse_json_option(args.custom_event_filter, "--custom-event-filter"),
        notes=args.notes or None,
    )
    result = TriggerManager(ctx.api(args)).create_trigger(path, body, dry_run=args.dry_run)
    emit_mutation(result, args, ctx, format_trigger)


def triggers_update(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    changes = trigger_body(
        name=args.name or None,
        trigger_type=args.type or None,
        filter_conditions=parse_json_option(args.filter, "--filter"),
        custom_event_filter=parse_json_option(args.custom_event_filter, "--custom-event-filter"),
        notes=args.notes,
    )
    result = TriggerManager(ctx.api(args)).update_trigger(
        path, args.trigger_id, changes, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_trigger)


def triggers_delete(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    result = TriggerManager(ctx.api(args)).delete_trigger(path, args.trigger_id, dry_run=args.dry_run)
    emit_deleted(result, f"Trigger {args.trigger_id}", ctx)


# variables


def variables_list(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    manager = VariableManager(ctx.api(args))
    emit_list(
        args,
        ctx,
        fetch_page=lambda token: manager.list_variables(path, token),
        fetch_all=lambda: manager.list_variables_from_workspace_path(path),
        items_field=manager.items_field,
        formatter=format_variable,
    )


def variables_get(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    variable = VariableManager(ctx.api(args)).get_variable(path, args.variable_id)
    ctx.emit(format_variable_detail(variable), args)


def variables_create(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    body = variable_body(
        name=args.name,
        variable_type=args.type,
        parameter=parse_json_option(args.parameter, "--parameter"),
        notes=args.notes or None,
    )
    result = VariableManager(ctx.api(args)).create_variable(path, body, dry_run=args.dry_run)
    emit_mutation(result, args, ctx, format_variable)


def variables_update(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    changes = variable_body(
        name=args.name or None,
        variable_type=args.type or None,
        parameter=parse_json_option(args.parameter, "--parameter"),
        notes=args.notes,
    )
    result = VariableManager(ctx.api(args)).update_variable(
        path, args.variable_id, changes, dry_run=args.dry_run
    )
    emit_mutation(result, args, ctx, format_variable)


def variables_delete(args: argparse.Namespace, ctx: CliContext) -> None:
    path = ctx.workspace_path(args)
    result = VariableManager(ctx.api(args)).delete_variable(
        path, args.variable_id, dry_run=args.dry_run
    )
    emit_deleted(result, f"Variable {args.variable_id}", ctx)


def _register_tags(subparsers: argparse._SubParsersAction) -> None:
    tags = subparsers.add_parser("tags", help="Manage GTM tags")
    group = tags.add_subparsers(dest="action", required=True)
    add_command(group, "list", "List tags in a workspace", tags_list, scope="workspace", kind="list")
    get = add_command(group, "get", "Get details of a specific tag", tags_get, scope="workspace")
    get.add_argument("--tag-id", required=True, help="GTM tag ID")

    create = add_command(group, "create", "Create a new tag", tags_create, scope="workspace", kind="mutation")
    create.add_argument("--name", required=True, help="Tag name")
    create.add_argument("--type", required=True, help='Tag type (e.g., "html", "gaawe")')
    update = add_command(group, "update", "Update a tag", tags_update, scope="workspace", kind="mutation")
    update.add_argument("--tag-id", required=True, help="GTM tag ID")
    update.add_argument("--name", help="New tag name")
    for parser in (create, update):
        parser.add_argument("--parameter", help="Tag parameters as JSON array")
        parser.add_argument("--firing-trigger-id", help="Comma-separated firing trigger IDs")
        parser.add_argument("--blocking-trigger-id", help="Comma-separated blocking trigger IDs")
        parser.add_argument("--notes", help="Tag notes")

    delete = add_command(group, "delete", "Delete a tag", tags_delete, scope="workspace", kind="mutation")
    delete.add_argument("--tag-id", required=True, help="GTM tag ID")


def _register_triggers(subparsers: argparse._SubParsersAction) -> None:
    triggers = subparsers.add_parser("triggers", help="Manage GTM triggers")
    group = triggers.add_subparsers(dest="action", required=True)
    add_command(group, "list", "List triggers in a workspace", triggers_list, scope="workspace", kind="list")
    get = add_command(group, "get", "Get details of a specific trigger", triggers_get, scope="workspace")
    get.add_argument("--trigger-id", required=True, help="GTM trigger ID")

    create = add_command(
        group, "create", "Create a new trigger", triggers_create, scope="workspace", kind="mutation"
    )
    create.add_argument("--name", required=True, help="Trigger name")
    create.add_argument(
        "--type", required=True, help='Trigger type (e.g., "pageview", "click", "customEvent")'
    )
    update = add_command(group, "update", "Update a trigger", triggers_update, scope="workspace", kind="mutation")
    update.add_argument("--trigger-id", required=True, help="GTM trigger ID")
    update.add_argument("--name", help="New trigger name")
    update.add_argument("--type", help="New trigger type")
    for parser in (create, update):
        parser.add_argument("--filter", help="Trigger filter conditions as JSON array")
        parser.add_argument(
            "--custom-event-filter", help="Custom event filter conditions as JSON array"
        )
        parser.add_argument("--notes", help="Trigger notes")

    delete = add_command(group, "delete", "Delete a trigger", triggers_delete, scope="workspace", kind="mutation")
    delete.add_argument("--trigger-id", required=True, help="GTM trigger ID")


def _register_variables(subparsers: argparse._SubParsersAction) -> None:
    variables = subparsers.add_parser("variables", help="Manage GTM variables")
    group = variables.add_subparsers(dest="action", required=True)
    add_command(group, "list", "List variables in a workspace", variables_list, scope="workspace", kind="list")
    get = add_command(group, "get", "Get details of a specific variable", variables_get, scope="workspace")
    get.add_argument("--variable-id", required=True, help="GTM variable ID")

    create = add_command(
        group, "create", "Create a new variable", variables_create, scope="workspace", kind="mutation"
    )
    create.add_argument("--name", required=True, help="Variable name")
    create.add_argument("--type", required=True, help='Variable type (e.g., "v", "jsm", "c")')
    update = add_command(
        group, "update", "Update a variable", variables_update, scope="workspace", kind="mutation"
    )
    update.add_argument("--variable-id", required=True, help="GTM variable ID")
    update.add_argument("--name", help="New variable name")
    update.add_argument("--type", help="New variable type")
    for parser in (create, update):
        parser.add_argument("--parameter", help="Variable parameters as JSON array")
        parser.add_argument("--notes", help="Variable notes")

    delete = add_command(
        group, "delete", "Delete a variable", variables_delete, scope="workspace", kind="mutation"
    )
    delete.add_argument("--variable-id", required=True, help="GTM variable ID")


def register(subparsers: argparse._SubParsersAction) -> None:
    _register_tags(subparsers)
    _register_triggers(subparsers)
    _register_variables(subparsers)
