"""Utility helpers for working with GTM triggers."""

from __future__ import annotations

import json
from typing import Any

from gtm_cli.managers.base import ResourceManager, drop_unset


def _json_or_blank(value: Any) -> str:
    return json.dumps(value) if value else ""


def format_trigger(trigger: dict[str, Any]) -> dict[str, Any]:
    return {
        "trigger_id": trigger.get("triggerId"),
        "name": trigger.get("name"),
        "type": trigger.get("type"),
        "tag_manager_url": trigger.get("tagManagerUrl") or "",
    }


def format_trigger_detail(trigger: dict[str, Any]) -> dict[str, Any]:
    return {
        **format_trigger(trigger),
        "filter": _json_or_blank(trigger.get("filter")),
        "custom_event_filter": _json_or_blank(trigger.get("customEventFilter")),
        "auto_event_filter": _json_or_blank(trigger.get("autoEventFilter")),
        "notes": trigger.get("notes") or "",
    }


def trigger_body(
    *,
    name: str | None = None,
    trigger_type: str | None = None,
    filter_conditions: list[dict[str, Any]] | None = None,
    custom_event_filter: list[dict[str, Any]] | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    return drop_unset(
        {
            "name": name,
            "type": trigger_type,
            "filter": filter_conditions,
            "customEventFilter": custom_event_filter,
            "notes": notes,
        }
    )


class TriggerManager(ResourceManager):
    """Trigger operations within a workspace path."""

    collection = "triggers"
    items_field = "trigger"

    def trigger_path(self, workspace_path: str, trigger_id: str) -> str:
        return f"{self.collection_path(workspace_path)}/{trigger_id}"

    def list_triggers(self, workspace_path: str, page_token: str | None = None) -> dict[str, Any]:
        return self.list_page(workspace_path, page_token)

    def list_all_triggers(self, workspace_path: str) -> list[dict[str, Any]]:
        return self.list_all(workspace_path)

    def get_trigger(self, workspace_path: str, trigger_id: str) -> dict[str, Any]:
        return self.get(self.trigger_path(workspace_path, trigger_id))

    def create_trigger(
        self, workspace_path: str, trigger: dict[str, Any], *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.create(workspace_path, trigger, dry_run=dry_run)

    def update_trigger(
        self,
        workspace_path: str,
        trigger_id: str,
        changes: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.update(self.trigger_path(workspace_path, trigger_id), changes, dry_run=dry_run)

    def delete_trigger(
        self, workspace_path: str, trigger_id: str, *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.delete(self.trigger_path(workspace_path, trigger_id), dry_run=dry_run)
