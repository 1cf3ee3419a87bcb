"""Utility helpers for working with GTM tags."""

from __future__ import annotations

import json
from typing import Any

from gtm_cli.managers.base import ResourceManager, drop_unset, split_ids


def format_tag(tag: dict[str, Any]) -> dict[str, Any]:
    return {
        "tag_id": tag.get("tagId"),
        "name": tag.get("name"),
        "type": tag.get("type"),
        "firing_triggers": ", ".join(tag.get("firingTriggerId") or []),
        "blocking_triggers": ", ".join(tag.get("blockingTriggerId") or []),
        "paused": tag.get("paused", False),
        "tag_manager_url": tag.get("tagManagerUrl") or "",
    }


def format_tag_detail(tag: dict[str, Any]) -> dict[str, Any]:
    """Row for a single tag, including its parameters as a JSON string."""
    return {
        **format_tag(tag),
        "parameters": json.dumps(tag["parameter"]) if tag.get("parameter") else "",
        "notes": tag.get("notes") or "",
    }


def tag_body(
    *,
    name: str | None = None,
    tag_type: str | None = None,
    parameter: list[dict[str, Any]] | None = None,
    firing_trigger_id: str | None = None,
    blocking_trigger_id: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    return drop_unset(
        {
            "name": name,
            "type": tag_type,
            "parameter": parameter,
            "firingTriggerId": split_ids(firing_trigger_id),
            "blockingTriggerId": split_ids(blocking_trigger_id),
            "notes": notes,
        }
    )


class TagManager(ResourceManager):
    """Tag operations within a workspace path (list/get/create/update/delete)."""

    collection = "tags"
    items_field = "tag"

    def tag_path(self, workspace_path: str, tag_id: str) -> str:
        return f"{self.collection_path(workspace_path)}/{tag_id}"

    def list_tags(self, workspace_path: str, page_token: str | None = None) -> dict[str, Any]:
        return self.list_page(workspace_path, page_token)

    def list_all_tags(self, workspace_path: str) -> list[dict[str, Any]]:
        return self.list_all(workspace_path)

    def get_tag(self, workspace_path: str, tag_id: str) -> dict[str, Any]:
        return self.get(self.tag_path(workspace_path, tag_id))

    def create_tag(
        self, workspace_path: str, tag: dict[str, Any], *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.create(workspace_path, tag, dry_run=dry_run)

    def update_tag(
        self,
        workspace_path: str,
        tag_id: str,
        changes: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.update(self.tag_path(workspace_path, tag_id), changes, dry_run=dry_run)

    def delete_tag(self, workspace_path: str, tag_id: str, *, dry_run: bool = False) -> dict[str, Any]:
        return self.delete(self.tag_path(workspace_path, tag_id), dry_run=dry_run)
