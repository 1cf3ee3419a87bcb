"""Helpers for working with GTM workspaces."""

from __future__ import annotations

from typing import Any

from gtm_cli.managers.base import ResourceManager, drop_unset
from gtm_cli.utils.gtm_api import container_path, workspace_path


def format_workspace(workspace: dict[str, Any]) -> dict[str, Any]:
    return {
        "account_id": workspace.get("accountId"),
        "container_id": workspace.get("containerId"),
        "workspace_id": workspace.get("workspaceId"),
        "name": workspace.get("name"),
        "description": workspace.get("description") or "",
        "tag_manager_url": workspace.get("tagManagerUrl") or "",
    }


def workspace_body(*, name: str | None = None, description: str | None = None) -> dict[str, Any]:
    return drop_unset({"name": name, "description": description})


class WorkspaceManager(ResourceManager):
    """Workspace operations (list/get/create/update/delete)."""

    collection = "workspaces"
    items_field = "workspace"

    def list_workspaces(
        self, account_id: str, container_id: str, page_token: str | None = None
    ) -> dict[str, Any]:
        return self.list_page(container_path(account_id, container_id), page_token)

    def list_all_workspaces(self, account_id: str, container_id: str) -> list[dict[str, Any]]:
        return self.list_all(container_path(account_id, container_id))

    def get_workspace(self, account_id: str, container_id: str, workspace_id: str) -> dict[str, Any]:
        return self.get(workspace_path(account_id, container_id, workspace_id))

    def create_workspace(
        self,
        account_id: str,
        container_id: str,
        workspace: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.create(container_path(account_id, container_id), workspace, dry_run=dry_run)

    def update_workspace(
        self,
        account_id: str,
        container_id: str,
        workspace_id: str,
        changes: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.update(
            workspace_path(account_id, container_id, workspace_id), changes, dry_run=dry_run
        )

    def delete_workspace(
        self, account_id: str, container_id: str, workspace_id: str, *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.delete(workspace_path(account_id, container_id, workspace_id), dry_run=dry_run)
