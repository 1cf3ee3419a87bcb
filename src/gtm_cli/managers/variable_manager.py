"""Helpers for working with GTM variables."""

from __future__ import annotations

import json
from typing import Any

from gtm_cli.managers.base import ResourceManager, drop_unset


def format_variable(variable: dict[str, Any]) -> dict[str, Any]:
    return {
        "variable_id": variable.get("variableId"),
        "name": variable.get("name"),
        "type": variable.get("type"),
        "tag_manager_url": variable.get("tagManagerUrl") or "",
    }


def format_variable_detail(variable: dict[str, Any]) -> dict[str, Any]:
    return {
        **format_variable(variable),
        "parameters": json.dumps(variable["parameter"]) if variable.get("parameter") else "",
        "notes": variable.get("notes") or "",
    }


def variable_body(
    *,
    name: str | None = None,
    variable_type: str | None = None,
    parameter: list[dict[str, Any]] | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    return drop_unset(
        {"name": name, "type": variable_type, "parameter": parameter, "notes": notes}
    )


class VariableManager(ResourceManager):
    """Variable operations (list/get/create/update/delete)."""

    collection = "variables"
    items_field = "variable"

    def variable_path(self, workspace_path: str, variable_id: str) -> str:
        return f"{self.collection_path(workspace_path)}/{variable_id}"

    def list_variables(self, workspace_path: str, page_token: str | None = None) -> dict[str, Any]:
        return self.list_page(workspace_path, page_token)

    def list_variables_from_workspace_path(self, workspace_path: str) -> list[dict[str, Any]]:
        """Return all variables for a workspace path (paginated)."""
        return self.list_all(workspace_path)

    def get_variable(self, workspace_path: str, variable_id: str) -> dict[str, Any]:
        return self.get(self.variable_path(workspace_path, variable_id))

    def create_variable(
        self, workspace_path: str, variable: dict[str, Any], *, dry_run: bool = False
    ) -> dict[str, Any]:
        """Create a variable in a workspace."""
        return self.create(workspace_path, variable, dry_run=dry_run)

    def update_variable(
        self,
        workspace_path: str,
        variable_id: str,
        changes: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.update(
            self.variable_path(workspace_path, variable_id), changes, dry_run=dry_run
        )

    def delete_variable(
        self, workspace_path: str, variable_id: str, *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.delete(self.variable_path(workspace_path, variable_id), dry_run=dry_run)
