"""Container versions: list headers, inspect, create from a workspace, publish."""

from __future__ import annotations

import logging
from typing import Any

from gtm_cli.managers.base import ResourceManager, drop_unset, dry_run_result
from gtm_cli.utils.gtm_api import container_path

log = logging.getLogger(__name__)


def format_version_header(header: dict[str, Any]) -> dict[str, Any]:
    return {
        "version_id": header.get("containerVersionId"),
        "name": header.get("name") or "",
        "num_tags": header.get("numTags") or "0",
        "num_triggers": header.get("numTriggers") or "0",
        "num_variables": header.get("numVariables") or "0",
        "deleted": header.get("deleted", False),
    }


def format_version(version: dict[str, Any]) -> dict[str, Any]:
    return {
        "version_id": version.get("containerVersionId"),
        "name": version.get("name") or "",
        "description": version.get("description") or "",
        "num_tags": len(version.get("tag") or []),
        "num_triggers": len(version.get("trigger") or []),
        "num_variables": len(version.get("variable") or []),
        "tag_manager_url": version.get("tagManagerUrl") or "",
    }


def version_body(*, name: str | None = None, notes: str | None = None) -> dict[str, Any]:
    return drop_unset({"name": name or None, "notes": notes or None})


class VersionManager(ResourceManager):
    """Version operations for a container.

    Listing goes through `version_headers`; creation happens on a workspace
    (`:create_version`) and publishing on a version (`:publish`). Both return
    `{"containerVersion": {...}, "compilerError": bool}`.
    """

    collection = "version_headers"
    items_field = "containerVersionHeader"

    def version_path(self, account_id: str, container_id: str, version_id: str) -> str:
        return f"{container_path(account_id, container_id)}/versions/{version_id}"

    def list_versions(
        self, account_id: str, container_id: str, page_token: str | None = None
    ) -> dict[str, Any]:
        return self.list_page(container_path(account_id, container_id), page_token)

    def list_all_versions(self, account_id: str, container_id: str) -> list[dict[str, Any]]:
        return self.list_all(container_path(account_id, container_id))

    def get_version(self, account_id: str, container_id: str, version_id: str) -> dict[str, Any]:
        return self.get(self.version_path(account_id, container_id, version_id))

    def create_version(
        self, workspace_path: str, body: dict[str, Any], *, dry_run: bool = False
    ) -> dict[str, Any]:
        path = f"{workspace_path}:create_version"
        if dry_run:
            return dry_run_result("POST", self.api.url(path), body)
        result = self.api.post(path, body)
        if result.get("compilerError"):
            log.info("Version created from %s with compiler errors", workspace_path)
        return result

    def publish_version(
        self, account_id: str, container_id: str, version_id: str, *, dry_run: bool = False
    ) -> dict[str, Any]:
        path = f"{self.version_path(account_id, container_id, version_id)}:publish"
        if dry_run:
            return dry_run_result("POST", self.api.url(path))
        result = self.api.post(path)
        if result.get("compilerError"):
            log.info("Version %s published with compiler errors", version_id)
        return result
