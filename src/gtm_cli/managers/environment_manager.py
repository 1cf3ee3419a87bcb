"""Helpers for working with GTM environments."""

from __future__ import annotations

from typing import Any

from gtm_cli.managers.base import ResourceManager, drop_unset
from gtm_cli.utils.gtm_api import container_path


def format_environment(environment: dict[str, Any]) -> dict[str, Any]:
    return {
        "environment_id": environment.get("environmentId"),
        "name": environment.get("name"),
        "type": environment.get("type"),
        "description": environment.get("description") or "",
        "container_version_id": environment.get("containerVersionId") or "",
        "url": environment.get("url") or "",
        "tag_manager_url": environment.get("tagManagerUrl") or "",
    }


def environment_body(
    *,
    name: str | None = None,
    description: str | None = None,
    url: str | None = None,
    container_version_id: str | None = None,
) -> dict[str, Any]:
    return drop_unset(
        {
            "name": name,
            "description": description,
            "url": url,
            "containerVersionId": container_version_id,
        }
    )


class EnvironmentManager(ResourceManager):
    """Environment operations for a container."""

    collection = "environments"
    items_field = "environment"

    def environment_path(self, account_id: str, container_id: str, environment_id: str) -> str:
        return f"{self.collection_path(container_path(account_id, container_id))}/{environment_id}"

    def list_environments(
        self, account_id: str, container_id: str, page_token: str | None = None
    ) -> dict[str, Any]:
        return self.list_page(container_path(account_id, container_id), page_token)

    def list_all_environments(self, account_id: str, container_id: str) -> list[dict[str, Any]]:
        return self.list_all(container_path(account_id, container_id))

    def get_environment(
        self, account_id: str, container_id: str, environment_id: str
    ) -> dict[str, Any]:
        return self.get(self.environment_path(account_id, container_id, environment_id))

    def create_environment(
        self,
        account_id: str,
        container_id: str,
        environment: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.create(container_path(account_id, container_id), environment, dry_run=dry_run)

    def update_environment(
        self,
        account_id: str,
        container_id: str,
        environment_id: str,
        changes: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.update(
            self.environment_path(account_id, container_id, environment_id),
            changes,
            dry_run=dry_run,
        )

    def delete_environment(
        self, account_id: str, container_id: str, environment_id: str, *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.delete(
            self.environment_path(account_id, container_id, environment_id), dry_run=dry_run
        )
