"""Utility helpers for working with GTM containers."""

from __future__ import annotations

from typing import Any

from gtm_cli.managers.base import ResourceManager, drop_unset, split_ids
from gtm_cli.utils.gtm_api import account_path, container_path

USAGE_CONTEXTS = ("web", "android", "ios", "amp", "server")


def format_container(container: dict[str, Any]) -> dict[str, Any]:
    return {
        "account_id": container.get("accountId"),
        "container_id": container.get("containerId"),
        "name": container.get("name"),
        "public_id": container.get("publicId"),
        "usage_context": ", ".join(container.get("usageContext") or []),
        "domain_name": ", ".join(container.get("domainName") or []),
        "tag_manager_url": container.get("tagManagerUrl") or "",
    }


def container_body(
    *,
    name: str | None = None,
    usage_context: str | None = None,
    domain_name: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    return drop_unset(
        {
            "name": name,
            "usageContext": [usage_context.upper()] if usage_context else None,
            "domainName": split_ids(domain_name),
            "notes": notes,
        }
    )


class ContainerManager(ResourceManager):
    """Container operations (list/get/create/update/delete)."""

    collection = "containers"
    items_field = "container"

    def list_containers(self, account_id: str, page_token: str | None = None) -> dict[str, Any]:
        return self.list_page(account_path(account_id), page_token)

    def list_all_containers(self, account_id: str) -> list[dict[str, Any]]:
        return self.list_all(account_path(account_id))

    def get_container(self, account_id: str, container_id: str) -> dict[str, Any]:
        return self.get(container_path(account_id, container_id))

    def create_container(
        self, account_id: str, container: dict[str, Any], *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.create(account_path(account_id), container, dry_run=dry_run)

    def update_container(
        self,
        account_id: str,
        container_id: str,
        changes: dict[str, Any],
        *,
        dry_run: bool = False,
    ) -> dict[str, Any]:
        return self.update(container_path(account_id, container_id), changes, dry_run=dry_run)

    def delete_container(
        self, account_id: str, container_id: str, *, dry_run: bool = False
    ) -> dict[str, Any]:
        return self.delete(container_path(account_id, container_id), dry_run=dry_run)
