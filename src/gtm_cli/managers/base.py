"""Shared CRUD plumbing for GTM resource managers."""

from __future__ import annotations

from typing import Any

from gtm_cli.utils.gtm_api import GtmApi
from gtm_cli.utils.http import list_all_pages


def split_ids(value: str | None) -> list[str] | None:
    """Turn a comma-separated CLI value into a list of trimmed ids."""
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def drop_unset(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


def dry_run_result(method: str, url: str, body: Any = None) -> dict[str, Any]:
    result: dict[str, Any] = {"dryRun": True, "method": method, "url": url}
    if body is not None:
        result["body"] = body
    return result


class ResourceManager:
    """List/get/create/update/delete for one collection under a parent path.

    Subclasses set `collection` (URL segment) and `items_field` (list response
    field) and expose resource-specific method names.
    """

    collection = ""
    items_field = ""

    def __init__(self, api: GtmApi):
        self.api = api

    def collection_path(self, parent_path: str) -> str:
        return f"{parent_path}/{self.collection}" if parent_path else self.collection

    def list_page(self, parent_path: str, page_token: str | None = None) -> dict[str, Any]:
        """Return one page: {<items_field>: [...], "nextPageToken"?: "..."}."""
        return self.api.get(
            self.collection_path(parent_path),
            params={"pageToken": page_token},
        )

    def list_all(self, parent_path: str) -> list[dict[str, Any]]:
        return list_all_pages(
            lambda page_token: self.list_page(parent_path, page_token),
            items_field=self.items_field,
        )

    def get(self, path: str) -> dict[str, Any]:
        return self.api.get(path)

    def create(
        self, parent_path: str, body: dict[str, Any], *, dry_run: bool = False
    ) -> dict[str, Any]:
        path = self.collection_path(parent_path)
        if dry_run:
            return dry_run_result("POST", self.api.url(path), body)
        return self.api.post(path, body)

    def update(
        self, path: str, changes: dict[str, Any], *, dry_run: bool = False
    ) -> dict[str, Any]:
        """Fetch the resource, overlay `changes`, and PUT it back (last write wins)."""
        current = self.get(path)
        body = {**current, **changes}
        if dry_run:
            return dry_run_result("PUT", self.api.url(path), body)
        return self.api.put(path, body)

    def delete(self, path: str, *, dry_run: bool = False) -> dict[str, Any]:
        if dry_run:
            return dry_run_result("DELETE", self.api.url(path))
        return self.api.delete(path)
