"""Helpers for working with GTM accounts."""

from __future__ import annotations

from typing import Any

from gtm_cli.managers.base import ResourceManager
from gtm_cli.utils.gtm_api import account_path


def format_account(account: dict[str, Any]) -> dict[str, Any]:
    return {
        "account_id": account.get("accountId"),
        "name": account.get("name"),
        "share_data": account.get("shareData", False),
        "tag_manager_url": account.get("tagManagerUrl") or "",
    }


class AccountManager(ResourceManager):
    """Account operations (list/get). Accounts cannot be created or deleted via the API."""

    collection = "accounts"
    items_field = "account"

    def list_accounts(self, page_token: str | None = None) -> dict[str, Any]:
        return self.list_page("", page_token)

    def list_all_accounts(self) -> list[dict[str, Any]]:
        return self.list_all("")

    def get_account(self, account_id: str) -> dict[str, Any]:
        return self.get(account_path(account_id))
