"""Authenticated handle on the Tag Manager REST API v2."""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

from gtm_cli.utils.auth import auth_headers
from gtm_cli.utils.http import DEFAULT_TIMEOUT_S, request, with_retry

API_BASE = "https://tagmanager.googleapis.com/tagmanager/v2"


def account_path(account_id: str) -> str:
    return f"accounts/{account_id}"


def container_path(account_id: str, container_id: str) -> str:
    return f"{account_path(account_id)}/containers/{container_id}"


def workspace_path(account_id: str, container_id: str, workspace_id: str) -> str:
    return f"{container_path(account_id, container_id)}/workspaces/{workspace_id}"


class GtmApi:
    """Issues retried, bearer-authenticated JSON calls against API paths."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = API_BASE,
        max_retries: int = 3,
        initial_delay_s: float = 1.0,
        timeout: float = DEFAULT_TIMEOUT_S,
        session: Any = None,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.initial_delay_s = initial_delay_s
        self.timeout = timeout
        self.session = session
        self.sleep = sleep

    def url(self, path: str, params: Mapping[str, Any] | None = None) -> str:
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    def call(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        url = self.url(path, params)
        headers = auth_headers(self.token)
        return with_retry(
            lambda: request(
                url,
                method=method,
                headers=headers,
                body=body,
                timeout=self.timeout,
                session=self.session,
            ),
            max_retries=self.max_retries,
            initial_delay_s=self.initial_delay_s,
            sleep=self.sleep,
        )

    def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("GET", path, params=params)

    def post(self, path: str, body: Any = None) -> Any:
        return self.call("POST", path, body=body)

    def put(self, path: str, body: Any) -> Any:
        return self.call("PUT", path, body=body)

    def delete(self, path: str) -> Any:
        return self.call("DELETE", path)
