"""Persisted credential record: exactly one of three shapes."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from gtm_cli.utils.errors import ConfigError


@dataclass(frozen=True)
class NoCredential:
    """Nothing stored; rely on --access-token or GTM_ACCESS_TOKEN."""


@dataclass(frozen=True)
class OAuthCredential:
    """User token obtained through the OAuth2 installed-app flow.

    `expires_at` is an epoch timestamp in milliseconds.
    """

    token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    client_id: str | None = None
    client_secret: str | None = None

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at is not None and now_ms >= self.expires_at

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token and self.client_id and self.client_secret)


@dataclass(frozen=True)
class ServiceAccountCredential:
    """Path to a service account JSON key; the key itself is never copied."""

    key_path: str


Credential = Union[NoCredential, OAuthCredential, ServiceAccountCredential]


def _parse_expires_at(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid oauth_expires_at in config: {value!r}. Run: gtm auth login"
        ) from exc


def credential_from_record(record: Any) -> Credential:
    """Map the persisted `auth` object onto a credential variant."""
    if not isinstance(record, dict):
        return NoCredential()

    key_path = record.get("service_account_key_path")
    if key_path:
        return ServiceAccountCredential(key_path=str(key_path))

    token = record.get("oauth_token")
    if token:
        expires_at = record.get("oauth_expires_at")
        return OAuthCredential(
            token=str(token),
            refresh_token=record.get("oauth_refresh_token") or None,
            expires_at=_parse_expires_at(expires_at),
            client_id=record.get("client_id") or None,
            client_secret=record.get("client_secret") or None,
        )

    return NoCredential()


def credential_to_record(credential: Credential) -> dict[str, Any] | None:
    if isinstance(credential, ServiceAccountCredential):
        return {"service_account_key_path": credential.key_path}
    if isinstance(credential, OAuthCredential):
        return {
            "oauth_token": credential.token,
            "oauth_refresh_token": credential.refresh_token,
            "oauth_expires_at": credential.expires_at,
            "client_id": credential.client_id,
            "client_secret": credential.client_secret,
        }
    return None


def load_service_account_key(key_path: str) -> dict[str, Any]:
    """Read and validate a service account key file.

    Raises:
        ConfigError: If the file is unreadable, not a JSON object, or not a
            service account key.
    """
    try:
        with open(key_path, "r", encoding="utf-8") as key_file:
            info = json.load(key_file)
    except OSError as exc:
        raise ConfigError(f"Error reading service account key file: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Service account key file {key_path} is not valid JSON.") from exc

    if not isinstance(info, dict) or info.get("type") != "service_account":
        raise ConfigError("The provided JSON file is not a service account key.")
    return info
