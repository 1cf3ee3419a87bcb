"""Access-token resolution for the Google Tag Manager API.

A bearer token comes from, in order: an explicit ``--access-token`` value, the
``GTM_ACCESS_TOKEN`` environment variable, or the credential record stored in
the config file (service account key path or OAuth2 user token).
"""

from __future__ import annotations

import logging
import os
import secrets
import time
import webbrowser
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

# Google may return broader scopes than requested (e.g. from prior grants).
os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")

import requests  # noqa: E402
from google.auth.exceptions import GoogleAuthError  # noqa: E402
from google.auth.transport.requests import Request as GoogleAuthRequest  # noqa: E402
from google.oauth2 import credentials as oauth2_credentials  # noqa: E402
from google.oauth2 import service_account  # noqa: E402
from google_auth_oauthlib.flow import Flow  # noqa: E402
from oauthlib.oauth2.rfc6749.errors import OAuth2Error  # noqa: E402

from gtm_cli.utils.config import ConfigStore  # noqa: E402
from gtm_cli.utils.credentials import (  # noqa: E402
    Credential,
    NoCredential,
    OAuthCredential,
    ServiceAccountCredential,
    credential_from_record,
    credential_to_record,
    load_service_account_key,
)
from gtm_cli.utils.errors import (  # noqa: E402
    AuthExchangeError,
    ConfigError,
    NotAuthenticatedError,
)
from gtm_cli.utils.oauth_callback import (  # noqa: E402
    CALLBACK_TIMEOUT_S,
    REDIRECT_PORT,
    OAuthCallbackServer,
)

log = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GTM_SCOPES = [
    "https://www.googleapis.com/auth/tagmanager.readonly",
    "https://www.googleapis.com/auth/tagmanager.edit.containers",
    "https://www.googleapis.com/auth/tagmanager.edit.containerversions",
    "https://www.googleapis.com/auth/tagmanager.publish",
]

TOKEN_ENV_VAR = "GTM_ACCESS_TOKEN"
CLIENT_ID_ENV_VAR = "GTM_CLIENT_ID"
CLIENT_SECRET_ENV_VAR = "GTM_CLIENT_SECRET"

NOT_AUTHENTICATED_MESSAGE = (
    "No credentials found. Provide one via:\n"
    "  1. --access-token flag\n"
    f"  2. {TOKEN_ENV_VAR} environment variable\n"
    "  3. gtm auth login"
)


@dataclass(frozen=True)
class AuthStatus:
    """Current authentication mode, as reported by `gtm auth status`."""

    method: str
    details: str


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _build_flow(client_id: str, client_secret: str, redirect_uri: str) -> Flow:
    client_config = {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": GOOGLE_AUTH_URL,
            "token_uri": GOOGLE_TOKEN_URL,
            "redirect_uris": [redirect_uri],
        }
    }
    return Flow.from_client_config(client_config, scopes=GTM_SCOPES, redirect_uri=redirect_uri)


class CredentialResolver:
    """Produce a bearer token for one CLI invocation.

    Parameters
    ----------
    store:
        Config store holding the persisted ``auth`` record.
    environ:
        Environment mapping; defaults to ``os.environ``.
    clock:
        Returns the current time in seconds since the epoch.
    auth_request:
        google-auth transport used for token endpoint exchanges. A fresh
        ``google.auth.transport.requests.Request`` is used when omitted.
    """

    def __init__(
        self,
        store: ConfigStore,
        *,
        environ: Mapping[str, str] | None = None,
        clock: Callable[[], float] = time.time,
        auth_request: Any = None,
    ):
        self.store = store
        self.environ = os.environ if environ is None else environ
        self.clock = clock
        self._auth_request = auth_request

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _transport(self) -> Any:
        return self._auth_request if self._auth_request is not None else GoogleAuthRequest()

    def load_credential(self) -> Credential:
        return credential_from_record(self.store.read().get("auth"))

    def _save_credential(self, credential: Credential) -> None:
        data = self.store.read()
        record = credential_to_record(credential)
        if record is None:
            data.pop("auth", None)
        else:
            data["auth"] = record
        self.store.write(data)

    def resolve(self, explicit_token: str | None = None) -> str | None:
        """Return a bearer token, or None when nothing is configured."""
        if explicit_token:
            return explicit_token

        env_token = self.environ.get(TOKEN_ENV_VAR)
        if env_token:
            return env_token

        credential = self.load_credential()
        if isinstance(credential, ServiceAccountCredential):
            return self._service_account_token(credential.key_path)

        if isinstance(credential, OAuthCredential):
            if not credential.is_expired(self._now_ms()):
                return credential.token
            if credential.can_refresh:
                return self._refresh_oauth_token(credential)
            log.debug("Stored OAuth token expired and cannot be refreshed")
            return None

        return None

    def require(self, explicit_token: str | None = None) -> str:
        token = self.resolve(explicit_token)
        if not token:
            raise NotAuthenticatedError(NOT_AUTHENTICATED_MESSAGE)
        return token

    def _service_account_token(self, key_path: str) -> str:
        info = load_service_account_key(key_path)
        try:
            credentials = service_account.Credentials.from_service_account_info(
                info,
                scopes=GTM_SCOPES,
                additional_claims={"aud": info.get("token_uri")},
            )
        except (ValueError, KeyError) as exc:
            raise ConfigError(f"Invalid service account key file {key_path}: {exc}") from exc

        log.debug("Exchanging service account assertion for %s", info.get("client_email"))
        try:
            credentials.refresh(self._transport())
        except GoogleAuthError as exc:
            raise AuthExchangeError(f"Service account token exchange failed: {exc}") from exc
        return credentials.token

    def _refresh_oauth_token(self, credential: OAuthCredential) -> str:
        refreshed = oauth2_credentials.Credentials(
            token=None,
            refresh_token=credential.refresh_token,
            token_uri=GOOGLE_TOKEN_URL,
            client_id=credential.client_id,
            client_secret=credential.client_secret,
        )
        log.debug("Refreshing expired OAuth token")
        try:
            refreshed.refresh(self._transport())
        except GoogleAuthError as exc:
            raise AuthExchangeError("Failed to refresh OAuth token. Run: gtm auth login") from exc

        expires_at = None
        if refreshed.expiry is not None:
            # google-auth stamps expiry as naive UTC from its own clock; keep only the lifetime.
            lifetime = refreshed.expiry.replace(tzinfo=timezone.utc) - datetime.now(timezone.utc)
            expires_at = self._now_ms() + round(lifetime.total_seconds()) * 1000
        self._save_credential(
            OAuthCredential(
                token=refreshed.token,
                refresh_token=refreshed.refresh_token or credential.refresh_token,
                expires_at=expires_at,
                client_id=credential.client_id,
                client_secret=credential.client_secret,
            )
        )
        return refreshed.token

    def login(
        self,
        client_id: str,
        client_secret: str,
        *,
        open_browser: Callable[[str], Any] = webbrowser.open,
        port: int = REDIRECT_PORT,
        timeout_s: float = CALLBACK_TIMEOUT_S,
    ) -> OAuthCredential:
        """Run the interactive OAuth2 flow and persist the resulting tokens.

        Raises:
            OAuthCallbackError: If the redirect reports an error, lacks a code,
                or does not arrive in time.
            AuthExchangeError: If the authorization code cannot be exchanged.
        """
        state = secrets.token_hex(32)

        with OAuthCallbackServer(state, port=port) as server:
            flow = _build_flow(client_id, client_secret, server.redirect_uri)
            auth_url, _ = flow.authorization_url(
                access_type="offline",
                prompt="consent",
                state=state,
            )
            open_browser(auth_url)
            code = server.wait_for_code(timeout_s)

        try:
            token = flow.fetch_token(code=code)
        except (OAuth2Error, requests.RequestException, ValueError) as exc:
            raise AuthExchangeError(f"Token exchange failed: {exc}") from exc

        expires_in = token.get("expires_in")
        credential = OAuthCredential(
            token=token["access_token"],
            refresh_token=token.get("refresh_token"),
            expires_at=self._now_ms() + int(expires_in) * 1000 if expires_in is not None else None,
            client_id=client_id,
            client_secret=client_secret,
        )
        self._save_credential(credential)
        return credential

    def store_service_account(self, key_path: str) -> str:
        """Validate a key file and remember its path. Returns the account email."""
        info = load_service_account_key(key_path)
        self._save_credential(ServiceAccountCredential(key_path=key_path))
        return str(info.get("client_email") or "")

    def status(self) -> AuthStatus | None:
        credential = self.load_credential()

        if isinstance(credential, ServiceAccountCredential):
            try:
                info = load_service_account_key(credential.key_path)
            except ConfigError:
                return AuthStatus(
                    method="Service Account",
                    details=f"Key file: {credential.key_path} (unreadable)",
                )
            return AuthStatus(method="Service Account", details=str(info.get("client_email") or ""))

        if isinstance(credential, OAuthCredential):
            if not credential.is_expired(self._now_ms()):
                details = "Token valid"
            elif credential.refresh_token:
                details = "Token expired (will auto-refresh)"
            else:
                details = "Token expired (no refresh token)"
            return AuthStatus(method="OAuth2", details=details)

        return None

    def clear(self) -> None:
        self._save_credential(NoCredential())
