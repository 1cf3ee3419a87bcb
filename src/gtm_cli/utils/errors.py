"""Error types shared by the GTM CLI."""

from __future__ import annotations

from typing import Any

RATE_LIMITED = "RATE_LIMITED"
AUTH_FAILED = "AUTH_FAILED"
NOT_FOUND = "NOT_FOUND"
API_ERROR = "API_ERROR"


class GtmCliError(Exception):
    """Base class for errors raised by gtm_cli."""


class HttpError(GtmCliError):
    """A classified Tag Manager API response.

    Attributes:
        code: One of RATE_LIMITED, AUTH_FAILED, NOT_FOUND or API_ERROR.
        status: HTTP status code of the response.
        retry_after: Seconds the server asked us to wait (429 only), if sent.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status: int,
        retry_after: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "retry_after": self.retry_after}


class ConfigError(GtmCliError):
    """Raised when local configuration or a key file cannot be used."""


class NotAuthenticatedError(ConfigError):
    """Raised when no access token can be resolved."""


class AuthExchangeError(GtmCliError):
    """Raised when the OAuth token endpoint rejects an exchange."""


class OAuthCallbackError(GtmCliError):
    """Raised when the OAuth redirect reports an error or carries no code."""


class OAuthCallbackTimeout(OAuthCallbackError):
    """Raised when no valid OAuth redirect arrives in time."""
