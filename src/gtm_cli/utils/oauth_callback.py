"""Loopback listener that receives the OAuth2 authorization redirect."""

from __future__ import annotations

import html
import logging
import time
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from gtm_cli.utils.errors import OAuthCallbackError, OAuthCallbackTimeout

log = logging.getLogger(__name__)

REDIRECT_HOST = "127.0.0.1"
REDIRECT_PORT = 8485
CALLBACK_TIMEOUT_S = 300.0

_PAGE = "<html><body><h1>{title}</h1>{extra}</body></html>"


class _CallbackHTTPServer(HTTPServer):
    def __init__(self, address: tuple[str, int], expected_state: str):
        super().__init__(address, _CallbackHandler)
        self.expected_state = expected_state
        self.code: str | None = None
        self.error: OAuthCallbackError | None = None

    @property
    def finished(self) -> bool:
        return self.code is not None or self.error is not None


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CallbackHTTPServer
    # Socket timeout for a client that connects but never sends a request.
    timeout = 10

    def do_GET(self) -> None:  # noqa: N802
        query = parse_qs(urlparse(self.path).query)
        error = _first(query, "error")
        state = _first(query, "state")
        code = _first(query, "code")

        if error:
            self._respond(400, f"Authorization failed: {html.escape(error)}")
            self.server.error = OAuthCallbackError(f"OAuth authorization failed: {error}")
            return

        if state != self.server.expected_state:
            log.debug("Ignoring OAuth callback with mismatched state: %s", self.path)
            self._respond(400, "Invalid state parameter")
            return

        if not code:
            self._respond(400, "Missing authorization code")
            self.server.error = OAuthCallbackError(
                "OAuth callback did not include an authorization code."
            )
            return

        self._respond(200, "Authorization successful!", "<p>You can close this window.</p>")
        self.server.code = code

    def _respond(self, status: int, title: str, extra: str = "") -> None:
        payload = _PAGE.format(title=title, extra=extra).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        log.debug("OAuth callback: " + format, *args)


def _first(query: dict[str, list[str]], name: str) -> str | None:
    values = query.get(name)
    return values[0] if values else None


class OAuthCallbackServer:
    """Scoped loopback listener for a single OAuth authorization redirect.

    The socket is bound on enter and always released on exit::

        with OAuthCallbackServer(state) as server:
            open_browser(url_with(server.redirect_uri))
            code = server.wait_for_code()

    Requests whose ``state`` does not match are answered with an error page and
    otherwise ignored, so stray or duplicate requests do not end the wait.
    """

    def __init__(self, expected_state: str, *, host: str = REDIRECT_HOST, port: int = REDIRECT_PORT):
        self.expected_state = expected_state
        self.host = host
        self.port = port
        self._server: _CallbackHTTPServer | None = None

    def __enter__(self) -> "OAuthCallbackServer":
        self._server = _CallbackHTTPServer((self.host, self.port), self.expected_state)
        self.port = self._server.server_address[1]
        log.debug("Listening for OAuth callback on %s:%d", self.host, self.port)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._server is not None:
            self._server.server_close()
            self._server = None

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.port}"

    def wait_for_code(self, timeout_s: float = CALLBACK_TIMEOUT_S) -> str:
        """Serve requests until a valid callback arrives.

        Raises:
            OAuthCallbackError: If the provider reports an error or omits the code.
            OAuthCallbackTimeout: If nothing valid arrives within `timeout_s`.
        """
        if self._server is None:
            raise RuntimeError("OAuthCallbackServer must be used as a context manager.")

        server = self._server
        deadline = time.monotonic() + timeout_s
        while not server.finished:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise OAuthCallbackTimeout(
                    f"OAuth callback timed out after {timeout_s:g} seconds"
                )
            server.timeout = remaining
            server.handle_request()

        if server.error is not None:
            raise server.error
        return str(server.code)
