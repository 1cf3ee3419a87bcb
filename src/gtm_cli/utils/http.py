"""JSON request primitive, retry policy and pagination for the Tag Manager API."""

from __future__ import annotations

import json
import logging
import socket
import threading
import time
from typing import Any, Callable, Mapping, TypeVar

import requests

from gtm_cli.utils.errors import (
    API_ERROR,
    AUTH_FAILED,
    NOT_FOUND,
    RATE_LIMITED,
    HttpError,
)

T = TypeVar("T")

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0
READ_CHUNK_BYTES = 8192


def _parse_retry_after(value: str | None) -> int | None:
    if not value:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        # HTTP-date form is not supported; fall back to exponential backoff.
        return None
    return seconds if seconds > 0 else None


def _api_error_message(text: str, status: int) -> str:
    """Pick the most specific message out of an error response body."""
    fallback = text or f"HTTP {status}"
    try:
        payload = json.loads(text)
    except ValueError:
        return fallback
    if not isinstance(payload, dict):
        return fallback

    error = payload.get("error")
    if isinstance(error, dict) and error.get("message") is not None:
        return str(error["message"])
    if payload.get("message") is not None:
        return str(payload["message"])
    return fallback


def _classify_response(response: requests.Response, text: str) -> Any:
    status = response.status_code

    if status == 429:
        raise HttpError(
            "Rate limit exceeded",
            RATE_LIMITED,
            status,
            retry_after=_parse_retry_after(response.headers.get("retry-after")),
        )
    if status in (401, 403):
        raise HttpError(
            "Authentication failed. Check your credentials or run: gtm auth login",
            AUTH_FAILED,
            status,
        )
    if status == 404:
        raise HttpError("Resource not found. Check the IDs provided.", NOT_FOUND, status)
    if not 200 <= status < 300:
        raise HttpError(_api_error_message(text, status), API_ERROR, status)

    if not text:
        return {}
    return json.loads(text)


def _abort_transport(response: requests.Response) -> None:
    """Shut the socket down so a read blocked on a slow server returns at once."""
    connection = getattr(response.raw, "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as exc:
        log.debug("Socket already closed: %s", exc)


def _read_text(response: requests.Response, deadline: float, timeout: float) -> str:
    """Drain the streamed body, giving up once the wall-clock deadline passes."""
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise requests.Timeout(f"Request exceeded the {timeout:g}s deadline")

    watchdog = threading.Timer(remaining, _abort_transport, args=(response,))
    watchdog.daemon = True
    watchdog.start()
    chunks: list[bytes] = []
    try:
        for chunk in response.iter_content(chunk_size=READ_CHUNK_BYTES):
            chunks.append(chunk)
            if time.monotonic() >= deadline:
                break
    except requests.RequestException as exc:
        if time.monotonic() >= deadline:
            raise requests.Timeout(f"Request exceeded the {timeout:g}s deadline") from exc
        raise
    finally:
        watchdog.cancel()

    if time.monotonic() >= deadline:
        raise requests.Timeout(f"Request exceeded the {timeout:g}s deadline")
    return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")


def request(
    url: str,
    *,
    method: str = "GET",
    headers: Mapping[str, str] | None = None,
    body: Any = None,
    timeout: float = DEFAULT_TIMEOUT_S,
    session: Any = None,
) -> Any:
    """Perform one JSON exchange and classify the outcome.

    `timeout` is a hard deadline for the whole exchange. The body is streamed
    and the connection is shut down when the deadline passes, so a server that
    trickles bytes cannot keep the call alive past it.

    Args:
        url: Absolute request URL, query string included.
        method: HTTP method.
        headers: Extra headers; they override the default JSON content type.
        body: JSON-serialisable payload, sent when not None.
        timeout: Seconds before the exchange is abandoned.
        session: Object exposing ``request(method, url, **kwargs)``; defaults to
            the ``requests`` module.

    Returns:
        The decoded JSON body, or an empty dict when the body is empty.

    Raises:
        HttpError: For 429, 401/403, 404 and any other non-2xx status.
        requests.RequestException: On transport failures; ``requests.Timeout``
            once the deadline passes.
        ValueError: If a successful response carries invalid JSON.
    """
    merged_headers = {"Content-Type": "application/json", **(headers or {})}
    data = json.dumps(body) if body is not None else None
    http = session if session is not None else requests
    deadline = time.monotonic() + timeout

    log.debug("%s %s", method, url)
    response = http.request(
        method, url, headers=merged_headers, data=data, timeout=timeout, stream=True
    )
    try:
        log.debug("%s %s -> %d", method, url, response.status_code)
        return _classify_response(response, _read_text(response, deadline, timeout))
    finally:
        response.close()


def with_retry(
    fn: Callable[[], T],
    *,
    max_retries: int = 3,
    initial_delay_s: float = 1.0,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """Execute `fn()` with exponential backoff retries.

    Every failure is retried, whatever its kind. A rate-limit error carrying a
    retry-after value waits exactly that long instead of the backoff delay.

    Args:
        fn: Callable that performs a single API request and returns the decoded payload.
        max_retries: Number of retries after the initial attempt.
        initial_delay_s: Delay before the first retry; doubles on each attempt.
        sleep: Sleep function, replaceable in tests.

    Returns:
        The return value of `fn()`.

    Raises:
        The last exception once all attempts have failed.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as exc:
            if attempt >= max_retries:
                raise
            if isinstance(exc, HttpError) and exc.retry_after and exc.retry_after > 0:
                delay_s = float(exc.retry_after)
            else:
                delay_s = initial_delay_s * (2**attempt)
            log.debug(
                "Attempt %d failed (%s), retrying in %.1fs", attempt + 1, exc, delay_s
            )
            sleep(delay_s)
            attempt += 1


def list_all_pages(
    fetch_page: Callable[[str | None], dict[str, Any]],
    *,
    items_field: str,
) -> list[dict[str, Any]]:
    """Collect all items across a paginated GTM list endpoint.

    Args:
        fetch_page: Function that accepts an optional page token and returns a parsed
            response payload (dict) from the GTM API.
        items_field: Response field containing list items (e.g., "tag", "trigger").

    Returns:
        All items from all pages, in received order.
    """
    items: list[dict[str, Any]] = []
    page_token: str | None = None

    while True:
        page = fetch_page(page_token)
        raw_items = page.get(items_field) or []
        if isinstance(raw_items, list):
            items.extend([x for x in raw_items if isinstance(x, dict)])
        page_token = page.get("nextPageToken")
        if not page_token:
            break

    return items
