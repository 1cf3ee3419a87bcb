from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock
from urllib.parse import parse_qs

import pytest


def pytest_configure() -> None:
    src_root = Path(__file__).resolve().parents[1] / "src"
    sys.path.insert(0, str(src_root))


class MemoryConfigStore:
    """In-memory stand-in for JsonConfigStore."""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data = json.loads(json.dumps(data or {}))
        self.writes = 0

    def read(self) -> dict[str, Any]:
        return json.loads(json.dumps(self.data))

    def write(self, data: dict[str, Any]) -> None:
        self.data = json.loads(json.dumps(data))
        self.writes += 1


class FakeTokenResponse:
    def __init__(self, status: int, payload: dict[str, Any]):
        self.status = status
        self.headers = {"content-type": "application/json"}
        self.data = json.dumps(payload).encode("utf-8")


class FakeTokenEndpoint:
    """google-auth transport that answers token endpoint POSTs from a queue."""

    def __init__(self, *responses: tuple[int, dict[str, Any]]):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def __call__(self, url: str = "", method: str = "GET", body: Any = None, headers: Any = None, **kwargs: Any):
        self.calls.append({"url": url, "method": method, "body": body, "headers": headers})
        status, payload = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return FakeTokenResponse(status, payload)

    def form(self, index: int = -1) -> dict[str, str]:
        body = self.calls[index]["body"]
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        return {k: v[0] for k, v in parse_qs(body).items()}


def make_response(status: int, payload: Any = None, *, text: str | None = None, headers: dict[str, str] | None = None):
    """Build a real requests.Response with the given status and body."""
    import requests
    from requests.structures import CaseInsensitiveDict

    response = requests.Response()
    response.status_code = status
    if text is None:
        text = "" if payload is None else json.dumps(payload)
    response._content = text.encode("utf-8")
    response._content_consumed = True
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    return response


def make_session(*responses) -> MagicMock:
    session = MagicMock()
    session.request.side_effect = list(responses)
    return session


@pytest.fixture
def memory_store() -> MemoryConfigStore:
    return MemoryConfigStore()


@pytest.fixture(scope="session")
def rsa_private_key_pem() -> str:
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture
def service_account_key(tmp_path, rsa_private_key_pem) -> Path:
    key_path = tmp_path / "sa-key.json"
    key_path.write_text(
        json.dumps(
            {
                "type": "service_account",
                "project_id": "demo-project",
                "private_key_id": "abc123",
                "private_key": rsa_private_key_pem,
                "client_email": "svc@demo-project.iam.gserviceaccount.com",
                "client_id": "1234567890",
                "token_uri": "https://oauth2.example.test/token",
            }
        ),
        encoding="utf-8",
    )
    return key_path


def hit_callback(port: int, query: str) -> int:
    """Send a GET to the local OAuth callback listener and return the status code."""
    import http.client

    connection = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
    try:
        connection.request("GET", f"/?{query}")
        return connection.getresponse().status
    finally:
        connection.close()
