from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from gtm_cli.utils.config import JsonConfigStore, default_config_path
from gtm_cli.utils.credentials import (
    NoCredential,
    OAuthCredential,
    ServiceAccountCredential,
    credential_from_record,
    credential_to_record,
    load_service_account_key,
)
from gtm_cli.utils.errors import ConfigError


def test_default_config_path_prefers_env_override(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("GTM_CONFIG_PATH", str(tmp_path / "custom.json"))
    assert default_config_path() == tmp_path / "custom.json"


def test_default_config_path_uses_xdg_config_home(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("GTM_CONFIG_PATH", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_config_path() == tmp_path / "gtm-cli" / "config.json"


def test_json_store_missing_or_blank_file_reads_empty(tmp_path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path)
    assert store.read() == {}

    path.write_text("  \n", encoding="utf-8")
    assert store.read() == {}


def test_json_store_write_creates_private_file(tmp_path) -> None:
    path = tmp_path / "nested" / "config.json"
    with JsonConfigStore.open(path) as store:
        store.write({"defaults": {"account_id": "1"}})

    assert json.loads(path.read_text(encoding="utf-8")) == {"defaults": {"account_id": "1"}}
    if os.name == "posix":
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_json_store_get_set_delete(tmp_path) -> None:
    store = JsonConfigStore(tmp_path / "config.json")
    store.set("defaults", {"container_id": "2"})
    store.set("auth", {"oauth_token": "T"})

    assert store.get("defaults") == {"container_id": "2"}
    store.delete("auth")
    assert store.get("auth") is None
    assert store.read() == {"defaults": {"container_id": "2"}}


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_json_store_rejects_invalid_documents(tmp_path, content: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        JsonConfigStore(path).read()


def test_json_store_refuses_use_after_close(tmp_path) -> None:
    store = JsonConfigStore(tmp_path / "config.json")
    store.close()
    with pytest.raises(ConfigError):
        store.read()


def test_credential_record_service_account_takes_precedence() -> None:
    record = {"service_account_key_path": "/keys/sa.json", "oauth_token": "T"}
    assert credential_from_record(record) == ServiceAccountCredential(key_path="/keys/sa.json")


def test_credential_record_oauth_round_trip() -> None:
    credential = OAuthCredential(
        token="T", refresh_token="R", expires_at=1_700_000_000_000, client_id="id", client_secret="s"
    )
    record = credential_to_record(credential)

    assert record["oauth_expires_at"] == 1_700_000_000_000
    assert credential_from_record(record) == credential


@pytest.mark.parametrize("record", [None, {}, {"oauth_token": ""}, "junk"])
def test_credential_record_without_token_is_no_credential(record) -> None:
    assert credential_from_record(record) == NoCredential()
    assert credential_to_record(NoCredential()) is None


def test_oauth_credential_expiry_and_refreshability() -> None:
    credential = OAuthCredential(token="T", refresh_token="R", expires_at=1000)
    assert credential.is_expired(1000)
    assert not credential.is_expired(999)
    assert not credential.can_refresh
    assert not OAuthCredential(token="T").is_expired(10**15)


def test_load_service_account_key_validates_type(tmp_path, service_account_key: Path) -> None:
    assert load_service_account_key(str(service_account_key))["client_email"].startswith("svc@")

    wrong = tmp_path / "user.json"
    wrong.write_text(json.dumps({"type": "authorized_user"}), encoding="utf-8")
    with pytest.raises(ConfigError, match="not a service account key"):
        load_service_account_key(str(wrong))

    with pytest.raises(ConfigError, match="Error reading service account key file"):
        load_service_account_key(str(tmp_path / "missing.json"))


@pytest.mark.parametrize("expires_at", ["soon", [1, 2]])
def test_credential_record_with_malformed_expiry_raises_config_error(expires_at) -> None:
    with pytest.raises(ConfigError, match="Invalid oauth_expires_at"):
        credential_from_record({"oauth_token": "T", "oauth_expires_at": expires_at})
