"""Local JSON configuration store for the GTM CLI.

The config document holds two top-level objects:

```json
{
  "defaults": {"account_id": "...", "container_id": "...", "workspace_id": "..."},
  "auth": {"oauth_token": "...", "oauth_refresh_token": "...", "oauth_expires_at": 0}
}
```

The file is read and rewritten as a whole; there is no locking.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Protocol

from gtm_cli.utils.errors import ConfigError

CONFIG_PATH_ENV_VAR = "GTM_CONFIG_PATH"
CONFIG_DIR_NAME = "gtm-cli"
CONFIG_FILE_NAME = "config.json"


def default_config_path() -> Path:
    """Return the config path from GTM_CONFIG_PATH or the XDG config directory."""
    override = os.getenv(CONFIG_PATH_ENV_VAR)
    if override:
        return Path(override).expanduser()
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


class ConfigStore(Protocol):
    """Minimal read/write interface the credential resolver depends on."""

    def read(self) -> dict[str, Any]: ...

    def write(self, data: dict[str, Any]) -> None: ...


class JsonConfigStore:
    """Config store backed by a single JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._closed = False

    @classmethod
    def open(cls, path: str | Path | None = None) -> "JsonConfigStore":
        return cls(Path(path) if path else default_config_path())

    def __enter__(self) -> "JsonConfigStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConfigError(f"Config store for {self.path} is closed.")

    def read(self) -> dict[str, Any]:
        self._ensure_open()
        if not self.path.exists():
            return {}

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {self.path}: {exc}") from exc
        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file {self.path} is not valid JSON.") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.path} must contain a JSON object.")
        return data

    def write(self, data: dict[str, Any]) -> None:
        self._ensure_open()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        # Holds tokens and client secrets.
        os.chmod(self.path, 0o600)

    def get(self, key: str, default: Any = None) -> Any:
        return self.read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self.read()
        data[key] = value
        self.write(data)

    def delete(self, key: str) -> None:
        data = self.read()
        if key in data:
            del data[key]
            self.write(data)
