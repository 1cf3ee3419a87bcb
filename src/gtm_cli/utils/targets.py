"""Resolve account/container/workspace identifiers for GTM commands.

Identifiers come from, in order: an explicit flag, a named target from a
target-key mapping (YAML file or environment variable), or the ``defaults``
object of the config file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from gtm_cli.utils.errors import ConfigError

DEFAULT_TARGETS_CONFIG = "config/targets.yaml"
TARGETS_ENV_VAR = "GTM_TARGETS_JSON"

_ID_FIELDS = ("account_id", "container_id", "workspace_id")
_REQUIRED_FIELDS = {"account_id", "container_id"}


def load_target_mapping(config_path: str | None) -> dict[str, dict[str, Any]]:
    """Load the target-key -> GTM account/container(/workspace) mapping.

    The mapping can be supplied from:
    - a YAML file (preferred), or
    - a JSON payload in `GTM_TARGETS_JSON`.

    The file can either be a raw mapping or contain a top-level `targets` key.
    Grouped entries are supported, e.g.:

    ```yaml
    targets:
      central:
        ga4: { account_id: "...", container_id: "...", workspace_id: "..." }
        marketing: { account_id: "...", container_id: "..." }
    ```

    which is flattened to keys like `central_ga4` / `central_marketing`.

    Args:
        config_path: Optional explicit YAML path.

    Returns:
        Normalized mapping keyed by target key.

    Raises:
        ConfigError: If no mapping is available or the mapping is malformed.
    """
    mapping = _load_mapping_from_file(config_path)
    if mapping is None:
        mapping = _load_mapping_from_env()

    if mapping is None:
        source_hint = config_path or DEFAULT_TARGETS_CONFIG
        raise ConfigError(
            "No target mapping found. Provide --targets-path, create "
            f"{source_hint}, or export JSON via {TARGETS_ENV_VAR}.",
        )

    return _normalize_mapping(mapping)


def resolve_target_ids(
    *,
    account_id: str | None = None,
    container_id: str | None = None,
    workspace_id: str | None = None,
    target_key: str | None = None,
    targets_path: str | None = None,
    defaults: Mapping[str, Any] | None = None,
    required: tuple[str, ...] = ("account_id",),
    config_hint: str = "the config file",
) -> dict[str, str | None]:
    """Resolve identifiers from flags, a named target, then config defaults.

    Args:
        account_id: Direct GTM account ID.
        container_id: Direct GTM container ID.
        workspace_id: Direct GTM workspace ID.
        target_key: Lookup key in the target mapping to fill missing identifiers.
        targets_path: Optional mapping YAML path.
        defaults: The `defaults` object from the config file.
        required: Identifier names that must resolve.
        config_hint: Config location mentioned in error messages.

    Returns:
        Dict with `account_id`, `container_id` and `workspace_id` (None when unresolved).

    Raises:
        ConfigError: If a required identifier cannot be resolved.
    """
    resolved: dict[str, str | None] = {
        "account_id": account_id,
        "container_id": container_id,
        "workspace_id": workspace_id,
    }

    if target_key:
        mapping = load_target_mapping(targets_path)
        entry = mapping.get(target_key)
        if not entry:
            available = ", ".join(sorted(mapping.keys()))
            raise ConfigError(
                f"Target key '{target_key}' not found. Available entries: {available or 'none'}",
            )
        for field in _ID_FIELDS:
            resolved[field] = resolved[field] or _as_id(entry.get(field))

    for field in _ID_FIELDS:
        resolved[field] = resolved[field] or _as_id((defaults or {}).get(field))

    for field in required:
        if not resolved.get(field):
            label = field.replace("_", " ").capitalize().replace(" id", " ID")
            flag = "--" + field.replace("_", "-")
            raise ConfigError(
                f"{label} required. Provide via {flag} flag or set a default in {config_hint}",
            )

    return resolved


def _as_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _resolve_mapping_path(config_path: str | None) -> Path | None:
    if config_path:
        return Path(config_path)

    default_targets_path = Path(DEFAULT_TARGETS_CONFIG)
    if default_targets_path.exists():
        return default_targets_path

    return None


def _load_mapping_from_file(config_path: str | None) -> dict[str, Any] | None:
    path_to_load = _resolve_mapping_path(config_path)
    if not path_to_load or not path_to_load.exists():
        return None

    with open(path_to_load, "r", encoding="utf-8") as config_file:
        raw_data = yaml.safe_load(config_file) or {}

    if not isinstance(raw_data, dict):
        raise ConfigError("Target config must be a mapping.")

    # Support both: top-level mapping, or wrapped in `targets:`.
    raw_mapping = raw_data.get("targets", raw_data)
    if raw_mapping is None:
        return None
    if not isinstance(raw_mapping, dict):
        raise ConfigError("Target config must be a mapping.")
    return raw_mapping


def _load_mapping_from_env() -> dict[str, Any] | None:
    env_payload = os.getenv(TARGETS_ENV_VAR)
    if not env_payload:
        return None

    try:
        parsed = json.loads(env_payload)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Failed to parse {TARGETS_ENV_VAR} environment variable as JSON.",
        ) from exc

    if not isinstance(parsed, dict):
        raise ConfigError(f"{TARGETS_ENV_VAR} must contain a JSON object mapping.")
    return parsed


def _pick_ids(value: dict[str, Any]) -> dict[str, Any]:
    return {field: value.get(field) for field in _ID_FIELDS if value.get(field) is not None}


def _normalize_mapping(mapping: dict[str, Any]) -> dict[str, dict[str, Any]]:
    cleaned: dict[str, dict[str, Any]] = {}

    for key, value in mapping.items():
        if not isinstance(value, dict):
            raise ConfigError(f"Target key '{key}' configuration must be a mapping.")

        if _REQUIRED_FIELDS <= set(value.keys()):
            cleaned[key] = _pick_ids(value)
            continue

        # Allow grouping keys (e.g., central: { ga4: {...}, marketing: {...} })
        subgroup_added = False
        for sub_key, sub_value in value.items():
            if not isinstance(sub_value, dict):
                continue
            if _REQUIRED_FIELDS <= set(sub_value.keys()):
                cleaned[f"{key}_{sub_key}"] = _pick_ids(sub_value)
                subgroup_added = True
        if subgroup_added:
            continue

        raise ConfigError(
            f"Target key '{key}' configuration is missing 'account_id'/'container_id' "
            "and does not contain sub-entries with those fields.",
        )

    return cleaned
