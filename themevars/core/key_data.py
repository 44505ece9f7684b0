"""Exported variable keys: the JSON shortcut for library lookups.

The file maps variable names to their library keys::

    {"color/red/500": {"key": "4f1c...", "resolvedType": "COLOR"}}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from themevars.core.host import VariableHost

_MAX_KEY_DATA_BYTES = 8 * 1024 * 1024


class KeyDataError(ValueError):
    """Raised when a key data file is unreadable or malformed."""


def extract_variable_keys(host: VariableHost, collection_id: str) -> dict[str, dict[str, str]]:
    """Build key data for a local collection id or a library collection key."""
    if host.get_collection(collection_id) is not None:
        entries = [
            (variable.name, variable.key or variable.id, variable.resolved_type)
            for variable in host.local_variables(collection_id)
        ]
    else:
        entries = [
            (variable.name, variable.key, variable.resolved_type)
            for variable in host.library_variables(collection_id)
        ]
    return {
        name: {"key": key, "resolvedType": resolved_type}
        for name, key, resolved_type in entries
    }


def load_key_data(path: str | Path) -> dict[str, dict[str, object]]:
    path = Path(path)
    try:
        if path.stat().st_size > _MAX_KEY_DATA_BYTES:
            raise KeyDataError(f"{path}: file exceeds max size ({_MAX_KEY_DATA_BYTES} bytes)")
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise KeyDataError(f"Unable to read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise KeyDataError(f"Invalid JSON in {path}: {exc}") from exc
    return validate_key_data(data, context=str(path))


def validate_key_data(data: object, *, context: str = "key data") -> dict[str, dict[str, object]]:
    if not isinstance(data, Mapping):
        raise KeyDataError(f"Expected JSON object in {context}")
    cleaned: dict[str, dict[str, object]] = {}
    for name, entry in data.items():
        if not isinstance(name, str) or not isinstance(entry, Mapping):
            raise KeyDataError(f"{context}: entry {name!r} must map a name to an object")
        key = entry.get("key")
        if not isinstance(key, str) or not key.strip():
            raise KeyDataError(f"{context}: entry {name!r} has no key")
        cleaned[name] = dict(entry)
    return cleaned


def save_key_data(data: Mapping[str, Mapping[str, object]], path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
