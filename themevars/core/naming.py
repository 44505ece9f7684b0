"""Name lookup helpers shared by every consumer of resolved references."""

from __future__ import annotations

from typing import Mapping, TypeVar

V = TypeVar("V")

COLOR_PREFIX = "color/"
STEPLESS_COLORS = frozenset({"black", "white"})


def is_stepless_color(name: str) -> bool:
    """Return True for palette colors without numeric steps (black, white)."""
    return name.rsplit("/", 1)[-1].lower() in STEPLESS_COLORS


def resolve_candidate_names(name: str) -> list[str]:
    """Return the ordered, de-duplicated names to try when looking up ``name``.

    Order: exact, with ``color/`` prefix, without it, then the bare
    ``color/black`` / ``color/white`` form for stepless colors. A trailing
    ``_100`` opacity marker is dropped first.
    """
    normalized = name[:-4] if name.endswith("_100") else name
    bare = normalized[len(COLOR_PREFIX):] if normalized.startswith(COLOR_PREFIX) else normalized
    candidates = [normalized, COLOR_PREFIX + bare, bare]
    if is_stepless_color(normalized):
        candidates.append(COLOR_PREFIX + normalized.rsplit("/", 1)[-1].lower())

    ordered: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in ordered:
            ordered.append(candidate)
    return ordered


def find_source_variable(variables_by_name: Mapping[str, V], name: str) -> V | None:
    for candidate in resolve_candidate_names(name):
        variable = variables_by_name.get(candidate)
        if variable is not None:
            return variable
    return None


def find_variable_key(key_data: Mapping[str, Mapping[str, object]], name: str) -> str | None:
    """Look up the library key for ``name`` in exported key data."""
    for candidate in resolve_candidate_names(name):
        entry = key_data.get(candidate)
        if not isinstance(entry, Mapping):
            continue
        key = entry.get("key")
        if isinstance(key, str) and key:
            return key
    return None
