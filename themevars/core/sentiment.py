"""Sentiment labels derived from theme filenames."""

from __future__ import annotations

import re
from typing import Iterable, Mapping, TypeVar

from themevars.core.models import VariableMapping

SENTIMENTS: tuple[str, ...] = (
    "danger",
    "warning",
    "success",
    "info",
    "brand",
    "neutral",
)

_SENTIMENT_FILENAME_RE = re.compile(rf"^({'|'.join(SENTIMENTS)})\.css$")

V = TypeVar("V")


def detect_sentiment(filename: str | None) -> str | None:
    """Return the sentiment for ``danger.css``-style filenames, else None."""
    if not filename:
        return None
    match = _SENTIMENT_FILENAME_RE.match(filename)
    return match.group(1) if match else None


def find_orphaned_sentiment_variables(
    existing: Mapping[str, V],
    mappings: Iterable[VariableMapping],
    sentiment: str,
) -> list[tuple[str, V]]:
    """List existing ``color/<group>/<sentiment>`` variables the theme no longer defines."""
    if sentiment not in SENTIMENTS:
        raise ValueError(f"Unknown sentiment: {sentiment!r}")
    pattern = re.compile(rf"color/[^/]+/{re.escape(sentiment)}($|/)")
    wanted = {mapping.target_name for mapping in mappings}
    return [
        (name, variable)
        for name, variable in existing.items()
        if pattern.search(name) and name not in wanted
    ]
