"""Per-operation state shared by the collection loader and the mapper."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from themevars.core.collections import CollectionInfo


class WriteMode(str, Enum):
    """Whether a run removes sentiment variables the theme no longer defines."""

    REPLACE = "replace"
    MERGE = "merge"

    @classmethod
    def coerce(cls, value: WriteMode | str | None) -> WriteMode:
        if isinstance(value, cls):
            return value
        cleaned = (value or "").strip().lower()
        for mode in cls:
            if mode.value == cleaned:
                return mode
        return cls.REPLACE


@dataclass
class MappingSession:
    """State for one user-initiated mapping operation."""

    key_data: dict[str, dict[str, object]] | None = None
    sentiment: str | None = None
    write_mode: WriteMode = WriteMode.REPLACE
    available_collections: list[CollectionInfo] = field(default_factory=list)
    collections_loaded: bool = False
    imported_variable_ids: list[str] = field(default_factory=list)

    def find_collection(self, collection_id: str) -> CollectionInfo | None:
        for info in self.available_collections:
            if info.id == collection_id:
                return info
        return None
