"""Shared fixtures: a small variable document with a local palette and a library."""

from __future__ import annotations

import pytest

from themevars.core.host import (
    DocumentHost,
    LibraryCollection,
    LibraryVariable,
    Variable,
    VariableCollection,
    VariableMode,
)


def make_palette_host() -> DocumentHost:
    palette = VariableCollection(
        id="VariableCollectionId:1",
        name="Palette",
        modes=[VariableMode("VariableCollectionId:1:0", "Value")],
    )
    semantic = VariableCollection(id="VariableCollectionId:2", name="Semantic")
    variables = [
        Variable("VariableID:1", "color/red/500", "k-red-500", palette.id),
        Variable("VariableID:2", "red/700_90", "k-red-700-90", palette.id),
        Variable("VariableID:3", "color/white", "k-white", palette.id),
    ]
    library = LibraryCollection(
        key="lib-primitives",
        name="Primitives",
        library_name="Design System",
        variables=[
            LibraryVariable("lk-red-500", "color/red/500"),
            LibraryVariable("lk-red-700-90", "color/red/700_90"),
            LibraryVariable("lk-blue-500", "color/blue/500"),
            LibraryVariable("lk-black", "color/black"),
        ],
    )
    return DocumentHost(
        collections=[palette, semantic],
        variables=variables,
        libraries=[library],
    )


@pytest.fixture
def host() -> DocumentHost:
    return make_palette_host()
