"""Collection discovery and cleanup of sample-imported library variables."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

from themevars.core.host import (
    HostError,
    LibraryCollection,
    VariableCollection,
    VariableHost,
    VariableInUseError,
)

if TYPE_CHECKING:
    from themevars.core.session import MappingSession

logger = logging.getLogger(__name__)

LOCAL = "local"
LIBRARY = "library"

_SAMPLE_IMPORT_COUNT = 3


@dataclass(frozen=True, slots=True)
class CollectionInfo:
    """Display-ready description of a local or library collection."""

    id: str
    host_id: str
    display_name: str
    library_name: str
    collection_name: str
    variable_count: int
    type: str
    mode_count: int = 1
    description: str = ""
    error: str | None = None

    @property
    def is_library(self) -> bool:
        return self.type == LIBRARY


@dataclass
class CollectionListing:
    sources: list[CollectionInfo] = field(default_factory=list)
    targets: list[CollectionInfo] = field(default_factory=list)
    warning: str = ""


@dataclass
class CleanupReport:
    removed: int = 0
    kept: int = 0


def local_collection_info(collection: VariableCollection, variable_count: int) -> CollectionInfo:
    return CollectionInfo(
        id=collection.id,
        host_id=collection.id,
        display_name=f"{collection.name} (Local)",
        library_name="Unknown Library",
        collection_name=collection.name,
        variable_count=variable_count,
        type=LOCAL,
        mode_count=len(collection.modes) or 1,
        description=collection.description,
    )


def library_collection_info(
    collection: LibraryCollection,
    variable_count: int | None,
    error: str | None = None,
) -> CollectionInfo:
    return CollectionInfo(
        id=collection.key,
        host_id=collection.key,
        display_name=f"{collection.library_name} → {collection.name}",
        library_name=collection.library_name or "Unknown Library",
        collection_name=collection.name,
        variable_count=variable_count or 0,
        type=LIBRARY,
        description=collection.description,
        error=error,
    )


def load_collections(host: VariableHost, session: MappingSession) -> CollectionListing:
    """List source and target collections and record them on the session.

    Sources are every readable library collection followed by the local
    collections; targets are local collections only. A failure to list
    libraries degrades to local sources with a warning.
    """
    local_infos = [
        local_collection_info(collection, len(host.local_variables(collection.id)))
        for collection in host.local_collections()
    ]
    logger.info("local collections loaded: %d", len(local_infos))

    warning = ""
    library_infos: list[CollectionInfo] = []
    try:
        libraries = host.library_collections()
    except HostError as exc:
        logger.error("could not list library collections: %s", exc)
        warning = f"Could not load library collections: {exc}"
        libraries = []

    for library in libraries:
        info = _check_library_collection(host, library, session)
        if info.error:
            continue
        library_infos.append(info)
    logger.info("library collections loaded: %d of %d", len(library_infos), len(libraries))

    session.available_collections = library_infos + local_infos
    session.collections_loaded = True
    return CollectionListing(
        sources=list(session.available_collections),
        targets=local_infos,
        warning=warning,
    )


def cleanup_imported_variables(host: VariableHost, session: MappingSession) -> CleanupReport:
    """Remove variables imported only to check library access."""
    report = CleanupReport()
    if not session.imported_variable_ids:
        logger.debug("no imported variables to clean up")
        return report

    for variable_id in session.imported_variable_ids:
        if host.get_variable(variable_id) is None:
            continue
        try:
            host.remove_variable(variable_id)
            report.removed += 1
        except VariableInUseError:
            report.kept += 1
        except HostError as exc:
            logger.warning("unexpected cleanup error for variable %s: %s", variable_id, exc)

    if report.kept:
        logger.info("kept %d imported variables that are in use", report.kept)
    session.imported_variable_ids = []
    return report


def _check_library_collection(
    host: VariableHost,
    library: LibraryCollection,
    session: MappingSession,
) -> CollectionInfo:
    try:
        variables = host.library_variables(library.key)
    except HostError as exc:
        logger.error("error processing library collection %r: %s", library.name, exc)
        return library_collection_info(library, None, error=str(exc))

    _import_samples(host, variables[:_SAMPLE_IMPORT_COUNT], session)
    return library_collection_info(library, len(variables))


def _import_samples(host: VariableHost, variables: Sequence, session: MappingSession) -> None:
    for entry in variables:
        try:
            imported = host.import_variable_by_key(entry.key)
        except HostError as exc:
            logger.warning("failed to import sample variable %s: %s", entry.name, exc)
            continue
        if imported.id not in session.imported_variable_ids:
            session.imported_variable_ids.append(imported.id)
