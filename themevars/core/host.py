"""Variable host: the collections and variables theme mappings are written into.

``VariableHost`` is the interface the workflow talks to. ``DocumentHost``
implements it over a JSON or YAML document holding local collections, their
variables, and the team-library collections available for import.
"""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

ALIAS_TYPE = "VARIABLE_ALIAS"
_YAML_SUFFIXES = {".yaml", ".yml"}
_MAX_DOCUMENT_BYTES = 16 * 1024 * 1024


class HostError(RuntimeError):
    """Base error raised by a variable host."""


class CollectionNotFoundError(HostError):
    """Raised when a collection id or library key is unknown."""


class VariableNotFoundError(HostError):
    """Raised when a variable id or key is unknown."""


class VariableInUseError(HostError):
    """Raised when removing a variable that other variables alias."""


class DocumentError(HostError):
    """Raised when a variable document cannot be read or is malformed."""


@dataclass(frozen=True, slots=True)
class VariableAlias:
    """A mode value pointing at another variable."""

    id: str
    type: str = ALIAS_TYPE


@dataclass
class VariableMode:
    mode_id: str
    name: str


@dataclass
class VariableCollection:
    """A local collection with named modes."""

    id: str
    name: str
    modes: list[VariableMode] = field(default_factory=list)
    default_mode_id: str = ""
    key: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not self.modes:
            self.modes.append(VariableMode(mode_id=f"{self.id}:0", name="Mode 1"))
        if not self.default_mode_id:
            self.default_mode_id = self.modes[0].mode_id

    def mode(self, mode_id: str) -> VariableMode | None:
        for mode in self.modes:
            if mode.mode_id == mode_id:
                return mode
        return None

    def add_mode(self, name: str) -> str:
        existing = {mode.mode_id for mode in self.modes}
        index = len(self.modes)
        while f"{self.id}:{index}" in existing:
            index += 1
        mode_id = f"{self.id}:{index}"
        self.modes.append(VariableMode(mode_id=mode_id, name=name))
        return mode_id

    def rename_mode(self, mode_id: str, name: str) -> None:
        mode = self.mode(mode_id)
        if mode is None:
            raise HostError(f"Mode {mode_id!r} not found in collection {self.name!r}")
        mode.name = name


@dataclass
class Variable:
    """A variable owned by a local collection, or imported from a library."""

    id: str
    name: str
    key: str
    collection_id: str
    resolved_type: str = "COLOR"
    values_by_mode: dict[str, Any] = field(default_factory=dict)
    remote: bool = False
    description: str = ""

    def set_value_for_mode(self, mode_id: str, value: Any) -> None:
        self.values_by_mode[mode_id] = value

    def aliases(self) -> set[str]:
        return {
            value.id for value in self.values_by_mode.values()
            if isinstance(value, VariableAlias)
        }


@dataclass(frozen=True, slots=True)
class LibraryVariable:
    key: str
    name: str
    resolved_type: str = "COLOR"


@dataclass
class LibraryCollection:
    """A team-library collection whose variables can be imported by key."""

    key: str
    name: str
    library_name: str = "Unknown Library"
    variables: list[LibraryVariable] = field(default_factory=list)
    description: str = ""


class VariableHost(ABC):
    """Operations the mapping workflow needs from the host application."""

    @abstractmethod
    def local_collections(self) -> list[VariableCollection]:
        ...

    @abstractmethod
    def get_collection(self, collection_id: str) -> VariableCollection | None:
        ...

    @abstractmethod
    def local_variables(self, collection_id: str | None = None) -> list[Variable]:
        ...

    @abstractmethod
    def get_variable(self, variable_id: str) -> Variable | None:
        ...

    @abstractmethod
    def library_collections(self) -> list[LibraryCollection]:
        ...

    @abstractmethod
    def library_variables(self, collection_key: str) -> list[LibraryVariable]:
        ...

    @abstractmethod
    def import_variable_by_key(self, key: str) -> Variable:
        ...

    @abstractmethod
    def create_variable(self, name: str, collection_id: str, resolved_type: str) -> Variable:
        ...

    @abstractmethod
    def remove_variable(self, variable_id: str) -> None:
        ...

    def create_variable_alias(self, variable: Variable) -> VariableAlias:
        return VariableAlias(id=variable.id)


class DocumentHost(VariableHost):
    """In-memory host backed by a variable document."""

    def __init__(
        self,
        collections: list[VariableCollection] | None = None,
        variables: list[Variable] | None = None,
        libraries: list[LibraryCollection] | None = None,
    ) -> None:
        self._collections: dict[str, VariableCollection] = {
            collection.id: collection for collection in collections or []
        }
        self._variables: dict[str, Variable] = {
            variable.id: variable for variable in variables or []
        }
        self._libraries: dict[str, LibraryCollection] = {
            library.key: library for library in libraries or []
        }
        self._next_id = len(self._variables) + 1

    # -- collections --

    def local_collections(self) -> list[VariableCollection]:
        return list(self._collections.values())

    def get_collection(self, collection_id: str) -> VariableCollection | None:
        return self._collections.get(collection_id)

    def add_collection(self, name: str, collection_id: str | None = None) -> VariableCollection:
        collection_id = collection_id or f"VariableCollectionId:{len(self._collections) + 1}"
        if collection_id in self._collections:
            raise HostError(f"Collection id already exists: {collection_id}")
        collection = VariableCollection(id=collection_id, name=name)
        self._collections[collection_id] = collection
        return collection

    # -- variables --

    def local_variables(self, collection_id: str | None = None) -> list[Variable]:
        return [
            variable for variable in self._variables.values()
            if not variable.remote
            and (collection_id is None or variable.collection_id == collection_id)
        ]

    def get_variable(self, variable_id: str) -> Variable | None:
        return self._variables.get(variable_id)

    def create_variable(self, name: str, collection_id: str, resolved_type: str) -> Variable:
        if collection_id not in self._collections:
            raise CollectionNotFoundError(f"Collection not found: {collection_id}")
        if any(variable.name == name for variable in self.local_variables(collection_id)):
            raise HostError(f"Variable {name!r} already exists in {collection_id}")
        variable = Variable(
            id=self._new_variable_id(),
            name=name,
            key=_variable_key(collection_id, name),
            collection_id=collection_id,
            resolved_type=resolved_type,
        )
        self._variables[variable.id] = variable
        return variable

    def remove_variable(self, variable_id: str) -> None:
        variable = self._variables.get(variable_id)
        if variable is None:
            raise VariableNotFoundError(f"Variable not found: {variable_id}")
        users = sorted(
            other.name for other in self._variables.values()
            if other.id != variable_id and variable_id in other.aliases()
        )
        if users:
            raise VariableInUseError(
                f"Removing this node is not allowed: {variable.name} is aliased by "
                + ", ".join(users)
            )
        del self._variables[variable_id]

    # -- libraries --

    def library_collections(self) -> list[LibraryCollection]:
        return list(self._libraries.values())

    def library_variables(self, collection_key: str) -> list[LibraryVariable]:
        library = self._libraries.get(collection_key)
        if library is None:
            raise CollectionNotFoundError(f"Library collection not found: {collection_key}")
        return list(library.variables)

    def import_variable_by_key(self, key: str) -> Variable:
        for variable in self._variables.values():
            if variable.remote and variable.key == key:
                return variable
        for library in self._libraries.values():
            for entry in library.variables:
                if entry.key == key:
                    variable = Variable(
                        id=self._new_variable_id(),
                        name=entry.name,
                        key=entry.key,
                        collection_id=f"library:{library.key}",
                        resolved_type=entry.resolved_type,
                        remote=True,
                    )
                    self._variables[variable.id] = variable
                    return variable
        raise VariableNotFoundError(f"No library variable with key {key!r}")

    # -- persistence --

    def to_dict(self) -> dict[str, Any]:
        return {
            "collections": [_collection_to_dict(c) for c in self._collections.values()],
            "variables": [_variable_to_dict(v) for v in self._variables.values()],
            "libraries": [_library_to_dict(lib) for lib in self._libraries.values()],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DocumentHost:
        try:
            collections = [_collection_from_dict(item) for item in data.get("collections") or []]
            variables = [_variable_from_dict(item) for item in data.get("variables") or []]
            libraries = [_library_from_dict(item) for item in data.get("libraries") or []]
        except (KeyError, TypeError, AttributeError) as exc:
            raise DocumentError(f"Malformed variable document: {exc}") from exc
        return cls(collections=collections, variables=variables, libraries=libraries)

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        data = self.to_dict()
        if path.suffix.lower() in _YAML_SUFFIXES:
            text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        else:
            text = json.dumps(data, indent=2)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def _new_variable_id(self) -> str:
        while f"VariableID:{self._next_id}" in self._variables:
            self._next_id += 1
        variable_id = f"VariableID:{self._next_id}"
        self._next_id += 1
        return variable_id


def load_document(path: str | Path) -> DocumentHost:
    """Load a variable document from a ``.json`` or ``.yaml`` file."""
    path = Path(path)
    try:
        if path.stat().st_size > _MAX_DOCUMENT_BYTES:
            raise DocumentError(f"{path}: file exceeds max size ({_MAX_DOCUMENT_BYTES} bytes)")
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentError(f"Unable to read {path}: {exc}") from exc

    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DocumentError(f"Invalid document {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise DocumentError(f"Expected a mapping at the top of {path}")
    return DocumentHost.from_dict(data)


def _variable_key(collection_id: str, name: str) -> str:
    return hashlib.sha1(f"{collection_id}/{name}".encode("utf-8")).hexdigest()[:16]


def _value_to_dict(value: Any) -> Any:
    if isinstance(value, VariableAlias):
        return {"type": value.type, "id": value.id}
    return value


def _value_from_dict(value: Any) -> Any:
    if isinstance(value, Mapping) and value.get("type") == ALIAS_TYPE:
        return VariableAlias(id=str(value["id"]))
    return value


def _collection_to_dict(collection: VariableCollection) -> dict[str, Any]:
    return {
        "id": collection.id,
        "name": collection.name,
        "key": collection.key,
        "description": collection.description,
        "defaultModeId": collection.default_mode_id,
        "modes": [{"modeId": m.mode_id, "name": m.name} for m in collection.modes],
    }


def _collection_from_dict(data: Mapping[str, Any]) -> VariableCollection:
    return VariableCollection(
        id=str(data["id"]),
        name=str(data["name"]),
        modes=[
            VariableMode(mode_id=str(m["modeId"]), name=str(m["name"]))
            for m in data.get("modes") or []
        ],
        default_mode_id=str(data.get("defaultModeId") or ""),
        key=str(data.get("key") or ""),
        description=str(data.get("description") or ""),
    )


def _variable_to_dict(variable: Variable) -> dict[str, Any]:
    return {
        "id": variable.id,
        "name": variable.name,
        "key": variable.key,
        "variableCollectionId": variable.collection_id,
        "resolvedType": variable.resolved_type,
        "remote": variable.remote,
        "description": variable.description,
        "valuesByMode": {
            mode_id: _value_to_dict(value) for mode_id, value in variable.values_by_mode.items()
        },
    }


def _variable_from_dict(data: Mapping[str, Any]) -> Variable:
    return Variable(
        id=str(data["id"]),
        name=str(data["name"]),
        key=str(data.get("key") or data["id"]),
        collection_id=str(data["variableCollectionId"]),
        resolved_type=str(data.get("resolvedType") or "COLOR"),
        values_by_mode={
            str(mode_id): _value_from_dict(value)
            for mode_id, value in (data.get("valuesByMode") or {}).items()
        },
        remote=bool(data.get("remote", False)),
        description=str(data.get("description") or ""),
    )


def _library_to_dict(library: LibraryCollection) -> dict[str, Any]:
    return {
        "key": library.key,
        "name": library.name,
        "libraryName": library.library_name,
        "description": library.description,
        "variables": [
            {"key": v.key, "name": v.name, "resolvedType": v.resolved_type}
            for v in library.variables
        ],
    }


def _library_from_dict(data: Mapping[str, Any]) -> LibraryCollection:
    return LibraryCollection(
        key=str(data["key"]),
        name=str(data["name"]),
        library_name=str(data.get("libraryName") or "Unknown Library"),
        variables=[
            LibraryVariable(
                key=str(v["key"]),
                name=str(v["name"]),
                resolved_type=str(v.get("resolvedType") or "COLOR"),
            )
            for v in data.get("variables") or []
        ],
        description=str(data.get("description") or ""),
    )
