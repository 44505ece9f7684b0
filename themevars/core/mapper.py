"""Write parsed theme mappings into a target collection as light/dark aliases."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from themevars.core.collections import CollectionInfo
from themevars.core.host import (
    CollectionNotFoundError,
    HostError,
    Variable,
    VariableHost,
)
from themevars.core.models import VariableMapping
from themevars.core.modes import setup_collection_modes
from themevars.core.naming import find_source_variable, find_variable_key
from themevars.core.sentiment import find_orphaned_sentiment_variables
from themevars.core.session import MappingSession, WriteMode

logger = logging.getLogger(__name__)

TARGET_TYPE = "COLOR"


class SourceLookupError(LookupError):
    """Raised when a mapping's light or dark source cannot be found."""


@dataclass
class MappingOutcome:
    """What happened to one target variable."""

    target_name: str
    light_reference: str
    dark_reference: str
    light_source: str = ""
    dark_source: str = ""
    error: str = ""


@dataclass
class MappingResult:
    created: list[MappingOutcome] = field(default_factory=list)
    updated: list[MappingOutcome] = field(default_factory=list)
    failed: list[MappingOutcome] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def message(self) -> str:
        if self.success:
            return "Variables processed successfully"
        return "Processing completed with some errors"

    @property
    def summary(self) -> str:
        return (
            f"Created: {len(self.created)} | Updated: {len(self.updated)} | "
            f"Removed: {len(self.removed)} | Failed: {len(self.failed)}"
        )


class VariableMapper:
    """Creates or updates target variables aliasing source variables per mode."""

    def __init__(self, host: VariableHost, session: MappingSession) -> None:
        self._host = host
        self._session = session
        self._imports: dict[str, Variable] = {}
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def apply(
        self,
        mappings: Sequence[VariableMapping],
        source_collection_id: str,
        target_collection_id: str,
        progress_cb: Callable[[int, int, str], None] | None = None,
    ) -> MappingResult:
        source = self._session.find_collection(source_collection_id)
        if source is None:
            raise CollectionNotFoundError("Source collection not found")
        target = self._host.get_collection(target_collection_id)
        if target is None:
            raise CollectionNotFoundError("Target collection not found")
        logger.info(
            "mapping %d variables from %r into %r (sentiment=%s mode=%s json=%s)",
            len(mappings), source.display_name, target.name,
            self._session.sentiment or "none", self._session.write_mode.value,
            "yes" if self._session.key_data else "no",
        )

        self._imports = {}
        modes = setup_collection_modes(target)
        existing = {variable.name: variable for variable in self._host.local_variables(target.id)}

        result = MappingResult()
        if self._session.sentiment and self._session.write_mode is WriteMode.REPLACE:
            orphans = find_orphaned_sentiment_variables(existing, mappings, self._session.sentiment)
            logger.info("found %d orphaned %s variables", len(orphans), self._session.sentiment)
            result.removed = self._remove_orphans(orphans, existing)

        lookup = self._source_lookup(source)
        total = len(mappings)
        for index, mapping in enumerate(mappings):
            if self._cancelled:
                break
            if progress_cb:
                progress_cb(index + 1, total, mapping.target_name)

            outcome = MappingOutcome(
                target_name=mapping.target_name,
                light_reference=mapping.light,
                dark_reference=mapping.dark,
            )
            try:
                light_var = lookup(mapping.light, "Light")
                dark_var = lookup(mapping.dark, "Dark")
            except SourceLookupError as exc:
                outcome.error = str(exc)
                result.failed.append(outcome)
                continue
            except HostError as exc:
                outcome.error = f"Import failed: {exc}"
                result.failed.append(outcome)
                continue

            target_var = existing.get(mapping.target_name)
            was_updated = target_var is not None
            try:
                if target_var is None:
                    target_var = self._host.create_variable(mapping.target_name, target.id, TARGET_TYPE)
                    existing[mapping.target_name] = target_var
                target_var.set_value_for_mode(modes.light, self._host.create_variable_alias(light_var))
                target_var.set_value_for_mode(modes.dark, self._host.create_variable_alias(dark_var))
            except HostError as exc:
                outcome.error = str(exc)
                result.failed.append(outcome)
                continue

            outcome.light_source = light_var.name
            outcome.dark_source = dark_var.name
            if was_updated:
                result.updated.append(outcome)
            else:
                result.created.append(outcome)

        self._log_result(result)
        return result

    def _remove_orphans(
        self,
        orphans: list[tuple[str, Variable]],
        existing: dict[str, Variable],
    ) -> list[str]:
        removed: list[str] = []
        for name, variable in orphans:
            try:
                self._host.remove_variable(variable.id)
            except HostError as exc:
                logger.error("failed to remove orphaned variable %s: %s", name, exc)
                continue
            existing.pop(name, None)
            removed.append(name)
        return removed

    def _source_lookup(self, source: CollectionInfo) -> Callable[[str, str], Variable]:
        if not source.is_library:
            by_name = {v.name: v for v in self._host.local_variables(source.host_id)}

            def local_lookup(reference: str, mode: str) -> Variable:
                variable = find_source_variable(by_name, reference)
                if variable is None:
                    raise SourceLookupError(f"{mode} source variable not found")
                return variable

            return local_lookup

        key_data = self._session.key_data
        if key_data:
            def key_lookup(reference: str, mode: str) -> Variable:
                key = find_variable_key(key_data, reference)
                if key is None:
                    raise SourceLookupError("Variable key not found in JSON data")
                return self._import(key)

            return key_lookup

        library_by_name = {v.name: v for v in self._host.library_variables(source.host_id)}

        def library_lookup(reference: str, mode: str) -> Variable:
            entry = find_source_variable(library_by_name, reference)
            if entry is None:
                raise SourceLookupError(f"{mode} source variable not found")
            return self._import(entry.key)

        return library_lookup

    def _import(self, key: str) -> Variable:
        variable = self._imports.get(key)
        if variable is None:
            variable = self._host.import_variable_by_key(key)
            self._imports[key] = variable
        return variable

    @staticmethod
    def _log_result(result: MappingResult) -> None:
        logger.info("mapping finished: %s", result.summary)
        for outcome in result.failed:
            logger.warning("failed %s (%s)", outcome.target_name, outcome.error)
