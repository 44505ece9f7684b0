"""Workers for collection loading and alias writing."""

from __future__ import annotations

from typing import Sequence

from themevars.core.collections import load_collections
from themevars.core.host import VariableHost
from themevars.core.mapper import VariableMapper
from themevars.core.models import VariableMapping
from themevars.core.session import MappingSession
from themevars.errors import classify_exception
from themevars.workers.base_worker import BaseWorker


class LoadCollectionsWorker(BaseWorker):
    """Lists source and target collections in a background thread."""

    def __init__(self, host: VariableHost, session: MappingSession) -> None:
        super().__init__()
        self._host = host
        self._session = session

    def run(self) -> None:
        self.started.emit()
        try:
            listing = load_collections(self._host, self._session)
        except Exception as e:
            self.error.emit(classify_exception(e))
            return
        self.finished.emit(listing)


class ApplyMappingWorker(BaseWorker):
    """Writes theme mappings into the target collection."""

    def __init__(self, host: VariableHost, session: MappingSession,
                 mappings: Sequence[VariableMapping],
                 source_collection_id: str, target_collection_id: str) -> None:
        super().__init__()
        self._host = host
        self._session = session
        self._mappings = list(mappings)
        self._source_collection_id = source_collection_id
        self._target_collection_id = target_collection_id
        self._mapper: VariableMapper | None = None

    def cancel(self) -> None:
        super().cancel()
        if self._mapper:
            self._mapper.cancel()

    def run(self) -> None:
        self.started.emit()
        try:
            self._mapper = VariableMapper(self._host, self._session)
            if self._is_cancelled:
                self._mapper.cancel()
            result = self._mapper.apply(
                self._mappings,
                self._source_collection_id,
                self._target_collection_id,
                progress_cb=lambda cur, tot, msg: self.progress.emit(cur, tot, msg),
            )
        except Exception as e:
            self.error.emit(classify_exception(e))
            return
        if self._is_cancelled:
            self.cancelled.emit()
        else:
            self.finished.emit(result)
