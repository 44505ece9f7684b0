"""Worker that parses a CSS theme file."""

from __future__ import annotations

from pathlib import Path

from themevars.core.css_theme import load_theme_file
from themevars.core.models import IncompletePolicy
from themevars.errors import classify_exception
from themevars.workers.base_worker import BaseWorker


class ParseWorker(BaseWorker):
    """Parses a theme file into a ParsedTheme in a background thread."""

    def __init__(self, css_path: str | Path,
                 on_incomplete: IncompletePolicy = IncompletePolicy.ABORT) -> None:
        super().__init__()
        self._css_path = Path(css_path)
        self._on_incomplete = on_incomplete

    def run(self) -> None:
        self.started.emit()
        try:
            parsed = load_theme_file(self._css_path, on_incomplete=self._on_incomplete)
        except Exception as e:
            self.error.emit(classify_exception(e, path=self._css_path))
            return
        self.finished.emit(parsed)
