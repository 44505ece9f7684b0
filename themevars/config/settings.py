"""Application settings via QSettings."""

from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtCore import QSettings

from themevars.core.models import IncompletePolicy
from themevars.core.session import WriteMode


class AppSettings:
    """Wraps QSettings for persistent app configuration."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings or QSettings("ThemeVars", "ThemeVars")

    # -- files --

    @property
    def css_path(self) -> str:
        return self._qs.value("files/css_path", "", type=str)

    @css_path.setter
    def css_path(self, value: str) -> None:
        self._qs.setValue("files/css_path", value)

    @property
    def document_path(self) -> str:
        return self._qs.value("files/document", "", type=str)

    @document_path.setter
    def document_path(self, value: str) -> None:
        self._qs.setValue("files/document", value)

    @property
    def key_data_path(self) -> str:
        return self._qs.value("files/key_data", "", type=str)

    @key_data_path.setter
    def key_data_path(self, value: str) -> None:
        self._qs.setValue("files/key_data", value)

    # -- mapping --

    @property
    def write_mode(self) -> WriteMode:
        raw = self._qs.value("mapping/write_mode", WriteMode.REPLACE.value, type=str)
        return WriteMode.coerce(raw)

    @write_mode.setter
    def write_mode(self, value: WriteMode | str) -> None:
        self._qs.setValue("mapping/write_mode", WriteMode.coerce(value).value)

    @property
    def incomplete_policy(self) -> IncompletePolicy:
        raw = self._qs.value("mapping/incomplete_policy", IncompletePolicy.ABORT.value, type=str)
        return IncompletePolicy.coerce(raw)

    @incomplete_policy.setter
    def incomplete_policy(self, value: IncompletePolicy | str) -> None:
        self._qs.setValue("mapping/incomplete_policy", IncompletePolicy.coerce(value).value)

    @property
    def source_collection_id(self) -> str:
        raw = self._qs.value("mapping/source_collection", "", type=str)
        return (raw or "").strip()

    @source_collection_id.setter
    def source_collection_id(self, value: str) -> None:
        self._qs.setValue("mapping/source_collection", (value or "").strip())

    @property
    def target_collection_id(self) -> str:
        raw = self._qs.value("mapping/target_collection", "", type=str)
        return (raw or "").strip()

    @target_collection_id.setter
    def target_collection_id(self, value: str) -> None:
        self._qs.setValue("mapping/target_collection", (value or "").strip())

    # -- window geometry --

    @property
    def window_geometry(self) -> bytes | None:
        return self._qs.value("ui/window_geometry")

    @window_geometry.setter
    def window_geometry(self, value: bytes) -> None:
        self._qs.setValue("ui/window_geometry", value)

    # -- helpers --

    @property
    def app_data_dir(self) -> Path:
        path = self._app_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def reports_dir(self) -> Path:
        path = self.app_data_dir / "reports"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _app_data_dir() -> Path:
        base = Path(os.environ.get("APPDATA", Path.home() / ".config"))
        return base / "themevars"
