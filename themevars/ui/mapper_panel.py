"""Panel: load a variable document, parse a CSS theme, write aliases."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from PySide6.QtCore import QThread, Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QHeaderView, QLabel,
    QMessageBox, QPushButton, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from themevars.core.collections import CollectionListing, cleanup_imported_variables
from themevars.core.host import DocumentHost, HostError, load_document
from themevars.core.key_data import KeyDataError, extract_variable_keys, load_key_data, save_key_data
from themevars.core.mapper import MappingResult
from themevars.core.models import IncompletePolicy, ParsedTheme
from themevars.core.report import write_report
from themevars.core.session import MappingSession, WriteMode
from themevars.errors import ErrorCode, ThemeVarsError, format_error_for_user
from themevars.ui.widgets.file_picker import FilePicker
from themevars.ui.widgets.progress_bar import ProgressIndicator
from themevars.workers.mapping_worker import ApplyMappingWorker, LoadCollectionsWorker
from themevars.workers.parse_worker import ParseWorker

if TYPE_CHECKING:
    from themevars.config.settings import AppSettings

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "parsed": "#2196F3",
    "created": "#4CAF50",
    "updated": "#009688",
    "failed": "#F44336",
}


class MapperPanel(QWidget):
    """Drives the parse → load collections → apply workflow."""

    def __init__(self, settings: AppSettings, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._settings = settings
        self._host: DocumentHost | None = None
        self._session = MappingSession()
        self._parsed: ParsedTheme | None = None
        self._result: MappingResult | None = None
        self._thread: QThread | None = None
        self._worker = None

        self._setup_ui()
        self._restore_settings()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        files_group = QGroupBox("Files")
        files_layout = QFormLayout(files_group)
        self._css_picker = FilePicker("CSS theme (*.css)")
        self._document_picker = FilePicker("Variable document (*.json *.yaml *.yml)")
        self._key_data_picker = FilePicker("Variable keys (*.json)")
        self._key_data_picker.setToolTip("Optional exported keys used to import library variables")
        files_layout.addRow("Theme CSS:", self._css_picker)
        files_layout.addRow("Variable Document:", self._document_picker)
        files_layout.addRow("Key Data (optional):", self._key_data_picker)
        layout.addWidget(files_group)

        options_group = QGroupBox("Mapping")
        options_layout = QFormLayout(options_group)
        self._source_combo = QComboBox()
        self._target_combo = QComboBox()
        self._write_mode_combo = QComboBox()
        for mode in WriteMode:
            self._write_mode_combo.addItem(mode.value.capitalize(), mode.value)
        self._policy_combo = QComboBox()
        self._policy_combo.addItem("Abort on incomplete entry", IncompletePolicy.ABORT.value)
        self._policy_combo.addItem("Skip incomplete entries", IncompletePolicy.SKIP.value)
        options_layout.addRow("Source Collection:", self._source_combo)
        options_layout.addRow("Target Collection:", self._target_combo)
        options_layout.addRow("Write Mode:", self._write_mode_combo)
        options_layout.addRow("Incomplete Entries:", self._policy_combo)
        layout.addWidget(options_group)

        btn_layout = QHBoxLayout()
        self._load_btn = QPushButton("Load Document")
        self._load_btn.clicked.connect(self._start_load)
        self._parse_btn = QPushButton("Parse CSS")
        self._parse_btn.clicked.connect(self._start_parse)
        self._apply_btn = QPushButton("Apply")
        self._apply_btn.setProperty("role", "accent")
        self._apply_btn.setEnabled(False)
        self._apply_btn.clicked.connect(self._start_apply)
        self._keys_btn = QPushButton("Export Keys...")
        self._keys_btn.setEnabled(False)
        self._keys_btn.clicked.connect(self._export_keys)
        self._save_btn = QPushButton("Save Document")
        self._save_btn.setEnabled(False)
        self._save_btn.clicked.connect(self._save_document)
        for button in (self._load_btn, self._parse_btn, self._apply_btn,
                       self._keys_btn, self._save_btn):
            btn_layout.addWidget(button)
        btn_layout.addStretch()
        layout.addLayout(btn_layout)

        self._summary_label = QLabel("")
        layout.addWidget(self._summary_label)

        self._table = QTableWidget()
        self._table.setColumnCount(4)
        self._table.setHorizontalHeaderLabels(["Variable", "Light", "Dark", "Status"])
        header = self._table.horizontalHeader()
        for column in range(3):
            header.setSectionResizeMode(column, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(3, QHeaderView.ResizeMode.ResizeToContents)
        self._table.setAlternatingRowColors(True)
        layout.addWidget(self._table, 1)

        self._progress = ProgressIndicator()
        layout.addWidget(self._progress)

    def _restore_settings(self) -> None:
        self._css_picker.set_path(self._settings.css_path)
        self._document_picker.set_path(self._settings.document_path)
        self._key_data_picker.set_path(self._settings.key_data_path)
        self._set_combo_data(self._write_mode_combo, self._settings.write_mode.value)
        self._set_combo_data(self._policy_combo, self._settings.incomplete_policy.value)

    def save_settings(self) -> None:
        self._settings.css_path = self._css_picker.path()
        self._settings.document_path = self._document_picker.path()
        self._settings.key_data_path = self._key_data_picker.path()
        self._settings.write_mode = self._write_mode_combo.currentData()
        self._settings.incomplete_policy = self._policy_combo.currentData()
        self._settings.source_collection_id = self._source_combo.currentData() or ""
        self._settings.target_collection_id = self._target_combo.currentData() or ""

    def shutdown(self) -> None:
        """Save settings and drop sample imports before the window closes."""
        self.save_settings()
        if self._worker is not None:
            self._worker.cancel()
        if self._thread and self._thread.isRunning():
            self._thread.quit()
            self._thread.wait(3000)
        self._cleanup_session()

    # -- load --

    def _start_load(self) -> None:
        if self._is_busy():
            return
        path = self._document_picker.path()
        if not path:
            QMessageBox.warning(self, "Missing", "Please select a variable document.")
            return
        self._cleanup_session()
        try:
            self._host = load_document(path)
        except HostError as exc:
            self._show_error("Document Error", exc)
            return

        self._session = MappingSession()
        self._progress.start("Loading collections...")
        self._run_worker(
            LoadCollectionsWorker(self._host, self._session),
            self._on_collections_loaded,
        )

    def _on_collections_loaded(self, listing: CollectionListing) -> None:
        self._fill_combo(self._source_combo, [(c.display_name, c.id) for c in listing.sources],
                         self._settings.source_collection_id)
        self._fill_combo(self._target_combo, [(c.display_name, c.id) for c in listing.targets],
                         self._settings.target_collection_id)
        self._save_btn.setEnabled(True)
        self._keys_btn.setEnabled(bool(listing.sources))
        self._update_apply_enabled()
        message = f"{len(listing.sources)} source / {len(listing.targets)} target collections"
        self._progress.finish(message)
        if listing.warning:
            QMessageBox.warning(self, "Library Collections", listing.warning)

    # -- parse --

    def _start_parse(self) -> None:
        if self._is_busy():
            return
        path = self._css_picker.path()
        if not path:
            QMessageBox.warning(self, "Missing", "Please select a CSS theme file.")
            return
        self._parsed = None
        self._table.setRowCount(0)
        self._progress.start("Parsing CSS...")
        policy = IncompletePolicy.coerce(self._policy_combo.currentData())
        self._run_worker(ParseWorker(path, policy), self._on_parsed)

    def _on_parsed(self, parsed: ParsedTheme) -> None:
        self._parsed = parsed
        self._table.setRowCount(len(parsed.mappings))
        for row, mapping in enumerate(parsed.mappings):
            self._set_row(row, mapping.target_name, mapping.light, mapping.dark, "parsed")
        summary = f"Parsed {len(parsed.mappings)} variables"
        if parsed.sentiment:
            summary += f" | Sentiment: {parsed.sentiment}"
        if parsed.skipped:
            summary += f" | Skipped: {', '.join(parsed.skipped)}"
        self._summary_label.setText(summary)
        self._update_apply_enabled()
        self._progress.finish("Theme parsed")

    # -- apply --

    def _start_apply(self) -> None:
        if self._is_busy() or self._host is None or self._parsed is None:
            return
        source_id = self._source_combo.currentData()
        target_id = self._target_combo.currentData()
        if not source_id or not target_id:
            QMessageBox.warning(self, "Missing", "Select a source and a target collection.")
            return

        key_path = self._key_data_picker.path()
        try:
            self._session.key_data = load_key_data(key_path) if key_path else None
        except KeyDataError as exc:
            self._show_error("Key Data Error", exc)
            return
        self._session.sentiment = self._parsed.sentiment
        self._session.write_mode = WriteMode.coerce(self._write_mode_combo.currentData())

        self._progress.start("Creating variables...")
        self._run_worker(
            ApplyMappingWorker(self._host, self._session, self._parsed.mappings,
                               source_id, target_id),
            self._on_applied,
        )

    def _on_applied(self, result: MappingResult) -> None:
        self._result = result
        outcomes = (
            [(o, "created") for o in result.created]
            + [(o, "updated") for o in result.updated]
            + [(o, "failed") for o in result.failed]
        )
        self._table.setRowCount(len(outcomes))
        for row, (outcome, status) in enumerate(outcomes):
            light = outcome.light_source or outcome.light_reference
            dark = outcome.dark_source or outcome.dark_reference
            label = f"{status}: {outcome.error}" if outcome.error else status
            self._set_row(row, outcome.target_name, light, dark, status, label)
        self._summary_label.setText(result.summary)
        self._progress.finish(result.message)
        self._write_report(result)
        if not result.success:
            partial = ThemeVarsError(ErrorCode.OPERATION_PARTIAL, message=result.summary)
            QMessageBox.warning(self, "Partial Result", format_error_for_user(partial))

    def _write_report(self, result: MappingResult) -> None:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = self._settings.reports_dir / f"mapping-{stamp}.yaml"
        try:
            write_report(
                result,
                path,
                source=self._source_combo.currentText(),
                target=self._target_combo.currentText(),
                theme_file=self._css_picker.path(),
            )
        except OSError as exc:
            logger.warning("could not write report %s: %s", path, exc)
            return
        logger.info("report written to %s", path)

    # -- document --

    def _save_document(self) -> None:
        path = self._document_picker.path()
        if self._host is None or not path:
            return
        try:
            self._host.save(path)
        except OSError as exc:
            self._show_error("Save Error", exc)
            return
        self._progress.finish(f"Saved {Path(path).name}")

    def _export_keys(self) -> None:
        source_id = self._source_combo.currentData()
        if self._host is None or not source_id:
            return
        path = self._key_data_picker.path() or str(self._settings.app_data_dir / "variable-keys.json")
        info = self._session.find_collection(source_id)
        host_id = info.host_id if info else source_id
        try:
            data = extract_variable_keys(self._host, host_id)
            save_key_data(data, path)
        except (HostError, OSError) as exc:
            self._show_error("Export Error", exc)
            return
        self._key_data_picker.set_path(path)
        self._progress.finish(f"Exported {len(data)} keys")

    # -- helpers --

    def _run_worker(self, worker, on_finished) -> None:
        self._set_busy(True)
        self._worker = worker
        self._thread = QThread()
        worker.moveToThread(self._thread)
        self._thread.started.connect(worker.run)
        worker.progress.connect(self._on_progress, Qt.ConnectionType.QueuedConnection)
        worker.finished.connect(on_finished)
        worker.error.connect(self._on_worker_error)
        worker.cancelled.connect(self._on_worker_cancelled)
        worker.finished.connect(self._thread.quit)
        worker.error.connect(self._thread.quit)
        worker.cancelled.connect(self._thread.quit)
        self._thread.finished.connect(self._cleanup_thread)
        self._thread.start()

    def _on_progress(self, current: int, total: int, message: str) -> None:
        self._progress.update_progress(current, total, message)

    def _on_worker_error(self, error: ThemeVarsError) -> None:
        self._progress.finish(f"Error: {error.message}")
        QMessageBox.critical(self, "Error", format_error_for_user(error))

    def _on_worker_cancelled(self) -> None:
        self._progress.finish("Cancelled")

    def _cleanup_thread(self) -> None:
        if self._worker is not None:
            self._worker.deleteLater()
        if self._thread is not None:
            self._thread.deleteLater()
        self._worker = None
        self._thread = None
        self._set_busy(False)

    def _cleanup_session(self) -> None:
        if self._host is None:
            return
        report = cleanup_imported_variables(self._host, self._session)
        if report.removed or report.kept:
            logger.info("cleanup removed=%d kept=%d", report.removed, report.kept)

    def _is_busy(self) -> bool:
        if self._thread and self._thread.isRunning():
            QMessageBox.information(self, "Busy", "Wait for the current operation to finish.")
            return True
        return False

    def _set_busy(self, busy: bool) -> None:
        self._load_btn.setEnabled(not busy)
        self._parse_btn.setEnabled(not busy)
        if busy:
            self._apply_btn.setEnabled(False)
        else:
            self._update_apply_enabled()

    def _update_apply_enabled(self) -> None:
        ready = (
            self._host is not None
            and self._parsed is not None
            and bool(self._parsed.mappings)
            and self._target_combo.count() > 0
        )
        self._apply_btn.setEnabled(ready)

    def _set_row(self, row: int, name: str, light: str, dark: str,
                 status: str, label: str = "") -> None:
        status_item = QTableWidgetItem(label or status.upper())
        status_item.setForeground(QColor(STATUS_COLORS.get(status, "#000000")))
        self._table.setItem(row, 0, QTableWidgetItem(name))
        self._table.setItem(row, 1, QTableWidgetItem(light))
        self._table.setItem(row, 2, QTableWidgetItem(dark))
        self._table.setItem(row, 3, status_item)

    def _show_error(self, title: str, exc: Exception) -> None:
        self._progress.finish(f"Error: {exc}")
        QMessageBox.critical(self, title, format_error_for_user(exc))

    @staticmethod
    def _fill_combo(combo: QComboBox, items: list[tuple[str, str]], selected: str) -> None:
        combo.clear()
        for label, data in items:
            combo.addItem(label, data)
        MapperPanel._set_combo_data(combo, selected)

    @staticmethod
    def _set_combo_data(combo: QComboBox, value: str) -> None:
        index = combo.findData(value)
        if index >= 0:
            combo.setCurrentIndex(index)
