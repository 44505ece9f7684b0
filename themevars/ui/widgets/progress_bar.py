"""Progress bar with a status message."""

from __future__ import annotations

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QHBoxLayout, QLabel, QProgressBar, QWidget


class ProgressIndicator(QWidget):
    """Shows step progress while a worker runs, then hides after a delay."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._bar = QProgressBar()
        self._bar.setRange(0, 100)
        self._message = QLabel()
        self._hide_timer = QTimer(self)
        self._hide_timer.setSingleShot(True)
        self._hide_timer.timeout.connect(self.hide)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)
        layout.addWidget(self._bar, 1)
        layout.addWidget(self._message)
        self.hide()

    def start(self, message: str = "Working...") -> None:
        self._hide_timer.stop()
        # Busy state until the first progress report arrives.
        self._bar.setRange(0, 0)
        self._message.setText(message)
        self.show()

    def update_progress(self, current: int, total: int, message: str = "") -> None:
        if total > 0:
            self._bar.setRange(0, total)
            self._bar.setValue(min(current, total))
        if message:
            self._message.setText(message)

    def finish(self, message: str = "Done", auto_hide_ms: int = 2500) -> None:
        self._bar.setRange(0, 100)
        self._bar.setValue(100)
        self._message.setText(message)
        self.show()
        if auto_hide_ms > 0:
            self._hide_timer.start(auto_hide_ms)
