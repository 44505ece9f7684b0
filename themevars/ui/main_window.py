"""Main application window."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QMainWindow, QMessageBox

from themevars import __version__
from themevars.ui.mapper_panel import MapperPanel

if TYPE_CHECKING:
    from themevars.config.settings import AppSettings


class MainWindow(QMainWindow):
    """Hosts the mapper panel and persists window geometry."""

    def __init__(self, settings: AppSettings) -> None:
        super().__init__()
        self._settings = settings

        self.setWindowTitle("Theme Variables")
        self.setMinimumSize(760, 520)
        self.resize(980, 700)
        self.setObjectName("MainWindow")

        self._mapper_panel = MapperPanel(settings)
        self.setCentralWidget(self._mapper_panel)

        self._setup_menu()
        self._restore_state()

    def _setup_menu(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        help_menu = menubar.addMenu("&Help")
        about_action = QAction("&About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            "About Theme Variables",
            f"Theme Variables {__version__}\n\n"
            "Maps CSS @theme variables onto light and dark variable aliases.",
        )

    def _restore_state(self) -> None:
        geo = self._settings.window_geometry
        if geo:
            self.restoreGeometry(geo)

    def closeEvent(self, event) -> None:
        self._mapper_panel.shutdown()
        self._settings.window_geometry = self.saveGeometry()
        super().closeEvent(event)
