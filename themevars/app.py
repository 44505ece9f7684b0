"""QApplication bootstrap."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys

from PySide6.QtWidgets import QApplication

from themevars import __version__
from themevars.config.settings import AppSettings
from themevars.ui.main_window import MainWindow


def _configure_logger(settings: AppSettings) -> logging.Logger:
    logger = logging.getLogger("themevars")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    log_dir = settings.app_data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / "themevars.log",
        maxBytes=512_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def run_app() -> int:
    """Initialize and run the application."""
    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    app.setApplicationName("ThemeVars")
    app.setOrganizationName("ThemeVars")
    settings = AppSettings()
    logger = _configure_logger(settings)
    logger.info("startup version=%s data_dir=%s", __version__, settings.app_data_dir)

    window = MainWindow(settings)
    window.show()

    exit_code = app.exec()
    logger.info("exit code=%s", exit_code)
    return exit_code
