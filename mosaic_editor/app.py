"""
Application entry point, logging setup and dark-theme stylesheet.

Usage:
    python -m mosaic_editor
    mosaic-editor          (after pip install)

Set ``MOSAIC_EDITOR_LOG=DEBUG`` to log to stderr.
"""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from mosaic_editor.config import APP_NAME, LOG_LEVEL_DEFAULT, LOG_LEVEL_ENV
from mosaic_editor.main_window import MainWindow

DARK_STYLESHEET = """
    QMainWindow { background: #2b2b2b; }
    QWidget { background: #2b2b2b; color: #ddd; font-size: 10pt; }
    QPushButton { background: #3a3a3a; border: 1px solid #555; border-radius: 4px; padding: 6px 12px; }
    QPushButton:hover { background: #4a4a4a; }
    QPushButton:pressed { background: #2a2a2a; }
    QPushButton:disabled { color: #666; }
    QToolBar { background: #333; border-bottom: 1px solid #444; spacing: 4px; padding: 4px; }
    QToolButton:disabled { color: #666; }
    QSlider::groove:horizontal { height: 4px; background: #555; border-radius: 2px; }
    QSlider::handle:horizontal { background: #3a6ea5; width: 12px; margin: -5px 0; border-radius: 6px; }
    QStatusBar { background: #333; border-top: 1px solid #444; }
"""


def _setup_logging():
    name = os.environ.get(LOG_LEVEL_ENV, LOG_LEVEL_DEFAULT).upper()
    level = getattr(logging, name, None)
    if not isinstance(level, int):
        level = getattr(logging, LOG_LEVEL_DEFAULT)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main():
    _setup_logging()

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setStyleSheet(DARK_STYLESHEET)

    window = MainWindow()
    window.show()

    try:
        sys.exit(app.exec())
    except (SystemExit, KeyboardInterrupt):
        pass


if __name__ == "__main__":
    main()
