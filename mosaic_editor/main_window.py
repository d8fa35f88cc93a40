"""
Main application window.

Wires the toolbar (open, mosaic coarseness, confirm, save), the image
widget and the status bar to a single ``MosaicDocument``.  All image
state lives in the document; the window only forwards user events and
redraws from the document's display bytes.
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QLabel, QFileDialog,
    QMessageBox, QStatusBar, QToolBar, QSlider, QApplication,
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence, QShortcut

from mosaic_editor.config import IMAGE_EXTENSIONS, RADIUS_MAX, RADIUS_MIN, WINDOW_TITLE
from mosaic_editor.editor import EditState, MosaicDocument
from mosaic_editor.errors import DecodeError, SaveError
from mosaic_editor.models import Point, display_ratio
from mosaic_editor.mosaic_widget import MosaicWidget, bytes_to_qpixmap
from mosaic_editor.settings import load_settings, save_settings

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.setMinimumSize(480, 360)

        # Screen-aware startup size, clamped to 80% of screen
        preferred_w, preferred_h = 1280, 800
        screen = QApplication.primaryScreen()
        if screen is not None:
            avail = screen.availableGeometry()
            preferred_w = min(preferred_w, int(avail.width() * 0.8))
            preferred_h = min(preferred_h, int(avail.height() * 0.8))
        self.resize(preferred_w, preferred_h)

        self._settings = load_settings()
        self._document: MosaicDocument | None = None

        self._build_ui()
        self._update_button_states()
        self._update_info()

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        self._build_toolbar()

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(4, 4, 4, 4)

        self._mosaic_widget = MosaicWidget()
        self._mosaic_widget.selection_started.connect(self._on_selection_started)
        self._mosaic_widget.selection_moved.connect(self._on_selection_moved)
        self._mosaic_widget.selection_finished.connect(self._on_selection_finished)
        self._mosaic_widget.display_changed.connect(self._update_info)
        layout.addWidget(self._mosaic_widget, stretch=1)

        # Status bar
        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._size_label = QLabel("")
        self._ratio_label = QLabel("")
        self._status.addPermanentWidget(self._size_label)
        self._status.addPermanentWidget(self._ratio_label)
        self._status.showMessage("Open an image, then drag over the area to pixelate.")

        # --- Keyboard Shortcuts ---
        QShortcut(QKeySequence(Qt.Key.Key_Return), self, self._confirm_mosaic)
        QShortcut(QKeySequence(Qt.Key.Key_Enter), self, self._confirm_mosaic)

    def _build_toolbar(self):
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        act_open = QAction("📂 Open Image…", self)
        act_open.setShortcut(QKeySequence.StandardKey.Open)
        act_open.triggered.connect(self._open_image)
        toolbar.addAction(act_open)

        toolbar.addSeparator()

        toolbar.addWidget(QLabel(" Mosaic coarseness: "))
        self._radius_slider = QSlider(Qt.Orientation.Horizontal)
        self._radius_slider.setRange(RADIUS_MIN, RADIUS_MAX)
        self._radius_slider.setValue(self._settings.radius)
        self._radius_slider.setFixedWidth(160)
        self._radius_slider.setToolTip("Block radius in image pixels (block side = 2 × radius + 1)")
        self._radius_slider.valueChanged.connect(self._on_radius_changed)
        toolbar.addWidget(self._radius_slider)
        self._radius_value_label = QLabel(f" {self._settings.radius} ")
        self._radius_value_label.setMinimumWidth(28)
        toolbar.addWidget(self._radius_value_label)

        toolbar.addSeparator()

        act_confirm = QAction("✔ Confirm Mosaic", self)
        act_confirm.setToolTip("Apply the previewed mosaic to the image (Enter)")
        act_confirm.triggered.connect(self._confirm_mosaic)
        toolbar.addAction(act_confirm)
        self._act_confirm = act_confirm

        act_save = QAction("💾 Save…", self)
        act_save.setShortcut(QKeySequence.StandardKey.Save)
        act_save.setToolTip("Save the confirmed image into a folder (never overwrites)")
        act_save.triggered.connect(self._save)
        toolbar.addAction(act_save)
        self._act_save = act_save

    # =========================================================================
    # Open / Save
    # =========================================================================

    def _open_image(self):
        patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS))
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Image",
            self._settings.last_open_dir or str(Path.home()),
            f"Images ({patterns});;All files (*)",
        )
        if not path:
            return
        self._load_path(Path(path))

    def _load_path(self, path: Path):
        try:
            document = MosaicDocument.open(path, radius=self._radius_slider.value())
        except DecodeError as exc:
            logger.warning("Open failed: %s", exc)
            QMessageBox.warning(self, "Open Failed", f"Could not open image:\n{exc}")
            return

        self._document = document
        self._settings.last_open_dir = str(path.parent)
        self._refresh_canvas()
        self._update_button_states()
        self._update_info()
        w, h = document.size
        self._status.showMessage(f"Opened {path.name}  ({w}×{h})")

    def _save(self):
        if self._document is None:
            return
        start = self._settings.last_save_dir
        if start is None and self._document.source_path is not None:
            start = str(self._document.source_path.parent)
        folder = QFileDialog.getExistingDirectory(self, "Select Save Folder", start or str(Path.home()))
        if not folder:
            return

        try:
            out_path = self._document.save(Path(folder))
        except SaveError as exc:
            logger.error("Save failed: %s", exc)
            QMessageBox.critical(self, "Save Failed", f"Could not save image:\n{exc}")
            return

        self._settings.last_save_dir = folder
        if self._document.state is EditState.PREVIEWING:
            self._status.showMessage(f"Saved {out_path}  (unconfirmed mosaic not included)")
        else:
            self._status.showMessage(f"Saved {out_path}")

    # =========================================================================
    # Selection / mosaic
    # =========================================================================

    def _on_selection_started(self, point: Point):
        if self._document is None:
            return
        had_preview = self._document.preview is not None
        self._document.begin_selection(point)
        self._refresh_canvas(image_changed=had_preview)
        self._update_button_states()

    def _on_selection_moved(self, point: Point):
        if self._document is None:
            return
        self._document.update_selection(point)
        self._mosaic_widget.set_selection(self._document.selection)

    def _on_selection_finished(self, displayed_width: float):
        if self._document is None:
            return
        if displayed_width <= 0:
            self._document.cancel_selection()
            self._refresh_canvas(image_changed=False)
            self._update_button_states()
            return
        if self._document.finish_selection(displayed_width) is None:
            return
        self._refresh_canvas()
        self._update_button_states()
        self._update_info()

    def _confirm_mosaic(self):
        if self._document is None or self._document.state is not EditState.PREVIEWING:
            return
        self._document.confirm()
        self._refresh_canvas()
        self._update_button_states()
        self._status.showMessage("Mosaic confirmed.")

    def _on_radius_changed(self, value: int):
        self._radius_value_label.setText(f" {value} ")
        self._settings.radius = value
        if self._document is not None:
            self._document.set_radius(value)

    # =========================================================================
    # View updates
    # =========================================================================

    def _refresh_canvas(self, image_changed: bool = True):
        """Push the document's displayed image and selection to the widget."""
        doc = self._document
        if doc is None:
            self._mosaic_widget.clear()
            return
        if image_changed:
            w, h = doc.size
            self._mosaic_widget.set_image(bytes_to_qpixmap(doc.display_bytes()), w, h)
        self._mosaic_widget.set_selection(doc.selection)

    def _update_button_states(self):
        has_doc = self._document is not None
        self._act_save.setEnabled(has_doc)
        self._act_confirm.setEnabled(has_doc and self._document.state is EditState.PREVIEWING)

    def _update_info(self):
        """Show image size and the current display ratio in the status bar."""
        if self._document is None or not self._mosaic_widget.has_image():
            self._size_label.setText("")
            self._ratio_label.setText("")
            return
        w, h = self._document.size
        self._size_label.setText(f"Image size: {w} × {h}")
        disp_w = self._mosaic_widget.displayed_width()
        if disp_w > 0:
            self._ratio_label.setText(f"Display ratio: {display_ratio(w, disp_w):.3f}")

    def closeEvent(self, event):
        """Persist settings before closing."""
        save_settings(self._settings)
        super().closeEvent(event)
