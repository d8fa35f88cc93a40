"""
Image display widget with drag-to-select.

This module contains everything that touches both Qt **and** image
display: ``bytes_to_qpixmap`` and the ``MosaicWidget`` editor surface.
The widget never edits pixels itself; it reports drags in display space
(relative to the displayed image's top-left corner, clamped to it) and
draws whatever selection the document currently holds.
"""

from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QRectF, QPointF, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPixmap, QColor, QPen,
    QMouseEvent, QPaintEvent, QResizeEvent,
)

from mosaic_editor.config import SELECTION_COLOR, SELECTION_PEN_WIDTH
from mosaic_editor.models import Point


# =============================================================================
# Qt helpers
# =============================================================================

def bytes_to_qpixmap(data: bytes) -> QPixmap:
    """Decode encoded display bytes into a QPixmap."""
    pixmap = QPixmap()
    if not pixmap.loadFromData(data):
        raise ValueError("Display bytes could not be decoded")
    return pixmap


# =============================================================================
# Mosaic Widget: image view with rectangular drag selection
# =============================================================================

class MosaicWidget(QWidget):
    """Widget that displays an image letterboxed and lets the user drag a rectangle."""

    selection_started = pyqtSignal(object)   # Point
    selection_moved = pyqtSignal(object)     # Point
    selection_finished = pyqtSignal(float)   # displayed image width
    display_changed = pyqtSignal()           # display scale or offset changed

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(320, 240)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self._pixmap: QPixmap | None = None
        self._img_w = 0
        self._img_h = 0
        self._selection: tuple[Point, Point] | None = None

        # Display mapping
        self._scale = 1.0
        self._offset_x = 0.0
        self._offset_y = 0.0

        self._dragging = False

    def set_image(self, pixmap: QPixmap, img_w: int, img_h: int):
        """Set the image to display."""
        self._pixmap = pixmap
        self._img_w = img_w
        self._img_h = img_h
        self._update_display_mapping()
        self.update()

    def set_selection(self, selection: tuple[Point, Point] | None):
        """Set the normalized display-space rectangle to outline, or None.

        The rectangle is kept in image pixels, so the outline stays on the
        same part of the image when the widget is resized.
        """
        if selection is None or self._scale <= 0:
            self._selection = None
        else:
            lo, hi = selection
            self._selection = (lo.scaled(1 / self._scale), hi.scaled(1 / self._scale))
        self.update()

    def selection_rect(self) -> QRectF | None:
        """Outline rectangle in widget coordinates under the current mapping."""
        if self._selection is None:
            return None
        lo, hi = self._selection
        return QRectF(self._image_to_widget(lo), self._image_to_widget(hi))

    def has_image(self) -> bool:
        return self._pixmap is not None

    def displayed_width(self) -> float:
        return self._img_w * self._scale

    def clear(self):
        self._pixmap = None
        self._img_w = 0
        self._img_h = 0
        self._selection = None
        self._dragging = False
        self.update()

    # --- Coordinate mapping ---

    def _update_display_mapping(self):
        """Calculate scale and offset to fit image in widget with letterboxing."""
        if not self._pixmap or self._img_w == 0 or self._img_h == 0:
            return
        ww, wh = self.width(), self.height()
        scale_x = ww / self._img_w
        scale_y = wh / self._img_h
        self._scale = min(scale_x, scale_y)
        disp_w = self._img_w * self._scale
        disp_h = self._img_h * self._scale
        self._offset_x = (ww - disp_w) / 2
        self._offset_y = (wh - disp_h) / 2

    def _widget_to_local(self, pos: QPointF) -> Point:
        """Widget position to display space, clamped to the displayed image."""
        disp_w = self._img_w * self._scale
        disp_h = self._img_h * self._scale
        x = max(0.0, min(pos.x() - self._offset_x, disp_w))
        y = max(0.0, min(pos.y() - self._offset_y, disp_h))
        return Point(x, y)

    def _image_to_widget(self, point: Point) -> QPointF:
        return QPointF(point.x * self._scale + self._offset_x, point.y * self._scale + self._offset_y)

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(30, 30, 30))

        if not self._pixmap:
            painter.setPen(QColor(128, 128, 128))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No image loaded")
            painter.end()
            return

        dest = QRectF(
            self._offset_x, self._offset_y,
            self._img_w * self._scale, self._img_h * self._scale,
        )
        painter.drawPixmap(dest, self._pixmap, QRectF(self._pixmap.rect()))

        outline = self.selection_rect()
        if outline is not None:
            pen = QPen(QColor(*SELECTION_COLOR), SELECTION_PEN_WIDTH)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(outline)

        painter.end()

    def resizeEvent(self, event: QResizeEvent):
        self._update_display_mapping()
        super().resizeEvent(event)
        self.display_changed.emit()

    # --- Mouse interaction ---

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or not self._pixmap or self._dragging:
            return
        self._dragging = True
        self.selection_started.emit(self._widget_to_local(event.position()))

    def mouseMoveEvent(self, event: QMouseEvent):
        if not self._dragging:
            return
        self.selection_moved.emit(self._widget_to_local(event.position()))

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or not self._dragging:
            return
        self._dragging = False
        self.selection_moved.emit(self._widget_to_local(event.position()))
        self.selection_finished.emit(self.displayed_width())
