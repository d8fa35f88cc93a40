"""
Data models and display-geometry utilities.

``Point`` and ``Selection`` are the core value types shared by the widget
and the editor.  Selections are recorded in display space (relative to
the displayed image's top-left corner) and converted to image-pixel space
with a single scalar ratio just before the mosaic is computed.
"""

from dataclasses import dataclass


# =============================================================================
# Data classes
# =============================================================================
@dataclass(frozen=True)
class Point:
    """A 2-D point; display or image space depending on context."""
    x: float = 0.0
    y: float = 0.0

    def scaled(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)


@dataclass(frozen=True)
class Selection:
    """User-dragged rectangle: where the drag started and where it is now."""
    start: Point
    end: Point

    def normalized(self) -> tuple[Point, Point]:
        """Return ``(min, max)`` corners, componentwise."""
        lo = Point(min(self.start.x, self.end.x), min(self.start.y, self.end.y))
        hi = Point(max(self.start.x, self.end.x), max(self.start.y, self.end.y))
        return lo, hi


class SelectionModel:
    """Tracks the rectangle being dragged over the displayed image."""

    def __init__(self):
        self._selection: Selection | None = None

    @property
    def is_active(self) -> bool:
        return self._selection is not None

    @property
    def selection(self) -> Selection | None:
        return self._selection

    def begin(self, point: Point):
        self._selection = Selection(point, point)

    def update(self, point: Point):
        """Move the dragged corner.  Ignored when no selection is active."""
        if self._selection is None:
            return
        self._selection = Selection(self._selection.start, point)

    def normalized(self) -> tuple[Point, Point] | None:
        if self._selection is None:
            return None
        return self._selection.normalized()

    def clear(self):
        self._selection = None


# =============================================================================
# Coordinate mapping
# =============================================================================
def display_ratio(image_width: int, displayed_width: float) -> float:
    """Image pixels per display pixel.

    One ratio serves both axes, so the display must preserve the image's
    aspect ratio (the mosaic widget always letterboxes with a uniform scale).
    """
    return image_width / displayed_width


def to_image_space(point: Point, ratio: float) -> Point:
    """Convert a display-space point to image-pixel space."""
    return point.scaled(ratio)
