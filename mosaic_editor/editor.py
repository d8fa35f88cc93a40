"""
Edit state machine for one open image.

``MosaicDocument`` owns the committed image, the optional preview derived
from it, the selection being dragged, and the encoded bytes used to redraw
the screen.  No other object writes these slots.  Every preview is
recomputed from the committed image, never from an earlier preview, so
abandoned drags cannot compound and re-finishing an unchanged selection
reproduces the same preview.

State transitions::

    IDLE       --begin_selection-->   SELECTING
    SELECTING  --update_selection-->  SELECTING
    SELECTING  --finish_selection-->  PREVIEWING
    SELECTING  --cancel_selection-->  IDLE
    PREVIEWING --begin_selection-->   SELECTING   (preview discarded)
    PREVIEWING --confirm-->           IDLE        (preview committed)

``save`` is available in every state and always writes the committed image.

This module is Qt-free.
"""

import logging
from enum import Enum
from pathlib import Path

from PIL import Image

from mosaic_editor.config import RADIUS_DEFAULT, RADIUS_MAX, RADIUS_MIN, SAVE_ATTEMPTS
from mosaic_editor.errors import DestinationExistsError, FilesystemError, InvalidTransitionError
from mosaic_editor.image_io import export_path, open_image, save_image, to_display_bytes
from mosaic_editor.models import Point, SelectionModel, display_ratio, to_image_space
from mosaic_editor.mosaic import apply_mosaic

logger = logging.getLogger(__name__)


class EditState(Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    PREVIEWING = "previewing"


def validate_radius(radius: int) -> int:
    """Return *radius* if within ``[RADIUS_MIN, RADIUS_MAX]``, else raise ValueError."""
    if not isinstance(radius, int) or isinstance(radius, bool) or not RADIUS_MIN <= radius <= RADIUS_MAX:
        raise ValueError(f"radius must be an integer in {RADIUS_MIN}..{RADIUS_MAX}, got {radius!r}")
    return radius


class MosaicDocument:
    """An opened image plus its pending mosaic edit."""

    def __init__(
        self,
        image: Image.Image,
        file_name: str,
        source_path: Path | None = None,
        radius: int = RADIUS_DEFAULT,
    ):
        self._committed = image
        self._preview: Image.Image | None = None
        self._file_name = file_name
        self._source_path = source_path
        self._radius = validate_radius(radius)
        self._selection = SelectionModel()
        self._state = EditState.IDLE
        self._last_ratio: float | None = None
        self._display_bytes: bytes | None = None

    @classmethod
    def open(cls, path: Path, radius: int = RADIUS_DEFAULT) -> "MosaicDocument":
        """Load *path* into a new document.  ``DecodeError`` propagates."""
        path = Path(path)
        image = open_image(path)
        return cls(image, path.name, source_path=path, radius=radius)

    # --- Read-only accessors ---

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def source_path(self) -> Path | None:
        return self._source_path

    @property
    def radius(self) -> int:
        return self._radius

    @property
    def committed(self) -> Image.Image:
        """Last accepted image.  Treat as read-only; ``copy()`` before editing."""
        return self._committed

    @property
    def preview(self) -> Image.Image | None:
        return self._preview

    @property
    def displayed(self) -> Image.Image:
        """The image currently shown: the preview when one exists."""
        return self._preview if self._preview is not None else self._committed

    @property
    def size(self) -> tuple[int, int]:
        return self._committed.size

    @property
    def selection(self) -> tuple[Point, Point] | None:
        """Normalized selection in display space, or None."""
        return self._selection.normalized()

    @property
    def last_ratio(self) -> float | None:
        """Display-to-image ratio used by the most recent preview."""
        return self._last_ratio

    def committed_pixel(self, x: int, y: int):
        return self._committed.getpixel((x, y))

    def preview_pixel(self, x: int, y: int):
        if self._preview is None:
            return None
        return self._preview.getpixel((x, y))

    def display_bytes(self) -> bytes:
        """Encoded bytes of ``displayed``, regenerated after every change."""
        if self._display_bytes is None:
            self._display_bytes = to_display_bytes(self.displayed)
        return self._display_bytes

    # --- Transitions ---

    def set_radius(self, radius: int):
        """Change the block radius; applies from the next finished selection."""
        self._radius = validate_radius(radius)

    def begin_selection(self, point: Point):
        if self._state is EditState.SELECTING:
            raise InvalidTransitionError("A selection drag is already in progress")
        if self._preview is not None:
            logger.debug("Discarding uncommitted preview")
            self._set_preview(None)
        self._selection.begin(point)
        self._state = EditState.SELECTING
        logger.debug("Selection started at (%.1f, %.1f)", point.x, point.y)

    def update_selection(self, point: Point):
        if self._state is not EditState.SELECTING:
            return
        self._selection.update(point)

    def finish_selection(self, displayed_width: float) -> Image.Image | None:
        """End the drag and compute the preview from the committed image.

        *displayed_width* is the on-screen width of the image in the same
        units as the selection points.  Returns the new preview, or None
        when no drag was in progress.
        """
        if self._state is not EditState.SELECTING:
            return None
        if displayed_width <= 0:
            raise ValueError(f"displayed_width must be positive, got {displayed_width!r}")

        ratio =display_ratio(self._committed.width, displayed_width)
        lo, hi = self._selection.normalized()
        preview = apply_mosaic(
            self._committed,
            to_image_space(lo, ratio),
            to_image_space(hi, ratio),
            self._radius,
        )
        self._last_ratio = ratio
        self._set_preview(preview)
        self._state = EditState.PREVIEWING
        logger.debug(
            "Preview computed: display (%.1f, %.1f)-(%.1f, %.1f), ratio %.4f, radius %d",
            lo.x, lo.y, hi.x, hi.y, ratio, self._radius,
        )
        return preview

    def cancel_selection(self):
        """Abandon the drag in progress without computing a preview."""
        if self._state is not EditState.SELECTING:
            return
        self._selection.clear()
        self._state = EditState.IDLE
        logger.debug("Selection cancelled")

    def confirm(self):
        """Promote the preview to the committed image and clear the selection."""
        if self._state is not EditState.PREVIEWING:
            raise InvalidTransitionError(f"Nothing to confirm in state {self._state.value!r}")
        self._committed = self._preview
        self._preview = None
        self._display_bytes = None
        self._selection.clear()
        self._state = EditState.IDLE
        logger.info("Mosaic committed to %s", self._file_name)

    def save(self, folder: Path) -> Path:
        """Write the committed image into *folder* without overwriting files.

        A pending preview is never written.  If the chosen file appears
        before it can be created, the next free name is tried.
        ``SaveError`` subclasses propagate and leave the document unchanged.
        """
        for _ in range(SAVE_ATTEMPTS):
            path = export_path(Path(folder), self._file_name)
            try:
                save_image(self._committed, path)
            except DestinationExistsError:
                logger.info("%s was created by someone else, choosing another name", path)
                continue
            return path
        raise FilesystemError(f"No free file name for {self._file_name} in {folder}")

    def _set_preview(self, preview: Image.Image | None):
        self._preview = preview
        self._display_bytes = None
