"""
Block pixelation ("mosaic") of a rectangular image region.

The image plane is partitioned into squares of side ``2 * radius + 1``
anchored at the image origin, never at the selection.  Every pixel
strictly inside the selection takes the color of its block's center
pixel, so block centers keep their own color.  Blocks whose center lies
outside the image (the partial blocks along the right and bottom edges)
are left untouched.

The work is done with Pillow's NEAREST resampling: the affected blocks
are shrunk to one pixel each (which picks exactly the center pixel) and
blown back up to block size, then pasted over the selection interior.

This module is Qt-free.
"""

import logging
import math
from dataclasses import dataclass

from PIL import Image

from mosaic_editor.models import Point

logger = logging.getLogger(__name__)


# =============================================================================
# Block grid
# =============================================================================
@dataclass(frozen=True)
class BlockGrid:
    """Origin-anchored partition of a ``width`` x ``height`` image into blocks."""
    width: int
    height: int
    radius: int

    @property
    def diameter(self) -> int:
        return 2 * self.radius + 1

    @property
    def columns(self) -> int:
        return math.ceil(self.width / self.diameter)

    @property
    def rows(self) -> int:
        return math.ceil(self.height / self.diameter)

    @property
    def centered_columns(self) -> int:
        """Leading block columns whose center pixel lies inside the image."""
        return (self.width - self.radius - 1) // self.diameter + 1

    @property
    def centered_rows(self) -> int:
        """Leading block rows whose center pixel lies inside the image."""
        return (self.height - self.radius - 1) // self.diameter + 1

    def center_of(self, x: int, y: int) -> tuple[int, int]:
        """Center pixel of the block containing ``(x, y)``."""
        d = self.diameter
        return x - x % d + self.radius, y - y % d + self.radius

    def block_center(self, column: int, row: int) -> tuple[int, int]:
        d = self.diameter
        return column * d + self.radius, row * d + self.radius

    def is_center(self, x: int, y: int) -> bool:
        d = self.diameter
        return x % d == self.radius and y % d == self.radius

    def index(self, column: int, row: int) -> int:
        """Flat index of a block, row-major."""
        return row * self.columns + column

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height


class _SampleArena:
    """Center colors of a rectangular window of blocks, one pixel per block.

    ``image`` holds the color of block ``(columns.start + i, rows.start + j)``
    at pixel ``(i, j)``.  Every block in the window must have its center
    inside *source*.
    """

    def __init__(self, source: Image.Image, grid: BlockGrid, columns: range, rows: range):
        d = grid.diameter
        self._columns = columns
        self._rows = rows
        # crop pads past the image edge, keeping the window an exact multiple of d;
        # NEAREST then samples pixel i * d + radius of each block
        window = source.crop((columns.start * d, rows.start * d, columns.stop * d, rows.stop * d))
        self.image = window.resize((len(columns), len(rows)), Image.NEAREST)

    @property
    def sampled(self) -> int:
        return len(self._columns) * len(self._rows)

    def color(self, column: int, row: int):
        return self.image.getpixel((column - self._columns.start, row - self._rows.start))

    def expand(self, diameter: int) -> Image.Image:
        """Blow every block color back up to a ``diameter``-sided square."""
        w, h = self.image.size
        return self.image.resize((w * diameter, h * diameter), Image.NEAREST)


# =============================================================================
# Mosaic
# =============================================================================
def _interior_range(lo: float, hi: float, limit: int) -> range:
    """Integers strictly between *lo* and *hi*, clipped to ``[0, limit)``."""
    start = max(0, math.floor(lo) + 1)
    stop = min(limit, math.ceil(hi))
    return range(start, max(start, stop))


def apply_mosaic(
    base_image: Image.Image,
    selection_min: Point,
    selection_max: Point,
    radius: int,
) -> Image.Image:
    """Return a copy of *base_image* with the selection interior pixelated.

    Parameters
    ----------
    base_image : Image.Image
        Source image; never modified.
    selection_min, selection_max : Point
        Normalized selection corners in image-pixel space.  The corners
        themselves are excluded: a pixel qualifies only when it lies
        strictly between them on both axes.
    radius : int
        Block radius (>= 1); blocks are ``2 * radius + 1`` pixels square.

    The result has the same size and mode as *base_image*.  Pixels outside
    the selection and block-center pixels keep their original color.
    """
    if radius < 1:
        raise ValueError(f"radius must be >= 1, got {radius!r}")

    result = base_image.copy()
    width, height = result.size
    grid = BlockGrid(width, height, radius)
    d = grid.diameter

    # pixels past the last centered block belong to edge blocks and stay as they are
    xs = _interior_range(selection_min.x, selection_max.x, min(width, grid.centered_columns * d))
    ys = _interior_range(selection_min.y, selection_max.y, min(height, grid.centered_rows * d))
    if not xs or not ys:
        logger.debug("Selection has no mosaic pixels, image unchanged")
        return result

    columns = range(xs.start // d, (xs.stop - 1) // d + 1)
    rows = range(ys.start // d, (ys.stop - 1) // d + 1)
    samples = _SampleArena(base_image, grid, columns, rows)

    ox, oy = columns.start * d, rows.start * d
    blocks = samples.expand(d).crop((xs.start - ox, ys.start - oy, xs.stop - ox, ys.stop - oy))
    result.paste(blocks, (xs.start, ys.start))

    logger.debug(
        "Mosaic r=%d on x[%d,%d) y[%d,%d): %d block(s) sampled",
        radius, xs.start, xs.stop, ys.start, ys.stop, samples.sampled,
    )
    return result
