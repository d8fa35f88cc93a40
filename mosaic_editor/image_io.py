"""
Qt-free image I/O utilities.

Provides helpers to open images (including PSD), save them with the
format inferred from the destination extension, choose an export path
that never overwrites an existing file, and encode images for the
on-screen byte cache.  Codec and filesystem failures are reported as
``DecodeError`` / ``EncodeError`` / ``FilesystemError``.
"""

import io
import logging
from pathlib import Path

from PIL import Image
from psd_tools import PSDImage

from mosaic_editor.config import (
    DISPLAY_FORMAT, JPEG_QUALITY_DEFAULT, PNG_COMPRESS_LEVEL,
    READ_ONLY_EXTENSIONS, READ_ONLY_FALLBACK_EXTENSION, SAVE_COLLISION_PREFIX,
)
from mosaic_editor.errors import DecodeError, DestinationExistsError, EncodeError, FilesystemError

logger = logging.getLogger(__name__)

# Allow very large images (Pillow's default limit is ~178MP)
Image.MAX_IMAGE_PIXELS = None

# Modes edited as-is; anything else (palette, CMYK, ...) is converted to RGBA
_EDITABLE_MODES = {"RGB", "RGBA", "L", "LA"}

# Formats without an alpha channel
_FLATTEN_FORMATS = {"JPEG"}


def _decode(path: Path) -> Image.Image:
    """Open and fully decode an image, using psd-tools for PSD and Pillow for the rest."""
    if path.suffix.lower() == ".psd":
        img = PSDImage.open(str(path)).composite()
        if img is None:
            raise ValueError("PSD has no renderable layers")
        return img
    img = Image.open(path)
    img.load()
    return img


def open_image(path: Path) -> Image.Image:
    """Decode *path* into an editable image.

    Raises ``DecodeError`` if the file is missing, unreadable, or not an
    image format Pillow or psd-tools understands.
    """
    path = Path(path)
    try:
        img = _decode(path)
    except Exception as exc:  # codec errors differ per plugin
        raise DecodeError(f"Cannot open {path.name}: {exc}") from exc

    if img.mode not in _EDITABLE_MODES:
        logger.debug("Converting %s from mode %s to RGBA", path.name, img.mode)
        img = img.convert("RGBA")

    logger.info("Opened %s (%dx%d, %s)", path, img.width, img.height, img.mode)
    return img


def output_format(path: Path) -> str:
    """Pillow format name for the destination extension.

    Raises ``EncodeError`` if Pillow has no writer for the extension.
    """
    ext = Path(path).suffix.lower()
    fmt = Image.registered_extensions().get(ext)
    if fmt is None or fmt not in Image.SAVE:
        raise EncodeError(f"No image writer for extension {ext or '(none)'!r}")
    return fmt


def save_image(image: Image.Image, path: Path) -> None:
    """Encode *image* in the format implied by *path* and write it.

    The image is encoded in memory first, so an encoding failure never
    leaves a partial file behind.  The file is created exclusively: if
    *path* already exists nothing is written and ``DestinationExistsError``
    is raised.  Raises ``EncodeError`` when the codec refuses the image and
    ``FilesystemError`` when the write fails.
    """
    path = Path(path)
    fmt = output_format(path)

    params: dict = {}
    if fmt in _FLATTEN_FORMATS and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    if fmt == "JPEG":
        params["quality"] = JPEG_QUALITY_DEFAULT
    elif fmt == "PNG":
        params["compress_level"] = PNG_COMPRESS_LEVEL

    buf = io.BytesIO()
    try:
        image.save(buf, fmt, **params)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"Cannot encode {path.name} as {fmt}: {exc}") from exc

    try:
        fh = open(path, "xb")
    except FileExistsError as exc:
        raise DestinationExistsError(f"{path} already exists") from exc
    except OSError as exc:
        raise FilesystemError(f"Cannot write {path}: {exc.strerror or exc}") from exc

    try:
        with fh:
            fh.write(buf.getvalue())
    except OSError as exc:
        path.unlink(missing_ok=True)
        raise FilesystemError(f"Cannot write {path}: {exc.strerror or exc}") from exc

    logger.info("Saved %s (%s, %d bytes)", path, fmt, buf.tell())


def unique_path(out_path: Path) -> Path:
    """Return a unique path by appending -01, -02, etc. if file already exists."""
    if not out_path.exists():
        return out_path
    stem = out_path.stem
    suffix = out_path.suffix
    parent = out_path.parent
    counter = 1
    while True:
        candidate = parent / f"{stem}-{counter:02d}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1


def export_path(folder: Path, file_name: str) -> Path:
    """Destination for saving *file_name* into *folder* without overwriting.

    The original name is used when free.  On a collision the name gets the
    ``SAVE_COLLISION_PREFIX`` prefix, and a numeric suffix if that is taken
    as well.  Extensions Pillow cannot write are swapped for PNG.
    """
    name = Path(file_name).name
    if Path(name).suffix.lower() in READ_ONLY_EXTENSIONS:
        name = Path(name).with_suffix(READ_ONLY_FALLBACK_EXTENSION).name

    candidate = Path(folder) / name
    if not candidate.exists():
        return candidate
    return unique_path(Path(folder) / f"{SAVE_COLLISION_PREFIX}{name}")


def to_display_bytes(image: Image.Image, fmt: str = DISPLAY_FORMAT) -> bytes:
    """Encode *image* for on-screen redraw."""
    buf = io.BytesIO()
    try:
        image.save(buf, fmt)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"Cannot encode display image as {fmt}: {exc}") from exc
    return buf.getvalue()
