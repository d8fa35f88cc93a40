"""
Application constants and configuration.

All tuneable values live here: mosaic radius bounds, save/export
behaviour, display encoding, and selection-overlay styling.  Persisted
user preferences (last radius, last folders) are handled by the
``settings`` module.

The ``config_dir()`` helper returns the platform-appropriate config
directory and is shared by all persistence modules.
"""

import os
import sys
from pathlib import Path

# =============================================================================
# APP IDENTITY & CONFIG DIRECTORY
# =============================================================================
APP_NAME = "mosaic-editor"
WINDOW_TITLE = "Image Mosaic Editor"


def config_dir() -> Path:
    """Return the platform-appropriate config directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    directory = base / APP_NAME
    directory.mkdir(parents=True, exist_ok=True)
    return directory


# Environment variable holding the log level name (e.g. "DEBUG")
LOG_LEVEL_ENV = "MOSAIC_EDITOR_LOG"
LOG_LEVEL_DEFAULT = "WARNING"

# =============================================================================
# MOSAIC PARAMETERS
# =============================================================================
# Block radius; each block is (2 * radius + 1) pixels square
RADIUS_MIN = 1
RADIUS_MAX = 20
RADIUS_DEFAULT = 5

# =============================================================================
# FILE HANDLING
# =============================================================================
# Prepended to the file name when the save destination already exists
SAVE_COLLISION_PREFIX = "mosaic_"

# Names tried before giving up when destinations keep appearing while saving
SAVE_ATTEMPTS = 10

# Extensions Pillow can decode but not encode; saved as PNG instead
READ_ONLY_EXTENSIONS = {".psd"}
READ_ONLY_FALLBACK_EXTENSION = ".png"

# PNG compression level (0-9, 9 = maximum compression)
PNG_COMPRESS_LEVEL = 9

# JPEG export quality
JPEG_QUALITY_DEFAULT = 95

# Supported image extensions for the open dialog
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".tif", ".webp", ".gif", ".psd"}

# Encoding used for the on-screen byte cache (lossless)
DISPLAY_FORMAT = "PNG"

# =============================================================================
# SELECTION OVERLAY
# =============================================================================
SELECTION_PEN_WIDTH = 1
SELECTION_COLOR = (255, 0, 0)
