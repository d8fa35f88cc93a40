"""
Image Mosaic Editor
===================

Drag a rectangle over an image to pixelate it into origin-anchored
blocks, confirm the preview, and save the result next to (never over)
existing files.
"""

__version__ = "0.1.0"
