"""Shared fixtures for the mosaic_editor test-suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from PIL import Image


def _gradient(width: int, height: int) -> Image.Image:
    """RGB image in which every pixel has a distinct color."""
    img = Image.new("RGB", (width, height))
    img.putdata([
        (x * 6 % 256, y * 8 % 256, (x * 31 + y * 17) % 256)
        for y in range(height)
        for x in range(width)
    ])
    return img


@pytest.fixture
def make_gradient() -> Callable[[int, int], Image.Image]:
    return _gradient


@pytest.fixture
def gradient() -> Image.Image:
    """Non-square 40x30 test image."""
    return _gradient(40, 30)
