"""
Framebuffer holding the rendered image.

Pixels are stored as linear-light float colors in [0, 1], row-major with
the origin at the top-left. Gamma mapping to 8-bit happens only when the
image is exported.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

import numpy as np

from .vec3 import Color

logger = logging.getLogger(__name__)


class Framebuffer:
    """A width x height grid of colors, each written once per render."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Framebuffer size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._data = np.zeros((height, width, 3), dtype=np.float64)
        self._written = np.zeros((height, width), dtype=bool)

    def set(self, x: int, y: int, color: Color) -> None:
        """Store the color for pixel (x, y); y = 0 is the top row."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} framebuffer")
        self._data[y, x] = color.to_array()
        self._written[y, x] = True

    def get(self, x: int, y: int) -> Color:
        return Color.from_array(self._data[y, x].copy())

    def is_complete(self) -> bool:
        """True once every pixel has been written."""
        return bool(self._written.all())

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the (height, width, 3) color array."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def to_ldr(self, gamma: float = 2.2) -> np.ndarray:
        """Convert to an 8-bit RGB array with gamma correction.

        Args:
            gamma: Display gamma

        Returns:
            uint8 array of shape (height, width, 3)
        """
        corrected = np.power(np.clip(self._data, 0.0, 1.0), 1.0 / gamma)
        return (corrected * 255.0 + 0.5).astype(np.uint8)

    def save(self, filename: Union[str, Path], gamma: float = 2.2) -> None:
        """Save the image to a file.

        Args:
            filename: Output filename (extension determines format)
            gamma: Display gamma
        """
        from PIL import Image as PILImage

        if not self.is_complete():
            logger.warning("Saving framebuffer with %d unwritten pixels",
                           int((~self._written).sum()))

        pil_image = PILImage.fromarray(self.to_ldr(gamma), 'RGB')
        pil_image.save(str(filename))
        logger.info("Saved %dx%d image to %s", self.width, self.height, filename)

    def __repr__(self) -> str:
        return f"Framebuffer({self.width}x{self.height})"
