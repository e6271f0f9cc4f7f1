"""Raster target and intensity colouring used by the visualizers."""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np
from matplotlib import colormaps
from matplotlib.colors import to_rgb

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


def parse_color(color: str | RGB) -> RGB:
    """Accept any matplotlib colour spec (``"#f3f"``, ``"white"``...) or an RGB tuple."""
    if isinstance(color, tuple) and len(color) == 3 and all(
        isinstance(c, (int, np.integer)) for c in color
    ):
        return (int(color[0]), int(color[1]), int(color[2]))
    r, g, b = to_rgb(color)
    return (round(r * 255), round(g * 255), round(b * 255))


class ColorRamp:
    """Lookup table from a byte intensity to an RGB colour.

    The table is sampled from a registered matplotlib colormap. Without a
    colormap (``name=None`` or an unknown name) intensities map to gray.
    """

    def __init__(self, name: Optional[str] = "viridis") -> None:
        self.name = name
        self.table = self._build_table(name)

    @staticmethod
    def _build_table(name: Optional[str]) -> np.ndarray:
        if name is not None:
            try:
                cmap = colormaps[name]
            except KeyError:
                logger.warning("unknown colormap %r, falling back to grayscale", name)
            else:
                rgba = cmap(np.linspace(0.0, 1.0, 256))
                return np.round(rgba[:, :3] * 255).astype(np.uint8)
        ramp = np.arange(256, dtype=np.uint8)
        return np.stack([ramp, ramp, ramp], axis=1)

    @property
    def grayscale(self) -> bool:
        return self.name is None or self.name not in colormaps

    def color_from_intensity(self, d: int) -> RGB:
        d = min(max(int(d), 0), 255)
        r, g, b = self.table[d]
        return (int(r), int(g), int(b))

    def colors(self, data: np.ndarray) -> np.ndarray:
        """Vectorised lookup: ``(n,)`` bytes to ``(n, 3)`` colours."""
        return self.table[np.clip(np.asarray(data, dtype=np.int64), 0, 255)]


class Canvas:
    """A ``height x width`` RGB raster with 2D-context style fill operations."""

    def __init__(self, width: int, height: int, background: str | RGB = (0, 0, 0)) -> None:
        self.pixels = np.zeros((max(0, int(height)), max(0, int(width)), 3), dtype=np.uint8)
        self.pixels[:, :] = parse_color(background)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def resize(self, width: int, height: int) -> bool:
        if (width, height) == (self.width, self.height):
            return False
        self.pixels = np.zeros((max(0, int(height)), max(0, int(width)), 3), dtype=np.uint8)
        return True

    def _clip(self, x: float, y: float, w: float, h: float) -> Optional[tuple[int, int, int, int]]:
        # Negative sizes extend left / up from the anchor, like canvas fillRect.
        if w < 0:
            x, w = x + w, -w
        if h < 0:
            y, h = y + h, -h
        if not all(math.isfinite(v) for v in (x, y, w, h)):
            return None
        x0 = max(int(round(x)), 0)
        y0 = max(int(round(y)), 0)
        x1 = min(int(round(x + w)), self.width)
        y1 = min(int(round(y + h)), self.height)
        if x1 <= x0 or y1 <= y0:
            return None
        return x0, y0, x1, y1

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str | RGB) -> None:
        box = self._clip(x, y, w, h)
        if box is None:
            return
        x0, y0, x1, y1 = box
        self.pixels[y0:y1, x0:x1] = parse_color(color)

    def scroll_left(self, amount: int, region_width: Optional[int] = None) -> None:
        """Shift ``[0, region_width)`` left by ``amount`` columns.

        The vacated columns on the right keep their old content until cleared.
        """
        region = self.width if region_width is None else min(int(region_width), self.width)
        amount = int(amount)
        if amount <= 0 or region <= 0:
            return
        if amount >= region:
            return
        self.pixels[:, : region - amount] = self.pixels[:, amount:region]


__all__ = ["Canvas", "ColorRamp", "RGB", "parse_color"]
