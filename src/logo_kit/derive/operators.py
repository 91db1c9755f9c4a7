"""Per-pixel transforms used to derive logo variants.

Every operator returns a new :class:`PixelBuffer` of the same size and leaves
its input untouched.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..pixels.buffer import PixelBuffer

RGB = Tuple[int, int, int]

BLACK: RGB = (0, 0, 0)
WHITE: RGB = (255, 255, 255)

DEFAULT_TOLERANCE = 30


def invert(buffer: PixelBuffer) -> PixelBuffer:
    """Return the photographic negative of *buffer*.

    Colour channels are blended against a white fill with a difference blend,
    i.e. ``|c - 255|``. Alpha is preserved exactly.
    """
    out = buffer.pixels.copy()
    rgb = out[:, :, :3].astype(np.int16)
    out[:, :, :3] = np.abs(rgb - 255).astype(np.uint8)
    return PixelBuffer(out)


def recolor(buffer: PixelBuffer, color: RGB) -> PixelBuffer:
    """Paint every non-transparent pixel with *color*.

    Fully transparent pixels are copied through byte for byte.
    """
    target = _validate_rgb(color)
    out = buffer.pixels.copy()
    visible = out[:, :, 3] > 0
    out[visible, :3] = target
    return PixelBuffer(out)


def key_out_background(buffer: PixelBuffer, tolerance: int = DEFAULT_TOLERANCE) -> PixelBuffer:
    """Make pixels close to the top-left reference colour fully transparent.

    A pixel is keyed out when each of its R, G and B channels lies strictly
    within *tolerance* of the pixel at (0, 0). All other pixels, alpha
    included, are left unchanged. If (0, 0) belongs to the foreground, the
    foreground is keyed out instead.
    """
    if not 0 <= tolerance <= 256:
        raise ValueError(f"Tolerance must be within 0..256, got {tolerance}")
    out = buffer.pixels.copy()
    rgb = out[:, :, :3].astype(np.int16)
    reference = rgb[0, 0]
    matches = np.all(np.abs(rgb - reference) < tolerance, axis=2)
    out[matches, 3] = 0
    return PixelBuffer(out)


def _validate_rgb(color: RGB) -> np.ndarray:
    if len(color) != 3 or any(not 0 <= int(c) <= 255 for c in color):
        raise ValueError(f"Expected an RGB triple in 0..255, got {color!r}")
    return np.array(color, dtype=np.uint8)
