"""Uniform scale-and-centre fitting of an image into a square canvas."""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from ..pixels.buffer import PixelBuffer

ICON_SIZE = 256


@dataclass(frozen=True, slots=True)
class FitTransform:
    """Scale factor and offsets that centre an image in a square."""

    scale: float
    offset_x: float
    offset_y: float


def compute_fit(src_width: int, src_height: int, target_size: int) -> FitTransform:
    """Return the transform fitting a ``src_width`` x ``src_height`` image
    into a ``target_size`` square without distortion or cropping."""
    if src_width <= 0 or src_height <= 0:
        raise ValueError("Source dimensions must be positive")
    if target_size <= 0:
        raise ValueError("Target size must be a positive integer")

    scale = min(target_size / src_width, target_size / src_height)
    offset_x = max(0.0, (target_size - src_width * scale) / 2)
    offset_y = max(0.0, (target_size - src_height * scale) / 2)
    return FitTransform(scale=scale, offset_x=offset_x, offset_y=offset_y)


def render_fit(buffer: PixelBuffer, target_size: int = ICON_SIZE) -> PixelBuffer:
    """Draw *buffer* centred on a transparent ``target_size`` square."""
    fit = compute_fit(buffer.width, buffer.height, target_size)
    scaled_w = max(1, round(buffer.width * fit.scale))
    scaled_h = max(1, round(buffer.height * fit.scale))

    resample_attr = getattr(Image, "Resampling", None)
    resample_filter = getattr(resample_attr, "LANCZOS", None) if resample_attr else None
    if resample_filter is None:
        resample_filter = getattr(Image, "LANCZOS", Image.BICUBIC)

    scaled = buffer.to_image().resize((scaled_w, scaled_h), resample_filter)
    canvas = Image.new("RGBA", (target_size, target_size), color=(0, 0, 0, 0))
    canvas.paste(scaled, (round(fit.offset_x), round(fit.offset_y)))
    return PixelBuffer.from_image(canvas)
