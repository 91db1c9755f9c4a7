"""Addressable RGBA pixel buffers backed by numpy and Pillow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError
from PIL.Image import DecompressionBombError

from ..errors import FetchError, LoadError
from ..io.fetch import encode_data_uri
from ..io.fetch import fetch_bytes as _fetch_reference

try:  # pragma: no cover - optional dependency
    import cairosvg  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    cairosvg = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

Pixel = Tuple[int, int, int, int]

_ENCODERS: dict[str, tuple[str, dict[str, object]]] = {
    "image/png": ("PNG", {}),
    "image/webp": ("WEBP", {"lossless": True}),
}


class PixelBuffer:
    """A dense RGBA pixel grid, row-major and top-to-bottom."""

    __slots__ = ("pixels",)

    def __init__(self, pixels: np.ndarray) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected an (height, width, 4) array, got {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("Pixel buffers must have positive dimensions")
        self.pixels = np.ascontiguousarray(pixels, dtype=np.uint8)

    @classmethod
    def blank(cls, width: int, height: int, fill: Pixel = (0, 0, 0, 0)) -> "PixelBuffer":
        """Return a buffer of the given size filled with *fill*."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = fill
        return cls(pixels)

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(np.array(img, dtype=np.uint8))

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def get_pixel(self, x: int, y: int) -> Pixel:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return r, g, b, a

    def set_pixel(self, x: int, y: int, value: Pixel) -> None:
        self.pixels[y, x] = value

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())

    def to_bytes(self) -> bytes:
        """Return the flat ``width*height*4`` RGBA byte layout."""
        return self.pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """An encoded image: a resolvable reference plus its raw payload."""

    url: str
    data: bytes
    mime_type: str


def load(url: str, payload: bytes | None = None) -> PixelBuffer:
    """Fetch and decode *url* into a buffer at the image's natural size.

    When *payload* already holds the fetched bytes it is decoded directly.
    Raises :class:`~logo_kit.errors.LoadError` if the image is unreachable or
    cannot be decoded.
    """
    if payload is None:
        try:
            payload = _fetch_reference(url)
        except FetchError as exc:
            raise LoadError(url, exc.reason) from exc
    if not payload:
        raise LoadError(url, "empty image payload")

    data = payload
    if _looks_like_svg(payload):
        if cairosvg is None:
            raise LoadError(url, "SVG source requires the optional cairosvg dependency")
        try:
            data = cairosvg.svg2png(bytestring=payload)  # type: ignore[attr-defined]
        except Exception as exc:
            raise LoadError(url, f"SVG rasterisation failed: {exc}") from exc

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            buffer = PixelBuffer.from_image(img)
    except (UnidentifiedImageError, DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise LoadError(url, f"undecodable image: {exc}") from exc

    logger.debug("Loaded %dx%d buffer", buffer.width, buffer.height)
    return buffer


def encode(buffer: PixelBuffer, mime_type: str = "image/png") -> EncodedImage:
    """Serialise *buffer* losslessly, returning a data URI and its bytes."""
    try:
        fmt, options = _ENCODERS[mime_type]
    except KeyError:
        raise ValueError(f"Unsupported output type {mime_type!r}") from None

    out = BytesIO()
    buffer.to_image().save(out, format=fmt, **options)
    data = out.getvalue()
    return EncodedImage(url=encode_data_uri(data, mime_type), data=data, mime_type=mime_type)


def fetch_bytes(url: str) -> bytes:
    """Return the encoded payload behind a reference produced by :func:`encode`.

    Raises :class:`~logo_kit.errors.FetchError` on failure.
    """
    return _fetch_reference(url)


def _looks_like_svg(image_bytes: bytes) -> bool:
    snippet = image_bytes[:1024].lstrip().lower()
    return snippet.startswith(b"<svg") or (
        snippet.startswith(b"<?xml") and b"<svg" in snippet
    )
