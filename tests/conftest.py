"""Shared fixtures: synthetic logos and a fake HTTP session."""

from __future__ import annotations

import base64
from io import BytesIO

import numpy as np
import pytest
import requests
from PIL import Image

from logo_kit.io import fetch

WHITE = (255, 255, 255, 255)
RED = (200, 30, 30, 255)


def _png(img: Image.Image) -> bytes:
    out = BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def _logo_image(width: int, height: int, background=WHITE, mark=RED) -> Image.Image:
    """A uniform background with a solid block in the middle."""
    img = Image.new("RGBA", (width, height), background)
    img.paste(mark, (width // 4, height // 4, 3 * width // 4, 3 * height // 4))
    return img


@pytest.fixture
def logo_png():
    def _make(width: int = 300, height: int = 150, background=WHITE, mark=RED) -> bytes:
        return _png(_logo_image(width, height, background, mark))

    return _make


@pytest.fixture
def logo_uri(logo_png):
    def _make(width: int = 300, height: int = 150, background=WHITE, mark=RED) -> str:
        data = logo_png(width, height, background, mark)
        return "data:image/png;base64," + base64.b64encode(data).decode("ascii")

    return _make


class FakeResponse:
    def __init__(self, url: str, status_code: int, content: bytes) -> None:
        self.url = url
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if 400 <= self.status_code:
            raise requests.HTTPError(f"{self.status_code} for {self.url}")


class FakeSession:
    """Serves registered payloads; unknown URLs answer 404."""

    def __init__(self) -> None:
        self.routes: dict[str, bytes] = {}
        self.requested: list[str] = []

    def get(self, url: str, timeout: float, allow_redirects: bool = True) -> FakeResponse:
        self.requested.append(url)
        if url in self.routes:
            return FakeResponse(url, 200, self.routes[url])
        return FakeResponse(url, 404, b"not found")


@pytest.fixture
def fake_http(monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(fetch, "_get_session", lambda: session)
    return session


def _chunk_offsets(data: bytes):
    """Yield (offset, type) for every chunk after the PNG signature."""
    pos = 8
    while pos + 8 <= len(data):
        length = int.from_bytes(data[pos : pos + 4], "big")
        yield pos, data[pos + 4 : pos + 8]
        pos += 12 + length


@pytest.fixture
def corrupt_png():
    """PNG payloads that Pillow starts reading but cannot decode."""

    def _make(kind: str) -> bytes:
        rng = np.random.default_rng(3)
        noise = rng.integers(0, 256, size=(300, 300, 4), dtype=np.uint8)
        data = bytearray(_png(Image.fromarray(noise)))
        if kind == "bad-chunk":
            # incompressible pixels span several IDAT chunks; break the second
            idat = [pos for pos, cid in _chunk_offsets(bytes(data)) if cid == b"IDAT"]
            assert len(idat) > 1
            data[idat[1] + 4 : idat[1] + 8] = b"\xf9\x1e\xf6\xdf"
        elif kind == "truncated-header":
            data[8:12] = b"\x00\x00\x00\x00"
        else:
            raise ValueError(kind)
        return bytes(data)

    return _make
