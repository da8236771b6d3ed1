"""Shared fixtures: in-memory PNG images and resolvers that never hit the network."""

import base64
import io

import pytest
from PIL import Image

from src.background_engine.image_size import ImageSizeResolver


def _png(width: int, height: int) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    """Factory: PNG bytes of the requested size."""
    return _png


@pytest.fixture
def png_data_uri():
    """Factory: base64 PNG data URI of the requested size."""

    def make(width: int, height: int) -> str:
        return "data:image/png;base64," + base64.b64encode(_png(width, height)).decode("ascii")

    return make


class FakeFetcher:
    """Serves registered URLs from memory and counts fetches."""

    def __init__(self):
        self.images: dict[str, bytes] = {}
        self.calls: list[str] = []

    def add(self, url: str, width: int, height: int) -> str:
        self.images[url] = _png(width, height)
        return url

    async def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.images:
            raise OSError(f"404 for {url}")
        return self.images[url]


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def resolver(fetcher):
    return ImageSizeResolver(fetcher=fetcher)
