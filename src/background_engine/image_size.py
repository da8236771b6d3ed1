"""Resolve the natural pixel size of background media, memoized per URL.

The resolver owns its cache, so each synchronizer (or test) can hold an
independent one.  Both successes and failures are cached: a URL that fails
to load is not retried for the life of the resolver.  Concurrent lookups of
the same URL share a single in-flight task.
"""

import asyncio
import io
import logging
from typing import Awaitable, Callable, Optional

from PIL import Image
from pydantic import BaseModel, Field

from src.schemas.engine_config import DEFAULT_CONFIG, EngineConfig
from .media_source import fetch_media_bytes

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[bytes]]


class ImageSize(BaseModel):
    """Natural image dimensions in pixels."""

    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def read_image_size(data: bytes) -> Optional[ImageSize]:
    """Decode just enough of ``data`` to read its dimensions."""
    with Image.open(io.BytesIO(data)) as img:
        width, height = img.size
    if width <= 0 or height <= 0:
        return None
    return ImageSize(width=width, height=height)


class ImageSizeResolver:
    """Memoizing natural-size lookup for media URLs."""

    def __init__(self, fetcher: Fetcher | None = None, config: EngineConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self._fetcher = fetcher or (lambda url: fetch_media_bytes(url, self.config))
        self._sizes: dict[str, Optional[ImageSize]] = {}
        self._in_flight: dict[str, asyncio.Task] = {}

    def clear(self) -> None:
        """Forget all cached sizes."""
        self._sizes.clear()
        self._in_flight.clear()

    def cached(self, url: str) -> bool:
        return url in self._sizes

    async def get_natural_size(self, url: str) -> Optional[ImageSize]:
        """Return the natural size of ``url``, or None if it cannot be determined.

        Never raises for load or decode failures.
        """
        key = str(url or "")
        if not key:
            return None
        if key in self._sizes:
            return self._sizes[key]

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(key))
            self._in_flight[key] = task
        try:
            size = await asyncio.shield(task)
        finally:
            if task.done():
                self._in_flight.pop(key, None)

        # First resolution wins.
        self._sizes.setdefault(key, size)
        return self._sizes[key]

    async def _resolve(self, url: str) -> Optional[ImageSize]:
        try:
            data = await self._fetcher(url)
            size = read_image_size(data)
        except Exception as e:
            logger.warning(f"Could not resolve image size for {url[:80]}: {e}")
            return None
        if size is None:
            logger.warning(f"Image at {url[:80]} reports an empty size")
        else:
            logger.debug(f"Resolved {url[:80]} to {size.width}x{size.height}")
        return size
