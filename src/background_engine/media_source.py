"""Load raw media bytes from a background media URL.

Supported sources:
- ``data:`` URIs (base64 or percent-encoded payloads)
- ``http://`` / ``https://`` URLs (fetched with httpx)
- ``file://`` URLs and plain local filesystem paths

``blob:`` URLs only exist inside a browser session and are rejected.
"""

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from urllib.parse import unquote, unquote_to_bytes, urlparse

import httpx

from src.schemas.engine_config import DEFAULT_CONFIG, EngineConfig

logger = logging.getLogger(__name__)


class MediaSourceError(ValueError):
    """Raised when a media URL cannot be turned into bytes."""


def decode_data_uri(url: str) -> bytes:
    """Decode the payload of a ``data:`` URI."""
    header, sep, payload = url.partition(",")
    if not sep:
        raise MediaSourceError("Malformed data URI: missing ',' separator")
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode(unquote(payload), validate=False)
        except (binascii.Error, ValueError) as e:
            raise MediaSourceError(f"Invalid base64 data URI: {e}") from e
    return unquote_to_bytes(payload)


def _local_path(url: str) -> Path | None:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    # Single-letter schemes are Windows drive letters, not URL schemes.
    if parsed.scheme == "" or len(parsed.scheme) == 1:
        return Path(url)
    return None


def _is_http(url: str) -> bool:
    return urlparse(url).scheme.lower() in ("http", "https")


def _read_local(url: str) -> bytes:
    path = _local_path(url)
    if path is None:
        raise MediaSourceError(f"Unsupported media URL scheme: {url[:40]}")
    if not path.exists():
        raise FileNotFoundError(f"Media file not found: {path}")
    return path.read_bytes()


def load_media_bytes(url: str, config: EngineConfig | None = None,
                     transport: httpx.BaseTransport | None = None) -> bytes:
    """Synchronously load the bytes behind ``url``."""
    config = config or DEFAULT_CONFIG
    if url.lower().startswith("data:"):
        return decode_data_uri(url)
    if _is_http(url):
        with httpx.Client(transport=transport, timeout=config.http_timeout,
                          follow_redirects=True) as client:
            response = client.get(url)
            response.raise_for_status()
            return response.content
    return _read_local(url)


async def fetch_media_bytes(url: str, config: EngineConfig | None = None,
                            transport: httpx.AsyncBaseTransport | None = None) -> bytes:
    """Asynchronously load the bytes behind ``url``."""
    config = config or DEFAULT_CONFIG
    if url.lower().startswith("data:"):
        return decode_data_uri(url)
    if _is_http(url):
        async with httpx.AsyncClient(transport=transport, timeout=config.http_timeout,
                                     follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
            logger.debug(f"Fetched {len(response.content)} bytes from {url}")
            return response.content
    return await asyncio.to_thread(_read_local, url)
