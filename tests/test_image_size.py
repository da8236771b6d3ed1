"""Tests for natural-size resolution and media byte loading."""

import asyncio

import httpx
import pytest

from src.background_engine.image_size import ImageSize, ImageSizeResolver, read_image_size
from src.background_engine.media_source import (
    MediaSourceError,
    decode_data_uri,
    fetch_media_bytes,
    load_media_bytes,
)
from src.schemas.engine_config import EngineConfig


class TestImageSizeResolver:
    def test_resolves_and_memoizes(self, fetcher, resolver):
        url = fetcher.add("https://cdn.example.com/a.png", 40, 20)

        async def run():
            first = await resolver.get_natural_size(url)
            second = await resolver.get_natural_size(url)
            return first, second

        first, second = asyncio.run(run())
        assert first == ImageSize(width=40, height=20)
        assert second == first
        assert fetcher.calls == [url]

    def test_failure_is_cached(self, fetcher, resolver):
        url = "https://cdn.example.com/missing.png"

        async def run():
            return [await resolver.get_natural_size(url) for _ in range(3)]

        assert asyncio.run(run()) == [None, None, None]
        assert fetcher.calls == [url]
        assert resolver.cached(url)

    def test_undecodable_bytes(self, fetcher, resolver):
        fetcher.images["https://cdn.example.com/not-an-image"] = b"<html>nope</html>"
        size = asyncio.run(resolver.get_natural_size("https://cdn.example.com/not-an-image"))
        assert size is None

    def test_concurrent_lookups_share_one_fetch(self, png_bytes):
        calls = []

        async def slow_fetch(url):
            calls.append(url)
            await asyncio.sleep(0.01)
            return png_bytes(30, 10)

        resolver = ImageSizeResolver(fetcher=slow_fetch)

        async def run():
            return await asyncio.gather(*(resolver.get_natural_size("https://x/a.png") for _ in range(4)))

        sizes = asyncio.run(run())
        assert all(s == ImageSize(width=30, height=10) for s in sizes)
        assert calls == ["https://x/a.png"]

    def test_blank_url(self, fetcher, resolver):
        assert asyncio.run(resolver.get_natural_size("")) is None
        assert fetcher.calls == []

    def test_clear_forgets(self, fetcher, resolver):
        url = fetcher.add("https://cdn.example.com/a.png", 4, 4)
        asyncio.run(resolver.get_natural_size(url))
        resolver.clear()
        assert not resolver.cached(url)
        asyncio.run(resolver.get_natural_size(url))
        assert fetcher.calls == [url, url]

    def test_resolvers_do_not_share_cache(self, fetcher):
        url = fetcher.add("https://cdn.example.com/a.png", 4, 4)
        asyncio.run(ImageSizeResolver(fetcher=fetcher).get_natural_size(url))
        asyncio.run(ImageSizeResolver(fetcher=fetcher).get_natural_size(url))
        assert len(fetcher.calls) == 2

    def test_default_fetcher_data_uri(self, png_data_uri):
        size = asyncio.run(ImageSizeResolver().get_natural_size(png_data_uri(64, 48)))
        assert size == ImageSize(width=64, height=48)

    def test_default_fetcher_local_file(self, tmp_path, png_bytes):
        path = tmp_path / "bg.png"
        path.write_bytes(png_bytes(12, 34))
        size = asyncio.run(ImageSizeResolver().get_natural_size(str(path)))
        assert (size.width, size.height) == (12, 34)

    def test_read_image_size(self, png_bytes):
        assert read_image_size(png_bytes(7, 3)).aspect_ratio == pytest.approx(7 / 3)


class TestMediaSource:
    def test_percent_encoded_data_uri(self):
        assert decode_data_uri("data:text/plain,hello%20world") == b"hello world"

    def test_base64_data_uri(self, png_bytes, png_data_uri):
        assert decode_data_uri(png_data_uri(5, 5)) == png_bytes(5, 5)

    def test_malformed_data_uri(self):
        with pytest.raises(MediaSourceError):
            decode_data_uri("data:image/png;base64")

    def test_blob_url_rejected(self):
        with pytest.raises(MediaSourceError):
            load_media_bytes("blob:https://editor.example.com/1234")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_media_bytes(str(tmp_path / "missing.png"))

    def test_file_url(self, tmp_path):
        path = tmp_path / "a.bin"
        path.write_bytes(b"\x00\x01")
        assert load_media_bytes(path.as_uri()) == b"\x00\x01"

    def test_async_data_uri(self):
        assert asyncio.run(fetch_media_bytes("data:,abc")) == b"abc"


@pytest.fixture
def cdn(png_bytes):
    """MockTransport serving a tiny CDN; records every request it sees."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/old.png":
            return httpx.Response(302, headers={"Location": "https://cdn.example.com/a.png"})
        if request.url.path == "/a.png":
            return httpx.Response(200, content=png_bytes(16, 9))
        return httpx.Response(404)

    transport = httpx.MockTransport(handler)
    transport.seen = seen
    return transport


class TestHttpMediaSource:
    def test_sync_get(self, cdn, png_bytes):
        assert load_media_bytes("https://cdn.example.com/a.png", transport=cdn) == png_bytes(16, 9)

    def test_sync_not_found(self, cdn):
        with pytest.raises(httpx.HTTPStatusError):
            load_media_bytes("https://cdn.example.com/missing.png", transport=cdn)

    def test_sync_follows_redirect(self, cdn, png_bytes):
        assert load_media_bytes("https://cdn.example.com/old.png", transport=cdn) == png_bytes(16, 9)
        assert [r.url.path for r in cdn.seen] == ["/old.png", "/a.png"]

    def test_async_get(self, cdn, png_bytes):
        data = asyncio.run(fetch_media_bytes("https://cdn.example.com/a.png", transport=cdn))
        assert data == png_bytes(16, 9)

    def test_async_not_found(self, cdn):
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(fetch_media_bytes("https://cdn.example.com/missing.png", transport=cdn))

    def test_async_follows_redirect(self, cdn, png_bytes):
        data = asyncio.run(fetch_media_bytes("https://cdn.example.com/old.png", transport=cdn))
        assert data == png_bytes(16, 9)
        assert len(cdn.seen) == 2

    def test_timeout_from_config(self, cdn):
        config = EngineConfig(http_timeout=3.5)
        load_media_bytes("https://cdn.example.com/a.png", config, transport=cdn)
        asyncio.run(fetch_media_bytes("https://cdn.example.com/a.png", config, transport=cdn))
        for request in cdn.seen:
            assert request.extensions["timeout"]["read"] == 3.5
            assert request.extensions["timeout"]["connect"] == 3.5

    def test_resolver_over_http(self, cdn):
        resolver = ImageSizeResolver(fetcher=lambda url: fetch_media_bytes(url, transport=cdn))

        async def run():
            found = await resolver.get_natural_size("https://cdn.example.com/old.png")
            missing = [await resolver.get_natural_size("https://cdn.example.com/missing.png") for _ in range(2)]
            return found, missing

        found, missing = asyncio.run(run())
        assert found == ImageSize(width=16, height=9)
        assert missing == [None, None]
        assert resolver.cached("https://cdn.example.com/missing.png")
        assert [r.url.path for r in cdn.seen] == ["/old.png", "/a.png", "/missing.png"]
