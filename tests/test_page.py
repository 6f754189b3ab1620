"""
Tests for the KaTeX page host and the asset download cache.
"""

import httpx
import pytest

from conftest import ASSETS
from nl2latex.render import AssetCache, KatexAssets, KatexPage, RendererLoader
from nl2latex.utils.config import RendererConfig
from nl2latex.utils.errors import AssetLoadError


class FakeCache:
    """Serves fixed script sources by URL."""

    def __init__(self, sources):
        self.sources = sources
        self.fetched = []

    async def fetch(self, url):
        self.fetched.append(url)
        return self.sources[url]


SOURCES = {
    ASSETS.core_script_url: "window.katex = {render: function () {}};",
    ASSETS.extension_script_url: "window.renderMathInElement = function () {};",
}


class TestKatexAssets:
    def test_default_urls(self):
        assets = KatexAssets.from_config(RendererConfig())

        assert assets.stylesheet_url == (
            "https://cdnjs.cloudflare.com/ajax/libs/KaTeX/0.16.9/katex.min.css"
        )
        assert assets.core_script_url.endswith("/0.16.9/katex.min.js")
        assert assets.extension_script_url.endswith("/0.16.9/contrib/auto-render.min.js")

    def test_custom_cdn(self):
        config = RendererConfig(katex_version="0.16.10", cdn_base="https://cdn.example/katex/")
        assets = KatexAssets.from_config(config)

        assert assets.core_script_url == "https://cdn.example/katex/0.16.10/katex.min.js"


class TestKatexPage:
    @pytest.mark.asyncio
    async def test_loader_fills_head_in_order(self):
        page = KatexPage(FakeCache(SOURCES))
        assert page.has_engine() is False

        await RendererLoader(page, ASSETS).ensure_loaded()

        assert page.has_engine() is True
        assert page.stylesheets == [ASSETS.stylesheet_url]
        assert page.scripts == [ASSETS.core_script_url, ASSETS.extension_script_url]
        assert 'rel="stylesheet"' in page.head[0]
        assert "window.katex" in page.head[1]
        assert "renderMathInElement" in page.head[2]

    @pytest.mark.asyncio
    async def test_document_contains_head_and_body(self):
        page = KatexPage(FakeCache(SOURCES))
        await RendererLoader(page, ASSETS).ensure_loaded()

        document = page.document('<div id="x">{}</div>')

        assert document.startswith("<!DOCTYPE html>")
        assert "window.katex" in document
        assert '<div id="x">{}</div>' in document

    @pytest.mark.asyncio
    async def test_inline_script_close_tag_is_escaped(self):
        sources = dict(SOURCES)
        sources[ASSETS.core_script_url] = 'var s = "</script>";'
        page = KatexPage(FakeCache(sources))

        await page.add_script(ASSETS.core_script_url)

        assert page.head[0] == '<script>var s = "<\\/script>";</script>'

    @pytest.mark.asyncio
    async def test_empty_script_is_an_error(self):
        page = KatexPage(FakeCache({ASSETS.core_script_url: "  "}))

        with pytest.raises(AssetLoadError):
            await page.add_script(ASSETS.core_script_url)
        assert page.has_engine() is False

    def test_theme(self):
        page = KatexPage(FakeCache({}), dark_mode=False)
        assert "#ffffff" in page.document("")

        assert "#0a0a0f" in KatexPage(FakeCache({})).document("")


class TestAssetCache:
    """Downloads through httpx, once per file."""

    @pytest.mark.asyncio
    async def test_downloads_then_hits_disk(self, tmp_path):
        requests = []

        def handler(request):
            requests.append(str(request.url))
            return httpx.Response(200, text="katex source")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            cache = AssetCache(tmp_path / "katex", client=client)

            first = await cache.fetch(ASSETS.core_script_url)
            second = await cache.fetch(ASSETS.core_script_url)

        assert first == second == "katex source"
        assert requests == [ASSETS.core_script_url]
        assert (tmp_path / "katex" / "katex.min.js").read_text() == "katex source"

    @pytest.mark.asyncio
    async def test_empty_cached_file_is_downloaded_again(self, tmp_path):
        """A zero-byte leftover from an interrupted run is not a cache hit."""
        (tmp_path / "katex.min.js").write_text("")
        requests = []

        def handler(request):
            requests.append(str(request.url))
            return httpx.Response(200, text="katex source")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            cache = AssetCache(tmp_path, client=client)

            assert await cache.fetch(ASSETS.core_script_url) == "katex source"

        assert len(requests) == 1
        assert (tmp_path / "katex.min.js").read_text() == "katex source"

    @pytest.mark.asyncio
    async def test_partial_temp_file_is_ignored(self, tmp_path):
        """Only a finished write lands under the asset's name."""
        (tmp_path / ".katex.min.js.abc123.part").write_text("window.kat")

        def handler(request):
            return httpx.Response(200, text="katex source")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            cache = AssetCache(tmp_path, client=client)

            assert await cache.fetch(ASSETS.core_script_url) == "katex source"

        written = sorted(p.name for p in tmp_path.iterdir())
        assert written == [".katex.min.js.abc123.part", "katex.min.js"]

    @pytest.mark.asyncio
    async def test_failed_write_leaves_nothing(self, tmp_path, monkeypatch):
        def handler(request):
            return httpx.Response(200, text="katex source")

        def disk_full(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr("nl2latex.render.assets.os.replace", disk_full)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            cache = AssetCache(tmp_path, client=client)

            with pytest.raises(OSError):
                await cache.fetch(ASSETS.core_script_url)

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_http_error(self, tmp_path):
        def handler(request):
            return httpx.Response(404, text="not found")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            cache = AssetCache(tmp_path, client=client)

            with pytest.raises(AssetLoadError) as exc_info:
                await cache.fetch(ASSETS.core_script_url)

        assert exc_info.value.url == ASSETS.core_script_url
        assert not (tmp_path / "katex.min.js").exists()

    @pytest.mark.asyncio
    async def test_connection_error(self, tmp_path):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            cache = AssetCache(tmp_path, client=client)

            with pytest.raises(AssetLoadError):
                await cache.fetch(ASSETS.extension_script_url)

    def test_path_for(self, tmp_path):
        cache = AssetCache(tmp_path)
        assert cache.path_for(ASSETS.extension_script_url) == tmp_path / "auto-render.min.js"
