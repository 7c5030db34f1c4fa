"""Tests for the webfetch tool and HTML conversion."""

import asyncio
import base64
from pathlib import Path

import httpx
import pytest

from webtools.config import OutputSettings, Settings, WebFetchSettings
from webtools.exceptions import (
    FetchHTTPError,
    FetchTimeoutError,
    InvalidParamsError,
    ResponseTooLargeError,
)
from webtools.tools import WebFetchTool
from webtools.transform import convert_html_to_markdown, extract_text_from_html

PAGE = (
    "<html><head><title>Runtimes</title><script>trackVisitor()</script>"
    "<style>body { color: red; }</style></head>"
    "<body><h1>Async Runtimes</h1><p>Tokio is <b>fast</b>.</p>"
    "<ul><li>tokio</li><li>smol</li></ul></body></html>"
)


def _tool(settings: Settings, handler) -> WebFetchTool:
    return WebFetchTool(settings, transport=httpx.MockTransport(handler))


def _html(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text=PAGE, headers={"content-type": "text/html; charset=utf-8"})


class TestTransform:
    """Tests for HTML conversion helpers."""

    def test_markdown(self):
        markdown = convert_html_to_markdown(PAGE)

        assert "# Async Runtimes" in markdown
        assert "**fast**" in markdown
        assert "- tokio" in markdown
        assert "trackVisitor" not in markdown
        assert "color: red" not in markdown

    def test_text(self):
        text = extract_text_from_html(PAGE)

        assert "Async Runtimes" in text
        assert "Tokio is fast." in text
        assert "trackVisitor" not in text
        assert "<h1>" not in text


class TestWebFetchTool:
    """Tests for WebFetchTool."""

    @pytest.mark.asyncio
    async def test_markdown_by_default(self, settings):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return _html(request)

        result = await _tool(settings, handler).execute({"url": "https://example.com/page"})

        assert "# Async Runtimes" in result.text
        assert result.details == {"url": "https://example.com/page", "format": "markdown"}
        assert seen[0].headers["accept"].startswith("text/markdown;q=1.0")
        assert "Mozilla/5.0" in seen[0].headers["user-agent"]

    @pytest.mark.asyncio
    async def test_text_format(self, settings):
        result = await _tool(settings, _html).execute({"url": "https://example.com", "format": "text"})

        assert "Tokio is fast." in result.text
        assert "<p>" not in result.text

    @pytest.mark.asyncio
    async def test_html_format_returns_raw(self, settings):
        result = await _tool(settings, _html).execute({"url": "https://example.com", "format": "html"})

        assert result.text == PAGE

    @pytest.mark.asyncio
    async def test_non_html_passes_through(self, settings):
        def handler(request):
            return httpx.Response(200, text="# Already markdown", headers={"content-type": "text/markdown"})

        result = await _tool(settings, handler).execute({"url": "https://example.com/readme.md"})

        assert result.text == "# Already markdown"

    @pytest.mark.asyncio
    async def test_image_passthrough(self, settings):
        png = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

        def handler(request):
            return httpx.Response(200, content=png, headers={"content-type": "image/png"})

        result = await _tool(settings, handler).execute({"url": "https://example.com/logo.png"})

        assert result.content[0] == {"type": "text", "text": "Fetched image [image/png] from https://example.com/logo.png"}
        assert result.content[1]["type"] == "image"
        assert result.content[1]["mimeType"] == "image/png"
        assert base64.b64decode(result.content[1]["data"]) == png

    @pytest.mark.asyncio
    async def test_http_error(self, settings):
        tool = _tool(settings, lambda request: httpx.Response(404, text="missing"))

        with pytest.raises(FetchHTTPError, match="Request failed with status code: 404"):
            await tool.execute({"url": "https://example.com/missing"})

    @pytest.mark.asyncio
    async def test_response_too_large(self, output_dir):
        settings = Settings(
            web_fetch=WebFetchSettings(max_response_bytes=1024),
            output=OutputSettings(directory=output_dir),
        )
        tool = _tool(settings, lambda request: httpx.Response(200, content=b"a" * 4096))

        with pytest.raises(ResponseTooLargeError):
            await tool.execute({"url": "https://example.com/big"})

    @pytest.mark.asyncio
    async def test_timeout(self, settings):
        async def hang(request):
            await asyncio.sleep(5)
            return httpx.Response(200, text="late")

        with pytest.raises(FetchTimeoutError, match="timed out"):
            await _tool(settings, hang).execute({"url": "https://example.com", "timeout": 0.05})

    @pytest.mark.asyncio
    async def test_long_text_is_truncated(self, settings):
        body = "\n".join(f"log line {i}" for i in range(3000))

        def handler(request):
            return httpx.Response(200, text=body, headers={"content-type": "text/plain"})

        result = await _tool(settings, handler).execute({"url": "https://example.com/log.txt"})

        assert result.details["truncation"]["outputLines"] == 2000
        assert result.details["truncation"]["totalLines"] == 3000
        assert Path(result.details["fullOutputPath"]).read_text(encoding="utf-8") == body

    @pytest.mark.parametrize(
        "params",
        [
            {"url": "ftp://example.com"},
            {"url": "example.com"},
            {},
            {"url": "https://example.com", "format": "pdf"},
            {"url": "https://example.com", "timeout": 0},
            {"url": "https://example.com", "timeout": "soon"},
        ],
    )
    def test_invalid_params(self, settings, params):
        with pytest.raises(InvalidParamsError):
            WebFetchTool(settings).normalize_params(params)

    def test_timeout_is_capped(self, settings):
        _, _, timeout = WebFetchTool(settings).normalize_params(
            {"url": "https://example.com", "timeout": 600}
        )

        assert timeout == 120.0
