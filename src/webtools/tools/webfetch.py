"""URL fetch tool with HTML conversion and image passthrough."""

import base64
from typing import Any

import httpx

from webtools.cancellation import CancellationToken, combine_signals, run_with_token
from webtools.config import Settings, get_settings
from webtools.exceptions import (
    FetchError,
    FetchHTTPError,
    FetchTimeoutError,
    InvalidParamsError,
    OperationCancelledError,
    ResponseTooLargeError,
)
from webtools.monitoring import LogContext, get_logger, track_web_fetch
from webtools.output import DEFAULT_MAX_BYTES, DEFAULT_MAX_LINES, bound_output
from webtools.tools.base import ToolResult, truncation_details
from webtools.transform import OUTPUT_FORMATS, normalize_output

TOOL_NAME = "webfetch"

IMAGE_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})

ACCEPT_HEADERS = {
    "markdown": "text/markdown;q=1.0, text/x-markdown;q=0.9, text/plain;q=0.8, text/html;q=0.7, */*;q=0.1",
    "text": "text/plain;q=1.0, text/markdown;q=0.9, text/html;q=0.8, */*;q=0.1",
    "html": "text/html;q=1.0, application/xhtml+xml;q=0.9, text/plain;q=0.8, text/markdown;q=0.7, */*;q=0.1",
}


def get_mime_type(content_type: str | None) -> str:
    """Return the lower-cased MIME type without parameters."""
    if not content_type:
        return ""
    return content_type.split(";")[0].strip().lower()


class WebFetchTool:
    """Fetch a URL as text, markdown or HTML; images come back as attachments."""

    name = TOOL_NAME

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the tool.

        Args:
            settings: Settings; defaults to the cached application settings.
            transport: Optional HTTPX transport, used in tests.
        """
        self.settings = settings or get_settings()
        self._transport = transport
        self._logger = get_logger(__name__)

    @property
    def description(self) -> str:
        return (
            "Fetch content from a URL. Supports text, markdown, and HTML. "
            "Images (png/jpg/gif/webp) are returned as attachments. "
            f"Text output is truncated to {DEFAULT_MAX_LINES} lines or "
            f"{DEFAULT_MAX_BYTES // 1024}KB (whichever hits first)."
        )

    def normalize_params(self, params: dict[str, Any]) -> tuple[str, str, float]:
        """Validate raw input into (url, format, timeout seconds).

        Raises:
            InvalidParamsError: For a non-http(s) URL, unknown format or bad timeout.
        """
        url = params.get("url")
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise InvalidParamsError("URL must start with http:// or https://")

        output_format = params.get("format") or "markdown"
        if output_format not in OUTPUT_FORMATS:
            raise InvalidParamsError(f"format must be one of: {', '.join(OUTPUT_FORMATS)}")

        fetch = self.settings.web_fetch
        timeout = params.get("timeout")
        if timeout is None:
            timeout = fetch.default_timeout
        elif isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidParamsError("timeout must be a positive number of seconds")

        return url, output_format, min(float(timeout), fetch.max_timeout)

    def _headers(self, output_format: str) -> dict[str, str]:
        return {
            "User-Agent": self.settings.web_fetch.user_agent,
            "Accept": ACCEPT_HEADERS[output_format],
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def _read_limited(self, response: httpx.Response, url: str) -> bytes:
        limit = self.settings.web_fetch.max_response_bytes
        chunks: list[bytes] = []
        size = 0
        async for chunk in response.aiter_bytes():
            size += len(chunk)
            if size > limit:
                raise ResponseTooLargeError(limit, url)
            chunks.append(chunk)
        return b"".join(chunks)

    async def _fetch(
        self,
        url: str,
        output_format: str,
        timeout: float,
        token: CancellationToken | None,
    ) -> tuple[bytes, str]:
        """GET ``url`` under a derived timeout token; return (body, content type)."""
        limit = self.settings.web_fetch.max_response_bytes

        with combine_signals(token, int(timeout * 1000)) as scope:
            try:
                async with httpx.AsyncClient(
                    timeout=timeout,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client:
                    request = client.build_request("GET", url, headers=self._headers(output_format))
                    response = await run_with_token(client.send(request, stream=True), scope.token)
                    try:
                        if not response.is_success:
                            raise FetchHTTPError(response.status_code, url)

                        content_length = response.headers.get("content-length")
                        if content_length and content_length.isdigit() and int(content_length) > limit:
                            raise ResponseTooLargeError(limit, url)

                        body = await run_with_token(self._read_limited(response, url), scope.token)
                    finally:
                        await response.aclose()
            except OperationCancelledError as e:
                if token is not None and token.cancelled:
                    raise FetchTimeoutError("Request cancelled", url) from e
                raise FetchTimeoutError(f"Request timed out after {timeout:g}s", url) from e
            except httpx.TimeoutException as e:
                raise FetchTimeoutError(f"Request timed out after {timeout:g}s", url, cause=e) from e
            except httpx.RequestError as e:
                raise FetchError(f"Request failed: {e}", url, cause=e) from e

        return body, response.headers.get("content-type", "")

    async def execute(
        self,
        params: dict[str, Any],
        token: CancellationToken | None = None,
    ) -> ToolResult:
        """Fetch a URL and return bounded text or an image attachment.

        Raises:
            InvalidParamsError: For malformed parameters.
            FetchHTTPError: On a non-success status.
            ResponseTooLargeError: If the body exceeds the size limit.
            FetchTimeoutError: On timeout or caller cancellation.
            FetchError: For other transport failures.
            OutputPersistError: If truncated output could not be saved.
        """
        url, output_format, timeout = self.normalize_params(params)
        details: dict[str, Any] = {"url": url, "format": output_format}

        with LogContext(tool=self.name, url=url):
            async with track_web_fetch():
                body, content_type = await self._fetch(url, output_format, timeout, token)

            mime = get_mime_type(content_type)
            if mime in IMAGE_MIME_TYPES:
                self._logger.info("webfetch_image", mime=mime, bytes=len(body))
                return ToolResult(
                    content=[
                        {"type": "text", "text": f"Fetched image [{mime}] from {url}"},
                        {"type": "image", "data": base64.b64encode(body).decode("ascii"), "mimeType": mime},
                    ],
                    details=details,
                )

            raw = body.decode("utf-8", errors="replace")
            output = normalize_output(raw, output_format, content_type)
            bounded = await bound_output(self.name, output, self.settings.output.directory)
            details.update(truncation_details(bounded))
            self._logger.info(
                "webfetch_completed",
                mime=mime,
                bytes=len(body),
                truncated=bounded.truncation.truncated,
            )

        return ToolResult.from_text(bounded.text, details)
