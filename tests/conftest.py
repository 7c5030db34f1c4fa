"""Pytest configuration and fixtures for webtools tests."""

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from webtools.config import OutputSettings, Settings, TavilySettings, WebSearchSettings
from webtools.web_search import ProviderResult


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Directory for overflow files."""
    return tmp_path / "tool-output"


@pytest.fixture
def settings(output_dir: Path) -> Settings:
    """Settings with a Tavily key, a short attempt timeout and a temp output dir."""
    return Settings(
        web_search=WebSearchSettings(request_timeout=0.2),
        tavily=TavilySettings(api_key="tvly-test-key"),
        output=OutputSettings(directory=output_dir),
    )


# =============================================================================
# SSE Body Fixtures
# =============================================================================

def _envelope(text: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {"content": [{"type": "text", "text": text}]},
    }


@pytest.fixture
def sse_body() -> Callable[..., str]:
    """Factory building an SSE body with one data line per content text."""
    def _build(*texts: str, preamble: tuple[str, ...] = ()) -> str:
        lines = list(preamble)
        for text in texts:
            lines.append("event: message")
            lines.append(f"data: {json.dumps(_envelope(text))}")
            lines.append("")
        return "\n".join(lines)
    return _build


@pytest.fixture
def tavily_body(sse_body: Callable[..., str]) -> Callable[[list[dict[str, Any]]], str]:
    """Factory building a Tavily SSE body from result records."""
    def _build(results: list[dict[str, Any]]) -> str:
        return sse_body(json.dumps({"query": "q", "results": results}))
    return _build


# =============================================================================
# Provider Fixtures
# =============================================================================

@pytest.fixture
def make_provider() -> Callable[..., MagicMock]:
    """Factory fixture to create a mock search provider."""
    def _create(
        name: str,
        content: str | None = None,
        error: Exception | None = None,
    ) -> MagicMock:
        provider = MagicMock()
        provider.provider_name = name
        if error is not None:
            provider.search = AsyncMock(side_effect=error)
        else:
            provider.search = AsyncMock(
                return_value=ProviderResult(content=content or "", provider=name)
            )
        return provider
    return _create
