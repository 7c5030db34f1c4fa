"""Agent tools: web search, Tavily-only search and URL fetch."""

from webtools.config import Settings, get_settings
from webtools.protocols import ToolProtocol
from webtools.tools.base import ToolResult
from webtools.tools.tavily_search import TavilySearchTool
from webtools.tools.webfetch import WebFetchTool
from webtools.tools.websearch import WebSearchTool


def create_tools(settings: Settings | None = None) -> list[ToolProtocol]:
    """Create every tool from one settings object."""
    settings = settings or get_settings()
    return [
        WebSearchTool(settings),
        TavilySearchTool(settings),
        WebFetchTool(settings),
    ]


__all__ = [
    "TavilySearchTool",
    "ToolResult",
    "WebFetchTool",
    "WebSearchTool",
    "create_tools",
]
