"""Web search with ordered provider fallback.

Providers (Exa, Tavily) speak MCP over HTTP and answer with server-sent
events; ``FallbackSearch`` tries them in order and aggregates failures.
"""

from webtools.web_search.base import (
    DEFAULT_MAX_RESULTS,
    MAX_MAX_RESULTS,
    MIN_MAX_RESULTS,
    REQUEST_TIMEOUT_MS,
    ProviderResult,
    SearchRecord,
    SearchRequest,
    format_records,
)
from webtools.web_search.factory import (
    SearchProviderType,
    create_search_provider,
    create_search_providers,
    get_supported_providers,
    register_provider,
)
from webtools.web_search.fallback import FallbackSearch
from webtools.web_search.providers import (
    ExaSearchProvider,
    TavilySearchOptions,
    TavilySearchProvider,
)
from webtools.web_search.sse import decode_event_stream, extract_content_text

__all__ = [
    # Models
    "DEFAULT_MAX_RESULTS",
    "MAX_MAX_RESULTS",
    "MIN_MAX_RESULTS",
    "REQUEST_TIMEOUT_MS",
    "ProviderResult",
    "SearchRecord",
    "SearchRequest",
    "format_records",
    # Decoding
    "decode_event_stream",
    "extract_content_text",
    # Orchestration
    "FallbackSearch",
    # Providers
    "ExaSearchProvider",
    "TavilySearchOptions",
    "TavilySearchProvider",
    # Factory
    "SearchProviderType",
    "create_search_provider",
    "create_search_providers",
    "get_supported_providers",
    "register_provider",
]
