"""Search provider adapters."""

from webtools.web_search.providers.exa import ExaSearchProvider
from webtools.web_search.providers.tavily import TavilySearchOptions, TavilySearchProvider

__all__ = ["ExaSearchProvider", "TavilySearchOptions", "TavilySearchProvider"]
