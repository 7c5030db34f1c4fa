"""Factory for creating web search providers from settings."""

from collections.abc import Callable
from enum import Enum

import httpx

from webtools.config import Settings
from webtools.exceptions import ConfigurationError
from webtools.protocols import SearchProviderProtocol
from webtools.web_search.providers.exa import ExaSearchProvider
from webtools.web_search.providers.tavily import TavilySearchProvider

ProviderBuilder = Callable[[Settings, httpx.AsyncBaseTransport | None], SearchProviderProtocol]


class SearchProviderType(str, Enum):
    """Supported search provider types."""

    EXA = "exa"
    TAVILY = "tavily"


def _build_exa(settings: Settings, transport: httpx.AsyncBaseTransport | None) -> ExaSearchProvider:
    search = settings.web_search
    return ExaSearchProvider(
        mcp_url=search.exa_url,
        timeout=search.request_timeout,
        search_type=search.exa_search_type,
        livecrawl=search.exa_livecrawl,
        context_max_characters=search.exa_context_max_characters,
        transport=transport,
    )


def _build_tavily(settings: Settings, transport: httpx.AsyncBaseTransport | None) -> TavilySearchProvider:
    return TavilySearchProvider(
        api_key=settings.tavily.api_key,
        mcp_url=settings.web_search.tavily_url,
        timeout=settings.web_search.request_timeout,
        transport=transport,
    )


# Registry of provider builders
_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    SearchProviderType.EXA.value: _build_exa,
    SearchProviderType.TAVILY.value: _build_tavily,
}


def create_search_provider(
    provider_type: str | SearchProviderType,
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SearchProviderProtocol:
    """Create a search provider instance.

    Args:
        provider_type: Type of provider ('exa' or 'tavily').
        settings: Application settings; credentials are taken from here.
        transport: Optional HTTPX transport shared by the provider.

    Returns:
        Configured provider.

    Raises:
        ConfigurationError: If the provider type is not supported.
    """
    provider_key = provider_type.value if isinstance(provider_type, Enum) else provider_type
    builder = _PROVIDER_REGISTRY.get(provider_key.lower())

    if builder is None:
        supported = ", ".join(_PROVIDER_REGISTRY.keys())
        raise ConfigurationError(
            f"Unsupported search provider: {provider_type}. Supported providers: {supported}",
            config_key="WEB_SEARCH_PROVIDERS",
        )

    return builder(settings, transport)


def create_search_providers(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SearchProviderProtocol]:
    """Create the configured providers in fallback order."""
    return [
        create_search_provider(name, settings, transport)
        for name in settings.web_search.providers
    ]


def register_provider(provider_type: str, builder: ProviderBuilder) -> None:
    """Register a new search provider builder.

    Args:
        provider_type: Unique identifier for the provider.
        builder: Callable taking (settings, transport) and returning a provider.
    """
    _PROVIDER_REGISTRY[provider_type.lower()] = builder


def get_supported_providers() -> list[str]:
    """Get list of supported provider types."""
    return list(_PROVIDER_REGISTRY.keys())
