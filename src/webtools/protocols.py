"""Protocol definitions for dependency injection.

The fallback orchestrator and the tools depend on these structural
interfaces rather than on concrete classes, so providers can be swapped
or mocked in tests.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from webtools.cancellation import CancellationToken
    from webtools.web_search.base import ProviderResult, SearchRequest


@runtime_checkable
class SearchProviderProtocol(Protocol):
    """Protocol for web search providers.

    A provider turns a SearchRequest into one normalized text payload, or
    raises. It never returns an empty result.
    """

    @property
    def provider_name(self) -> str:
        """Return the name of this provider."""
        ...

    async def search(
        self,
        request: "SearchRequest",
        token: "CancellationToken",
    ) -> "ProviderResult":
        """Execute a search request.

        Args:
            request: Normalized search parameters.
            token: Cancellation token bounding this attempt.

        Returns:
            ProviderResult with non-empty content.
        """
        ...


@runtime_checkable
class ToolProtocol(Protocol):
    """Protocol for agent tools."""

    name: str

    async def execute(
        self,
        params: dict[str, Any],
        token: "CancellationToken | None" = None,
    ) -> Any:
        """Run the tool with raw caller parameters."""
        ...
