"""Ordered provider fallback for web search."""

import logging
from collections.abc import Sequence

from webtools.cancellation import CancellationToken, combine_signals, run_with_token
from webtools.exceptions import (
    AllProvidersFailedError,
    OperationCancelledError,
    SearchCancelledError,
    SearchEmptyResultError,
    SearchTimeoutError,
)
from webtools.monitoring import track_fallback, track_provider_search, track_sequence_failure
from webtools.protocols import SearchProviderProtocol
from webtools.web_search.base import REQUEST_TIMEOUT_MS, ProviderResult, SearchRequest

logger = logging.getLogger(__name__)


class FallbackSearch:
    """Try providers strictly in order until one succeeds.

    Each attempt runs under its own token derived from the caller token and
    a fixed per-attempt timeout. An attempt that times out counts as that
    provider's failure. A cancelled caller token stops the whole sequence.
    """

    def __init__(
        self,
        providers: Sequence[SearchProviderProtocol],
        timeout_ms: int = REQUEST_TIMEOUT_MS,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            providers: Providers in priority order.
            timeout_ms: Per-attempt timeout in milliseconds.
        """
        if not providers:
            raise ValueError("At least one search provider is required")
        self._providers = list(providers)
        self.timeout_ms = timeout_ms

    @property
    def provider_names(self) -> list[str]:
        return [provider.provider_name for provider in self._providers]

    async def search(
        self,
        request: SearchRequest,
        token: CancellationToken | None = None,
    ) -> ProviderResult:
        """Return the first provider's successful result.

        Args:
            request: Normalized search request.
            token: Optional caller cancellation token.

        Returns:
            The winning ProviderResult, unmodified.

        Raises:
            SearchCancelledError: If the caller token is cancelled.
            AllProvidersFailedError: If every provider failed; lists each
                provider's reason in attempt order.
        """
        failures: list[tuple[str, str]] = []
        last_index = len(self._providers) - 1

        for index, provider in enumerate(self._providers):
            name = provider.provider_name
            if token is not None and token.cancelled:
                raise SearchCancelledError()

            try:
                result = await self._call_provider(provider, request, token)
            except SearchCancelledError:
                raise
            except Exception as e:
                if token is not None and token.cancelled:
                    raise SearchCancelledError() from e
                failures.append((name, str(e)))
                logger.warning(f"{name} search failed: {type(e).__name__}: {e}")
                if index < last_index:
                    track_fallback(name)
                continue

            if index > 0:
                logger.info(f"Search succeeded with fallback provider {name}")
            return result

        track_sequence_failure()
        logger.error(f"All search providers failed for '{request.query}'")
        raise AllProvidersFailedError(failures)

    async def _call_provider(
        self,
        provider: SearchProviderProtocol,
        request: SearchRequest,
        token: CancellationToken | None,
    ) -> ProviderResult:
        """Run one provider attempt inside its own cancellation scope."""
        name = provider.provider_name
        with combine_signals(token, self.timeout_ms) as scope:
            async with track_provider_search(name):
                try:
                    result = await run_with_token(provider.search(request, scope.token), scope.token)
                except OperationCancelledError as e:
                    if token is not None and token.cancelled:
                        raise SearchCancelledError() from e
                    raise SearchTimeoutError(
                        provider=name,
                        timeout_seconds=self.timeout_ms / 1000,
                    ) from e

                if not result.content.strip():
                    raise SearchEmptyResultError(name)
                return result
