"""Data models shared by web search providers."""

from dataclasses import dataclass
from typing import Any

from webtools.exceptions import InvalidParamsError

REQUEST_TIMEOUT_MS = 25_000

DEFAULT_MAX_RESULTS = 10
MIN_MAX_RESULTS = 5
MAX_MAX_RESULTS = 20


@dataclass(frozen=True)
class SearchRequest:
    """Provider-agnostic search request.

    Attributes:
        query: Trimmed, non-empty search query.
        max_results: Number of results to ask each provider for.
    """

    query: str
    max_results: int = DEFAULT_MAX_RESULTS

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not self.query.strip():
            raise InvalidParamsError("Search query cannot be empty")
        if self.max_results < 1:
            raise InvalidParamsError("maxResults must be positive")

    @classmethod
    def from_params(
        cls,
        query: Any,
        max_results: Any = None,
        default: int = DEFAULT_MAX_RESULTS,
        minimum: int = MIN_MAX_RESULTS,
        maximum: int = MAX_MAX_RESULTS,
    ) -> "SearchRequest":
        """Normalize raw tool input into a request.

        Args:
            query: Raw query; trimmed before validation.
            max_results: Raw result count or None for ``default``.
            default: Count used when ``max_results`` is None.
            minimum: Smallest accepted count.
            maximum: Largest accepted count.

        Raises:
            InvalidParamsError: If the query is empty or the count is out of range.
        """
        text = query.strip() if isinstance(query, str) else ""
        if not text:
            raise InvalidParamsError("Search query cannot be empty")

        count = default if max_results is None else max_results
        if isinstance(count, bool) or not isinstance(count, (int, float)) or count != int(count):
            raise InvalidParamsError("maxResults must be an integer")
        count = int(count)
        if count < minimum or count > maximum:
            raise InvalidParamsError(f"maxResults must be between {minimum} and {maximum}")

        return cls(query=text, max_results=count)


@dataclass(frozen=True)
class ProviderResult:
    """Normalized text payload produced by one provider.

    Attributes:
        content: The flattened result text.
        provider: Name of the provider that produced it.
    """

    content: str
    provider: str | None = None


@dataclass(frozen=True)
class SearchRecord:
    """A single ranked result record (title, url, content)."""

    title: str
    url: str
    content: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchRecord":
        """Create SearchRecord from a provider result dictionary."""
        return cls(
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            content=str(data.get("content") or ""),
        )

    def to_text(self) -> str:
        """Render as ``Title:``/``Url:``/optional ``Content:`` lines."""
        lines = [f"Title: {self.title}", f"Url: {self.url}"]
        if self.content:
            lines.append(f"Content: {self.content}")
        return "\n".join(lines)


def format_records(records: list[SearchRecord]) -> str:
    """Flatten ranked records into one text block, one paragraph per record.

    Order is preserved as received.
    """
    return "\n\n".join(record.to_text() for record in records)
