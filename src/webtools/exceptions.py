"""Custom exceptions for the webtools package.

This module defines a hierarchy of exceptions for the web search and
fetch tools so that callers get one descriptive error per failed call.

Exception Hierarchy:
    WebToolsError (base)
    ├── ConfigurationError
    ├── InvalidParamsError
    ├── OperationCancelledError
    ├── SearchError
    │   ├── SearchConnectionError
    │   ├── SearchHTTPError
    │   ├── SearchEmptyResultError
    │   ├── SearchParseError
    │   ├── SearchTimeoutError
    │   ├── SearchCancelledError
    │   └── AllProvidersFailedError
    ├── FetchError
    │   ├── FetchHTTPError
    │   ├── FetchTimeoutError
    │   └── ResponseTooLargeError
    └── OutputPersistError
"""


class WebToolsError(Exception):
    """Base exception for all webtools errors.

    Attributes:
        message: Human-readable error description.
        cause: Optional underlying exception that caused this error.
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            cause: Optional underlying exception that caused this error.
        """
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigurationError(WebToolsError):
    """Error in tool configuration.

    Raised when a required credential is missing or a configured
    provider name is unknown. Never retried.
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the configuration error.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            cause: Optional underlying exception.
        """
        self.config_key = config_key
        super().__init__(message, cause)


class InvalidParamsError(WebToolsError):
    """Error when tool call parameters are malformed."""

    pass


class OperationCancelledError(WebToolsError):
    """Raised when a derived cancellation token fires during an operation.

    Attributes:
        reason: Why the token fired ("timeout" or "cancelled").
    """

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or f"Operation aborted ({reason})")


class SearchError(WebToolsError):
    """Base error for web search issues.

    Attributes:
        provider: Name of the provider that failed, if any.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the search error.

        Args:
            message: Human-readable error description.
            provider: Name of the search provider.
            cause: Optional underlying exception.
        """
        self.provider = provider
        super().__init__(message, cause)


class SearchConnectionError(SearchError):
    """Error connecting to search provider.

    Raised when network issues prevent reaching the search API.
    """

    pass


class SearchHTTPError(SearchError):
    """Error when a provider answers with a non-success HTTP status.

    Attributes:
        status_code: The HTTP status code returned.
        body: The response body text.
    """

    def __init__(
        self,
        status_code: int,
        body: str,
        provider: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        label = f"{provider} search error" if provider else "Search error"
        super().__init__(f"{label} ({status_code}): {body}", provider)


class SearchEmptyResultError(SearchError):
    """Error when a provider response carries no usable content."""

    def __init__(self, provider: str | None = None) -> None:
        label = f"{provider} search" if provider else "Search"
        super().__init__(f"{label} returned empty content", provider)


class SearchParseError(SearchError):
    """Error when a provider response cannot be decoded."""

    pass


class SearchTimeoutError(SearchError):
    """Error when a search attempt exceeds its time budget.

    Attributes:
        timeout_seconds: The timeout duration that was exceeded.
    """

    def __init__(
        self,
        message: str = "Search request timed out",
        provider: str | None = None,
        timeout_seconds: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the timeout error.

        Args:
            message: Human-readable error description.
            provider: Name of the search provider.
            timeout_seconds: The timeout duration that was exceeded.
            cause: Optional underlying exception.
        """
        self.timeout_seconds = timeout_seconds
        super().__init__(message, provider, cause)


class SearchCancelledError(SearchError):
    """Error when the caller cancels a search.

    Stops the whole fallback sequence; no further provider is attempted.
    """

    def __init__(self, message: str = "Search request cancelled") -> None:
        super().__init__(message)


class AllProvidersFailedError(SearchError):
    """Error when every provider in a fallback sequence failed.

    Attributes:
        failures: Ordered (provider name, error message) pairs.
    """

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures = list(failures)
        reasons = ". ".join(f"{name}: {reason}" for name, reason in self.failures)
        super().__init__(f"Websearch failed with all providers. {reasons}")


class FetchError(WebToolsError):
    """Base error for URL fetch issues.

    Attributes:
        url: The URL being fetched.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        super().__init__(message, cause)


class FetchHTTPError(FetchError):
    """Error when the fetched URL answers with a non-success status."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(f"Request failed with status code: {status_code}", url)


class FetchTimeoutError(FetchError):
    """Error when fetching a URL times out or is cancelled."""

    pass


class ResponseTooLargeError(FetchError):
    """Error when a fetched body exceeds the size limit."""

    def __init__(self, limit_bytes: int, url: str | None = None) -> None:
        self.limit_bytes = limit_bytes
        limit_mb = limit_bytes // (1024 * 1024)
        super().__init__(f"Response too large (exceeds {limit_mb}MB limit)", url)


class OutputPersistError(WebToolsError):
    """Error when truncated output cannot be written to its overflow file.

    Attributes:
        path: The path that could not be written.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.path = path
        if path:
            message = f"{message}: {path}"
        super().__init__(message, cause)
