"""MCP ``tools/call`` requests over HTTP."""

import logging
from typing import Any

import httpx

from webtools.cancellation import CancellationToken, run_with_token
from webtools.exceptions import (
    SearchConnectionError,
    SearchHTTPError,
    SearchTimeoutError,
)

logger = logging.getLogger(__name__)

MCP_ACCEPT = "application/json, text/event-stream"


def build_tool_call(
    tool_name: str,
    arguments: dict[str, Any],
    request_id: int = 1,
) -> dict[str, Any]:
    """Build a JSON-RPC 2.0 ``tools/call`` envelope.

    Arguments whose value is None are left out.
    """
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {
            "name": tool_name,
            "arguments": {key: value for key, value in arguments.items() if value is not None},
        },
    }


def mcp_headers(extra: dict[str, str] | None = None) -> dict[str, str]:
    """Get common headers for MCP requests."""
    headers = {
        "Accept": MCP_ACCEPT,
        "Content-Type": "application/json",
    }
    if extra:
        headers.update(extra)
    return headers


async def post_tool_call(
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    token: CancellationToken,
    provider: str,
    headers: dict[str, str] | None = None,
) -> str:
    """POST a tool call and return the response body text.

    Both the request and the body read are aborted when ``token`` fires.

    Args:
        client: HTTPX async client.
        url: MCP endpoint.
        payload: JSON-RPC envelope.
        token: Derived cancellation token for this attempt.
        provider: Provider name for error messages.
        headers: Extra headers, e.g. authorization.

    Returns:
        The full response body.

    Raises:
        SearchHTTPError: On a non-success status.
        SearchTimeoutError: On an httpx timeout.
        SearchConnectionError: On other transport failures.
        OperationCancelledError: If ``token`` fires first.
    """
    request = client.build_request("POST", url, json=payload, headers=mcp_headers(headers))

    try:
        response = await run_with_token(client.send(request, stream=True), token)
        try:
            await run_with_token(response.aread(), token)
        finally:
            await response.aclose()
    except httpx.TimeoutException as e:
        raise SearchTimeoutError(provider=provider, cause=e) from e
    except httpx.RequestError as e:
        raise SearchConnectionError(f"Request error: {e}", provider=provider, cause=e) from e

    body = response.text
    logger.debug(f"{provider} responded {response.status_code} ({len(body)} chars)")

    if not response.is_success:
        raise SearchHTTPError(response.status_code, body, provider=provider)

    return body
