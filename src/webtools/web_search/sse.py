"""Decoder for MCP responses sent as server-sent events.

Only ``data:`` lines carry payloads; comments, ``event:`` lines, blank
lines and the ``[DONE]`` sentinel are skipped. A data line that is not
valid JSON is skipped rather than failing the whole response, since servers
interleave heartbeats and partial frames with the real payload.
"""

import json
import logging
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from webtools.exceptions import SearchParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def iter_data_payloads(raw_text: str) -> Iterator[str]:
    """Yield the non-empty payload of each ``data:`` line, in order."""
    for line in raw_text.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            continue
        payload = line[len(DATA_PREFIX):].strip()
        if not payload or payload == DONE_SENTINEL:
            continue
        yield payload


def extract_content_text(envelope: Any) -> str | None:
    """Return ``result.content[0].text`` from a JSON-RPC envelope, if present."""
    if not isinstance(envelope, dict):
        return None
    result = envelope.get("result")
    if not isinstance(result, dict):
        return None
    content = result.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    return text if isinstance(text, str) else None


def decode_event_stream(
    raw_text: str,
    parse_inner: Callable[[str], T | None] | None = None,
) -> str | T | None:
    """Extract the first usable payload from an event-stream body.

    Each data line is parsed as a JSON-RPC envelope and its content text is
    taken. Without ``parse_inner`` the first non-blank text is returned.
    With it, the text is parsed again and the first non-None result is
    returned; scanning stops there.

    Args:
        raw_text: Full response body.
        parse_inner: Optional second-level parser for the content text.
            It may raise ``ValueError`` or return None to reject the text.

    Returns:
        The decoded payload, or None when no line yields one.

    Raises:
        SearchParseError: If exactly one line carried content text and
            ``parse_inner`` failed on it.
    """
    viable_lines = 0
    last_error: Exception | None = None

    for payload in iter_data_payloads(raw_text):
        try:
            envelope = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping malformed SSE data line: {e}")
            continue

        text = extract_content_text(envelope)
        if not text or not text.strip():
            continue

        if parse_inner is None:
            return text

        viable_lines += 1
        try:
            decoded = parse_inner(text)
        except (ValueError, TypeError) as e:
            logger.debug(f"Failed to parse SSE content text: {e}")
            last_error = e
            continue

        if decoded is not None:
            return decoded

    if viable_lines == 1 and last_error is not None:
        raise SearchParseError(
            f"Failed to parse search response: {last_error}",
            cause=last_error,
        ) from last_error

    return None
