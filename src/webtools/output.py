"""Output bounding and overflow persistence shared by every tool.

Tool results are head-truncated to a fixed line/byte envelope. When
truncation happens the untruncated text is written to a uniquely named file
and a notice with its path is appended to the bounded text.
"""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from webtools.exceptions import OutputPersistError
from webtools.monitoring import track_truncation

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINES = 2000
DEFAULT_MAX_BYTES = 50 * 1024


@dataclass(frozen=True)
class TruncationMeta:
    """Sizes of the kept and original content.

    Attributes:
        output_lines: Lines kept.
        total_lines: Lines in the original content.
        output_bytes: UTF-8 bytes kept.
        total_bytes: UTF-8 bytes in the original content.
        truncated_by: Which limit was hit first ("lines" or "bytes").
        first_line_exceeds_limit: The first line alone was over the byte limit.
    """

    output_lines: int
    total_lines: int
    output_bytes: int
    total_bytes: int
    truncated_by: str
    first_line_exceeds_limit: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase shape used in tool details."""
        return {
            "truncated": True,
            "truncatedBy": self.truncated_by,
            "outputLines": self.output_lines,
            "totalLines": self.total_lines,
            "outputBytes": self.output_bytes,
            "totalBytes": self.total_bytes,
            "firstLineExceedsLimit": self.first_line_exceeds_limit,
        }


@dataclass(frozen=True)
class TruncationResult:
    """Result of bounding a text. ``meta`` is set iff ``truncated``."""

    content: str
    truncated: bool
    meta: TruncationMeta | None = None


@dataclass(frozen=True)
class BoundedOutput:
    """Final tool text plus the truncation details behind it."""

    text: str
    truncation: TruncationResult
    full_output_path: Path | None = None


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def truncate_head(
    content: str,
    max_lines: int = DEFAULT_MAX_LINES,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> TruncationResult:
    """Keep content from the start until the line or byte limit is hit.

    Lines are counted by splitting on ``\\n``. When the first line alone is
    larger than ``max_bytes``, the longest UTF-8-safe prefix of that line is
    kept and ``first_line_exceeds_limit`` is set.

    Args:
        content: Text to bound.
        max_lines: Maximum number of lines to keep.
        max_bytes: Maximum number of UTF-8 bytes to keep.

    Returns:
        TruncationResult, with content unchanged when within both limits.
    """
    if max_lines < 1 or max_bytes < 1:
        raise ValueError("max_lines and max_bytes must be positive")

    total_bytes = _byte_len(content)
    lines = content.split("\n")
    total_lines = len(lines)

    if total_lines <= max_lines and total_bytes <= max_bytes:
        return TruncationResult(content=content, truncated=False)

    first_line = lines[0].encode("utf-8")
    if len(first_line) > max_bytes:
        kept = first_line[:max_bytes].decode("utf-8", errors="ignore")
        return TruncationResult(
            content=kept,
            truncated=True,
            meta=TruncationMeta(
                output_lines=1,
                total_lines=total_lines,
                output_bytes=_byte_len(kept),
                total_bytes=total_bytes,
                truncated_by="bytes",
                first_line_exceeds_limit=True,
            ),
        )

    kept_lines: list[str] = []
    used_bytes = 0
    truncated_by = "lines"
    for index, line in enumerate(lines):
        if index >= max_lines:
            truncated_by = "lines"
            break
        # Every line after the first also costs its leading newline.
        size = _byte_len(line) + (1 if index else 0)
        if used_bytes + size > max_bytes:
            truncated_by = "bytes"
            break
        kept_lines.append(line)
        used_bytes += size

    return TruncationResult(
        content="\n".join(kept_lines),
        truncated=True,
        meta=TruncationMeta(
            output_lines=len(kept_lines),
            total_lines=total_lines,
            output_bytes=used_bytes,
            total_bytes=total_bytes,
            truncated_by=truncated_by,
        ),
    )


def format_size(num_bytes: int) -> str:
    """Render a byte count as B, KB or MB."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f}KB"
    return f"{num_bytes / (1024 * 1024):.1f}MB"


def truncation_notice(meta: TruncationMeta, full_output_path: Path | str) -> str:
    """Build the notice appended to truncated output."""
    return (
        f"\n\n[Output truncated: {meta.output_lines} of {meta.total_lines} lines "
        f"({format_size(meta.output_bytes)} of {format_size(meta.total_bytes)}). "
        f"Full output saved to: {full_output_path}]"
    )


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_temp_output(tool: str, content: str, directory: Path) -> Path:
    """Write full output to ``<directory>/<tool>-<epoch-ms>-<hex>.txt``.

    Raises:
        OutputPersistError: If the file cannot be written.
    """
    path = directory / f"{tool}-{int(time.time() * 1000)}-{secrets.token_hex(8)}.txt"
    try:
        await asyncio.to_thread(_write_text, path, content)
    except OSError as e:
        raise OutputPersistError("Failed to save full output", path=str(path), cause=e) from e
    return path


async def bound_output(
    tool: str,
    content: str,
    directory: Path,
    max_lines: int = DEFAULT_MAX_LINES,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> BoundedOutput:
    """Bound ``content`` and persist the original when it was truncated.

    The notice is only appended after the overflow file was written.

    Args:
        tool: Tool name used as the file name prefix.
        content: Full tool output.
        directory: Directory for overflow files.
        max_lines: Maximum number of lines to keep.
        max_bytes: Maximum number of UTF-8 bytes to keep.

    Returns:
        BoundedOutput with the final text.

    Raises:
        OutputPersistError: If the overflow file cannot be written.
    """
    truncation = truncate_head(content, max_lines=max_lines, max_bytes=max_bytes)
    meta = truncation.meta
    if meta is None:
        return BoundedOutput(text=truncation.content, truncation=truncation)

    path = await write_temp_output(tool, content, directory)
    track_truncation(tool)
    logger.info(
        f"{tool} output truncated to {meta.output_lines}/{meta.total_lines} lines, "
        f"full output at {path}"
    )
    return BoundedOutput(
        text=truncation.content + truncation_notice(meta, path),
        truncation=truncation,
        full_output_path=path,
    )
