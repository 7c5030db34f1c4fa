"""Tool result model shared by the agent tools."""

from dataclasses import dataclass, field
from typing import Any

from webtools.output import BoundedOutput


@dataclass
class ToolResult:
    """Result returned to the agent host.

    Attributes:
        content: Content blocks, e.g. ``{"type": "text", "text": ...}`` or
            ``{"type": "image", "data": ..., "mimeType": ...}``.
        details: Normalized request parameters and other metadata.
    """

    content: list[dict[str, Any]]
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str, details: dict[str, Any] | None = None) -> "ToolResult":
        """Create a result with a single text block."""
        return cls(content=[{"type": "text", "text": text}], details=details or {})

    @property
    def text(self) -> str:
        """Text of the first text block, or an empty string."""
        for block in self.content:
            if block.get("type") == "text":
                return block.get("text", "")
        return ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"content": self.content, "details": self.details}


def truncation_details(bounded: BoundedOutput) -> dict[str, Any]:
    """Details describing a truncated result, empty when nothing was cut."""
    meta = bounded.truncation.meta
    if meta is None:
        return {}
    return {
        "truncation": meta.to_dict(),
        "fullOutputPath": str(bounded.full_output_path),
    }
