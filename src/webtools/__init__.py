"""Resilient web search and fetch tools for AI agents."""

__version__ = "0.1.0"
