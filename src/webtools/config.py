"""Configuration management using pydantic-settings."""

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WebSearchSettings(BaseSettings):
    """Web search provider settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEB_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    providers: list[str] = Field(
        default_factory=lambda: ["exa", "tavily"],
        description="Provider fallback order (first is primary)",
    )
    exa_url: str = Field(default="https://mcp.exa.ai/mcp", description="Exa MCP endpoint URL")
    tavily_url: str = Field(default="https://mcp.tavily.com/mcp", description="Tavily MCP endpoint URL")
    request_timeout: float = Field(default=25.0, gt=0, description="Per-provider attempt timeout in seconds")
    default_max_results: int = Field(default=10, description="Result count used when the caller gives none")
    min_max_results: int = Field(default=5, ge=1, description="Smallest accepted result count")
    max_max_results: int = Field(default=20, ge=1, description="Largest accepted result count")
    exa_search_type: str = Field(default="auto", description="Exa search type (auto, fast, deep)")
    exa_livecrawl: str = Field(default="fallback", description="Exa live crawl mode (fallback, preferred)")
    exa_context_max_characters: int | None = Field(
        default=None, description="Maximum characters of Exa context text"
    )


class TavilySettings(BaseSettings):
    """Tavily credential settings."""

    model_config = SettingsConfigDict(
        env_prefix="TAVILY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str = Field(default="", description="Tavily API key (TAVILY_API_KEY)")


class WebFetchSettings(BaseSettings):
    """URL fetch settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEB_FETCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_timeout: float = Field(default=30.0, gt=0, description="Fetch timeout in seconds")
    max_timeout: float = Field(default=120.0, gt=0, description="Upper bound for caller-supplied timeouts")
    max_response_bytes: int = Field(default=5 * 1024 * 1024, description="Maximum response body size")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
        ),
        description="User-Agent header sent with fetch requests",
    )


class OutputSettings(BaseSettings):
    """Overflow artifact settings."""

    model_config = SettingsConfigDict(
        env_prefix="TOOL_OUTPUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    directory: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "pi-tool-output",
        description="Directory for full output of truncated results",
    )


class MonitoringSettings(BaseSettings):
    """Monitoring and observability settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONITORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    json_logs: bool = Field(default=True, description="Use JSON format for logs")
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    web_search: WebSearchSettings = Field(default_factory=WebSearchSettings)
    tavily: TavilySettings = Field(default_factory=TavilySettings)
    web_fetch: WebFetchSettings = Field(default_factory=WebFetchSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
