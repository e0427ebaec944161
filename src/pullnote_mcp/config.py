"""Configuration management for the Pullnote MCP server."""

import logging
import sys

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DEFAULT_BASE_URL, APIConfiguration


class ServerConfig(BaseSettings):
    """Server settings loaded from PULLNOTE_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="PULLNOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr = Field(..., description="Pullnote project API key")
    base_url: str = Field(DEFAULT_BASE_URL, description="Pullnote API base URL")
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    host: str | None = Field(None, description="Public site host for canonical links")
    log_level: str = Field("INFO", description="Logging level")

    def get_api_config(self) -> APIConfiguration:
        """Build the client configuration from server settings."""
        return APIConfiguration(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            host=self.host,
        )


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr (stdout carries the MCP stdio protocol)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    has_console = any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in root.handlers
    )
    if not has_console:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
