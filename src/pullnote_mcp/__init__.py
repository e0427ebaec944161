"""Pullnote MCP - async client and MCP server for the Pullnote note store."""

from .client import PullnoteClient
from .models import (
    APIConfiguration,
    ConfigurationError,
    Listing,
    Note,
    NoteSummary,
    PreconditionError,
    PullnoteError,
    RemoteError,
)

__version__ = "0.1.0"

__all__ = [
    "APIConfiguration",
    "ConfigurationError",
    "Listing",
    "Note",
    "NoteSummary",
    "PreconditionError",
    "PullnoteClient",
    "PullnoteError",
    "RemoteError",
]
