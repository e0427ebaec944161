"""Pullnote API client package."""

from .api_client import PullnoteClient

__all__ = ["PullnoteClient"]
