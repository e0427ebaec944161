"""Pullnote API client implementation."""

from typing import Any, Iterable, Mapping

from ..models import ConfigurationError, HeadInfo, Note
from .api_client_listing import PullnoteClientListing
from .head import head_info, render_head
from .sitemap import build_sitemap


class PullnoteClient(PullnoteClientListing):
    """Async client for Pullnote API operations."""

    # ------------------------------------------------------------------
    # Convenience reads
    # ------------------------------------------------------------------

    async def get_md(self, path: str) -> str | None:
        """Content of a note as markdown."""
        note = await self.get(path, "md")
        return note.content if note else None

    async def get_html(self, path: str) -> str | None:
        """Content of a note rendered to HTML by the server."""
        note = await self.get(path, "html")
        return note.content if note else None

    async def get_title(self, path: str) -> str:
        note = await self.get(path)
        return (note.title if note else None) or ""

    async def get_data(self, path: str) -> dict[str, Any]:
        """Custom metadata stored with a note."""
        note = await self.get(path)
        return (note.data if note else None) or {}

    async def get_image(self, path: str) -> str | None:
        note = await self.get(path)
        return note.imgUrl if note else None

    async def get_head(self, path: str, host: str | None = None) -> HeadInfo:
        """Title, description, image and canonical location for SEO tags.

        ``host`` defaults to the configured PULLNOTE_HOST.
        """
        note = await self.get(path)
        return head_info(note, host or self.host)

    async def get_head_html(self, path: str, host: str | None = None) -> str:
        """A basic set of SEO friendly <head> tags (values are not escaped)."""
        return render_head(await self.get_head(path, host))

    # ------------------------------------------------------------------
    # Convenience writes
    # ------------------------------------------------------------------

    async def set_data(self, path: str, data: Mapping[str, Any]) -> Note | None:
        return await self.update(path, {"data": dict(data)})

    async def set_index(self, path: str, index: int) -> Note | None:
        return await self.update(path, {"index": index})

    async def add_user(self, email: str, display_name: str | None = None) -> Any:
        """Give someone (e.g. a content editor) access to the project."""
        user = {"email": email}
        if display_name:
            user["nomdeplume"] = display_name
        return await self.dispatch("POST", "/users", {"user": user})

    async def remove_user(self, email: str) -> Any:
        return await self.dispatch("DELETE", "/users", {"user": {"email": email}})

    # ------------------------------------------------------------------
    # Sitemap
    # ------------------------------------------------------------------

    async def get_sitemap(self, site_url: str = "", static_pages: Iterable[Any] = ()) -> str:
        """XML sitemap for the whole site.

        Args:
            site_url: e.g. "https://example.com"; defaults to the project's domain
            static_pages: extra pages, each a path string or {"loc": ..., "lastmod": ...}
        """
        if not site_url:
            ping = await self.ping()
            site_url = (ping.project.domain if ping.project else None) or ""
            if not site_url:
                raise ConfigurationError("Please pass your siteUrl or add a project URL at pullnote.com")

        notes = await self.get_all()
        return build_sitemap(site_url, static_pages, notes)
