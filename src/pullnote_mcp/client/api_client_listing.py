"""Pullnote API client - Listings, search and hierarchy navigation."""

from __future__ import annotations

from typing import Any, Mapping

from ..models import Listing, ListingQuery, NoteSummary
from .api_client_core import PullnoteClientCore, _ClientLogger
from .cache import ListingSlot
from . import hierarchy

logger = _ClientLogger("LISTING")


def _decode_summaries(data: Any) -> list[NoteSummary]:
    # find/getAll answer with a bare array; tolerate a {"notes": [...]} wrapper
    if isinstance(data, dict):
        data = data.get("notes", [])
    if not isinstance(data, list):
        return []
    return [NoteSummary.model_validate(item) for item in data if isinstance(item, dict)]


def _detached(result: Any) -> Any:
    # callers get their own copy; the slot keeps the original
    if isinstance(result, list):
        return [note.model_copy(deep=True) for note in result]
    return result.model_copy(deep=True)


class PullnoteClientListing(PullnoteClientCore):
    """Listing cache plus parent/children/siblings/breadcrumb projections."""

    def _cached_listing(self, query: ListingQuery) -> Any:
        slot = self._listing_slot
        if slot is not None and slot.matches(query):
            logger.debug(f"listing cache hit: {query}")
            return _detached(slot.result)
        return None

    async def find(
        self,
        path: str,
        criteria: Mapping[str, Any] | None = None,
        sort: str = "",
        sort_direction: int = 0,
        fields: str = "",
    ) -> list[NoteSummary]:
        """Find notes under ``path`` matching ``criteria``.

        Args:
            path: Scope to search from ("/" for the whole project)
            criteria: Field filters, e.g. {"title": "Hello", "data.city": "London"}
            sort: Sort column, e.g. "title" (default "modified")
            sort_direction: 1 ascending, -1 descending (default descending)
            fields: Comma-separated projection, e.g. "path,title,data"
        """
        data = await self.dispatch(
            "GET",
            path,
            {"find": dict(criteria or {}), "fields": fields, "sort": sort, "sortDirection": sort_direction},
        )
        return hierarchy.sort_notes(_decode_summaries(data), sort, sort_direction)

    async def get_all(self, sort: str = "", sort_direction: int = 0, fields: str = "") -> list[NoteSummary]:
        """Every note in the project (cached in the listing slot)."""
        query = ListingQuery(scope="/", sort=sort, sort_direction=sort_direction, all=True, fields=fields)
        cached = self._cached_listing(query)
        if cached is not None:
            return cached

        self._listing_slot = None
        data = await self.dispatch(
            "GET", "/", {"find": {}, "fields": fields, "sort": sort, "sortDirection": sort_direction}
        )
        notes = hierarchy.sort_notes(_decode_summaries(data), sort, sort_direction)
        self._listing_slot = ListingSlot(query=query, result=notes)
        return _detached(notes)

    async def list(self, path: str, sort: str = "", sort_direction: int = 0) -> Listing:
        """Parents, children and siblings surrounding ``path``. Useful for menus."""
        query = ListingQuery(scope=path or "/", sort=sort, sort_direction=sort_direction)
        cached = self._cached_listing(query)
        if cached is not None:
            return cached

        self._listing_slot = None
        data = await self.dispatch("GET", path, {"list": 1, "sort": sort, "sortDirection": sort_direction})
        if not isinstance(data, dict):
            return Listing()

        listing = Listing.model_validate(data)
        listing.children = hierarchy.sort_notes(listing.children, sort, sort_direction)
        listing.siblings = hierarchy.sort_notes(listing.siblings, sort, sort_direction)
        self._listing_slot = ListingSlot(query=query, result=listing)
        return _detached(listing)

    async def get_surrounding(self, path: str, sort: str = "", sort_direction: int = 0) -> Listing:
        """Synonym for list()."""
        return await self.list(path, sort, sort_direction)

    async def get_parent(self, path: str) -> NoteSummary | None:
        """/blog/cats/tabby -> the /blog/cats note."""
        return (await self.list(path)).parent

    async def get_breadcrumbs(self, path: str) -> list[NoteSummary]:
        """/blog/cats/tabby -> [/blog, /blog/cats]."""
        return (await self.list(path)).parents

    async def get_children(self, path: str) -> list[NoteSummary]:
        return (await self.list(path)).children

    async def get_siblings(self, path: str) -> list[NoteSummary]:
        """Notes sharing the parent of ``path``, including itself."""
        return (await self.list(path)).siblings

    async def get_index(self, path: str) -> int:
        """Position hint for bespoke sorting (0 when unknown)."""
        return (await self.list(path)).index or 0

    async def get_descendants(self, path: str, sort: str = "", sort_direction: int = 0) -> list[NoteSummary]:
        """Every note beneath ``path`` at any depth, from the full listing."""
        notes = await self.get_all()
        return hierarchy.sort_notes(hierarchy.descendants(notes, path), sort, sort_direction)

    async def derive_surrounding(self, path: str, sort: str = "", sort_direction: int = 0) -> Listing:
        """Build the list() view locally from the full listing."""
        notes = await self.get_all()
        return hierarchy.derive_listing(notes, path, sort, sort_direction)
