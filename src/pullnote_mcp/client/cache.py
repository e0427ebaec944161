"""Single-slot caches for the most recent document and listing."""

from dataclasses import dataclass
from typing import Any

from ..models import ListingQuery, Note


@dataclass
class DocumentSlot:
    path: str
    format: str
    note: Note

    def matches(self, path: str, format: str = "") -> bool:
        """A slot serves get(path, format) when paths agree and format is unset or equal."""
        return self.path == path and (not format or self.format == format)


@dataclass
class ListingSlot:
    query: ListingQuery
    result: Any

    def matches(self, query: ListingQuery) -> bool:
        return self.query == query
