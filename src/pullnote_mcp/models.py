"""Pullnote data models, request descriptors and exceptions."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_BASE_URL = "https://api.pullnote.com"


class APIConfiguration(BaseModel):
    """Connection settings for the Pullnote API."""

    api_key: SecretStr = Field(..., description="Pullnote project API key")
    base_url: str = Field(DEFAULT_BASE_URL, description="Pullnote API base URL")
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    host: str | None = Field(None, description="Public site host used for canonical links")


class NoteSummary(BaseModel):
    """A note as it appears in listings (no content body)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    path: str | None = None
    title: str | None = None
    description: str | None = None
    picture: str | None = None
    imgUrl: str | None = None
    created: Any = None
    modified: Any = None
    data: dict[str, Any] | None = Field(default_factory=dict)
    index: int | None = None


class Note(NoteSummary):
    """A full note document."""

    id: str | int | None = Field(None, alias="_id")
    project_id: str | None = None
    content: str | None = None
    prompt: str | None = None
    imgPrompt: str | None = None
    author: str | None = None
    format: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize for a write request, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class Listing(BaseModel):
    """Relationships surrounding a note: breadcrumbs, children and siblings."""

    model_config = ConfigDict(extra="allow")

    parent: NoteSummary | None = None
    parents: list[NoteSummary] = Field(default_factory=list)
    children: list[NoteSummary] = Field(default_factory=list)
    siblings: list[NoteSummary] = Field(default_factory=list)
    index: int | None = 0

    @field_validator("parents", "children", "siblings", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ProjectInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    domain: str | None = None


class PingResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    found: bool = False
    project: ProjectInfo | None = None


class HeadInfo(BaseModel):
    """Values used to render SEO head tags for a note."""

    title: str = ""
    description: str = ""
    imgUrl: str = ""
    path: str = ""
    host: str = ""


class SitemapEntry(BaseModel):
    loc: str
    lastmod: str | None = None


class RequestKind(str, Enum):
    """How a request authenticates: query token for reads, bearer header for writes."""

    READ = "read"
    WRITE = "write"

    @classmethod
    def for_method(cls, method: str) -> "RequestKind":
        return cls.READ if method.upper() == "GET" else cls.WRITE


@dataclass(frozen=True)
class ListingQuery:
    """Cache key for the listing slot."""

    scope: str
    sort: str = ""
    sort_direction: int = 0
    all: bool = False
    fields: str = ""


# Read outcomes


@dataclass(frozen=True)
class Found:
    note: Note


@dataclass(frozen=True)
class NotFound:
    path: str


@dataclass(frozen=True)
class Failed:
    error: "RemoteError"


ReadOutcome = Union[Found, NotFound, Failed]


# Exceptions


class PullnoteError(Exception):
    """Base exception for Pullnote client errors."""


class RemoteError(PullnoteError):
    """The API answered with a non-success status other than 404."""

    def __init__(self, message: str = "Unknown pullnote error", status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PreconditionError(PullnoteError):
    """An operation was called without the state it needs (e.g. no path)."""


class ConfigurationError(PullnoteError):
    """Required configuration is missing."""
