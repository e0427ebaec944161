"""Pullnote MCP server implementation using FastMCP."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from .client import PullnoteClient
from .config import ServerConfig, setup_logging
from .models import Listing, Note, NoteSummary

logger = logging.getLogger(__name__)

# Global client instance
_client: PullnoteClient | None = None


def get_client() -> PullnoteClient:
    """Get the global Pullnote client instance."""
    if _client is None:
        raise RuntimeError("Pullnote client not initialized. Server not started properly.")
    return _client


@asynccontextmanager
async def lifespan(_app: FastMCP):  # type: ignore[no-untyped-def]
    """Manage server lifecycle."""
    global _client

    logger.info("Starting Pullnote MCP server")

    config = ServerConfig()  # type: ignore[call-arg]
    setup_logging(config.log_level)
    api_config = config.get_api_config()
    _client = PullnoteClient.from_config(api_config)

    logger.info(f"Pullnote client initialized with base URL: {api_config.base_url}")

    yield

    logger.info("Shutting down Pullnote MCP server")
    if _client:
        await _client.close()
        _client = None


mcp = FastMCP(
    "Pullnote MCP Server",
    instructions="MCP server for reading and editing Pullnote notes addressed by path",
    lifespan=lifespan,
)


# Tool: Get Note
@mcp.tool(name="pullnote_get", description="Retrieve a Pullnote note by path")
async def get_note(path: str, format: str = "") -> Note | None:
    """Retrieve a note.

    Args:
        path: Note path, e.g. /blog/cats/tabby
        format: "md" (default) or "html"

    Returns:
        The note, or None if no note exists at that path
    """
    return await get_client().get(path, format)


@mcp.tool(name="pullnote_exists", description="Check whether a note exists at a path")
async def note_exists(path: str) -> dict:
    return {"path": path, "exists": await get_client().exists(path)}


@mcp.tool(name="pullnote_find", description="Find notes under a path matching field filters")
async def find_notes(
    path: str = "/",
    criteria: dict[str, Any] | None = None,
    sort: str = "",
    sort_direction: int = 0,
    fields: str = "",
) -> list[NoteSummary]:
    """Find notes.

    Args:
        path: Scope to search from
        criteria: Field filters, e.g. {"data.city": "London"}
        sort: Sort column (default "modified")
        sort_direction: 1 ascending, -1 descending
        fields: Comma-separated field projection

    Returns:
        Matching notes
    """
    return await get_client().find(path, criteria, sort, sort_direction, fields)


@mcp.tool(name="pullnote_get_all", description="List every note in the project")
async def get_all_notes(sort: str = "", sort_direction: int = 0, fields: str = "") -> list[NoteSummary]:
    return await get_client().get_all(sort, sort_direction, fields)


@mcp.tool(name="pullnote_list", description="Parents, children and siblings surrounding a note")
async def list_surrounding(path: str, sort: str = "", sort_direction: int = 0) -> Listing:
    return await get_client().list(path, sort, sort_direction)


@mcp.tool(name="pullnote_get_children", description="Direct children of a note")
async def get_children(path: str) -> list[NoteSummary]:
    return await get_client().get_children(path)


@mcp.tool(name="pullnote_get_breadcrumbs", description="Ancestors of a note from the top level down")
async def get_breadcrumbs(path: str) -> list[NoteSummary]:
    return await get_client().get_breadcrumbs(path)


# Tool: Add Note
@mcp.tool(name="pullnote_add", description="Create a new note at a path")
async def add_note(
    path: str,
    title: str | None = None,
    content: str | None = None,
    description: str | None = None,
    data: dict[str, Any] | None = None,
) -> Note | None:
    """Create a note.

    Args:
        path: Where to create the note (overrides any path in the payload)
        title: Note title
        content: Markdown content
        description: Short description (used for SEO tags)
        data: Custom metadata

    Returns:
        The created note
    """
    note = Note(title=title, content=content, description=description, data=data)
    return await get_client().add(path, note)


@mcp.tool(name="pullnote_update", description="Update an existing note; pass new_path to move it")
async def update_note(
    path: str,
    title: str | None = None,
    content: str | None = None,
    description: str | None = None,
    new_path: str | None = None,
) -> Note | None:
    changes = {"title": title, "content": content, "description": description, "path": new_path}
    return await get_client().update(path, {k: v for k, v in changes.items() if v is not None})


@mcp.tool(name="pullnote_remove", description="Delete a note")
async def remove_note(path: str) -> dict:
    success = await get_client().remove(path)
    return {"success": success, "deleted_path": path}


@mcp.tool(name="pullnote_set_data", description="Replace the custom metadata of a note")
async def set_data(path: str, data: dict[str, Any]) -> Note | None:
    return await get_client().set_data(path, data)


@mcp.tool(name="pullnote_set_index", description="Set the ordering hint of a note")
async def set_index(path: str, index: int) -> Note | None:
    return await get_client().set_index(path, index)


@mcp.tool(name="pullnote_generate", description="Generate a note from a prompt (server-side AI)")
async def generate_note(path: str, prompt: str, img_prompt: str | None = None) -> Any:
    return await get_client().generate(path, prompt, img_prompt)


@mcp.tool(name="pullnote_get_head_html", description="SEO <head> tags for a note")
async def get_head_html(path: str, host: str | None = None) -> str:
    return await get_client().get_head_html(path, host)


@mcp.tool(name="pullnote_get_sitemap", description="XML sitemap for the whole site")
async def get_sitemap(site_url: str = "", static_pages: list[str] | None = None) -> str:
    return await get_client().get_sitemap(site_url, static_pages or [])


@mcp.tool(name="pullnote_clear_cache", description="Forget the cached note and listing")
async def clear_cache() -> dict:
    get_client().clear()
    return {"success": True}


# Resource: Sitemap
@mcp.resource(
    uri="pullnote://sitemap",
    name="pullnote_sitemap",
    description="XML sitemap of the project's notes",
)
async def sitemap_resource() -> str:
    return await get_client().get_sitemap()


def main() -> None:
    """Console entry point: run the server over stdio."""
    setup_logging()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
