"""Pullnote API client - Transport dispatch and document CRUD with single-slot cache."""

import json
import sys
from typing import Any, Mapping
from datetime import datetime

import httpx

from ..models import (
    DEFAULT_BASE_URL,
    APIConfiguration,
    Failed,
    Found,
    Note,
    NotFound,
    PingResult,
    PreconditionError,
    ReadOutcome,
    RemoteError,
    RequestKind,
)
from .cache import DocumentSlot, ListingSlot

# Header name for write auth. The hosting platform reserves "Authorization".
WRITE_AUTH_HEADER = "pn_authorization"


def log_event(message: str, component: str = "CLIENT") -> None:
    """Log an event to stderr with timestamp and consistent formatting."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"[{timestamp}] [pullnote] [{component}] {message}", file=sys.stderr, flush=True)


class _ClientLogger:
    """Logger facade over log_event with the usual level methods.

    Stdout belongs to the MCP stdio transport, so everything goes to
    stderr through log_event.
    """

    def __init__(self, component: str = "CLIENT") -> None:
        self._component = component

    def info(self, msg: object) -> None:
        log_event(str(msg), self._component)

    def warning(self, msg: object) -> None:
        log_event(f"WARNING: {msg}", self._component)

    def error(self, msg: object) -> None:
        log_event(f"ERROR: {msg}", self._component)

    def debug(self, msg: object) -> None:
        log_event(f"DEBUG: {msg}", self._component)


logger = _ClientLogger()


def _encode_query_value(value: Any) -> str:
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _with_format(path: str, format: str) -> str:
    if not format or format == "md":
        return path
    sep = "&" if "?" in path else "?"
    return f"{path}{sep}format={format}"


class PullnoteClientCore:
    """Core Pullnote API client - dispatch, auth schemes and document cache."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        host: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the Pullnote API client.

        Args:
            api_key: Project API key (sent as ``token`` on reads, bearer header on writes)
            base_url: API root
            timeout: Per-request timeout in seconds
            host: Public site host used for canonical links in head tags
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.host = host
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        # Single-slot caches. Overlapping calls are not serialized; the last
        # response to arrive owns the slot.
        self._document_slot: DocumentSlot | None = None
        self._listing_slot: ListingSlot | None = None

    @classmethod
    def from_config(cls, config: APIConfiguration, **kwargs: Any):
        """Build a client from an APIConfiguration."""
        return cls(
            api_key=config.api_key.get_secret_value(),
            base_url=config.base_url,
            timeout=config.timeout,
            host=config.host,
            **kwargs,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            self._client = httpx.AsyncClient(
                base_url=self.base_url + "/",
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PullnoteClientCore":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _build_read_request(self, method: str, url: str, body: Mapping[str, Any] | None) -> httpx.Request:
        params: list[tuple[str, str]] = [("token", self.api_key)]
        for key, value in (body or {}).items():
            if value is None or value == "":
                continue
            params.append((key, _encode_query_value(value)))
        return self.client.build_request(method, url, params=params)

    def _build_write_request(self, method: str, url: str, body: Mapping[str, Any] | None) -> httpx.Request:
        headers = {WRITE_AUTH_HEADER: f"Bearer {self.api_key}"}
        payload = None
        if body is not None:
            payload = {k: v for k, v in body.items() if v is not None}
        return self.client.build_request(method, url, headers=headers, json=payload)

    def _build_request(self, method: str, path: str, body: Mapping[str, Any] | None = None) -> httpx.Request:
        # Joined as text: httpx would read a relative "notes:draft" as scheme "notes"
        relative = path[1:] if path and path.startswith("/") else (path or "")
        url = f"{self.base_url}/{relative}"
        if RequestKind.for_method(method) is RequestKind.READ:
            return self._build_read_request(method, url, body)
        return self._build_write_request(method, url, body)

    async def _handle_response(self, response: httpx.Response) -> Any:
        """Decode an API response; 404 becomes None, other failures raise RemoteError."""
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            data = None
            if response.is_success:
                raise RemoteError("Invalid response format from API", response.status_code)

        if response.is_success:
            return data

        if isinstance(data, str):
            message = data
        elif isinstance(data, dict) and data.get("message"):
            message = str(data["message"])
        else:
            message = "Unknown pullnote error"

        if response.status_code == 404:
            logger.warning(f"{message} ({response.request.method} {response.request.url.path})")
            return None

        logger.error(f"{response.status_code} {message} ({response.request.method} {response.request.url.path})")
        raise RemoteError(message, response.status_code)

    async def dispatch(self, method: str, path: str, body: Mapping[str, Any] | None = None) -> Any:
        """Send one authenticated request and return the decoded JSON (None on 404)."""
        request = self._build_request(method.upper(), path, body)
        response = await self.client.send(request)
        return await self._handle_response(response)

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def _invalidate(self) -> None:
        """Drop both cache slots. Every mutation goes through here."""
        if self._document_slot is not None or self._listing_slot is not None:
            logger.debug("cache invalidated")
        self._document_slot = None
        self._listing_slot = None

    def clear(self) -> None:
        """Forget the cached document and listing."""
        self._invalidate()

    def _store_document(self, path: str, format: str, data: Any) -> Note | None:
        if not isinstance(data, dict):
            return None
        note = Note.model_validate(data)
        self._document_slot = DocumentSlot(path=path, format=format or "md", note=note)
        return note.model_copy(deep=True)

    def _resolve_path(self, path: str | None) -> str:
        if path:
            return path
        if self._document_slot is not None:
            return self._document_slot.path
        raise PreconditionError("No current document: pass a path or fetch a note first")

    # ------------------------------------------------------------------
    # Document operations
    # ------------------------------------------------------------------

    async def ping(self) -> PingResult:
        """Lightweight project ping (also carries the project's domain)."""
        data = await self.dispatch("GET", "/", {"ping": 1})
        return PingResult.model_validate(data or {})

    async def get(self, path: str, format: str = "") -> Note | None:
        """Return the note at ``path`` or None if it does not exist.

        Args:
            path: Note path (``""`` means the root)
            format: Content format, e.g. "md" (default) or "html"
        """
        path = path or "/"
        slot = self._document_slot
        if slot is not None and slot.matches(path, format):
            logger.debug(f"document cache hit: {path}")
            return slot.note.model_copy(deep=True)

        self._document_slot = None
        data = await self.dispatch("GET", _with_format(path, format))
        return self._store_document(path, format, data)

    async def fetch(self, path: str, format: str = "") -> ReadOutcome:
        """Like get(), but report the result as Found / NotFound / Failed."""
        try:
            note = await self.get(path, format)
        except RemoteError as e:
            return Failed(e)
        if note is None:
            return NotFound(path or "/")
        return Found(note)

    async def exists(self, path: str) -> bool:
        """Check whether a note exists without touching the cache."""
        data = await self.dispatch("GET", path, {"ping": 1})
        return bool(isinstance(data, dict) and data.get("found"))

    async def add(self, path: str, note: Note | Mapping[str, Any]) -> Note | None:
        """Create a note at ``path``. The path argument wins over note.path."""
        self._invalidate()
        payload = note.to_payload() if isinstance(note, Note) else dict(note)
        data = await self.dispatch("POST", path, payload)
        stored = self._store_document(path, "", data)
        if stored is not None and stored.path and stored.path != path:
            self._document_slot.path = stored.path
        return stored

    async def update(self, path: str | None, changes: Note | Mapping[str, Any]) -> Note | None:
        """Apply ``changes`` to a note. Pass ``changes["path"]`` to move it."""
        path = self._resolve_path(path)
        self._invalidate()
        payload = changes.to_payload() if isinstance(changes, Note) else dict(changes)
        data = await self.dispatch("PATCH", path, payload)
        stored = self._store_document(path, "", data)
        if stored is not None and stored.path and stored.path != path:
            self._document_slot.path = stored.path
        return stored

    async def remove(self, path: str | None = None) -> bool:
        """Delete a note (defaults to the cached document's path)."""
        path = self._resolve_path(path)
        data = await self.dispatch("DELETE", path)
        self._invalidate()
        return bool(isinstance(data, dict) and data.get("success"))

    async def delete(self, path: str | None = None) -> bool:
        """Synonym for remove()."""
        return await self.remove(path)

    async def generate(self, path: str, prompt: str, img_prompt: str | None = None) -> Any:
        """Ask the server to generate a note from a prompt. Returns the raw response."""
        self._invalidate()
        return await self.dispatch("POST", path, {"prompt": prompt, "imgPrompt": img_prompt})
