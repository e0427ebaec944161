"""Shared fixtures: a recording fake of the Pullnote API on httpx.MockTransport."""

import json
from typing import Any, Callable

import httpx
import pytest

from pullnote_mcp.client import PullnoteClient

API_KEY = "pk_test_123"
BASE_URL = "https://api.example.test"


class FakePullnoteAPI:
    """Routes (method, path) to canned responses and records every request.

    Routes are keyed by the URL path without the leading slash, e.g.
    ("GET", "blog/post-1"). Unrouted requests answer 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def add(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        def responder(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json=payload)

        self.routes[(method, path.lstrip("/"))] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path.lstrip("/"))
        if key in self.routes:
            return self.routes[key](request)
        return httpx.Response(404, json={"message": "Note not found"})

    def count(self, method: str | None = None) -> int:
        return len([r for r in self.requests if method is None or r.method == method])

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def api() -> FakePullnoteAPI:
    return FakePullnoteAPI()


@pytest.fixture
def client(api: FakePullnoteAPI) -> PullnoteClient:
    return PullnoteClient(API_KEY, BASE_URL, transport=httpx.MockTransport(api.handler))


@pytest.fixture
def tabby() -> dict:
    return {
        "_id": "n1",
        "path": "/blog/cats/tabby",
        "title": "Tabby",
        "description": "Stripes",
        "content": "# Tabby",
        "imgUrl": "https://img.example.test/tabby.png",
        "modified": "2024-03-05T10:00:00.000Z",
        "data": {"city": "London"},
    }
