"""Tests for listings, find and the listing cache.

Coverage target: src/pullnote_mcp/client/api_client_listing.py
"""

import json

import pytest

from pullnote_mcp.models import Listing


@pytest.fixture
def surrounding():
    return {
        "parent": {"path": "/blog/cats", "title": "Cats"},
        "parents": [{"path": "/blog", "title": "Blog"}, {"path": "/blog/cats", "title": "Cats"}],
        "children": [],
        "siblings": [
            {"path": "/blog/cats/siamese", "title": "Siamese", "modified": "2024-01-01T00:00:00Z"},
            {"path": "/blog/cats/tabby", "title": "Tabby", "modified": "2024-02-01T00:00:00Z"},
        ],
        "index": 3,
    }


@pytest.fixture
def everything():
    return [
        {"path": "/a", "modified": "2024-01-01T00:00:00Z"},
        {"path": "/a/b", "modified": "2024-01-03T00:00:00Z"},
        {"path": "/a/b/c", "modified": "2024-01-04T00:00:00Z"},
        {"path": "/a/d", "modified": "2024-01-02T00:00:00Z"},
    ]


class TestList:

    @pytest.mark.asyncio
    async def test_list_request_shape(self, client, api, surrounding):
        api.add("GET", "/blog/cats/tabby", surrounding)

        listing = await client.list("/blog/cats/tabby", "title", 1)

        params = api.last.url.params
        assert params["list"] == "1"
        assert params["sort"] == "title"
        assert params["sortDirection"] == "1"
        assert isinstance(listing, Listing)
        assert [s.path for s in listing.siblings] == ["/blog/cats/siamese", "/blog/cats/tabby"]

    @pytest.mark.asyncio
    async def test_projections_share_one_request(self, client, api, surrounding):
        api.add("GET", "/blog/cats/tabby", surrounding)
        path = "/blog/cats/tabby"

        parent = await client.get_parent(path)
        crumbs = await client.get_breadcrumbs(path)
        children = await client.get_children(path)
        sibs = await client.get_siblings(path)
        index = await client.get_index(path)

        assert api.count("GET") == 1
        assert parent.path == "/blog/cats"
        assert [c.path for c in crumbs] == ["/blog", "/blog/cats"]
        assert children == []
        # default sort is modified descending
        assert [s.path for s in sibs] == ["/blog/cats/tabby", "/blog/cats/siamese"]
        assert index == 3

    @pytest.mark.asyncio
    async def test_cached_results_are_not_shared_with_callers(self, client, api, surrounding):
        api.add("GET", "/blog/cats/tabby", surrounding)
        path = "/blog/cats/tabby"

        sibs = await client.get_siblings(path)
        sibs.clear()
        listing = await client.list(path)
        listing.parent.title = "Dogs"

        assert [s.path for s in await client.get_siblings(path)] == ["/blog/cats/tabby", "/blog/cats/siamese"]
        assert (await client.get_parent(path)).title != "Dogs"
        assert api.count("GET") == 1

    @pytest.mark.asyncio
    async def test_projections_default_when_relationships_missing(self, client, api):
        api.add("GET", "/lonely", {"parents": None, "index": None})

        assert await client.get_parent("/lonely") is None
        assert await client.get_breadcrumbs("/lonely") == []
        assert await client.get_children("/lonely") == []
        assert await client.get_siblings("/lonely") == []
        assert await client.get_index("/lonely") == 0

    @pytest.mark.asyncio
    async def test_projections_on_missing_note(self, client, api):
        assert await client.get_parent("/missing") is None
        assert await client.get_children("/missing") == []
        assert await client.get_index("/missing") == 0

    @pytest.mark.asyncio
    async def test_descriptor_change_is_a_miss(self, client, api, surrounding):
        api.add("GET", "/blog/cats/tabby", surrounding)

        await client.list("/blog/cats/tabby")
        await client.get_surrounding("/blog/cats/tabby")
        await client.list("/blog/cats/tabby", "title")
        await client.list("/blog/cats/tabby", "title", -1)

        assert api.count("GET") == 3

    @pytest.mark.asyncio
    async def test_mutation_invalidates_listing(self, client, api, surrounding):
        api.add("GET", "/blog/cats/tabby", surrounding)
        api.add("PATCH", "/blog/cats/tabby", {"path": "/blog/cats/tabby", "index": 9})

        await client.list("/blog/cats/tabby")
        await client.set_index("/blog/cats/tabby", 9)
        await client.list("/blog/cats/tabby")

        assert api.count("GET") == 2
        assert api.body(api.requests[1]) == {"index": 9}


class TestGetAllAndFind:

    @pytest.mark.asyncio
    async def test_get_all_request_and_cache(self, client, api, everything):
        api.add("GET", "/", everything)

        first = await client.get_all()
        second = await client.get_all()

        assert api.count("GET") == 1
        assert first == second
        assert first is not second
        assert json.loads(api.last.url.params["find"]) == {}
        assert [n.path for n in first] == ["/a/b/c", "/a/b", "/a/d", "/a"]

    @pytest.mark.asyncio
    async def test_get_all_and_list_share_one_slot(self, client, api, everything, surrounding):
        api.add("GET", "/", everything)
        api.add("GET", "/blog/cats/tabby", surrounding)

        await client.get_all()
        await client.list("/blog/cats/tabby")
        await client.get_all()

        assert api.count("GET") == 3

    @pytest.mark.asyncio
    async def test_find_encodes_criteria_and_is_not_cached(self, client, api, everything):
        api.add("GET", "/a", everything[1:])

        found = await client.find("/a", {"data.city": "London"}, "path", 1, "path,title")
        await client.find("/a", {"data.city": "London"}, "path", 1, "path,title")

        params = api.last.url.params
        assert json.loads(params["find"]) == {"data.city": "London"}
        assert params["fields"] == "path,title"
        assert api.count("GET") == 2
        assert [n.path for n in found] == ["/a/b", "/a/b/c", "/a/d"]

    @pytest.mark.asyncio
    async def test_find_missing_scope_is_empty(self, client, api):
        assert await client.find("/missing", {"title": "x"}) == []


class TestClientSideDerivation:

    @pytest.mark.asyncio
    async def test_get_descendants(self, client, api, everything):
        api.add("GET", "/", everything)

        result = await client.get_descendants("/a")

        assert {n.path for n in result} == {"/a/b", "/a/b/c", "/a/d"}

    @pytest.mark.asyncio
    async def test_derive_surrounding_uses_cached_listing(self, client, api, everything):
        api.add("GET", "/", everything)

        listing = await client.derive_surrounding("/a")
        again = await client.derive_surrounding("/a/b")

        assert api.count("GET") == 1
        assert {c.path for c in listing.children} == {"/a/b", "/a/d"}
        assert again.parent.path == "/a"
        assert [c.path for c in again.children] == ["/a/b/c"]
