"""Notion client tests."""

import json
import unittest

import httpx

from notion_carousel.errors import SourceUnavailable
from notion_carousel.source.client import NotionClient


class TestNotionClient(unittest.IsolatedAsyncioTestCase):
    def _client(self, handler, **kwargs) -> NotionClient:
        client = NotionClient(
            "secret-token",
            api_base="https://api.test/v1",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        self.addAsyncCleanup(client.aclose)
        return client

    async def test_list_children_request(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": [{"id": "a"}], "next_cursor": "c2"})

        client = self._client(handler, page_size=50)
        page = await client.list_children("block-1", cursor="c1")

        self.assertEqual(page.items, [{"id": "a"}])
        self.assertEqual(page.next_cursor, "c2")
        request = seen[0]
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.url.path, "/v1/blocks/block-1/children")
        self.assertEqual(request.url.params["page_size"], "50")
        self.assertEqual(request.url.params["start_cursor"], "c1")
        self.assertEqual(request.headers["Authorization"], "Bearer secret-token")
        self.assertEqual(request.headers["Notion-Version"], "2022-06-28")

    async def test_search_and_query_post_bodies(self) -> None:
        bodies = {}

        def handler(request: httpx.Request) -> httpx.Response:
            bodies[request.url.path] = json.loads(request.content)
            return httpx.Response(200, json={"results": [], "next_cursor": None})

        client = self._client(handler)
        await client.search()
        await client.query_database("db-1", cursor="next")

        self.assertEqual(bodies["/v1/search"], {"page_size": 100})
        self.assertEqual(bodies["/v1/databases/db-1/query"], {"page_size": 100, "start_cursor": "next"})

    async def test_object_not_found_maps_to_404(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": "object_not_found", "message": "Could not find block"})

        client = self._client(handler)
        with self.assertRaises(SourceUnavailable) as ctx:
            await client.list_children("missing")
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.code, "object_not_found")
        self.assertIn("Could not find block", str(ctx.exception))

    async def test_other_errors_keep_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"code": "unauthorized", "message": "API token is invalid."})

        client = self._client(handler)
        with self.assertRaises(SourceUnavailable) as ctx:
            await client.search()
        self.assertEqual(ctx.exception.status, 401)

    async def test_transport_error_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        client = self._client(handler)
        with self.assertRaises(SourceUnavailable):
            await client.list_children("x")

    async def test_image_auth_only_for_notion_hosts(self) -> None:
        headers = {}

        def handler(request: httpx.Request) -> httpx.Response:
            headers[request.url.host] = request.headers.get("Authorization")
            return httpx.Response(200, content=b"img")

        client = self._client(handler)
        self.assertEqual(await client.fetch_image("https://prod-files-secure.s3-us-west-2.amazonaws.com/a.png"), b"img")
        await client.fetch_image("https://www.notion.so/image/b.png")
        await client.fetch_image("https://cdn.example.com/c.png")

        self.assertEqual(headers["prod-files-secure.s3-us-west-2.amazonaws.com"], "Bearer secret-token")
        self.assertEqual(headers["www.notion.so"], "Bearer secret-token")
        self.assertIsNone(headers["cdn.example.com"])

    async def test_image_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403)

        client = self._client(handler)
        with self.assertRaises(SourceUnavailable) as ctx:
            await client.fetch_image("https://cdn.example.com/c.png")
        self.assertEqual(ctx.exception.status, 403)

    def test_missing_token(self) -> None:
        with self.assertRaises(SourceUnavailable) as ctx:
            NotionClient("")
        self.assertEqual(ctx.exception.status, 401)


if __name__ == "__main__":
    unittest.main()
