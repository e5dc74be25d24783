"""Block tree acquisition.

All listings are drained with cursor pagination, one request at a time, so
callers observe progress in source order and the source never sees bursts.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..models.blocks import BlockTree, ChildPage, DatabaseRef
from ..normalize.blocks import normalize_blocks
from .client import ContentSourceClient, Page
from .identifier import require_identifier

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, ChildPage], None]

_LIST_KINDS = ("bulleted_list_item", "numbered_list_item")


def _plain_text(rich_text: Any) -> str:
    if not isinstance(rich_text, list):
        return ""
    return "".join(item.get("plain_text") or "" for item in rich_text if isinstance(item, dict))


def _database_title(item: Dict[str, Any]) -> str:
    return _plain_text(item.get("title")) or "Untitled Database"


def _page_title(properties: Any) -> str:
    if not isinstance(properties, dict):
        return "Untitled"
    for prop in properties.values():
        if isinstance(prop, dict) and prop.get("type") == "title" and isinstance(prop.get("title"), list):
            return _plain_text(prop["title"]) or "Untitled"
    return "Untitled"


async def _drain(fetch_page: Callable[[Optional[str]], Awaitable[Page]]) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    cursor: Optional[str] = None
    while True:
        page = await fetch_page(cursor)
        items.extend(page.items)
        cursor = page.next_cursor
        if not cursor:
            return items


class BlockTreeFetcher:
    def __init__(self, client: ContentSourceClient) -> None:
        self.client = client

    async def fetch_children(self, container_id: str) -> List[Dict[str, Any]]:
        """Return every child of ``container_id`` in source order."""
        return await _drain(lambda cursor: self.client.list_children(container_id, cursor))

    async def fetch_block_tree(self, container_id: str) -> List[Dict[str, Any]]:
        """Fetch raw blocks and expand the two structural cases.

        List items flagged ``has_children`` get one level of ``nested``
        children; column lists get ``columns``, each column carrying its own
        ``children``. Nothing deeper is fetched.
        """
        items = await self.fetch_children(container_id)
        for item in items:
            kind = item.get("type")
            if kind in _LIST_KINDS and item.get("has_children"):
                item["nested"] = await self.fetch_children(item["id"])
            elif kind == "column_list":
                columns = [
                    column
                    for column in await self.fetch_children(item["id"])
                    if column.get("type") == "column"
                ]
                for column in columns:
                    column["children"] = await self.fetch_children(column["id"])
                item["columns"] = columns
        logger.debug("Fetched %d blocks for %s", len(items), container_id)
        return items

    async def list_child_pages(self, parent_id: str) -> List[ChildPage]:
        return [
            ChildPage(id=item["id"], title=(item.get("child_page") or {}).get("title") or "Untitled")
            for item in await self.fetch_children(parent_id)
            if item.get("type") == "child_page"
        ]

    async def search_databases(self) -> List[DatabaseRef]:
        return [
            DatabaseRef(id=item["id"], title=_database_title(item))
            for item in await _drain(self.client.search)
            if item.get("object") == "database"
        ]

    async def list_database_pages(self, database_id: str) -> List[ChildPage]:
        results = await _drain(lambda cursor: self.client.query_database(database_id, cursor))
        return [
            ChildPage(id=item["id"], title=_page_title(item.get("properties")), url=item.get("url"))
            for item in results
            if item.get("object") == "page"
        ]

    async def load_page(self, page_reference: str) -> BlockTree:
        page_id = require_identifier(page_reference)
        return BlockTree(page_id=page_id, blocks=normalize_blocks(await self.fetch_block_tree(page_id)))

    async def load_slides(
        self, parent_reference: str, on_progress: Optional[ProgressCallback] = None
    ) -> List[tuple[ChildPage, BlockTree]]:
        """Load every child page of a parent as one normalized slide each."""
        parent_id = require_identifier(parent_reference)
        pages = await self.list_child_pages(parent_id)
        slides: List[tuple[ChildPage, BlockTree]] = []
        for position, page in enumerate(pages):
            blocks = normalize_blocks(await self.fetch_block_tree(page.id))
            slides.append((page, BlockTree(page_id=page.id, blocks=blocks)))
            if on_progress is not None:
                on_progress(position + 1, len(pages), page)
        return slides
