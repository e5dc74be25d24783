"""Content source client for the Notion REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ..errors import SourceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"
# Hosts whose file URLs need the integration token attached.
_AUTHENTICATED_IMAGE_HOSTS = ("notion", "s3-us-west-2.amazonaws.com")


@dataclass(frozen=True)
class Page:
    """One page of a cursor-paginated listing."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None


class ContentSourceClient(Protocol):
    async def list_children(self, block_id: str, cursor: Optional[str] = None) -> Page: ...

    async def search(self, cursor: Optional[str] = None) -> Page: ...

    async def query_database(self, database_id: str, cursor: Optional[str] = None) -> Page: ...

    async def fetch_image(self, url: str) -> bytes: ...


def _to_page(payload: Dict[str, Any]) -> Page:
    return Page(items=list(payload.get("results") or []), next_cursor=payload.get("next_cursor"))


def _error_from_response(response: httpx.Response) -> SourceUnavailable:
    try:
        body = response.json()
    except ValueError:
        body = {}
    code = body.get("code") if isinstance(body, dict) else None
    message = (body.get("message") if isinstance(body, dict) else None) or "Notion API error"
    status = 404 if code == "object_not_found" else response.status_code
    return SourceUnavailable(message, status=status, code=code)


class NotionClient:
    """Async Notion API client.

    Usage::

        async with NotionClient(token) as client:
            page = await client.list_children(page_id)
    """

    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        notion_version: str = DEFAULT_NOTION_VERSION,
        page_size: int = 100,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not token:
            raise SourceUnavailable("Not connected to Notion", status=401)
        self.token = token
        self.page_size = page_size
        self._http = httpx.AsyncClient(
            base_url=api_base.rstrip("/") + "/",
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": notion_version,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )
        # absolute file URLs; API base and default headers do not apply
        self._files = httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True)

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()
        await self._files.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Notion request failed: {exc}") from exc
        if response.is_error:
            error = _error_from_response(response)
            logger.warning("Notion %s %s -> %s (%s)", method, path, response.status_code, error.code)
            raise error
        return response.json()

    async def list_children(self, block_id: str, cursor: Optional[str] = None) -> Page:
        params: Dict[str, Any] = {"page_size": self.page_size}
        if cursor:
            params["start_cursor"] = cursor
        payload = await self._request("GET", f"blocks/{block_id}/children", params=params)
        return _to_page(payload)

    async def search(self, cursor: Optional[str] = None) -> Page:
        body: Dict[str, Any] = {"page_size": self.page_size}
        if cursor:
            body["start_cursor"] = cursor
        return _to_page(await self._request("POST", "search", json=body))

    async def query_database(self, database_id: str, cursor: Optional[str] = None) -> Page:
        body: Dict[str, Any] = {"page_size": self.page_size}
        if cursor:
            body["start_cursor"] = cursor
        return _to_page(await self._request("POST", f"databases/{database_id}/query", json=body))

    async def fetch_image(self, url: str) -> bytes:
        headers = {"Accept": "image/*"}
        if any(host in url for host in _AUTHENTICATED_IMAGE_HOSTS):
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = await self._files.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Image fetch failed: {exc}") from exc
        if response.is_error:
            raise SourceUnavailable("Failed to load image", status=response.status_code)
        return response.content
