"""HTTP client for the Logseq API server."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from logseq_mcp.clients.config import LogseqConfig
from logseq_mcp.core.exceptions import (
    LogseqProtocolError,
    LogseqRemoteError,
    LogseqUnreachableError,
)
from logseq_mcp.core.types import Backlink, Block, GraphInfo, Page

logger = logging.getLogger(__name__)


class LogseqClient:
    """Async client for the Logseq HTTP API.

    Every call is one authenticated ``POST {api_url}/api`` carrying
    ``{"method": ..., "args": [...]}``. There is no batching and no retry;
    failures surface as one of the ``LogseqError`` subclasses.

    Example:
        >>> async with LogseqClient(LogseqConfig(auth_token="secret")) as client:
        ...     page = await client.get_page("Python")
        ...     blocks = await client.get_page_blocks_tree("Python")
    """

    def __init__(
        self,
        config: LogseqConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._http = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {config.auth_token}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    @property
    def config(self) -> LogseqConfig:
        return self._config

    async def __aenter__(self) -> "LogseqClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    async def call(self, method: str, args: list[Any] | None = None) -> Any:
        """Call a Logseq API method.

        Args:
            method: API method name (e.g. ``logseq.Editor.getBlock``)
            args: Positional arguments for the method

        Returns:
            The decoded response body. ``None`` usually means "not found".

        Raises:
            LogseqUnreachableError: the API server is not listening
            LogseqProtocolError: non-success HTTP status
            LogseqRemoteError: the response carries an ``error`` field
        """
        url = self._config.endpoint
        logger.debug("Logseq call %s (%d args)", method, len(args or []))

        try:
            response = await self._http.post(url, json={"method": method, "args": args or []})
        except httpx.TransportError as e:
            raise LogseqUnreachableError(url, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise LogseqProtocolError(response.status_code, response.reason_phrase)

        try:
            data = response.json()
        except ValueError as e:
            raise LogseqProtocolError(
                response.status_code, "response body is not valid JSON"
            ) from e

        if isinstance(data, dict) and "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                error = error.get("message") or str(error)
            raise LogseqRemoteError(str(error), method=method)

        return data

    # ----- Datalog -----

    async def datascript_query(self, query: str, *inputs: Any) -> list[Any]:
        """Run a Datalog query through ``logseq.DB.datascriptQuery``.

        Returns the result tuples; an empty or null result becomes ``[]``.
        """
        rows = await self.call("logseq.DB.datascriptQuery", [query, *inputs])
        return list(rows or [])

    async def q(self, query: str) -> list[Any]:
        """Run a simple query through ``logseq.DB.q``."""
        rows = await self.call("logseq.DB.q", [query])
        return list(rows or [])

    # ----- Editor -----

    async def get_page(
        self,
        name_or_id: str | int,
        include_children: bool = False,
    ) -> Page | None:
        """Fetch a page by name or id, ``None`` when it does not exist."""
        args: list[Any] = [name_or_id]
        if include_children:
            args.append({"includeChildren": True})
        payload = await self.call("logseq.Editor.getPage", args)
        return Page.from_payload(payload) if payload else None

    async def get_page_blocks_tree(self, page_name: str) -> list[Block]:
        """Fetch the block tree of a page (empty for unknown pages)."""
        payload = await self.call("logseq.Editor.getPageBlocksTree", [page_name])
        return [b for b in (Block.from_payload(raw) for raw in payload or []) if b]

    async def get_backlinks(self, page_name: str) -> list[Backlink] | None:
        """Fetch ``(source page, blocks)`` pairs that reference a page.

        Returns ``None`` when the page has no linked-references entry.
        """
        payload = await self.call("logseq.Editor.getPageLinkedReferences", [page_name])
        if payload is None:
            return None
        return [b for b in (Backlink.from_payload(raw) for raw in payload) if b]

    async def get_block(self, block_uuid: str, include_children: bool = False) -> Block | None:
        args: list[Any] = [block_uuid]
        if include_children:
            args.append({"includeChildren": True})
        payload = await self.call("logseq.Editor.getBlock", args)
        return Block.from_payload(payload) if payload else None

    async def get_all_pages(self) -> list[Page]:
        payload = await self.call("logseq.Editor.getAllPages")
        return [p for p in (Page.from_payload(raw) for raw in payload or []) if p]

    # ----- App -----

    async def get_current_graph(self) -> GraphInfo | None:
        payload = await self.call("logseq.App.getCurrentGraph")
        return GraphInfo.from_payload(payload) if isinstance(payload, dict) else None
