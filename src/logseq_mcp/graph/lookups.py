"""Direct lookups against the Logseq API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from logseq_mcp.core.exceptions import (
    BlockNotFoundError,
    InvalidInputError,
    LogseqRemoteError,
    PageNotFoundError,
)
from logseq_mcp.core.types import Backlink, Block, GraphInfo, Page
from logseq_mcp.graph.queries import DatalogQueryBuilder

if TYPE_CHECKING:
    from logseq_mcp.clients.logseq import LogseqClient


async def get_page(client: "LogseqClient", page_name: str, include_children: bool = False) -> Page:
    """Fetch a page, optionally with its block tree.

    Raises:
        PageNotFoundError: the page does not exist
    """
    page = await client.get_page(page_name, include_children=include_children)
    if page is None:
        raise PageNotFoundError(page_name)
    return page


async def get_backlinks(client: "LogseqClient", page_name: str) -> list[Backlink] | None:
    """Pages and blocks that reference ``page_name``; None without an index entry."""
    return await client.get_backlinks(page_name)


async def get_block(client: "LogseqClient", block_uuid: str, include_children: bool = False) -> Block:
    """Fetch a block by uuid.

    Raises:
        BlockNotFoundError: no block has this uuid
    """
    block = await client.get_block(block_uuid, include_children=include_children)
    if block is None:
        raise BlockNotFoundError(block_uuid)
    return block


async def search_blocks(client: "LogseqClient", text: str, limit: int | None = None) -> list[Block]:
    """Blocks whose content contains ``text``.

    Raises:
        InvalidInputError: ``limit`` is negative
    """
    if limit is not None and limit < 0:
        raise InvalidInputError(f"limit must be >= 0, got {limit}")
    rows = await client.datascript_query(DatalogQueryBuilder.search_content(text))
    blocks = _blocks_from_rows(rows)
    return blocks[:limit] if limit is not None else blocks


async def query_by_property(
    client: "LogseqClient", property_key: str, property_value: str
) -> list[Block]:
    """Blocks whose property ``property_key`` equals ``property_value``."""
    rows = await client.datascript_query(
        DatalogQueryBuilder.property_match(property_key, property_value)
    )
    return _blocks_from_rows(rows)


async def get_graph_info(client: "LogseqClient") -> GraphInfo:
    """Name and location of the graph open in Logseq.

    Raises:
        LogseqRemoteError: Logseq returned no graph
    """
    info = await client.get_current_graph()
    if info is None:
        raise LogseqRemoteError(
            "Failed to retrieve graph information", method="logseq.App.getCurrentGraph"
        )
    return info


def _blocks_from_rows(rows: list) -> list[Block]:
    blocks: list[Block] = []
    seen: set[int] = set()
    for row in rows:
        block = Block.from_payload(row[0] if isinstance(row, list) and row else row)
        if block is not None and block.id not in seen:
            seen.add(block.id)
            blocks.append(block)
    return blocks
