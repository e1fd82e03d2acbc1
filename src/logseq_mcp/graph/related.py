"""One-hop related pages listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from logseq_mcp.core.exceptions import InvalidInputError, PageNotFoundError
from logseq_mcp.core.utils import extract_references, normalize_name
from logseq_mcp.graph.types import LinkDirection, RelatedPage, RelatedPagesResult

if TYPE_CHECKING:
    from logseq_mcp.clients.logseq import LogseqClient


async def get_related_pages(
    client: "LogseqClient",
    page_name: str,
    depth: int = 1,
) -> RelatedPagesResult:
    """List pages linked to or from ``page_name``.

    Outbound references come first, in order of appearance in the block
    tree, then the sources of inbound backlinks. Each page appears once.

    Raises:
        PageNotFoundError: the source page does not exist
        InvalidInputError: ``depth`` is negative
    """
    if depth < 0:
        raise InvalidInputError(f"depth must be >= 0, got {depth}")

    source = await client.get_page(page_name)
    if source is None:
        raise PageNotFoundError(page_name)

    result = RelatedPagesResult(source_page=source)
    if depth == 0:
        return result

    visited = {source.id}

    names: dict[str, str] = {}
    for block in await client.get_page_blocks_tree(source.name):
        for descendant in block.walk():
            for name in extract_references(descendant.content):
                names.setdefault(normalize_name(name), name)

    for name in names.values():
        page = await client.get_page(name)
        if page is not None and page.id not in visited:
            visited.add(page.id)
            result.related_pages.append(
                RelatedPage(page=page, relationship_type=LinkDirection.OUTBOUND)
            )

    for backlink in await client.get_backlinks(source.name) or []:
        page = backlink.source_page
        if page is None and backlink.source_page_id is not None:
            if backlink.source_page_id in visited:
                continue
            page = await client.get_page(backlink.source_page_id)
        if page is not None and page.id not in visited:
            visited.add(page.id)
            result.related_pages.append(
                RelatedPage(page=page, relationship_type=LinkDirection.INBOUND)
            )

    return result
