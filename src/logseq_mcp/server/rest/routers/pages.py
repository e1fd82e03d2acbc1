"""Page, block and search endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from logseq_mcp.server.dependencies import get_graph
from logseq_mcp.service import LogseqGraph

router = APIRouter()


@router.get("/pages/{page_name}")
async def get_page(
    page_name: str,
    include_children: bool = False,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    page = await graph.get_page(page_name, include_children)
    return page.to_dict()


@router.get("/pages/{page_name}/backlinks")
async def get_backlinks(
    page_name: str,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    """Backlinks of a page; ``backlinks`` is null when Logseq has no entry for it."""
    backlinks = await graph.get_backlinks(page_name)
    return {
        "page": page_name,
        "backlinks": [b.to_dict() for b in backlinks] if backlinks is not None else None,
    }


@router.get("/pages/{page_name}/related")
async def get_related_pages(
    page_name: str,
    depth: int = Query(default=1, ge=0, le=3),
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    result = await graph.get_related_pages(page_name, depth)
    return result.to_dict()


@router.get("/blocks/{block_uuid}")
async def get_block(
    block_uuid: str,
    include_children: bool = False,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    block = await graph.get_block(block_uuid, include_children)
    return block.to_dict()


@router.get("/search")
async def search_blocks(
    q: str = Query(min_length=1),
    limit: int | None = Query(default=None, ge=1),
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    blocks = await graph.search_blocks(q, limit)
    return {"query": q, "results": [b.to_dict() for b in blocks], "total": len(blocks)}


@router.get("/properties/{property_key}")
async def query_by_property(
    property_key: str,
    value: str,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    blocks = await graph.query_by_property(property_key, value)
    return {
        "property": property_key,
        "value": value,
        "results": [b.to_dict() for b in blocks],
        "total": len(blocks),
    }
