"""Graph traversal and context endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from logseq_mcp.graph.context import ContextOptions
from logseq_mcp.server.dependencies import get_graph
from logseq_mcp.server.schemas import ContextRequest, QueryContextRequest, RelationshipRequest
from logseq_mcp.service import LogseqGraph

router = APIRouter(prefix="/graph")


@router.get("/info")
async def graph_info(graph: LogseqGraph = Depends(get_graph)) -> dict[str, Any]:
    info = await graph.get_graph_info()
    return info.to_dict()


@router.get("/network/{concept}")
async def concept_network(
    concept: str,
    max_depth: int = Query(default=2, ge=0, le=3),
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    network = await graph.get_concept_network(concept, max_depth)
    return network.to_dict()


@router.post("/relationship")
async def search_by_relationship(
    body: RelationshipRequest,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    result = await graph.search_by_relationship(
        body.topic_a, body.topic_b, body.relationship_type, body.max_distance
    )
    return result.to_dict()


@router.post("/context")
async def build_context(
    body: ContextRequest,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    options = ContextOptions(
        max_blocks=body.max_blocks,
        max_related_pages=body.max_related_pages,
        max_references=body.max_references,
        include_temporal_context=body.include_temporal_context,
    )
    context = await graph.build_context(body.topic, options)
    return context.to_dict()


@router.post("/query-context")
async def query_context(
    body: QueryContextRequest,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    result = await graph.get_context_for_query(body.query)
    return result.to_dict()
