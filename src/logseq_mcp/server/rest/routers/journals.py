"""Journal and timeline endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from logseq_mcp.server.dependencies import get_graph
from logseq_mcp.service import LogseqGraph

router = APIRouter(prefix="/journals")


@router.get("")
async def query_by_date_range(
    start: int,
    end: int,
    search_term: str | None = None,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    result = await graph.query_by_date_range(start, end, search_term)
    return result.to_dict()


@router.get("/evolution/{concept}")
async def concept_evolution(
    concept: str,
    start: int | None = None,
    end: int | None = None,
    group_by: str | None = None,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    result = await graph.get_concept_evolution(concept, start, end, group_by)
    return result.to_dict()


@router.get("/timeline/{entity}")
async def entity_timeline(
    entity: str,
    start: int | None = None,
    end: int | None = None,
    graph: LogseqGraph = Depends(get_graph),
) -> dict[str, Any]:
    result = await graph.get_entity_timeline(entity, start, end)
    return result.to_dict()
