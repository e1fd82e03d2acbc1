"""Health and status endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request

from logseq_mcp import __version__
from logseq_mcp.server.dependencies import get_graph
from logseq_mcp.server.schemas import HealthResponse, StatusResponse
from logseq_mcp.service import LogseqGraph

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> HealthResponse:
    elapsed = time.monotonic() - request.app.state.start_time
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(elapsed, 1),
    )


@router.get("/status")
async def status(request: Request, graph: LogseqGraph = Depends(get_graph)) -> StatusResponse:
    """Server status plus the graph open in Logseq (fails when Logseq is down)."""
    elapsed = time.monotonic() - request.app.state.start_time
    info = await graph.get_graph_info()
    config = request.app.state.config

    return StatusResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(elapsed, 1),
        mode=config.mode,
        api_url=config.logseq.api_url,
        graph_name=info.name,
        graph_path=info.path,
    )
