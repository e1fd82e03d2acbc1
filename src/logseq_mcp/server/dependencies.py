"""Dependency injection for the REST routers."""

from __future__ import annotations

from fastapi import HTTPException, Request

from logseq_mcp.service import LogseqGraph


def get_graph(request: Request) -> LogseqGraph:
    """Get the shared LogseqGraph from app state."""
    graph: LogseqGraph | None = getattr(request.app.state, "graph", None)
    if graph is None:
        raise HTTPException(status_code=503, detail="Logseq graph not initialized")
    return graph
