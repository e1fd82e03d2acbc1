"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from logseq_mcp import __version__
from logseq_mcp.server.config import ServerConfig
from logseq_mcp.server.errors import EXCEPTION_HANDLERS
from logseq_mcp.server.rest.middleware import RequestLoggingMiddleware
from logseq_mcp.server.rest.routers import graph, health, journals, pages
from logseq_mcp.service import LogseqGraph

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig, logseq_graph: LogseqGraph | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``logseq_graph`` replaces the graph built from ``config`` (used by tests).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        app.state.config = config
        app.state.start_time = time.monotonic()
        app.state.graph = logseq_graph or LogseqGraph(config.logseq)
        logger.info(
            "Logseq graph server started (mode=%s, api=%s)", config.mode, config.logseq.api_url
        )
        yield

        # Shutdown
        await app.state.graph.close()
        logger.info("Logseq graph server stopped")

    app = FastAPI(
        title="Logseq Graph",
        description="Read-only traversal of a Logseq knowledge graph",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    # Routers
    prefix = "/api/v1"
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(pages.router, prefix=prefix, tags=["pages"])
    app.include_router(graph.router, prefix=prefix, tags=["graph"])
    app.include_router(journals.router, prefix=prefix, tags=["journals"])

    return app
