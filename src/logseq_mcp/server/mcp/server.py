"""FastMCP server with the Logseq graph tools."""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable

from mcp.server.fastmcp import FastMCP

from logseq_mcp.core.exceptions import LogseqError
from logseq_mcp.graph.context import ContextOptions
from logseq_mcp.server.config import ServerConfig
from logseq_mcp.service import LogseqGraph

logger = logging.getLogger(__name__)

MAX_DEPTH = 3


def to_jsonable(value: Any) -> Any:
    """Turn a result (dataclass, list of dataclasses or plain data) into JSON data."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    return value


async def _respond(operation: str, pending: Awaitable[Any]) -> str:
    """Await an operation and render its result, or its domain error, as JSON text."""
    try:
        result = await pending
    except LogseqError as e:
        logger.info("%s failed: %s", operation, e)
        return json.dumps({"error": str(e), "kind": e.kind}, indent=2)
    return json.dumps(to_jsonable(result), indent=2, default=str)


def create_mcp_server(config: ServerConfig, graph: LogseqGraph | None = None) -> FastMCP:
    """Create a FastMCP server exposing every graph operation as a tool."""

    mcp = FastMCP(
        "Logseq Graph",
        instructions="Read and traverse a Logseq knowledge graph: pages, blocks, links and journals",
    )

    _graph = graph

    def _get_graph() -> LogseqGraph:
        nonlocal _graph
        if _graph is None:
            _graph = LogseqGraph(config.logseq)
        return _graph

    # ===== Tool 1: logseq_get_page =====

    @mcp.tool()
    async def logseq_get_page(page_name: str, include_children: bool = False) -> str:
        """Get a Logseq page by name, optionally with its child blocks."""
        return await _respond(
            "logseq_get_page", _get_graph().get_page(page_name, include_children)
        )

    # ===== Tool 2: logseq_get_backlinks =====

    @mcp.tool()
    async def logseq_get_backlinks(page_name: str) -> str:
        """Get all pages and blocks that link to a page."""
        return await _respond("logseq_get_backlinks", _get_graph().get_backlinks(page_name))

    # ===== Tool 3: logseq_get_block =====

    @mcp.tool()
    async def logseq_get_block(block_uuid: str, include_children: bool = False) -> str:
        """Get a Logseq block by UUID, optionally with its child blocks."""
        return await _respond(
            "logseq_get_block", _get_graph().get_block(block_uuid, include_children)
        )

    # ===== Tool 4: logseq_search_blocks =====

    @mcp.tool()
    async def logseq_search_blocks(query: str, limit: int | None = None) -> str:
        """Search for blocks containing specific text.

        Args:
            query: Text to search for in block content
            limit: Maximum number of results to return
        """
        return await _respond("logseq_search_blocks", _get_graph().search_blocks(query, limit))

    # ===== Tool 5: logseq_query_by_property =====

    @mcp.tool()
    async def logseq_query_by_property(property_key: str, property_value: str) -> str:
        """Find blocks whose property equals a value (e.g. status = done)."""
        return await _respond(
            "logseq_query_by_property",
            _get_graph().query_by_property(property_key, property_value),
        )

    # ===== Tool 6: logseq_get_related_pages =====

    @mcp.tool()
    async def logseq_get_related_pages(page_name: str, depth: int = 1) -> str:
        """Get pages related to a page through references and backlinks.

        Args:
            page_name: Name of the source page
            depth: Maximum depth to traverse (default 1, max 3)
        """
        return await _respond(
            "logseq_get_related_pages",
            _get_graph().get_related_pages(page_name, min(depth, MAX_DEPTH)),
        )

    # ===== Tool 7: logseq_get_entity_timeline =====

    @mcp.tool()
    async def logseq_get_entity_timeline(
        entity_name: str,
        start_date: int | None = None,
        end_date: int | None = None,
    ) -> str:
        """Get blocks mentioning an entity, sorted chronologically.

        Args:
            entity_name: Name of the entity (page name)
            start_date: Optional start date as YYYYMMDD
            end_date: Optional end date as YYYYMMDD
        """
        return await _respond(
            "logseq_get_entity_timeline",
            _get_graph().get_entity_timeline(entity_name, start_date, end_date),
        )

    # ===== Tool 8: logseq_get_concept_network =====

    @mcp.tool()
    async def logseq_get_concept_network(concept_name: str, max_depth: int = 2) -> str:
        """Get the network of pages around a concept as nodes and edges.

        Args:
            concept_name: Name of the root concept
            max_depth: Maximum depth to traverse (default 2, max 3)
        """
        return await _respond(
            "logseq_get_concept_network",
            _get_graph().get_concept_network(concept_name, min(max_depth, MAX_DEPTH)),
        )

    # ===== Tool 9: logseq_search_by_relationship =====

    @mcp.tool()
    async def logseq_search_by_relationship(
        topic_a: str,
        topic_b: str,
        relationship_type: str,
        max_distance: int = 2,
    ) -> str:
        """Find blocks that relate two topics.

        Args:
            topic_a: Primary topic
            topic_b: Topic that defines the relationship
            relationship_type: "references", "referenced-by", "in-pages-linking-to"
                or "connected-within"
            max_distance: Hop limit for "connected-within" (default 2)
        """
        return await _respond(
            "logseq_search_by_relationship",
            _get_graph().search_by_relationship(
                topic_a, topic_b, relationship_type, min(max_distance, MAX_DEPTH)
            ),
        )

    # ===== Tool 10: logseq_build_context =====

    @mcp.tool()
    async def logseq_build_context(
        topic_name: str,
        max_blocks: int = 50,
        max_related_pages: int = 10,
        max_references: int = 20,
        include_temporal_context: bool = True,
    ) -> str:
        """Build a context bundle for a topic: page, blocks, related pages and references."""
        options = ContextOptions(
            max_blocks=max_blocks,
            max_related_pages=max_related_pages,
            max_references=max_references,
            include_temporal_context=include_temporal_context,
        )
        return await _respond(
            "logseq_build_context", _get_graph().build_context(topic_name, options)
        )

    # ===== Tool 11: logseq_get_context_for_query =====

    @mcp.tool()
    async def logseq_get_context_for_query(query: str) -> str:
        """Gather context for a question using its [[page]] references and #tags.

        Falls back to a keyword block search when the question names no pages.
        """
        return await _respond(
            "logseq_get_context_for_query", _get_graph().get_context_for_query(query)
        )

    # ===== Tool 12: logseq_query_by_date_range =====

    @mcp.tool()
    async def logseq_query_by_date_range(
        start_date: int,
        end_date: int,
        search_term: str | None = None,
    ) -> str:
        """Get journal entries between two dates (YYYYMMDD), optionally filtered by a term."""
        return await _respond(
            "logseq_query_by_date_range",
            _get_graph().query_by_date_range(start_date, end_date, search_term),
        )

    # ===== Tool 13: logseq_get_concept_evolution =====

    @mcp.tool()
    async def logseq_get_concept_evolution(
        concept_name: str,
        start_date: int | None = None,
        end_date: int | None = None,
        group_by: str | None = None,
    ) -> str:
        """Track how a concept is mentioned over time.

        Args:
            concept_name: Concept (page name) to track
            start_date: Optional start date as YYYYMMDD
            end_date: Optional end date as YYYYMMDD
            group_by: Optional "day", "week" or "month" bucketing
        """
        return await _respond(
            "logseq_get_concept_evolution",
            _get_graph().get_concept_evolution(concept_name, start_date, end_date, group_by),
        )

    # ===== Tool 14: logseq_get_graph_info =====

    @mcp.tool()
    async def logseq_get_graph_info() -> str:
        """Get the name and location of the graph currently open in Logseq."""
        return await _respond("logseq_get_graph_info", _get_graph().get_graph_info())

    return mcp
