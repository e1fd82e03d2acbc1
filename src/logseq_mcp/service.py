"""Facade over every graph operation.

``LogseqGraph`` owns the API client and the feature flags and picks the
query strategy for each composite operation. Servers talk to this class
only.
"""

from __future__ import annotations

import logging
from typing import Any

from logseq_mcp.clients.config import FeatureFlags, LogseqConfig
from logseq_mcp.clients.logseq import LogseqClient
from logseq_mcp.core.types import Backlink, Block, GraphInfo, Page
from logseq_mcp.graph import lookups
from logseq_mcp.graph.context import ContextBuilder, ContextOptions
from logseq_mcp.graph.network import create_traversal
from logseq_mcp.graph.query_context import get_context_for_query
from logseq_mcp.graph.related import get_related_pages
from logseq_mcp.graph.relationships import RelationshipSearch
from logseq_mcp.graph.types import (
    ConceptNetwork,
    QueryContext,
    RelatedPagesResult,
    RelationshipResult,
    RelationshipType,
    TopicContext,
)
from logseq_mcp.temporal.journals import JournalExplorer
from logseq_mcp.temporal.types import (
    ConceptEvolution,
    DateRangeResult,
    EntityTimeline,
    GroupBy,
)

logger = logging.getLogger(__name__)


class LogseqGraph:
    """Read-only access to a Logseq graph.

    Example:
        >>> config = load_config()
        >>> async with LogseqGraph(config) as graph:
        ...     network = await graph.get_concept_network("Python", max_hops=2)
        ...     context = await graph.build_context("Python")
    """

    def __init__(
        self,
        config: LogseqConfig,
        client: LogseqClient | None = None,
    ) -> None:
        self._config = config
        self._client = client or LogseqClient(config)
        self._journals = JournalExplorer(self._client)

    @property
    def client(self) -> LogseqClient:
        return self._client

    @property
    def features(self) -> FeatureFlags:
        return self._config.features

    async def __aenter__(self) -> "LogseqGraph":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    # ===== Direct lookups =====

    async def get_page(self, page_name: str, include_children: bool = False) -> Page:
        return await lookups.get_page(self._client, page_name, include_children)

    async def get_backlinks(self, page_name: str) -> list[Backlink] | None:
        return await lookups.get_backlinks(self._client, page_name)

    async def get_block(self, block_uuid: str, include_children: bool = False) -> Block:
        return await lookups.get_block(self._client, block_uuid, include_children)

    async def search_blocks(self, query: str, limit: int | None = None) -> list[Block]:
        return await lookups.search_blocks(self._client, query, limit)

    async def query_by_property(self, property_key: str, property_value: str) -> list[Block]:
        return await lookups.query_by_property(self._client, property_key, property_value)

    async def get_graph_info(self) -> GraphInfo:
        return await lookups.get_graph_info(self._client)

    # ===== Graph traversal =====

    async def get_concept_network(self, concept: str, max_hops: int = 2) -> ConceptNetwork:
        use_datalog = self.features.datalog_enabled("conceptNetwork")
        logger.debug("Concept network for %r (datalog=%s)", concept, use_datalog)
        return await create_traversal(self._client, use_datalog).traverse(concept, max_hops)

    async def get_related_pages(self, page_name: str, depth: int = 1) -> RelatedPagesResult:
        return await get_related_pages(self._client, page_name, depth)

    async def search_by_relationship(
        self,
        topic_a: str,
        topic_b: str,
        relationship_type: RelationshipType | str,
        max_distance: int = 2,
    ) -> RelationshipResult:
        search = RelationshipSearch(
            self._client, use_datalog=self.features.datalog_enabled("searchByRelationship")
        )
        return await search.search(topic_a, topic_b, relationship_type, max_distance)

    # ===== Context =====

    def _context_builder(self) -> ContextBuilder:
        return ContextBuilder(
            self._client, use_datalog=self.features.datalog_enabled("buildContext")
        )

    async def build_context(
        self, topic: str, options: ContextOptions | None = None
    ) -> TopicContext:
        return await self._context_builder().build(topic, options)

    async def get_context_for_query(self, query: str) -> QueryContext:
        return await get_context_for_query(self._client, query, builder=self._context_builder())

    # ===== Journals =====

    async def query_by_date_range(
        self, start: int, end: int, search_term: str | None = None
    ) -> DateRangeResult:
        return await self._journals.query_by_date_range(start, end, search_term)

    async def get_concept_evolution(
        self,
        concept: str,
        start: int | None = None,
        end: int | None = None,
        group_by: GroupBy | str | None = None,
    ) -> ConceptEvolution:
        return await self._journals.get_concept_evolution(concept, start, end, group_by)

    async def get_entity_timeline(
        self, entity: str, start: int | None = None, end: int | None = None
    ) -> EntityTimeline:
        return await self._journals.get_entity_timeline(entity, start, end)
