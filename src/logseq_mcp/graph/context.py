"""Topic context aggregation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from logseq_mcp.core.exceptions import LogseqError, PageNotFoundError
from logseq_mcp.core.types import Block, Page
from logseq_mcp.core.utils import normalize_name
from logseq_mcp.graph.network import NetworkTraversal, create_traversal, first_page
from logseq_mcp.graph.queries import DatalogQueryBuilder
from logseq_mcp.graph.types import (
    LinkDirection,
    Reference,
    RelatedPage,
    StepOutcome,
    StepStatus,
    TemporalContext,
    TopicContext,
)

if TYPE_CHECKING:
    from logseq_mcp.clients.logseq import LogseqClient

logger = logging.getLogger(__name__)


@dataclass
class ContextOptions:
    """Size caps for a topic context."""

    max_blocks: int = 50
    max_related_pages: int = 10
    max_references: int = 20
    include_temporal_context: bool = True


class ContextBuilder:
    """Build an enriched context bundle describing one topic page.

    The bundle combines the page itself, its blocks, the pages one hop
    away and the blocks on other pages that reference it. Only resolving
    the main page is fatal; the related-pages and references steps are
    best-effort and report their outcome in ``TopicContext.diagnostics``.

    Example:
        >>> builder = ContextBuilder(client)
        >>> context = await builder.build("Python")
        >>> print(context.as_text())
    """

    def __init__(
        self,
        client: "LogseqClient",
        use_datalog: bool = False,
        traversal: NetworkTraversal | None = None,
    ) -> None:
        self._client = client
        self._use_datalog = use_datalog
        self._traversal = traversal or create_traversal(client, use_datalog)

    async def build(self, topic: str, options: ContextOptions | None = None) -> TopicContext:
        """Build the context for ``topic``.

        Raises:
            PageNotFoundError: the topic page does not exist
        """
        options = options or ContextOptions()

        main_page = await self._main_page(topic)
        context = TopicContext(topic=topic, main_page=main_page)

        blocks = await self._blocks(main_page)
        context.direct_blocks = blocks[: options.max_blocks]

        try:
            context.related_pages = await self._related_pages(main_page, options)
            context.diagnostics["related_pages"] = StepOutcome.from_items(context.related_pages)
        except LogseqError as e:
            logger.warning("Related pages for %r unavailable: %s", topic, e, exc_info=True)
            context.diagnostics["related_pages"] = StepOutcome(StepStatus.FAILED, str(e))

        try:
            context.references = await self._references(main_page, context.related_pages, options)
            context.diagnostics["references"] = StepOutcome.from_items(context.references)
        except LogseqError as e:
            logger.warning("References for %r unavailable: %s", topic, e, exc_info=True)
            context.diagnostics["references"] = StepOutcome(StepStatus.FAILED, str(e))

        if options.include_temporal_context:
            context.temporal_context = TemporalContext(
                is_journal=main_page.is_journal,
                date=main_page.journal_day if main_page.is_journal else None,
            )

        logger.debug(
            "Context for %r: %d blocks, %d related, %d references",
            topic,
            len(context.direct_blocks),
            len(context.related_pages),
            len(context.references),
        )
        return context

    # ===== Step 1-2: page and blocks =====

    async def _main_page(self, topic: str) -> Page:
        if self._use_datalog:
            rows = await self._client.datascript_query(DatalogQueryBuilder.page(topic))
            page = first_page(rows)
        else:
            page = await self._client.get_page(topic)
        if page is None:
            raise PageNotFoundError(topic)
        return page

    async def _blocks(self, page: Page) -> list[Block]:
        if not self._use_datalog:
            return await self._client.get_page_blocks_tree(page.name)

        rows = await self._client.datascript_query(DatalogQueryBuilder.page_blocks(page.name))
        blocks: list[Block] = []
        seen: set[int] = set()
        for row in rows:
            block = Block.from_payload(row[0] if isinstance(row, list) and row else row)
            if block is not None and block.id not in seen:
                seen.add(block.id)
                blocks.append(block)
        return blocks

    # ===== Step 3: one-hop network =====

    async def _related_pages(self, main_page: Page, options: ContextOptions) -> list[RelatedPage]:
        network = await self._traversal.traverse(main_page.name, max_hops=1)
        names = {node.id: node.name for node in network.nodes}

        related: list[RelatedPage] = []
        seen = {main_page.id}
        for edge in network.edges:
            if len(related) >= options.max_related_pages:
                break
            if edge.source == main_page.id:
                other, direction = edge.target, LinkDirection.OUTBOUND
            elif edge.target == main_page.id:
                other, direction = edge.source, LinkDirection.INBOUND
            else:
                continue
            if other in seen:
                continue
            seen.add(other)
            page = Page(id=other, name=normalize_name(names[other]), original_name=names[other])
            related.append(RelatedPage(page=page, relationship_type=direction))
        return related

    # ===== Step 4: backlinks =====

    async def _references(
        self,
        main_page: Page,
        related: list[RelatedPage],
        options: ContextOptions,
    ) -> list[Reference]:
        """Flatten backlinks into references.

        Backlink sources missing from ``related`` are appended to it as
        inbound pages, subject to the same cap.
        """
        backlinks = await self._client.get_backlinks(main_page.name) or []
        seen = {main_page.id} | {r.page.id for r in related}
        pages_by_id: dict[int, Page | None] = {}

        references: list[Reference] = []
        for backlink in backlinks:
            for block in backlink.blocks:
                if (
                    len(references) >= options.max_references
                    and len(related) >= options.max_related_pages
                ):
                    return references

                source = backlink.source_page or block.page
                if source is None and block.page_id is not None:
                    if block.page_id not in pages_by_id:
                        pages_by_id[block.page_id] = await self._client.get_page(block.page_id)
                    source = pages_by_id[block.page_id]
                if source is None:
                    continue

                if source.id not in seen and len(related) < options.max_related_pages:
                    seen.add(source.id)
                    related.append(
                        RelatedPage(page=source, relationship_type=LinkDirection.INBOUND)
                    )

                if len(references) < options.max_references:
                    references.append(Reference(block=block, source_page=source))
        return references
