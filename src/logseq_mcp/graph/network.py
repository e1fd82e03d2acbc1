"""Concept network traversal.

Two interchangeable strategies build the same network:

- ``DatalogTraversal`` asks the store for a whole BFS level with one Datalog
  query, so it issues one query per hop.
- ``SequentialTraversal`` fetches each frontier page's block tree (outbound
  references) and linked references (inbound) one page at a time.

Both must return the same node ids and the same number of edges for the
same input. Edges are deduplicated per ordered ``(from, to)`` pair and
self-references are ignored.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from logseq_mcp.core.exceptions import InvalidInputError, PageNotFoundError
from logseq_mcp.core.types import Page, entity_id
from logseq_mcp.core.utils import extract_references, normalize_name
from logseq_mcp.graph.queries import DatalogQueryBuilder
from logseq_mcp.graph.types import (
    ConceptNetwork,
    EdgeType,
    LinkDirection,
    NetworkEdge,
    NetworkNode,
)

if TYPE_CHECKING:
    from logseq_mcp.clients.logseq import LogseqClient

logger = logging.getLogger(__name__)

# (page being expanded, page on the other end, direction seen from the first)
Link = tuple[int, Page, LinkDirection]


class _NetworkAccumulator:
    """Collects nodes and edges while a BFS runs."""

    def __init__(self, concept: str, root: Page) -> None:
        self.network = ConceptNetwork(concept=concept)
        self.network.nodes.append(NetworkNode(id=root.id, name=root.display_name, depth=0))
        self._visited: set[int] = {root.id}
        self._edge_keys: set[tuple[int, int]] = set()

    def absorb(self, links: list[Link], depth: int) -> list[Page]:
        """Add one level of links; return newly discovered pages."""
        discovered: list[Page] = []
        for source_id, page, direction in links:
            if page.id == source_id:
                continue

            if direction is LinkDirection.OUTBOUND:
                key = (source_id, page.id)
            else:
                key = (page.id, source_id)
            if key not in self._edge_keys:
                self._edge_keys.add(key)
                self.network.edges.append(
                    NetworkEdge(source=key[0], target=key[1], type=EdgeType.for_direction(direction))
                )

            if page.id not in self._visited:
                self._visited.add(page.id)
                self.network.nodes.append(
                    NetworkNode(id=page.id, name=page.display_name, depth=depth)
                )
                discovered.append(page)
        return discovered


class _PageCache:
    """Page lookups shared by the steps of one traversal."""

    def __init__(self, client: "LogseqClient") -> None:
        self._client = client
        self._by_name: dict[str, Page | None] = {}
        self._by_id: dict[int, Page | None] = {}

    def remember(self, page: Page) -> None:
        self._by_name[normalize_name(page.name)] = page
        self._by_id[page.id] = page

    async def by_name(self, name: str) -> Page | None:
        key = normalize_name(name)
        if key not in self._by_name:
            self._by_name[key] = await self._client.get_page(name)
        return self._by_name[key]

    async def by_id(self, page_id: int) -> Page | None:
        if page_id not in self._by_id:
            self._by_id[page_id] = await self._client.get_page(page_id)
        return self._by_id[page_id]


class NetworkTraversal(ABC):
    """Bounded breadth-first traversal of the page link graph."""

    strategy: str = ""

    def __init__(self, client: "LogseqClient") -> None:
        self._client = client

    async def traverse(self, concept: str, max_hops: int = 2) -> ConceptNetwork:
        """Build the network of pages within ``max_hops`` of ``concept``.

        Args:
            concept: Root page name (any casing)
            max_hops: Maximum BFS distance from the root

        Returns:
            ConceptNetwork with the root at depth 0

        Raises:
            PageNotFoundError: the root page does not exist
            InvalidInputError: ``max_hops`` is negative
        """
        if max_hops < 0:
            raise InvalidInputError(f"max_hops must be >= 0, got {max_hops}")

        pages = _PageCache(self._client)
        root = await self._resolve_root(concept, pages)
        accumulator = _NetworkAccumulator(concept, root)

        frontier = [root]
        depth = 1
        while frontier and depth <= max_hops:
            logger.debug(
                "Expanding %d page(s) at depth %d (%s)", len(frontier), depth, self.strategy
            )
            links = await self._expand(frontier, pages)
            if not links:
                break
            frontier = accumulator.absorb(links, depth)
            depth += 1

        network = accumulator.network
        logger.debug(
            "Network for %r: %d nodes, %d edges", concept, len(network.nodes), len(network.edges)
        )
        return network

    @abstractmethod
    async def _resolve_root(self, concept: str, pages: _PageCache) -> Page:
        ...

    @abstractmethod
    async def _expand(self, frontier: list[Page], pages: _PageCache) -> list[Link]:
        """Return every link touching a page of the frontier."""
        ...


class DatalogTraversal(NetworkTraversal):
    """One Datalog query per BFS level for the whole frontier."""

    strategy = "datalog"

    async def _resolve_root(self, concept: str, pages: _PageCache) -> Page:
        rows = await self._client.datascript_query(DatalogQueryBuilder.concept_network(concept, 0))
        root = first_page(rows)
        if root is None:
            raise PageNotFoundError(concept)
        return root

    async def _expand(self, frontier: list[Page], pages: _PageCache) -> list[Link]:
        query = DatalogQueryBuilder.connected_pages(p.id for p in frontier)
        rows = await self._client.datascript_query(query)

        links: list[Link] = []
        for row in rows:
            if not isinstance(row, (list, tuple)) or len(row) != 3:
                continue
            raw_source, raw_connected, raw_rel = row
            source_id = entity_id(raw_source)
            connected = Page.from_payload(raw_connected) if raw_connected else None
            if source_id is None or connected is None:
                continue
            try:
                direction = LinkDirection(raw_rel)
            except ValueError:
                logger.debug("Skipping row with unknown relationship %r", raw_rel)
                continue
            links.append((source_id, connected, direction))
        return links


class SequentialTraversal(NetworkTraversal):
    """Per-page block scans and backlink lookups."""

    strategy = "sequential"

    async def _resolve_root(self, concept: str, pages: _PageCache) -> Page:
        root = await self._client.get_page(concept)
        if root is None:
            raise PageNotFoundError(concept)
        pages.remember(root)
        return root

    async def _expand(self, frontier: list[Page], pages: _PageCache) -> list[Link]:
        links: list[Link] = []
        for page in frontier:
            links.extend(await self._outbound(page, pages))
            links.extend(await self._inbound(page, pages))
        return links

    async def _outbound(self, page: Page, pages: _PageCache) -> list[Link]:
        blocks = await self._client.get_page_blocks_tree(page.name)
        names: list[str] = []
        seen: set[str] = set()
        for block in blocks:
            for descendant in block.walk():
                for name in extract_references(descendant.content):
                    key = normalize_name(name)
                    if key not in seen:
                        seen.add(key)
                        names.append(name)

        links: list[Link] = []
        for name in names:
            target = await pages.by_name(name)
            if target is not None:
                links.append((page.id, target, LinkDirection.OUTBOUND))
        return links

    async def _inbound(self, page: Page, pages: _PageCache) -> list[Link]:
        backlinks = await self._client.get_backlinks(page.name) or []
        links: list[Link] = []
        for backlink in backlinks:
            source = backlink.source_page
            if source is None and backlink.source_page_id is not None:
                source = await pages.by_id(backlink.source_page_id)
            if source is not None:
                links.append((page.id, source, LinkDirection.INBOUND))
        return links


def first_page(rows: list[Any]) -> Page | None:
    if not rows:
        return None
    first = rows[0]
    if isinstance(first, (list, tuple)):
        first = first[0] if first else None
    return Page.from_payload(first) if isinstance(first, dict) else None


def create_traversal(client: "LogseqClient", use_datalog: bool) -> NetworkTraversal:
    """Pick the traversal strategy selected by the feature flags."""
    if use_datalog:
        return DatalogTraversal(client)
    return SequentialTraversal(client)
