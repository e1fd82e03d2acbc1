"""Relationship search between two topics."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from logseq_mcp.core.exceptions import InvalidInputError, PageNotFoundError
from logseq_mcp.core.types import Block, Page
from logseq_mcp.core.utils import extract_references, mentions, normalize_name
from logseq_mcp.graph.queries import DatalogQueryBuilder
from logseq_mcp.graph.types import RelationshipResult, RelationshipType

if TYPE_CHECKING:
    from logseq_mcp.clients.logseq import LogseqClient

logger = logging.getLogger(__name__)


class RelationshipSearch:
    """Answer "how is topic A related to topic B" questions.

    Supported kinds:
    - ``references``: blocks on A that embed B
    - ``referenced-by``: blocks mentioning A on the pages B references
    - ``in-pages-linking-to``: blocks mentioning A on the pages that link to B
    - ``connected-within``: whether B is reachable from A within N hops

    Example:
        >>> search = RelationshipSearch(client)
        >>> result = await search.search("Python", "Rust", "connected-within", 2)
        >>> result.connected
        True
    """

    def __init__(self, client: "LogseqClient", use_datalog: bool = False) -> None:
        self._client = client
        self._use_datalog = use_datalog

    async def search(
        self,
        topic_a: str,
        topic_b: str,
        relationship_type: RelationshipType | str,
        max_distance: int = 2,
    ) -> RelationshipResult:
        """Find blocks that evidence a relationship between two topics.

        Args:
            topic_a: Primary topic
            topic_b: Topic that defines the relationship
            relationship_type: One of ``RelationshipType``
            max_distance: Hop limit for ``connected-within``

        Returns:
            RelationshipResult; empty when topic A does not exist, except for
            ``connected-within`` which needs A as its starting point

        Raises:
            InvalidInputError: unknown kind or negative distance
            PageNotFoundError: topic A is missing for ``connected-within``
        """
        try:
            kind = RelationshipType(relationship_type)
        except ValueError:
            raise InvalidInputError(
                f"Unknown relationship type: {relationship_type!r}"
            ) from None

        if kind is RelationshipType.CONNECTED_WITHIN:
            return await self._connected_within(topic_a, topic_b, max_distance)

        result = RelationshipResult(topic_a=topic_a, topic_b=topic_b, relationship_type=kind)
        if await self._client.get_page(topic_a) is None:
            logger.debug("Topic %r does not exist, no %s results", topic_a, kind.value)
            return result

        if kind is RelationshipType.REFERENCES:
            result.results = await self._references(topic_a, topic_b)
        elif kind is RelationshipType.REFERENCED_BY:
            pages = await self._pages_referenced_by(topic_b)
            result.results = await self._blocks_mentioning(topic_a, pages)
        else:
            pages = await self._pages_linking_to(topic_b)
            result.results = await self._blocks_mentioning(topic_a, pages)
        return result

    # ===== references =====

    async def _references(self, topic_a: str, topic_b: str) -> list[Block]:
        if self._use_datalog:
            rows = await self._client.datascript_query(
                DatalogQueryBuilder.blocks_referencing(topic_a, topic_b)
            )
            blocks = [Block.from_payload(row[0] if isinstance(row, list) else row) for row in rows]
            return [b for b in blocks if b is not None]

        tree = await self._client.get_page_blocks_tree(topic_a)
        return [b for b in _flatten(tree) if mentions(b.content, topic_b)]

    # ===== page sets =====

    async def _pages_referenced_by(self, topic: str) -> list[str]:
        """Names of the pages that ``topic``'s blocks embed."""
        tree = await self._client.get_page_blocks_tree(topic)
        names: dict[str, str] = {}
        for block in _flatten(tree):
            for name in extract_references(block.content):
                names.setdefault(normalize_name(name), name)
        names.pop(normalize_name(topic), None)
        return list(names.values())

    async def _pages_linking_to(self, topic: str) -> list[str]:
        """Names of the pages holding backlinks to ``topic``."""
        backlinks = await self._client.get_backlinks(topic) or []
        names: dict[int, str] = {}
        for backlink in backlinks:
            source = backlink.source_page
            if source is None and backlink.source_page_id is not None:
                source = await self._client.get_page(backlink.source_page_id)
            if source is not None:
                names.setdefault(source.id, source.name)
        return list(names.values())

    async def _blocks_mentioning(self, topic: str, page_names: list[str]) -> list[Block]:
        results: list[Block] = []
        for page_name in page_names:
            tree = await self._client.get_page_blocks_tree(page_name)
            results.extend(b for b in _flatten(tree) if mentions(b.content, topic))
        return results

    # ===== connected-within =====

    async def _connected_within(
        self, topic_a: str, topic_b: str, max_distance: int
    ) -> RelationshipResult:
        if max_distance < 0:
            raise InvalidInputError(f"max_distance must be >= 0, got {max_distance}")

        result = RelationshipResult(
            topic_a=topic_a,
            topic_b=topic_b,
            relationship_type=RelationshipType.CONNECTED_WITHIN,
            max_distance=max_distance,
            connected=False,
        )

        root = await self._client.get_page(topic_a)
        if root is None:
            raise PageNotFoundError(topic_a)

        result.connected = await self._reachable(root, normalize_name(topic_b), max_distance)
        if result.connected:
            blocks_a = await self._client.get_page_blocks_tree(topic_a)
            blocks_b = await self._client.get_page_blocks_tree(topic_b)
            result.results = blocks_a + blocks_b
        return result

    async def _reachable(self, root: Page, target: str, max_distance: int) -> bool:
        """BFS over outbound and inbound neighbours, stopping at ``target``."""
        if root.name == target:
            return True

        visited = {root.name}
        queue: deque[tuple[str, int]] = deque([(root.name, 0)])
        while queue:
            page_name, depth = queue.popleft()
            if depth >= max_distance:
                continue

            for neighbour in await self._neighbours(page_name):
                if neighbour == target:
                    logger.debug("Reached %r from %r at depth %d", target, root.name, depth + 1)
                    return True
                if neighbour not in visited:
                    visited.add(neighbour)
                    queue.append((neighbour, depth + 1))
        return False

    async def _neighbours(self, page_name: str) -> list[str]:
        """Normalized names of pages linked to or from ``page_name``."""
        neighbours = [normalize_name(n) for n in await self._pages_referenced_by(page_name)]
        for name in await self._pages_linking_to(page_name):
            if name not in neighbours:
                neighbours.append(name)
        return neighbours


def _flatten(blocks: list[Block]) -> list[Block]:
    flat: list[Block] = []
    for block in blocks:
        flat.extend(block.walk())
    return flat
