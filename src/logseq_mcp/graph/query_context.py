"""Context gathering for free-text questions."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from logseq_mcp.core.exceptions import LogseqError, NotFoundError
from logseq_mcp.core.types import Block
from logseq_mcp.graph.context import ContextBuilder, ContextOptions
from logseq_mcp.graph.queries import SimpleQueryBuilder
from logseq_mcp.graph.types import QueryContext

if TYPE_CHECKING:
    from logseq_mcp.clients.logseq import LogseqClient

logger = logging.getLogger(__name__)

_PAGE_REF_RE = re.compile(r"\[\[([^\]]+)\]\]")
_TAG_RE = re.compile(r"#(?!\[\[)([^\s#]+)")

STOPWORDS = frozenset({
    "what", "when", "where", "who", "why", "how",
    "the", "a", "an", "is", "are", "was", "were",
    "do", "does", "did", "can", "could", "should",
    "would", "in", "on", "at", "to", "for", "of",
    "with", "about", "by",
})

# Per-topic caps are smaller than a standalone context build
TOPIC_OPTIONS = ContextOptions(max_blocks=10, max_related_pages=5, max_references=10)


def extract_topics(query: str) -> list[str]:
    """Page references first, then tags; duplicates dropped, order kept."""
    topics = [m.group(1).strip() for m in _PAGE_REF_RE.finditer(query)]
    topics += [m.group(1) for m in _TAG_RE.finditer(query)]
    return list(dict.fromkeys(t for t in topics if t))


def extract_keywords(query: str, limit: int = 3) -> list[str]:
    """Non-stopword words longer than three characters."""
    words = (w.strip("?!.,;:\"'()") for w in query.lower().split())
    return [w for w in words if len(w) > 3 and w not in STOPWORDS][:limit]


async def get_context_for_query(
    client: "LogseqClient",
    query: str,
    builder: ContextBuilder | None = None,
    max_topics: int = 5,
    max_search_results: int = 20,
) -> QueryContext:
    """Gather context for a natural language question.

    Explicit ``[[page]]`` references and ``#tags`` in the question each get a
    small topic context; topics without a page are skipped. A question with
    no topics falls back to a keyword block search.

    Args:
        client: Logseq API client
        query: The question text
        builder: Context builder to use (default: sequential strategy)
        max_topics: Maximum number of topics to build contexts for
        max_search_results: Cap on keyword search results

    Returns:
        QueryContext with per-topic contexts or search results
    """
    builder = builder or ContextBuilder(client)
    result = QueryContext(query=query, extracted_topics=extract_topics(query))

    for topic in result.extracted_topics[:max_topics]:
        try:
            result.contexts.append(await builder.build(topic, TOPIC_OPTIONS))
        except NotFoundError as e:
            logger.info("Skipping topic %r: %s", topic, e)

    if not result.extracted_topics:
        keywords = extract_keywords(query)
        if keywords:
            result.search_results = await _keyword_search(client, keywords, max_search_results)

    return result


async def _keyword_search(
    client: "LogseqClient", keywords: list[str], limit: int
) -> list[Block]:
    try:
        rows = await client.q(SimpleQueryBuilder.block_content(*keywords))
    except LogseqError as e:
        logger.warning("Keyword search for %s failed: %s", keywords, e, exc_info=True)
        return []
    blocks = [Block.from_payload(row) for row in rows]
    return [b for b in blocks if b is not None][:limit]
