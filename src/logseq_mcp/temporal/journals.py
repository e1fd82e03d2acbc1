"""Journal range queries and timelines."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from logseq_mcp.core.exceptions import InvalidInputError
from logseq_mcp.core.types import Block, Page
from logseq_mcp.graph.queries import SimpleQueryBuilder
from logseq_mcp.temporal.dates import (
    is_valid_date_key,
    month_identifier,
    week_identifier,
)
from logseq_mcp.temporal.types import (
    ConceptEvolution,
    DateRangeResult,
    EntityTimeline,
    GroupBy,
    JournalEntry,
    TimelineEntry,
)

if TYPE_CHECKING:
    from logseq_mcp.clients.logseq import LogseqClient

logger = logging.getLogger(__name__)


def _check_date_key(key: int | None) -> None:
    if key is not None and not is_valid_date_key(key):
        raise InvalidInputError(f"Invalid date format: {key}")


def _in_range(day: int | None, start: int | None, end: int | None) -> bool:
    """Undated blocks are always in range."""
    if day is None:
        return True
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


class JournalExplorer:
    """Query journal pages and build timelines of concepts.

    Example:
        >>> journals = JournalExplorer(client)
        >>> week = await journals.query_by_date_range(20250101, 20250107)
        >>> evolution = await journals.get_concept_evolution("Python", group_by="month")
    """

    def __init__(self, client: "LogseqClient") -> None:
        self._client = client

    async def query_by_date_range(
        self,
        start: int,
        end: int,
        search_term: str | None = None,
    ) -> DateRangeResult:
        """Journal pages between ``start`` and ``end`` (inclusive) with their blocks.

        With ``search_term``, only blocks containing it (case-insensitive)
        are kept and days without a match are dropped.

        Raises:
            InvalidInputError: malformed date key or ``start > end``
        """
        if not is_valid_date_key(start):
            raise InvalidInputError(f"Invalid date format: {start}")
        if not is_valid_date_key(end):
            raise InvalidInputError(f"Invalid date format: {end}")
        if start > end:
            raise InvalidInputError("Start date must be before or equal to end date")

        pages = await self._client.get_all_pages()
        journals = [
            p for p in pages
            if p.is_journal and p.journal_day is not None and start <= p.journal_day <= end
        ]
        journals.sort(key=lambda p: p.journal_day)

        result = DateRangeResult(start=start, end=end, search_term=search_term)
        term = search_term.lower() if search_term else None
        for page in journals:
            blocks = await self._client.get_page_blocks_tree(page.name)
            if term:
                blocks = [b for b in blocks if term in b.content.lower()]
                if not blocks:
                    continue
            result.entries.append(JournalEntry(date=page.journal_day, page=page, blocks=blocks))

        logger.debug("%d journal days between %d and %d", len(result.entries), start, end)
        return result

    async def get_concept_evolution(
        self,
        concept: str,
        start: int | None = None,
        end: int | None = None,
        group_by: GroupBy | str | None = None,
    ) -> ConceptEvolution:
        """Track mentions of ``concept`` over time.

        Blocks on the concept's own page and blocks embedding ``[[concept]]``
        are merged. Blocks off the journals are kept regardless of the date
        bounds.

        Raises:
            InvalidInputError: malformed date key or unknown ``group_by``
        """
        _check_date_key(start)
        _check_date_key(end)
        period: GroupBy | None = None
        if group_by is not None:
            try:
                period = GroupBy(group_by)
            except ValueError:
                raise InvalidInputError(f"Invalid group_by: {group_by!r}") from None

        evolution = ConceptEvolution(concept=concept)
        evolution.entries = await self._dated_mentions(concept, start, end)

        if period is not None:
            evolution.grouped = {}
            for entry in evolution.entries:
                if entry.date is None:
                    continue
                if period is GroupBy.WEEK:
                    key = week_identifier(entry.date)
                elif period is GroupBy.MONTH:
                    key = month_identifier(entry.date)
                else:
                    key = str(entry.date)
                evolution.grouped.setdefault(key, []).append(entry.block)
        return evolution

    async def get_entity_timeline(
        self,
        entity: str,
        start: int | None = None,
        end: int | None = None,
    ) -> EntityTimeline:
        """Blocks about ``entity`` sorted by journal day, undated ones last."""
        _check_date_key(start)
        _check_date_key(end)

        entries = await self._dated_mentions(entity, start, end)
        entries.sort(key=lambda e: (e.date is None, e.date or 0))
        return EntityTimeline(entity=entity, timeline=entries)

    async def _dated_mentions(
        self, name: str, start: int | None, end: int | None
    ) -> list[TimelineEntry]:
        blocks = await self._client.get_page_blocks_tree(name)
        rows = await self._client.q(SimpleQueryBuilder.page_mention(name))
        blocks += [b for b in (Block.from_payload(r) for r in rows) if b is not None]

        unique: dict[int, Block] = {}
        for block in blocks:
            unique.setdefault(block.id, block)

        pages: dict[int, Page | None] = {}
        entries: list[TimelineEntry] = []
        for block in unique.values():
            day = await self._journal_day(block, pages)
            if _in_range(day, start, end):
                entries.append(TimelineEntry(date=day, block=block))
        return entries

    async def _journal_day(self, block: Block, pages: dict[int, Page | None]) -> int | None:
        """Journal day of the block's page, fetching the page when only its id is known."""
        if block.page is not None:
            return block.page.journal_day
        if block.page_id is None:
            return None
        if block.page_id not in pages:
            pages[block.page_id] = await self._client.get_page(block.page_id)
        page = pages[block.page_id]
        return page.journal_day if page is not None else None
