"""Types for journal and timeline queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from logseq_mcp.core.types import Block, Page


class GroupBy(str, Enum):
    """Period used to bucket a concept timeline."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass
class JournalEntry:
    """One journal day and its blocks."""

    date: int
    page: Page
    blocks: list[Block] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "page": self.page.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
        }


@dataclass
class DateRangeResult:
    """Journal entries between two date keys."""

    start: int
    end: int
    entries: list[JournalEntry] = field(default_factory=list)
    search_term: str | None = None

    @property
    def summary(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "total_days": len(self.entries),
            "total_blocks": sum(len(e.blocks) for e in self.entries),
        }
        if self.search_term:
            result["search_term"] = self.search_term
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "date_range": {"start": self.start, "end": self.end},
            "entries": [e.to_dict() for e in self.entries],
            "summary": self.summary,
        }


@dataclass
class TimelineEntry:
    """A block placed on a timeline; ``date`` is None off the journals."""

    date: int | None
    block: Block

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "block": self.block.to_dict()}


@dataclass
class ConceptEvolution:
    """How mentions of a concept are spread over time."""

    concept: str
    entries: list[TimelineEntry] = field(default_factory=list)
    grouped: dict[str, list[Block]] | None = None

    @property
    def timeline(self) -> list[tuple[int | None, list[Block]]]:
        """Blocks bucketed by journal day, dated buckets first."""
        buckets: dict[int | None, list[Block]] = {}
        for entry in self.entries:
            buckets.setdefault(entry.date, []).append(entry.block)
        return sorted(buckets.items(), key=lambda item: (item[0] is None, item[0] or 0))

    @property
    def summary(self) -> dict[str, Any]:
        dates = [e.date for e in self.entries if e.date is not None]
        return {
            "total_mentions": len(self.entries),
            "date_range": {
                "earliest": min(dates) if dates else None,
                "latest": max(dates) if dates else None,
            },
            "journal_mentions": len(dates),
            "non_journal_mentions": len(self.entries) - len(dates),
        }

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "concept": self.concept,
            "timeline": [
                {"date": day, "blocks": [b.to_dict() for b in blocks]}
                for day, blocks in self.timeline
            ],
            "summary": self.summary,
        }
        if self.grouped is not None:
            result["grouped_timeline"] = {
                key: [b.to_dict() for b in blocks] for key, blocks in self.grouped.items()
            }
        return result


@dataclass
class EntityTimeline:
    """Blocks about an entity ordered by journal day."""

    entity: str
    timeline: list[TimelineEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"entity": self.entity, "timeline": [e.to_dict() for e in self.timeline]}
