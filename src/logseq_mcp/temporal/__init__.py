"""Journal date helpers and timeline queries."""

from logseq_mcp.temporal.dates import (
    add_days,
    date_range,
    format_date_key,
    is_valid_date_key,
    is_weekend,
    month_identifier,
    parse_date_key,
    week_identifier,
    week_number,
)
from logseq_mcp.temporal.journals import JournalExplorer
from logseq_mcp.temporal.types import (
    ConceptEvolution,
    DateRangeResult,
    EntityTimeline,
    GroupBy,
    JournalEntry,
    TimelineEntry,
)

__all__ = [
    "ConceptEvolution",
    "DateRangeResult",
    "EntityTimeline",
    "GroupBy",
    "JournalEntry",
    "JournalExplorer",
    "TimelineEntry",
    "add_days",
    "date_range",
    "format_date_key",
    "is_valid_date_key",
    "is_weekend",
    "month_identifier",
    "parse_date_key",
    "week_identifier",
    "week_number",
]
