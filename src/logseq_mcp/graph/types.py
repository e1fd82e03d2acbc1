"""Types for the graph traversal layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from logseq_mcp.core.types import Block, Page


class LinkDirection(str, Enum):
    """Direction of a link relative to the page being expanded."""

    OUTBOUND = "outbound"  # expanded page -> other page
    INBOUND = "inbound"  # other page -> expanded page


class EdgeType(str, Enum):
    """Edge types in a concept network."""

    REFERENCE = "reference"
    BACKLINK = "backlink"

    @classmethod
    def for_direction(cls, direction: LinkDirection) -> "EdgeType":
        return cls.REFERENCE if direction is LinkDirection.OUTBOUND else cls.BACKLINK


class RelationshipType(str, Enum):
    """Kinds of relationship search between two topics."""

    REFERENCES = "references"  # blocks on A that embed B
    REFERENCED_BY = "referenced-by"  # blocks mentioning A in pages B references
    IN_PAGES_LINKING_TO = "in-pages-linking-to"  # blocks mentioning A in pages linking to B
    CONNECTED_WITHIN = "connected-within"  # B reachable from A within N hops


class StepStatus(str, Enum):
    """Outcome of a best-effort aggregation step."""

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class NetworkNode:
    """A page discovered during traversal, tagged with its BFS depth."""

    id: int
    name: str
    depth: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "depth": self.depth}


@dataclass(frozen=True)
class NetworkEdge:
    """A directed link between two pages of a concept network."""

    source: int  # page id
    target: int  # page id
    type: EdgeType

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.source, "to": self.target, "type": self.type.value}


@dataclass
class ConceptNetwork:
    """Nodes and edges reachable from a root page within a hop limit."""

    concept: str
    nodes: list[NetworkNode] = field(default_factory=list)
    edges: list[NetworkEdge] = field(default_factory=list)

    @property
    def root(self) -> NetworkNode | None:
        return next((n for n in self.nodes if n.depth == 0), None)

    @property
    def node_ids(self) -> set[int]:
        return {n.id for n in self.nodes}

    def depth_of(self, page_id: int) -> int | None:
        for node in self.nodes:
            if node.id == page_id:
                return node.depth
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "concept": self.concept,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class RelatedPage:
    """A page related to a topic, with the direction of the link."""

    page: Page
    relationship_type: LinkDirection
    distance: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page.to_dict(),
            "relationship_type": self.relationship_type.value,
            "distance": self.distance,
        }


@dataclass
class Reference:
    """A block on another page that references the topic."""

    block: Block
    source_page: Page | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "block": self.block.to_dict(),
            "source_page": self.source_page.to_dict() if self.source_page else None,
        }


@dataclass
class TemporalContext:
    """Journal information for a topic page."""

    is_journal: bool
    date: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"is_journal": self.is_journal}
        if self.is_journal:
            result["date"] = self.date
        return result


@dataclass
class StepOutcome:
    """Whether a best-effort step produced data, found none, or failed."""

    status: StepStatus
    error: str | None = None

    @classmethod
    def from_items(cls, items: list[Any]) -> "StepOutcome":
        return cls(StepStatus.OK if items else StepStatus.EMPTY)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status.value}
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class TopicContext:
    """Everything known about a topic page, assembled per request."""

    topic: str
    main_page: Page
    direct_blocks: list[Block] = field(default_factory=list)
    related_pages: list[RelatedPage] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    temporal_context: TemporalContext | None = None
    diagnostics: dict[str, StepOutcome] = field(default_factory=dict)

    @property
    def summary(self) -> dict[str, Any]:
        """Counts derived from the collections, never stored separately."""
        return {
            "total_blocks": len(self.direct_blocks),
            "total_related_pages": len(self.related_pages),
            "total_references": len(self.references),
            "page_properties": self.main_page.properties,
        }

    def as_text(self) -> str:
        """Format as a short human-readable report."""
        lines = [
            f"Topic: {self.main_page.display_name}",
            "=" * 50,
            f"Blocks: {len(self.direct_blocks)}",
            f"Related pages: {len(self.related_pages)}",
            f"References: {len(self.references)}",
        ]
        if self.temporal_context and self.temporal_context.is_journal:
            lines.append(f"Journal date: {self.temporal_context.date}")

        if self.related_pages:
            lines.append("")
            lines.append("Related pages:")
            for related in self.related_pages[:5]:
                lines.append(
                    f"  - {related.page.display_name} ({related.relationship_type.value})"
                )
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "topic": self.topic,
            "main_page": self.main_page.to_dict(),
            "direct_blocks": [b.to_dict() for b in self.direct_blocks],
            "related_pages": [r.to_dict() for r in self.related_pages],
            "references": [r.to_dict() for r in self.references],
            "summary": self.summary,
            "diagnostics": {k: v.to_dict() for k, v in self.diagnostics.items()},
        }
        if self.temporal_context is not None:
            result["temporal_context"] = self.temporal_context.to_dict()
        return result


@dataclass
class RelationshipResult:
    """Blocks that evidence a relationship between two topics."""

    topic_a: str
    topic_b: str
    relationship_type: RelationshipType
    results: list[Block] = field(default_factory=list)
    max_distance: int | None = None
    connected: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        query: dict[str, Any] = {
            "topic_a": self.topic_a,
            "topic_b": self.topic_b,
            "relationship_type": self.relationship_type.value,
        }
        if self.max_distance is not None:
            query["max_distance"] = self.max_distance
        result: dict[str, Any] = {
            "query": query,
            "relationship_type": self.relationship_type.value,
            "results": [b.to_dict() for b in self.results],
        }
        if self.connected is not None:
            result["connected"] = self.connected
        return result


@dataclass
class RelatedPagesResult:
    """Pages one hop away from a source page."""

    source_page: Page
    related_pages: list[RelatedPage] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_page": self.source_page.to_dict(),
            "related_pages": [
                {
                    "page": r.page.to_dict(),
                    "relationship_type": f"{r.relationship_type.value}-reference",
                    "distance": r.distance,
                }
                for r in self.related_pages
            ],
        }


@dataclass
class QueryContext:
    """Context gathered for a free-text question."""

    query: str
    extracted_topics: list[str] = field(default_factory=list)
    contexts: list[TopicContext] = field(default_factory=list)
    search_results: list[Block] | None = None

    @property
    def summary(self) -> dict[str, int]:
        total_blocks = sum(len(c.direct_blocks) for c in self.contexts)
        total_blocks += len(self.search_results or [])
        page_ids = set()
        for ctx in self.contexts:
            page_ids.add(ctx.main_page.id)
            page_ids.update(r.page.id for r in ctx.related_pages)
        return {
            "total_topics": len(self.contexts),
            "total_blocks": total_blocks,
            "total_pages": len(page_ids),
        }

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "query": self.query,
            "extracted_topics": self.extracted_topics,
            "contexts": [c.to_dict() for c in self.contexts],
            "summary": self.summary,
        }
        if self.search_results is not None:
            result["search_results"] = [b.to_dict() for b in self.search_results]
        return result
