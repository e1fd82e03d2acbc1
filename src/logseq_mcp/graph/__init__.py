"""Graph traversal, relationship search and context aggregation."""

from logseq_mcp.graph.context import ContextBuilder, ContextOptions
from logseq_mcp.graph.network import (
    DatalogTraversal,
    NetworkTraversal,
    SequentialTraversal,
    create_traversal,
)
from logseq_mcp.graph.queries import DatalogQueryBuilder, SimpleQueryBuilder
from logseq_mcp.graph.query_context import extract_topics, get_context_for_query
from logseq_mcp.graph.related import get_related_pages
from logseq_mcp.graph.relationships import RelationshipSearch
from logseq_mcp.graph.types import (
    ConceptNetwork,
    EdgeType,
    LinkDirection,
    NetworkEdge,
    NetworkNode,
    QueryContext,
    Reference,
    RelatedPage,
    RelatedPagesResult,
    RelationshipResult,
    RelationshipType,
    StepOutcome,
    StepStatus,
    TemporalContext,
    TopicContext,
)

__all__ = [
    # Types
    "ConceptNetwork",
    "EdgeType",
    "LinkDirection",
    "NetworkEdge",
    "NetworkNode",
    "QueryContext",
    "Reference",
    "RelatedPage",
    "RelatedPagesResult",
    "RelationshipResult",
    "RelationshipType",
    "StepOutcome",
    "StepStatus",
    "TemporalContext",
    "TopicContext",
    # Queries
    "DatalogQueryBuilder",
    "SimpleQueryBuilder",
    # Traversal
    "DatalogTraversal",
    "NetworkTraversal",
    "SequentialTraversal",
    "create_traversal",
    # Composite operations
    "ContextBuilder",
    "ContextOptions",
    "RelationshipSearch",
    "extract_topics",
    "get_context_for_query",
    "get_related_pages",
]
