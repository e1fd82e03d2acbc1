"""Core types, exceptions and helpers."""

from logseq_mcp.core.exceptions import (
    BlockNotFoundError,
    ConfigError,
    InvalidInputError,
    LogseqError,
    LogseqProtocolError,
    LogseqRemoteError,
    LogseqUnreachableError,
    NotFoundError,
    PageNotFoundError,
)
from logseq_mcp.core.types import Backlink, Block, GraphInfo, Page
from logseq_mcp.core.utils import extract_references, mentions, normalize_name

__all__ = [
    # Types
    "Backlink",
    "Block",
    "GraphInfo",
    "Page",
    # Exceptions
    "BlockNotFoundError",
    "ConfigError",
    "InvalidInputError",
    "LogseqError",
    "LogseqProtocolError",
    "LogseqRemoteError",
    "LogseqUnreachableError",
    "NotFoundError",
    "PageNotFoundError",
    # Helpers
    "extract_references",
    "mentions",
    "normalize_name",
]
