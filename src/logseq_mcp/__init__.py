"""Logseq graph bridge: traverse a Logseq knowledge graph over MCP and REST."""

from logseq_mcp.clients import FeatureFlags, LogseqClient, LogseqConfig, load_config
from logseq_mcp.service import LogseqGraph

__version__ = "0.1.0"

__all__ = [
    "FeatureFlags",
    "LogseqClient",
    "LogseqConfig",
    "LogseqGraph",
    "load_config",
]
