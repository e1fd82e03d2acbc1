"""Logseq HTTP API client and its configuration."""

from logseq_mcp.clients.config import (
    DEFAULT_API_URL,
    DEFAULT_CONFIG_PATH,
    FeatureFlags,
    LogseqConfig,
    load_config,
)
from logseq_mcp.clients.logseq import LogseqClient

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_CONFIG_PATH",
    "FeatureFlags",
    "LogseqClient",
    "LogseqConfig",
    "load_config",
]
