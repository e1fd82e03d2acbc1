"""Server configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from logseq_mcp.clients.config import LogseqConfig


@dataclass
class ServerConfig:
    """Configuration for the Logseq graph server."""

    logseq: LogseqConfig

    # Mode: "mcp" (stdio tools) or "rest"
    mode: str = "mcp"

    # Network (REST mode)
    host: str = "127.0.0.1"
    port: int = 8430

    # CORS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
