"""CLI entrypoint: python -m logseq_mcp.server"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from logseq_mcp.clients.config import DEFAULT_CONFIG_PATH, load_config
from logseq_mcp.core.exceptions import ConfigError
from logseq_mcp.server.config import ServerConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="logseq-mcp",
        description="Logseq graph server: MCP tools over stdio, or a REST API",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH,
                    help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--mode", choices=["mcp", "rest"], default="mcp",
                    help="Server mode (default: mcp)")
    p.add_argument("--host", default="127.0.0.1", help="REST bind host (default: 127.0.0.1)")
    p.add_argument("--port", type=int, default=8430, help="REST bind port (default: 8430)")

    # Logging
    p.add_argument("--log-level", default="INFO",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        logseq=load_config(args.config),
        mode=args.mode,
        host=args.host,
        port=args.port,
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    # stdout carries the MCP protocol, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        config = build_config(args)
    except ConfigError as e:
        logging.getLogger(__name__).error("%s", e)
        sys.exit(1)

    if config.mode == "mcp":
        _run_mcp(config)
    else:
        _run_rest(config)


def _run_rest(config: ServerConfig) -> None:
    import uvicorn

    from logseq_mcp.server.rest.app import create_app

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port)


def _run_mcp(config: ServerConfig) -> None:
    from logseq_mcp.server.mcp.server import create_mcp_server

    server = create_mcp_server(config)
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
