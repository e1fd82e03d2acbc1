"""MCP and REST servers for the Logseq graph bridge."""
