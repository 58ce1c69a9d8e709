# Pilosa HTTP Client
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint for the Pilosa MCP server.

This is the script behind the ``pilosa-mcp`` console command.

It:

- creates a FastMCP server,
- registers the Pilosa client tools, and
- runs the built-in stdio transport.
"""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from ..tools import tasks


def main() -> None:
    """Synchronous entrypoint for console_scripts."""
    # stdout carries the MCP protocol; logs go to stderr.
    logging.basicConfig(level=logging.INFO)

    mcp = FastMCP("pilosa-mcp")

    # Register core tools (ping, schema, create/delete, query, diagnostics)
    tasks.register_tools(mcp)

    # Let FastMCP handle stdio + event loop setup.
    mcp.run()


if __name__ == "__main__":
    main()
