"""
MCP server for codenav.

Exposes code navigation tools to LLMs via the Model Context Protocol.

Tools:
    - codenav_type_hierarchy: Supertypes and subtypes of a type
    - codenav_call_hierarchy: Callers or callees of a function
    - codenav_implementations: Overriding methods and implementing types
    - codenav_super_methods: Methods a method overrides
    - codenav_find_symbol: Search for declarations
    - codenav_languages: Languages supported per capability

Usage:
    Run: mcp-server-codenav (from a directory indexed with 'codenav index .')
"""

import asyncio

from codenav.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
