"""MCP server implementation for codenav."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from codenav.core.config import Limits, get_default_snapshot_path
from codenav.core.exceptions import CodeNavError
from codenav.navigator import Navigator

server = Server("codenav")

SNAPSHOT_ENV = "CODENAV_SNAPSHOT"

_TARGET_PROPERTIES: dict[str, Any] = {
    "symbol": {
        "type": "string",
        "description": "Qualified or simple name of the element (e.g. 'Shape.area')",
    },
    "file": {
        "type": "string",
        "description": "File containing the element (alternative to 'symbol')",
    },
    "line": {
        "type": "integer",
        "description": "1-based line of the element in 'file'",
    },
    "column": {
        "type": "integer",
        "description": "Column of the element in 'file' (default: 0)",
        "default": 0,
    },
}


def _get_navigator() -> Navigator:
    """Navigator over the snapshot for the current directory."""
    override = os.environ.get(SNAPSHOT_ENV)
    path = Path(override) if override else get_default_snapshot_path(Path.cwd())
    return Navigator.from_snapshot(path.resolve(), limits=Limits.from_env())


def _resolve(nav: Navigator, arguments: dict[str, Any]) -> Any:
    return nav.resolve(
        arguments.get("symbol"),
        arguments.get("file"),
        arguments.get("line"),
        arguments.get("column", 0),
    )


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="codenav_type_hierarchy",
            description=(
                "Show the supertypes (recursively) and subtypes of a class, interface "
                "or struct. Works for Java, Kotlin, Python, JavaScript, TypeScript and Go."
            ),
            inputSchema={"type": "object", "properties": _TARGET_PROPERTIES},
        ),
        Tool(
            name="codenav_call_hierarchy",
            description=(
                "Build a tree of callers (who calls this?) or callees (what does this "
                "call?) of a function or method. Callers include calls made through "
                "the methods it overrides."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    **_TARGET_PROPERTIES,
                    "direction": {
                        "type": "string",
                        "enum": ["callers", "callees"],
                        "description": "Which way to walk the call graph",
                    },
                    "depth": {
                        "type": "integer",
                        "description": "Maximum nesting depth (default: 3)",
                        "default": 3,
                    },
                },
                "required": ["direction"],
            },
        ),
        Tool(
            name="codenav_implementations",
            description=(
                "Find overriding methods of a method, or implementations and "
                "subclasses of a type."
            ),
            inputSchema={"type": "object", "properties": _TARGET_PROPERTIES},
        ),
        Tool(
            name="codenav_super_methods",
            description=(
                "List the methods a method overrides or implements, nearest first, "
                "with their depth in the hierarchy."
            ),
            inputSchema={"type": "object", "properties": _TARGET_PROPERTIES},
        ),
        Tool(
            name="codenav_find_symbol",
            description=(
                "Search for types, functions, methods and fields by name. Supports "
                "substring and camel-case matching (e.g. 'USvc' finds 'UserService')."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query",
                    },
                    "include_libraries": {
                        "type": "boolean",
                        "description": "Also search library declarations (default: false)",
                        "default": False,
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum results (default: 20)",
                        "default": 20,
                    },
                },
                "required": ["query"],
            },
        ),
        Tool(
            name="codenav_languages",
            description="List the languages each navigation capability supports.",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "codenav_type_hierarchy":
            result = _handle_type_hierarchy(arguments)
        elif name == "codenav_call_hierarchy":
            result = _handle_call_hierarchy(arguments)
        elif name == "codenav_implementations":
            result = _handle_implementations(arguments)
        elif name == "codenav_super_methods":
            result = _handle_super_methods(arguments)
        elif name == "codenav_find_symbol":
            result = _handle_find_symbol(arguments)
        elif name == "codenav_languages":
            result = _handle_languages()
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except (CodeNavError, ValueError) as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]


def _handle_type_hierarchy(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle codenav_type_hierarchy tool."""
    nav = _get_navigator()
    result = nav.type_hierarchy(_resolve(nav, arguments))
    if result is None:
        return {"error": "No class or interface at the given location"}
    return result.to_dict()


def _handle_call_hierarchy(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle codenav_call_hierarchy tool."""
    nav = _get_navigator()
    result = nav.call_hierarchy(
        _resolve(nav, arguments),
        arguments.get("direction", "callers"),
        int(arguments.get("depth", 3)),
    )
    if result is None:
        return {"error": "No function or method at the given location"}
    return result.to_dict()


def _handle_implementations(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle codenav_implementations tool."""
    nav = _get_navigator()
    result = nav.implementations(_resolve(nav, arguments))
    if result is None:
        return {"error": "No method or type at the given location"}
    return {"implementations": [impl.to_dict() for impl in result]}


def _handle_super_methods(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle codenav_super_methods tool."""
    nav = _get_navigator()
    result = nav.super_methods(_resolve(nav, arguments))
    if result is None:
        return {"error": "No method at the given location"}
    return result.to_dict()


def _handle_find_symbol(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle codenav_find_symbol tool."""
    matches = _get_navigator().find_symbols(
        arguments.get("query", ""),
        bool(arguments.get("include_libraries", False)),
        int(arguments.get("limit", 20)),
    )
    return {"results": [m.to_dict() for m in matches]}


def _handle_languages() -> dict[str, Any]:
    """Handle codenav_languages tool."""
    return {"capabilities": _get_navigator().languages()}


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
