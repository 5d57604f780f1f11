"""MCP server that exposes luamod lookups as tools.

This server wraps the `luamod` CLI tool, giving structured access to the
module index through the Model Context Protocol.
"""

import json
import subprocess
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent


# Initialize MCP server
app = Server("luamod")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """Declare available tools."""
    return [
        Tool(
            name="luamod_locate",
            description=(
                "Find where a function of a Lua module(...) file is defined. "
                "Returns the file path and the line/column range of the function name."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "target": {
                        "type": "string",
                        "description": "Function in format 'Module.function' (e.g., 'PlayerM.getLevel')",
                    }
                },
                "required": ["target"],
            },
        ),
        Tool(
            name="luamod_info",
            description=(
                "Get the indexed functions of a Lua module, or detailed information "
                "about one function: signature, description, documented parameters "
                "and return values."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "module": {
                        "type": "string",
                        "description": "Module name (case-insensitive), e.g. 'PlayerM'",
                    },
                    "function": {
                        "type": "string",
                        "description": "Optional function name within the module",
                    },
                },
                "required": ["module"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls by routing to appropriate CLI commands."""
    if name == "luamod_locate":
        return await _handle_locate(arguments["target"])
    elif name == "luamod_info":
        return await _handle_info(arguments["module"], arguments.get("function"))

    raise ValueError(f"Unknown tool: {name}")


def _run_cli(args: list[str]) -> Any:
    """Run the luamod CLI and parse its JSON output."""
    result = subprocess.run(
        ["luamod", *args, "--json"],
        capture_output=True,
        text=True,
        check=True,
    )
    return json.loads(result.stdout)


def _error(message: str) -> list[TextContent]:
    return [TextContent(type="text", text=message)]


async def _handle_locate(target: str) -> list[TextContent]:
    """Handle luamod_locate tool calls.

    Args:
        target: Function in format "Module.function"

    Returns:
        List containing a single TextContent describing the location
    """
    try:
        location = _run_cli(["locate", target])

        start = location["range"]["start"]
        end = location["range"]["end"]
        return [
            TextContent(
                type="text",
                text=(
                    f"'{target}' defined in {location['path']} "
                    f"(line {start['line'] + 1}, columns {start['character'] + 1}-{end['character']})"
                ),
            )
        ]

    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip() if e.stderr else str(e)
        return _error(f"Error running luamod locate: {error_msg}")
    except json.JSONDecodeError as e:
        return _error(f"Error parsing luamod output: {e}")
    except Exception as e:
        return _error(f"Unexpected error: {e}")


async def _handle_info(module: str, function: str | None = None) -> list[TextContent]:
    """Handle luamod_info tool calls.

    Args:
        module: Module name
        function: Function name, or None for the whole module

    Returns:
        List containing a single TextContent with JSON results
    """
    args = ["info", module]
    if function:
        args.append(function)

    try:
        info = _run_cli(args)

        return [
            TextContent(
                type="text",
                text=json.dumps(info, indent=2),
            )
        ]

    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip() if e.stderr else str(e)
        return _error(f"Error running luamod info: {error_msg}")
    except json.JSONDecodeError as e:
        return _error(f"Error parsing luamod output: {e}")
    except Exception as e:
        return _error(f"Unexpected error: {e}")


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
