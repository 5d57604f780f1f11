"""Tests for MCP server functionality."""

import json
import subprocess
from unittest.mock import patch

import pytest

from luamod import mcp_server


@pytest.mark.asyncio
async def test_list_tools():
    """Test that list_tools returns the luamod_locate and luamod_info tools."""
    tools = await mcp_server.list_tools()

    assert len(tools) == 2

    locate_tool = tools[0]
    assert locate_tool.name == "luamod_locate"
    assert "Lua" in locate_tool.description
    assert "target" in locate_tool.inputSchema["properties"]

    info_tool = tools[1]
    assert info_tool.name == "luamod_info"
    assert "module" in info_tool.inputSchema["properties"]
    assert info_tool.inputSchema["required"] == ["module"]


@pytest.mark.asyncio
async def test_call_tool_unknown():
    """Test that calling an unknown tool raises ValueError."""
    with pytest.raises(ValueError, match="Unknown tool"):
        await mcp_server.call_tool("nonexistent_tool", {})


@pytest.mark.asyncio
async def test_locate_formats_cli_output():
    """Test that locate results are turned into a readable sentence."""
    location = {
        "path": "src/PlayerM.lua",
        "range": {
            "start": {"line": 5, "character": 9},
            "end": {"line": 5, "character": 17},
        },
    }
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=json.dumps(location), stderr="")

    with patch("luamod.mcp_server.subprocess.run", return_value=completed) as run:
        contents = await mcp_server.call_tool("luamod_locate", {"target": "Player.getLevel"})

    run.assert_called_once()
    assert run.call_args.args[0] == ["luamod", "locate", "Player.getLevel", "--json"]
    assert contents[0].text == "'Player.getLevel' defined in src/PlayerM.lua (line 6, columns 10-17)"


@pytest.mark.asyncio
async def test_info_passes_function_name():
    """Test that the optional function argument reaches the CLI."""
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout='{"function": {"name": "getLevel"}}', stderr="")

    with patch("luamod.mcp_server.subprocess.run", return_value=completed) as run:
        contents = await mcp_server.call_tool("luamod_info", {"module": "Player", "function": "getLevel"})

    assert run.call_args.args[0] == ["luamod", "info", "Player", "getLevel", "--json"]
    assert json.loads(contents[0].text) == {"function": {"name": "getLevel"}}


@pytest.mark.asyncio
async def test_cli_error_is_reported_as_text():
    """Test that CLI failures are returned as text content."""
    error = subprocess.CalledProcessError(1, ["luamod"], stderr="Error: 'Player.fly' not found\n")

    with patch("luamod.mcp_server.subprocess.run", side_effect=error):
        contents = await mcp_server.call_tool("luamod_locate", {"target": "Player.fly"})

    assert contents[0].text == "Error running luamod locate: Error: 'Player.fly' not found"
