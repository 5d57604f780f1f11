from pathlib import Path

from luamod.parsers.base import BaseParser
from luamod.parsers.lua_parser import DEFAULT_COMMENT_LOOKBACK, LuaModuleParser
from luamod.repository import DEFAULT_SUFFIXES, is_module_file


def get_parser_for_file(
    file_path: Path,
    suffixes=DEFAULT_SUFFIXES,
    comment_lookback: int = DEFAULT_COMMENT_LOOKBACK
) -> BaseParser | None:
    """Return the indexer for a module file, or None for any other file."""
    if is_module_file(Path(file_path), suffixes):
        return LuaModuleParser(comment_lookback=comment_lookback)
    return None
