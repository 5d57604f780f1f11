"""luamod - index and convert Lua module(...) files."""

try:
    from importlib.metadata import version

    __version__ = version("luamod")
except Exception:
    __version__ = "0.0.0.dev0+local"  # Fallback for development
