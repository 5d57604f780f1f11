"""Configuration management for luamod indexing."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

CONFIG_FILE_NAME = ".luamod"


@dataclass
class IndexConfig:
    """Configuration for module discovery and doc-comment scanning.

    Attributes:
        module_dirs: Directories (relative to the root) searched for module files.
        file_suffixes: File name endings that mark a module file (case-sensitive).
        comment_lookback: Maximum number of lines scanned upward for a
            function's doc comment.
    """
    module_dirs: list[str] = field(default_factory=lambda: ["src"])
    file_suffixes: list[str] = field(default_factory=lambda: ["M.lua", "Util.lua"])
    comment_lookback: int = 10

    def module_paths(self, root: Path) -> list[Path]:
        """Resolve module_dirs against the given root."""
        return [root / module_dir for module_dir in self.module_dirs]


def _string_list(value, default: list[str]) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    return default


def load_index_config(root: Path | None = None) -> IndexConfig:
    """Load index configuration from .luamod file in the project root.

    Args:
        root: Path to project root. If None, uses current directory.

    Returns:
        IndexConfig object with loaded or default values.

    Notes:
        If .luamod file doesn't exist or can't be parsed, returns default config.
        Expected YAML structure:

        ```yaml
        index:
          module_dirs: [src]
          file_suffixes: [M.lua, Util.lua]
          comment_lookback: 10
        ```
    """
    if root is None:
        root = Path.cwd()

    config_path = root / CONFIG_FILE_NAME

    if not config_path.exists():
        return IndexConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            return IndexConfig()

        index_config = data.get("index", {})
        if not isinstance(index_config, dict):
            return IndexConfig()

        defaults = IndexConfig()

        comment_lookback = index_config.get("comment_lookback", defaults.comment_lookback)
        if not isinstance(comment_lookback, int) or comment_lookback < 0:
            comment_lookback = defaults.comment_lookback

        return IndexConfig(
            module_dirs=_string_list(
                index_config.get("module_dirs"),
                defaults.module_dirs
            ),
            file_suffixes=_string_list(
                index_config.get("file_suffixes"),
                defaults.file_suffixes
            ),
            comment_lookback=comment_lookback,
        )
    except (yaml.YAMLError, OSError, KeyError, TypeError, ValueError):
        # Return default config on any parsing errors
        return IndexConfig()
