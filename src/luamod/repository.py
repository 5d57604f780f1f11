"""Discovery of Lua module files on disk."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SUFFIXES = ("M.lua", "Util.lua")


class ProjectRootNotFoundError(Exception):
    """Raised when the requested project root is not a directory."""


def resolve_root(root: Path | None = None) -> Path:
    """Return an absolute project root, defaulting to the current directory.

    Raises:
        ProjectRootNotFoundError: If the path is not an existing directory
    """
    if root is None:
        root = Path.cwd()

    root = root.resolve()
    if not root.is_dir():
        raise ProjectRootNotFoundError(f"Project root not found: {root}")

    return root


def is_module_file(path: Path, suffixes=DEFAULT_SUFFIXES) -> bool:
    """Check whether a file name marks it as a Lua module file.

    The suffix match is case-sensitive: `PlayerM.lua` and `StringUtil.lua`
    qualify, `playerm.lua` and `Player.LUA` do not.
    """
    return path.suffix == ".lua" and path.name.endswith(tuple(suffixes))


def find_module_files(directory: Path, suffixes=DEFAULT_SUFFIXES) -> list[Path]:
    """Recursively collect module files below a directory.

    Args:
        directory: Directory to search
        suffixes: File name endings that mark a module file

    Returns:
        Sorted list of matching file paths (empty if the directory is missing)
    """
    if not directory.is_dir():
        logger.warning(f"Module directory not found, skipping: {directory}")
        return []

    files = []
    for path in directory.rglob("*.lua"):
        # Skip hidden directories
        if any(part.startswith(".") for part in path.relative_to(directory).parts):
            continue
        if path.is_file() and is_module_file(path, suffixes):
            logger.debug(f"Found module file {path}")
            files.append(path)

    return sorted(files)
