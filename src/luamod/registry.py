"""In-memory index of every module file under the configured directories."""

import logging
from pathlib import Path
from typing import Callable, Iterable

from luamod.config import IndexConfig
from luamod.models import FunctionInfo, IndexProgress, ModuleInfo
from luamod.parsers.lua_parser import LuaModuleParser
from luamod.repository import find_module_files

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Maps lowercase module names to the ModuleInfo scanned from disk.

    A registry is a plain object: build one per workspace (or per test),
    populate it with load_all(), keep it current with on_file_changed(),
    and drop everything with clear().
    """

    def __init__(
        self,
        config: IndexConfig | None = None,
        on_progress: Callable[[IndexProgress], None] | None = None
    ):
        self.config = config or IndexConfig()
        self.parser = LuaModuleParser(comment_lookback=self.config.comment_lookback)
        self.on_progress = on_progress
        self.progress = IndexProgress()
        self.files: set[str] = set()
        self._modules: dict[str, ModuleInfo] = {}
        # file path -> lowercase module name it last produced
        self._file_modules: dict[str, str] = {}
        self._observer = None

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_name: str) -> bool:
        return module_name.lower() in self._modules

    def load_all(self, roots: Iterable[Path | str]) -> None:
        """Discover and scan every module file under the given directories.

        Files are scanned one at a time so progress counts stay consistent
        with the module map.
        """
        files: list[Path] = []
        seen: set[Path] = set()
        for root in roots:
            for path in find_module_files(Path(root), self.config.file_suffixes):
                # Overlapping roots yield the same file more than once
                resolved = path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                files.append(path)

        self.files.update(str(path) for path in files)
        self.progress = IndexProgress(total=len(files))

        for path in files:
            self.update_file(path)
            self.progress.processed += 1
            if self.on_progress is not None:
                self.on_progress(self.progress)

        logger.debug(f"Indexed {len(self._modules)} modules from {len(files)} files")

    def update_file(self, path: Path | str) -> ModuleInfo | None:
        """Rescan one file and replace whatever it contributed before.

        Returns:
            The new ModuleInfo, or None if the file declares no module or
            could not be read. An unreadable file keeps its previous entry.
        """
        key = str(path)

        try:
            source_code = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read module file {key}: {e}")
            return None

        module = self.parser.scan(source_code, key)
        self._forget_file(key)

        if module is None:
            return None

        lowered = module.name.lower()
        if lowered in self._modules and self._modules[lowered].file_path != key:
            logger.debug(
                f"Module {module.name} in {key} replaces the one from "
                f"{self._modules[lowered].file_path}"
            )
        self._modules[lowered] = module
        self._file_modules[key] = lowered
        return module

    def on_file_changed(self, path: Path | str) -> ModuleInfo | None:
        """Handle a change notification for one file."""
        if not Path(path).exists():
            self.on_file_deleted(path)
            return None

        self.files.add(str(path))
        return self.update_file(path)

    def on_file_deleted(self, path: Path | str) -> None:
        key = str(path)
        self.files.discard(key)
        self._forget_file(key)

    def _forget_file(self, key: str) -> None:
        lowered = self._file_modules.pop(key, None)
        if lowered is None:
            return
        # Another file may have taken the name over since
        current = self._modules.get(lowered)
        if current is not None and current.file_path == key:
            del self._modules[lowered]

    def lookup(self, module_name: str) -> dict[str, FunctionInfo] | None:
        """Return the function table of a module (case-insensitive)."""
        module = self._modules.get(module_name.lower())
        return module.functions if module else None

    def get_module(self, module_name: str) -> ModuleInfo | None:
        return self._modules.get(module_name.lower())

    def modules(self) -> list[ModuleInfo]:
        """All indexed modules sorted by lowercase name."""
        return [self._modules[key] for key in sorted(self._modules)]

    def watch(self, roots: Iterable[Path | str]) -> None:
        """Keep the registry current from file-system events under roots."""
        from luamod.watcher import ModuleChangeHandler, start_observer

        self.stop_watching()
        handler = ModuleChangeHandler(self, self.config.file_suffixes)
        self._observer = start_observer(handler, roots)

    @property
    def watching(self) -> bool:
        return self._observer is not None

    def stop_watching(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    def clear(self) -> None:
        """Drop all indexed state and release the file watcher."""
        self.stop_watching()
        self._modules.clear()
        self._file_modules.clear()
        self.files.clear()
        self.progress = IndexProgress()
