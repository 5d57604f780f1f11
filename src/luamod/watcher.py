"""
File system watching for the module registry.

A single watchdog observer covers every root; all events flow through one
handler that routes them to the registry by path.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from luamod.repository import DEFAULT_SUFFIXES, is_module_file

logger = logging.getLogger(__name__)


class ModuleChangeHandler(FileSystemEventHandler):
    """File system event handler that rescans changed module files."""

    def __init__(self, registry, suffixes=DEFAULT_SUFFIXES):
        super().__init__()
        self.registry = registry
        self.suffixes = tuple(suffixes)

        # Statistics
        self.files_updated_count = 0
        self.files_deleted_count = 0

    def _module_path(self, raw_path) -> Path | None:
        path = Path(os.fsdecode(raw_path))
        return path if is_module_file(path, self.suffixes) else None

    def on_modified(self, event):
        """Handle file modification events."""
        if event.is_directory:
            return

        path = self._module_path(event.src_path)
        if path is None:
            return

        try:
            self.registry.on_file_changed(path)
            self.files_updated_count += 1
            logger.debug(f"Rescanned module file: {path}")
        except Exception as e:
            logger.warning(f"Failed to rescan module file {path}: {e}")

    def on_created(self, event):
        """Handle file creation events (same as modification)."""
        self.on_modified(event)

    def on_deleted(self, event):
        """Handle file deletion events."""
        if event.is_directory:
            return

        path = self._module_path(event.src_path)
        if path is None:
            return

        self.registry.on_file_deleted(path)
        self.files_deleted_count += 1
        logger.debug(f"Dropped module file: {path}")

    def on_moved(self, event):
        """Handle file move events as delete old + create new."""
        if event.is_directory:
            return

        old_path = self._module_path(event.src_path)
        if old_path is not None:
            self.registry.on_file_deleted(old_path)
            self.files_deleted_count += 1

        new_path = self._module_path(event.dest_path)
        if new_path is not None:
            try:
                self.registry.on_file_changed(new_path)
                self.files_updated_count += 1
            except Exception as e:
                logger.warning(f"Failed to rescan module file {new_path}: {e}")


def start_observer(handler: FileSystemEventHandler, roots: Iterable[Path | str]) -> Observer:
    """Schedule one recursive watch per existing root and start the observer."""
    observer = Observer()

    for root in roots:
        root_path = Path(root)
        if not root_path.is_dir():
            logger.warning(f"Cannot watch missing directory: {root_path}")
            continue
        observer.schedule(handler, path=str(root_path), recursive=True)

    observer.start()
    return observer
