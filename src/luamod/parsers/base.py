from abc import ABC, abstractmethod

from luamod.models import ModuleInfo


class BaseParser(ABC):
    """Abstract base class for module indexers."""

    @abstractmethod
    def scan(self, source_code: str, file_path: str) -> ModuleInfo | None:
        """Build the module record for one source file.

        Args:
            source_code: Full text of the file
            file_path: Path recorded in function locations

        Returns:
            ModuleInfo, or None if the file does not declare a module
        """
        pass
