from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class Position:
    """A point in a text document (0-indexed line and character)."""
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """A span between two positions (end exclusive)."""
    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> "Range":
        return cls(Position(line, start), Position(line, end))

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class Location:
    """A range inside a specific file."""
    path: str
    range: Range


@dataclass(frozen=True)
class ParamInfo:
    """A documented parameter or return value."""
    type: str
    detail: str
    text: str  # Fragment after the @param/@return tag, kept for redisplay


@dataclass(frozen=True)
class FunctionInfo:
    """A function found in a module file, with its doc comment attached."""
    name: str
    title: str
    detail: str
    location: Location
    params: dict[str, ParamInfo] = field(default_factory=dict)
    returns: list[ParamInfo] = field(default_factory=list)


@dataclass
class ModuleInfo:
    """All functions declared by one module file."""
    name: str  # Declared casing, lookups are case-insensitive
    file_path: str
    functions: dict[str, FunctionInfo] = field(default_factory=dict)


@dataclass(frozen=True)
class TextEdit:
    """Replacement of a range in the original text (empty range = insertion)."""
    range: Range
    new_text: str


@dataclass
class IndexProgress:
    """Counters for a bulk indexing run."""
    processed: int = 0
    total: int = 0

    @property
    def done(self) -> bool:
        return self.processed >= self.total
