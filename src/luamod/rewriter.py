"""Convert `module("Name", ...)` files into table-based modules.

The conversion is computed as a set of non-overlapping edits against the
original text, so every position refers to the untouched source:

1. the declaration becomes `Name = {};` and each top-level
   `function f(` becomes `function Name.f(`
2. bare calls to those functions become `Name.f(`
3. `return Name;` is appended
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from luamod.models import Position, Range, TextEdit
from luamod.scanning import (
    MODULE_STATEMENT,
    call_site_pattern,
    find_call_sites,
    match_function_definition,
    match_module_statement,
    split_lines,
)

logger = logging.getLogger(__name__)


class OverlappingEditError(ValueError):
    """Raised when an edit would touch text already claimed by another edit."""


def _overlaps(a: Range, b: Range) -> bool:
    if a.is_empty and b.is_empty:
        return a.start == b.start
    if a.is_empty:
        return b.start < a.start < b.end
    if b.is_empty:
        return a.start < b.start < a.end
    return a.start < b.end and b.start < a.end


class EditBuilder:
    """Collects edits against an immutable snapshot and applies them at once."""

    def __init__(self, source_code: str):
        self.source_code = source_code
        self._edits: list[TextEdit] = []

    def __len__(self) -> int:
        return len(self._edits)

    def replace(self, range: Range, new_text: str) -> None:
        self._add(TextEdit(range=range, new_text=new_text))

    def insert(self, position: Position, new_text: str) -> None:
        self._add(TextEdit(range=Range(position, position), new_text=new_text))

    def _add(self, edit: TextEdit) -> None:
        for existing in self._edits:
            if _overlaps(existing.range, edit.range):
                raise OverlappingEditError(
                    f"Edit at {edit.range.start} overlaps edit at {existing.range.start}"
                )
        self._edits.append(edit)

    @property
    def edits(self) -> list[TextEdit]:
        """Edits in document order."""
        return sorted(self._edits, key=lambda edit: (edit.range.start, edit.range.end))

    def apply(self) -> str:
        return apply_edits(self.source_code, self._edits)


def _offset_resolver(source_code: str):
    lines = split_lines(source_code)
    line_starts = []
    offset = 0
    for line in lines:
        line_starts.append(offset)
        offset += len(line) + 1

    def to_offset(position: Position) -> int:
        # Positions past the end of the text clamp to its end
        if position.line >= len(lines):
            return len(source_code)
        column = min(position.character, len(lines[position.line]))
        return line_starts[position.line] + column

    return to_offset


def apply_edits(source_code: str, edits: list[TextEdit]) -> str:
    """Apply all edits to the original text in one step.

    Raises:
        OverlappingEditError: If any two edits overlap; nothing is applied
    """
    to_offset = _offset_resolver(source_code)
    spans = sorted(
        ((to_offset(edit.range.start), to_offset(edit.range.end), edit.new_text) for edit in edits),
        key=lambda span: (span[0], span[1]),
    )

    result = []
    cursor = 0
    for start, end, new_text in spans:
        if start < cursor:
            raise OverlappingEditError(f"Edit at offset {start} overlaps a previous edit")
        result.append(source_code[cursor:start])
        result.append(new_text)
        cursor = end

    result.append(source_code[cursor:])
    return "".join(result)


def rewrite(source_code: str) -> list[TextEdit]:
    """Compute the edits converting a module(...) file to a table module.

    Args:
        source_code: Full text of the Lua file

    Returns:
        Edits in document order, or an empty list when the file has no
        semicolon-terminated module declaration (nothing to convert)
    """
    declaration = MODULE_STATEMENT.search(source_code)
    if not declaration:
        return []

    module_name = declaration.group(1)
    lines = split_lines(source_code)
    builder = EditBuilder(source_code)

    rewritten_lines: set[int] = set()
    function_names: list[str] = []

    # Pass 1: declaration and top-level definitions
    for index, line in enumerate(lines):
        statement = match_module_statement(line)
        if statement:
            name, start, end = statement
            logger.debug(f"Replacing module declaration {name} on line {index + 1}")
            builder.replace(Range.on_line(index, start, end), f"{name} = {{}};")
            rewritten_lines.add(index)
            continue

        span = match_function_definition(line, top_level=True)
        if span is None:
            continue

        logger.debug(f"Qualifying function {span.name} on line {index + 1}")
        builder.replace(Range.on_line(index, span.start, span.end), f"{module_name}.{span.name}")
        function_names.append(span.name)
        rewritten_lines.add(index)

    # Pass 2: bare calls to functions defined in this file
    pattern = call_site_pattern(function_names)
    if pattern is not None:
        for index, line in enumerate(lines):
            if index in rewritten_lines:
                continue
            for span in find_call_sites(line, pattern):
                logger.debug(f"Qualifying call to {span.name} on line {index + 1}")
                builder.replace(
                    Range.on_line(index, span.start, span.end),
                    f"{module_name}.{span.name}",
                )

    # Pass 3: export the module table
    export = f"return {module_name};\n"
    last_index = len(lines) - 1
    last_line = lines[last_index]
    if not last_line.strip():
        builder.insert(Position(last_index, 0), "\n" + export)
    else:
        builder.insert(Position(last_index, len(last_line)), "\n\n" + export)

    return builder.edits


@dataclass
class ConversionResult:
    """Outcome of converting one file."""
    path: str
    changed: bool
    message: str
    edits: list[TextEdit] = field(default_factory=list)
    new_source: str | None = None  # None when nothing changed


def convert_file(path: Path | str, dry_run: bool = False) -> ConversionResult:
    """Convert a module file in place.

    Args:
        path: Lua file to convert
        dry_run: Compute the new text without writing it

    Returns:
        ConversionResult describing what was (or would be) done

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    # newline="" keeps CRLF line endings intact on write-back
    with open(file_path, "r", encoding="utf-8", newline="") as f:
        source_code = f.read()

    edits = rewrite(source_code)
    if not edits:
        return ConversionResult(
            path=str(file_path),
            changed=False,
            message=f"[{file_path.name}] requires no changes",
        )

    new_source = apply_edits(source_code, edits)
    if not dry_run:
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(new_source)

    module_name = MODULE_STATEMENT.search(source_code).group(1)
    return ConversionResult(
        path=str(file_path),
        changed=True,
        message=f"Converted {file_path.name} to module {module_name}",
        edits=edits,
        new_source=new_source,
    )
