"""Cursor-position queries against a ModuleRegistry (hover, completion, definition)."""

from dataclasses import dataclass

from luamod.models import FunctionInfo, Location
from luamod.registry import ModuleRegistry
from luamod.scanning import IDENTIFIER_AFTER, IDENTIFIER_BEFORE, MODULE_ACCESS, split_lines


@dataclass(frozen=True)
class ResolvedFunction:
    """A `Module.function` reference found at a cursor position."""
    module_name: str  # As typed at the call site
    function: FunctionInfo


@dataclass(frozen=True)
class CompletionCandidate:
    name: str
    function: FunctionInfo
    documentation: str


def _line_at(source_code: str, line: int) -> str | None:
    lines = split_lines(source_code)
    if line < 0 or line >= len(lines):
        return None
    return lines[line]


def resolve_at_position(
    registry: ModuleRegistry,
    source_code: str,
    line: int,
    character: int
) -> ResolvedFunction | None:
    """Find the module function referenced at a cursor position.

    The identifier right before the last `.` preceding the cursor is taken as
    the module name, the identifier right after that dot as the function name.

    Args:
        registry: Registry used to resolve the names
        source_code: Full text of the document
        line: 0-indexed cursor line
        character: 0-indexed cursor column

    Returns:
        ResolvedFunction, or None if either name does not resolve
    """
    current_line = _line_at(source_code, line)
    if current_line is None:
        return None

    text_before_cursor = current_line[:character]
    dot_pos = text_before_cursor.rfind(".")
    if dot_pos == -1:
        return None

    module_match = IDENTIFIER_BEFORE.search(text_before_cursor[:dot_pos])
    if not module_match:
        return None

    module_name = module_match.group(1)
    functions = registry.lookup(module_name)
    if functions is None:
        return None

    function_match = IDENTIFIER_AFTER.match(current_line[dot_pos + 1:].strip())
    if not function_match:
        return None

    function = functions.get(function_match.group(1))
    if function is None:
        return None

    return ResolvedFunction(module_name=module_name, function=function)


def find_definition(
    registry: ModuleRegistry,
    source_code: str,
    line: int,
    character: int
) -> Location | None:
    """Return the definition location of the function under the cursor."""
    resolved = resolve_at_position(registry, source_code, line, character)
    return resolved.function.location if resolved else None


def _code_block(code: str) -> str:
    return f"```lua\n{code}\n```\n"


def format_doc(function: FunctionInfo, include_separator: bool = True) -> str:
    """Render a function's signature and doc comment as Markdown.

    Layout: the title in a lua code block, an optional `---` separator, the
    free-text description, then a second code block with the original
    @param and @return fragments (params first). The second block is left
    out when the function has no tags.
    """
    parts = [_code_block(function.title)]

    if include_separator:
        parts.append("---\n")

    if function.detail:
        parts.append(f"{function.detail}\n")

    tags = [f"@param {info.text}" for info in function.params.values()]
    tags.extend(f"@return {info.text}" for info in function.returns)
    if tags:
        parts.append(_code_block("\n".join(tags)))

    return "".join(parts)


def completion_candidates(
    registry: ModuleRegistry,
    source_code: str,
    line: int,
    character: int
) -> list[CompletionCandidate]:
    """List every function of the module accessed before the cursor.

    Returns:
        Candidates in the module's function-table order; empty when no
        `Module.` access precedes the cursor or the module is unknown.
    """
    current_line = _line_at(source_code, line)
    if current_line is None:
        return []

    module_match = MODULE_ACCESS.search(current_line[:character])
    if not module_match:
        return []

    functions = registry.lookup(module_match.group(1))
    if functions is None:
        return []

    return [
        CompletionCandidate(
            name=name,
            function=function,
            documentation=format_doc(function, include_separator=False),
        )
        for name, function in functions.items()
    ]
