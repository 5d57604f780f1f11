"""Line classifiers and span matchers shared by the indexer and the rewriter.

Lua sources are never parsed. Every construct the tool cares about is picked
out of the text with one of the small patterns below, so each can be
exercised on its own.
"""

import re
from dataclasses import dataclass

# module("Name", package.seeall) anywhere in the text
MODULE_DECLARATION = re.compile(r"""module\(["'](\w+)['"][,\s\w.]*\)""")

# Same declaration, but only when closed by a semicolon (rewrite target)
MODULE_STATEMENT = re.compile(r"""module\(["'](\w+)['"][,\s\w.]*\);""")

FUNCTION_DEFINITION = re.compile(r"function\s+(\w+)\s*\(")

# Top-level definitions only: no indentation, no `local`
TOP_LEVEL_FUNCTION = re.compile(r"^function\s+(\w+)\s*\(")

RETURN_TAG = re.compile(r"^([A-Za-z\d.]+)\s+(.*)")
PARAM_TAG = re.compile(r"^([A-Za-z\d.]+)\s+([A-Za-z\d.]+)\s+(.*)")

IDENTIFIER_BEFORE = re.compile(r"(\w+)$")
IDENTIFIER_AFTER = re.compile(r"^(\w+)")
MODULE_ACCESS = re.compile(r"(\w+)\.")


@dataclass(frozen=True)
class Span:
    """A matched identifier and its column range on one line."""
    name: str
    start: int
    end: int


@dataclass(frozen=True)
class DocTag:
    """A classified doc-comment line.

    kind is "param", "return" or "description". name is only set for params,
    type and text only for tags.
    """
    kind: str
    detail: str
    name: str = ""
    type: str = ""
    text: str = ""


def split_lines(source_code: str) -> list[str]:
    """Split on newlines only, keeping a trailing empty line if present."""
    return source_code.split("\n")


def find_module_name(source_code: str) -> str | None:
    """Return the first declared module name in the text, if any."""
    match = MODULE_DECLARATION.search(source_code)
    return match.group(1) if match else None


def match_module_statement(line: str) -> tuple[str, int, int] | None:
    """Match a semicolon-terminated module declaration on a single line.

    Returns:
        (module_name, start_column, end_column) covering the whole statement.
    """
    match = MODULE_STATEMENT.search(line)
    if not match:
        return None
    return match.group(1), match.start(), match.end()


def match_function_definition(line: str, top_level: bool = False) -> Span | None:
    """Find a function definition's name on a line.

    Args:
        line: A single source line
        top_level: Only accept `function` at column 0

    Returns:
        Span of the function name, or None.
    """
    pattern = TOP_LEVEL_FUNCTION if top_level else FUNCTION_DEFINITION
    match = pattern.search(line)
    if not match:
        return None
    return Span(match.group(1), match.start(1), match.end(1))


def is_comment_line(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and stripped.startswith("--")


def classify_comment(line: str) -> DocTag | None:
    """Classify one `--` comment line.

    Returns None when a @param/@return line does not have the expected shape.
    """
    body = line.strip().lstrip("-").lstrip()

    if body.startswith("@return"):
        text = body[len("@return"):].strip()
        match = RETURN_TAG.match(text)
        if not match:
            return None
        return DocTag(kind="return", type=match.group(1), detail=match.group(2), text=text)

    if body.startswith("@param"):
        text = body[len("@param"):].strip()
        match = PARAM_TAG.match(text)
        if not match:
            return None
        return DocTag(
            kind="param",
            name=match.group(1),
            type=match.group(2),
            detail=match.group(3),
            text=text,
        )

    return DocTag(kind="description", detail=body)


def call_site_pattern(function_names) -> re.Pattern | None:
    """Build a matcher for bare calls to any of the given functions.

    A call only counts when the name is not preceded by an identifier
    character, a dot or a colon, so `obj.foo(`, `obj:foo(` and `barfoo(`
    are left alone.
    """
    names = sorted(set(function_names), key=len, reverse=True)
    if not names:
        return None
    alternation = "|".join(re.escape(name) for name in names)
    return re.compile(rf"(?<![\w.:])({alternation})\(")


def find_call_sites(line: str, pattern: re.Pattern) -> list[Span]:
    """Return every call-site name span on the line, left to right."""
    return [Span(m.group(1), m.start(1), m.end(1)) for m in pattern.finditer(line)]
