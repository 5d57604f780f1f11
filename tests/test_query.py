"""Tests for hover, definition and completion queries."""

import pytest

from luamod.models import Position
from luamod.query import (
    completion_candidates,
    find_definition,
    format_doc,
    resolve_at_position,
)
from luamod.registry import ModuleRegistry

MATH_SOURCE = """module("MathUtil", package.seeall);

-- Adds two numbers
--@param a number left operand
--@param b number right operand
--@return number the sum
function add(a, b)
    return a + b
end

function noop()
end
"""


@pytest.fixture
def registry(tmp_path) -> ModuleRegistry:
    (tmp_path / "MathUtil.lua").write_text(MATH_SOURCE)
    registry = ModuleRegistry()
    registry.load_all([tmp_path])
    return registry


class TestResolveAtPosition:
    """Tests for resolve_at_position."""

    def test_resolves_function_under_cursor(self, registry):
        document = "local x = MathUtil.add(1, 2)"

        resolved = resolve_at_position(registry, document, 0, 20)

        assert resolved is not None
        assert resolved.module_name == "MathUtil"
        assert resolved.function.name == "add"

    def test_module_name_is_case_insensitive(self, registry):
        resolved = resolve_at_position(registry, "mathutil.add(1, 2)", 0, 10)

        assert resolved.function.name == "add"
        assert resolved.module_name == "mathutil"

    def test_cursor_on_later_line(self, registry):
        document = "local a = 1\n  MathUtil.noop()\n"

        resolved = resolve_at_position(registry, document, 1, 13)

        assert resolved.function.name == "noop"

    def test_no_dot_before_cursor(self, registry):
        assert resolve_at_position(registry, "MathUtil.add(1)", 0, 4) is None

    def test_unknown_module(self, registry):
        assert resolve_at_position(registry, "Other.add(1)", 0, 8) is None

    def test_unknown_function(self, registry):
        assert resolve_at_position(registry, "MathUtil.sub(1)", 0, 11) is None

    def test_nothing_after_dot(self, registry):
        assert resolve_at_position(registry, "MathUtil.", 0, 9) is None

    def test_line_out_of_range(self, registry):
        assert resolve_at_position(registry, "MathUtil.add()", 3, 0) is None

    def test_find_definition(self, registry, tmp_path):
        location = find_definition(registry, "MathUtil.add(1, 2)", 0, 12)

        assert location.path == str(tmp_path / "MathUtil.lua")
        assert location.range.start == Position(6, 9)
        assert location.range.end == Position(6, 12)

    def test_find_definition_nothing_found(self, registry):
        assert find_definition(registry, "print(1)", 0, 3) is None


class TestFormatDoc:
    """Tests for format_doc."""

    def test_format_with_separator(self, registry):
        function = registry.lookup("MathUtil")["add"]

        assert format_doc(function) == (
            "```lua\n"
            "function add(a: number, b: number)\n"
            "\t->1. number\t-- the sum\n"
            "```\n"
            "---\n"
            "Adds two numbers\n"
            "```lua\n"
            "@param a number left operand\n"
            "@param b number right operand\n"
            "@return number the sum\n"
            "```\n"
        )

    def test_format_without_separator(self, registry):
        function = registry.lookup("MathUtil")["add"]

        assert "---" not in format_doc(function, include_separator=False)

    def test_format_without_docs(self, registry):
        function = registry.lookup("MathUtil")["noop"]

        assert format_doc(function) == "```lua\nfunction noop()\n```\n---\n"


class TestCompletionCandidates:
    """Tests for completion_candidates."""

    def test_lists_module_functions_in_order(self, registry):
        candidates = completion_candidates(registry, "  MathUtil.", 0, 11)

        assert [candidate.name for candidate in candidates] == ["add", "noop"]
        assert candidates[0].function.detail == "Adds two numbers"
        assert "---" not in candidates[0].documentation
        assert "@param a number left operand" in candidates[0].documentation

    def test_partial_function_name(self, registry):
        candidates = completion_candidates(registry, "MathUtil.ad", 0, 11)

        assert [candidate.name for candidate in candidates] == ["add", "noop"]

    def test_without_module_access(self, registry):
        assert completion_candidates(registry, "local x = ", 0, 10) == []

    def test_unknown_module(self, registry):
        assert completion_candidates(registry, "Nope.", 0, 5) == []
