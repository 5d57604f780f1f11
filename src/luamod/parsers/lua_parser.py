import logging

from luamod.models import FunctionInfo, Location, ModuleInfo, ParamInfo, Range
from luamod.parsers.base import BaseParser
from luamod.scanning import (
    Span,
    classify_comment,
    find_module_name,
    is_comment_line,
    match_function_definition,
    split_lines,
)

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_LOOKBACK = 10


class LuaModuleParser(BaseParser):
    """Indexer for Lua files written in the `module("Name", ...)` style."""

    def __init__(self, comment_lookback: int = DEFAULT_COMMENT_LOOKBACK):
        self.comment_lookback = comment_lookback

    def scan(self, source_code: str, file_path: str) -> ModuleInfo | None:
        """Extract the module name and every function with its doc comment.

        Args:
            source_code: Lua source code
            file_path: Path of the file (stored in each function's location)

        Returns:
            ModuleInfo, or None when no module declaration is present
        """
        module_name = find_module_name(source_code)
        if not module_name:
            return None

        lines = split_lines(source_code)
        functions: dict[str, FunctionInfo] = {}

        for index, line in enumerate(lines):
            span = match_function_definition(line)
            if span is None:
                continue

            logger.debug(f"Found function {span.name} in {file_path}:{index + 1}")
            # Later definitions replace earlier ones with the same name
            functions[span.name] = self._build_function(lines, index, span, file_path)

        return ModuleInfo(name=module_name, file_path=file_path, functions=functions)

    def _build_function(
        self,
        lines: list[str],
        index: int,
        span: Span,
        file_path: str
    ) -> FunctionInfo:
        """Attach the doc comment above line `index` to the function."""
        params, returns, detail = self._collect_doc_comment(lines, index)

        location = Location(
            path=file_path,
            range=Range.on_line(index, span.start, span.end),
        )

        return FunctionInfo(
            name=span.name,
            title=build_title(span.name, params, returns),
            detail=" ".join(detail),
            location=location,
            params=dict(params),
            returns=returns,
        )

    def _collect_doc_comment(
        self,
        lines: list[str],
        index: int
    ) -> tuple[list[tuple[str, ParamInfo]], list[ParamInfo], list[str]]:
        """Walk upward from a definition collecting contiguous comment lines.

        Lines are visited nearest-first, so every entry is prepended to keep
        the results in source order.
        """
        params: list[tuple[str, ParamInfo]] = []
        returns: list[ParamInfo] = []
        detail: list[str] = []

        for offset in range(1, self.comment_lookback + 1):
            line_index = index - offset
            if line_index < 0 or not is_comment_line(lines[line_index]):
                break

            tag = classify_comment(lines[line_index])
            if tag is None:
                continue

            if tag.kind == "return":
                returns.insert(0, ParamInfo(type=tag.type, detail=tag.detail, text=tag.text))
            elif tag.kind == "param":
                params.insert(0, (tag.name, ParamInfo(type=tag.type, detail=tag.detail, text=tag.text)))
            else:
                detail.insert(0, tag.detail)

        return params, returns, detail


def build_title(
    name: str,
    params: list[tuple[str, ParamInfo]],
    returns: list[ParamInfo]
) -> str:
    """Synthesize the one-line signature shown above a function's docs.

    Example:
        function add(a: number, b: number)
            ->1. number    -- the sum
    """
    params_str = ", ".join(f"{param_name}: {info.type}" for param_name, info in params)

    returns_str = ""
    if returns:
        returns_str = "\n\t" + "\n\t".join(
            f"->{i}. {info.type}\t-- {info.detail}" for i, info in enumerate(returns, start=1)
        )

    return f"function {name}({params_str}){returns_str}"
