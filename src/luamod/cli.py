import asyncio
import json
import logging
import time

from dataclasses import asdict
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress
from rich.table import Table
from typing import Optional

import typer

from luamod import __version__
from luamod.config import load_index_config
from luamod.query import completion_candidates, format_doc, resolve_at_position
from luamod.registry import ModuleRegistry
from luamod.repository import ProjectRootNotFoundError, resolve_root
from luamod.rewriter import convert_file

app = typer.Typer(
    help="luamod - index and convert Lua module(...) files",
    no_args_is_help=True,
)

console = Console()

ROOT_OPTION = typer.Option(None, "--root", "-r", help="Project root (defaults to current directory)")
JSON_OPTION = typer.Option(False, "--json", "-j", help="Output as JSON")
POSITION_ARGUMENT = typer.Argument(..., min=1, help="1-based position")


def _load_registry(root: Path | None, show_progress: bool = False) -> tuple[Path, ModuleRegistry]:
    """Index every configured module directory under the project root."""
    root = resolve_root(root)
    config = load_index_config(root)
    module_paths = config.module_paths(root)

    if not show_progress:
        registry = ModuleRegistry(config)
        registry.load_all(module_paths)
        return root, registry

    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Loading modules", total=None)

        def on_progress(counts):
            progress.update(task, completed=counts.processed, total=counts.total)

        registry = ModuleRegistry(config, on_progress=on_progress)
        registry.load_all(module_paths)

    return root, registry


def _relative(path: str, root: Path) -> str:
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path


@app.command()
def index(root: Optional[Path] = ROOT_OPTION, output_json: bool = JSON_OPTION):
    """Index all module files and list the modules found."""
    try:
        root, registry = _load_registry(root, show_progress=not output_json)
    except ProjectRootNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    modules = registry.modules()

    if output_json:
        results = [
            {
                "name": module.name,
                "path": _relative(module.file_path, root),
                "functions": list(module.functions),
            }
            for module in modules
        ]
        typer.echo(json.dumps(results, indent=2))
        return

    table = Table()
    table.add_column("Module", style="cyan")
    table.add_column("Functions", justify="right")
    table.add_column("Path", style="green")
    for module in modules:
        table.add_row(module.name, str(len(module.functions)), _relative(module.file_path, root))
    console.print(table)
    console.print(f"{len(modules)} modules in {registry.progress.total} files")


@app.command()
def info(
    module_name: str,
    function_name: Optional[str] = typer.Argument(None),
    root: Optional[Path] = ROOT_OPTION,
    output_json: bool = JSON_OPTION,
):
    """Show the functions of a module, or the documentation of one function.

    Examples:
        luamod info PlayerM
        luamod info PlayerM getLevel
    """
    try:
        root, registry = _load_registry(root)
    except ProjectRootNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    module = registry.get_module(module_name)
    if module is None:
        typer.echo(f"Error: Module '{module_name}' not found", err=True)
        raise typer.Exit(code=1)

    if function_name is None:
        if output_json:
            typer.echo(json.dumps({"module": asdict(module)}, indent=2))
            return
        for function in module.functions.values():
            typer.echo(function.title)
        return

    function = module.functions.get(function_name)
    if function is None:
        typer.echo(f"Error: Function '{function_name}' not found in {module.name}", err=True)
        raise typer.Exit(code=1)

    if output_json:
        typer.echo(json.dumps({"function": asdict(function)}, indent=2))
    else:
        typer.echo(format_doc(function))


@app.command()
def locate(
    target: str,
    root: Optional[Path] = ROOT_OPTION,
    output_json: bool = JSON_OPTION,
):
    """Find where a module function is defined.

    Args:
        target: Function in format "Module.function"
    """
    if "." not in target:
        typer.echo(f"Error: Expected Module.function, got '{target}'", err=True)
        raise typer.Exit(code=1)

    module_name, function_name = target.rsplit(".", 1)

    try:
        root, registry = _load_registry(root)
    except ProjectRootNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    functions = registry.lookup(module_name) or {}
    function = functions.get(function_name)
    if function is None:
        typer.echo(f"Error: '{target}' not found", err=True)
        raise typer.Exit(code=1)

    location = function.location
    if output_json:
        typer.echo(json.dumps(asdict(location), indent=2))
    else:
        start = location.range.start
        typer.echo(f"{_relative(location.path, root)}:{start.line + 1}:{start.character + 1}")


def _read_document(file: Path) -> str:
    if not file.is_file():
        typer.echo("Warning: please open a file first", err=True)
        raise typer.Exit(code=1)
    try:
        return file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def hover(
    file: Path,
    line: int = POSITION_ARGUMENT,
    column: int = POSITION_ARGUMENT,
    root: Optional[Path] = ROOT_OPTION,
):
    """Show documentation for the Module.function at LINE:COLUMN (1-based)."""
    source_code = _read_document(file)

    try:
        _, registry = _load_registry(root)
    except ProjectRootNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    resolved = resolve_at_position(registry, source_code, line - 1, column - 1)
    if resolved is None:
        typer.echo("No module function at this position", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_doc(resolved.function))


@app.command()
def complete(
    file: Path,
    line: int = POSITION_ARGUMENT,
    column: int = POSITION_ARGUMENT,
    root: Optional[Path] = ROOT_OPTION,
    output_json: bool = JSON_OPTION,
):
    """List completion candidates for the Module. before LINE:COLUMN (1-based)."""
    source_code = _read_document(file)

    try:
        _, registry = _load_registry(root)
    except ProjectRootNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    candidates = completion_candidates(registry, source_code, line - 1, column - 1)

    if output_json:
        results = [
            {"name": candidate.name, "documentation": candidate.documentation}
            for candidate in candidates
        ]
        typer.echo(json.dumps(results, indent=2))
        return

    for candidate in candidates:
        typer.echo(candidate.function.title.splitlines()[0])


@app.command()
def convert(
    file: Path,
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print the result instead of writing it"),
):
    """Convert a module("Name", ...) file to a table-based module."""
    if not file.is_file():
        typer.echo("Warning: please open a file first", err=True)
        raise typer.Exit(code=1)

    try:
        result = convert_file(file, dry_run=dry_run)
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    if dry_run and result.changed:
        typer.echo(result.new_source, nl=False)
        return

    typer.echo(result.message)


@app.command()
def watch(root: Optional[Path] = ROOT_OPTION):
    """Index module files and keep the index current until interrupted."""
    try:
        root, registry = _load_registry(root, show_progress=True)
    except ProjectRootNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    registry.watch(registry.config.module_paths(root))
    console.print(
        f"Watching {len(registry.files)} module files. Press Ctrl+C to stop.",
        style="blue",
    )

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\nWatch mode stopped", style="yellow")
    finally:
        registry.clear()


@app.command()
def mcp_server():
    """Start the MCP server exposing luamod lookups as tools."""
    from luamod.mcp_server import main

    asyncio.run(main())


def _version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"luamod version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging")):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True))],
        )
