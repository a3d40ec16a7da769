"""CLI entry point for codenav."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.tree import Tree

from codenav.core.config import Limits, get_default_snapshot_path
from codenav.core.exceptions import CodeNavError
from codenav.core.models import CallNode, Direction, ElementReference, TypeNode
from codenav.indexing import Indexer
from codenav.model.snapshot import save_snapshot
from codenav.navigator import Navigator

app = typer.Typer(
    name="codenav",
    help="Type hierarchies, call graphs and symbol search across languages.",
    no_args_is_help=True,
)
console = Console()

TargetArg = Annotated[
    str | None, typer.Argument(help="Qualified or simple symbol name (e.g. Shape.area)")
]
FileOpt = Annotated[str | None, typer.Option("--file", "-f", help="File containing the element")]
LineOpt = Annotated[int | None, typer.Option("--line", "-l", help="1-based line in --file")]
ColumnOpt = Annotated[int, typer.Option("--column", "-c", help="Column in --file")]
JsonOpt = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]
SnapshotOpt = Annotated[
    Path | None,
    typer.Option("--snapshot", "-s", help="Code model file (default: .codenav/model.json)"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Type hierarchies, call graphs and symbol search across languages."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


def get_navigator(snapshot: Path | None) -> Navigator:
    """Open the code model for the current directory (or ``snapshot``)."""
    path = snapshot or get_default_snapshot_path(Path(".").resolve())
    try:
        limits = Limits.from_env()
    except ValueError as e:
        raise CodeNavError(str(e)) from e
    return Navigator.from_snapshot(path.resolve(), limits=limits)


def _fail(error: Exception) -> typer.Exit:
    console.print(f"[red]Error:[/red] {error}")
    return typer.Exit(code=1)


def _location(ref: ElementReference) -> str:
    if ref.file is None:
        return ""
    return f" [dim]{ref.file}:{ref.line or 0}[/]"


def _label(ref: ElementReference, style: str = "cyan") -> str:
    return f"[{style}]{ref.name}[/] ({ref.kind}){_location(ref)}"


def _print_json(data: Any) -> None:
    print(json.dumps(data))


def _not_found(what: str, output_json: bool) -> None:
    if output_json:
        _print_json(None)
    else:
        console.print(f"[dim]{what}[/]")


@app.command()
def index(
    path: Annotated[Path, typer.Argument(help="Directory to index")] = Path("."),
    exclude: Annotated[
        list[str] | None, typer.Option("--exclude", "-e", help="Patterns to exclude")
    ] = None,
) -> None:
    """Index Python sources and write the code model snapshot."""
    path = path.resolve()
    indexer = Indexer()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(f"Indexing [cyan]{path.name}[/]", total=None)

        def on_progress(file: Path, current: int, total: int) -> None:
            progress.update(task, total=total, completed=current)
            try:
                rel_path: Path | str = file.relative_to(path)
            except ValueError:
                rel_path = file.name
            progress.update(task, description=f"[cyan]{rel_path}[/]")

        stats = indexer.index_directory(path, exclude_patterns=exclude or [], on_progress=on_progress)

    snapshot = get_default_snapshot_path(path)
    save_snapshot(indexer.model, snapshot, plugins=["python"])

    console.print("[green]Done![/green]")
    console.print(f"  Files indexed: {stats.files}")
    console.print(f"  Symbols found: {stats.symbols}")
    console.print(f"  Calls recorded: {stats.calls} ({stats.resolved_calls} resolved)")
    console.print(f"  [dim]Model: {snapshot}[/]")

    if stats.skipped:
        console.print(f"  [dim]Skipped: {stats.skipped}[/]")
    if stats.errors:
        console.print(f"  [red]Errors: {len(stats.errors)}[/red]")
        for error in stats.errors:
            console.print(f"    {error}")


@app.command()
def hierarchy(
    target: TargetArg = None,
    file: FileOpt = None,
    line: LineOpt = None,
    column: ColumnOpt = 0,
    snapshot: SnapshotOpt = None,
    output_json: JsonOpt = False,
) -> None:
    """Show the supertypes and subtypes of a type."""
    try:
        nav = get_navigator(snapshot)
        result = nav.type_hierarchy(nav.resolve(target, file, line, column))
    except CodeNavError as e:
        raise _fail(e) from e

    if result is None:
        _not_found("No type at the given location", output_json)
        return
    if output_json:
        _print_json(result.to_dict())
        return

    tree = Tree(f"[bold]{_label(result.root.element, 'bold cyan')}[/]")
    if result.supertypes:
        branch = tree.add("[green]Supertypes[/]")

        def add_supertypes(parent: Tree, nodes: tuple[TypeNode, ...]) -> None:
            for node in nodes:
                add_supertypes(parent.add(_label(node.element)), node.supertypes)

        add_supertypes(branch, result.supertypes)
    if result.subtypes:
        branch = tree.add("[green]Subtypes[/]")
        for sub in result.subtypes:
            branch.add(_label(sub))
    console.print(tree)


def _show_calls(
    direction: Direction,
    target: str | None,
    file: str | None,
    line: int | None,
    column: int,
    depth: int,
    snapshot: Path | None,
    output_json: bool,
) -> None:
    try:
        nav = get_navigator(snapshot)
        result = nav.call_hierarchy(nav.resolve(target, file, line, column), direction, depth)
    except CodeNavError as e:
        raise _fail(e) from e

    if result is None:
        _not_found("No function or method at the given location", output_json)
        return
    if output_json:
        _print_json(result.to_dict())
        return

    tree = Tree(f"[bold yellow]▶ {result.root.name}[/]{_location(result.root)}")

    def add_calls(parent: Tree, nodes: tuple[CallNode, ...]) -> None:
        for node in nodes:
            add_calls(parent.add(f"[blue]{node.name}[/]{_location(node.element)}"), node.children)

    add_calls(tree, result.calls)
    console.print(tree)
    if not result.calls:
        label = "callers" if direction is Direction.CALLERS else "calls"
        console.print(f"  [dim]No {label} found[/]")


@app.command()
def callers(
    target: TargetArg = None,
    file: FileOpt = None,
    line: LineOpt = None,
    column: ColumnOpt = 0,
    depth: Annotated[int, typer.Option("--depth", "-d", help="Maximum nesting depth")] = 3,
    snapshot: SnapshotOpt = None,
    output_json: JsonOpt = False,
) -> None:
    """Show what calls a function (who calls this?)."""
    _show_calls(Direction.CALLERS, target, file, line, column, depth, snapshot, output_json)


@app.command()
def callees(
    target: TargetArg = None,
    file: FileOpt = None,
    line: LineOpt = None,
    column: ColumnOpt = 0,
    depth: Annotated[int, typer.Option("--depth", "-d", help="Maximum nesting depth")] = 3,
    snapshot: SnapshotOpt = None,
    output_json: JsonOpt = False,
) -> None:
    """Show what a function calls (what does this call?)."""
    _show_calls(Direction.CALLEES, target, file, line, column, depth, snapshot, output_json)


@app.command()
def implementations(
    target: TargetArg = None,
    file: FileOpt = None,
    line: LineOpt = None,
    column: ColumnOpt = 0,
    snapshot: SnapshotOpt = None,
    output_json: JsonOpt = False,
) -> None:
    """Show overriding methods of a method, or implementations of a type."""
    try:
        nav = get_navigator(snapshot)
        result = nav.implementations(nav.resolve(target, file, line, column))
    except CodeNavError as e:
        raise _fail(e) from e

    if result is None:
        _not_found("No method or type at the given location", output_json)
        return
    if output_json:
        _print_json([impl.to_dict() for impl in result])
        return
    if not result:
        console.print("[dim]No implementations found[/]")
        return
    for impl in result:
        console.print(f"[cyan]{impl.name}[/cyan] ({impl.kind})")
        console.print(f"  {impl.file}:{impl.line}")


@app.command()
def supers(
    target: TargetArg = None,
    file: FileOpt = None,
    line: LineOpt = None,
    column: ColumnOpt = 0,
    snapshot: SnapshotOpt = None,
    output_json: JsonOpt = False,
) -> None:
    """Show the methods a method overrides or implements."""
    try:
        nav = get_navigator(snapshot)
        result = nav.super_methods(nav.resolve(target, file, line, column))
    except CodeNavError as e:
        raise _fail(e) from e

    if result is None:
        _not_found("No method at the given location", output_json)
        return
    if output_json:
        _print_json(result.to_dict())
        return

    method = result.method
    console.print(f"\n[bold cyan]{method.containing_class}.{method.signature}[/]")
    if method.file:
        console.print(f"  [dim]{method.file}:{method.line}[/]")
    if not result.hierarchy:
        console.print("  [dim]Overrides nothing[/]")
        return
    for entry in result.hierarchy:
        indent = "  " * entry.depth
        marker = "[magenta]interface[/] " if entry.is_interface else ""
        where = f" [dim]{entry.file}:{entry.line}[/]" if entry.file else ""
        console.print(f"{indent}{marker}[cyan]{entry.containing_class}[/].{entry.signature}{where}")


@app.command()
def find(
    pattern: Annotated[str, typer.Argument(help="Name or camel-case abbreviation")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum results")] = 20,
    libraries: Annotated[
        bool, typer.Option("--libraries", help="Include library declarations")
    ] = False,
    snapshot: SnapshotOpt = None,
    output_json: JsonOpt = False,
) -> None:
    """Search for types, functions and fields by name."""
    try:
        matches = get_navigator(snapshot).find_symbols(pattern, libraries, limit)
    except CodeNavError as e:
        raise _fail(e) from e

    if output_json:
        _print_json([m.to_dict() for m in matches])
        return
    if not matches:
        console.print(f"No matches for '[cyan]{pattern}[/cyan]'")
        return
    for match in matches:
        container = f" in {match.container_name}" if match.container_name else ""
        console.print(f"[cyan]{match.name}[/cyan] ({match.kind}, {match.language}){container}")
        console.print(f"  {match.file}:{match.line}")


@app.command()
def languages(
    snapshot: SnapshotOpt = None,
    output_json: JsonOpt = False,
) -> None:
    """Show which languages each capability supports."""
    try:
        supported = get_navigator(snapshot).languages()
    except CodeNavError as e:
        raise _fail(e) from e

    if output_json:
        _print_json(supported)
        return
    for capability, names in supported.items():
        listed = ", ".join(names) if names else "[dim]none[/]"
        console.print(f"[cyan]{capability}[/]: {listed}")


if __name__ == "__main__":
    app()
