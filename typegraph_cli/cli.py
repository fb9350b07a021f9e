"""Typer-based CLI for TypeGraph type-hierarchy inspection."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Set

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from . import __version__, config, config_manager
from .cli_config import config_app
from .cli_watch import watch
from .converter import GraphConverter
from .graph_export import export_dot, export_html, export_json
from .loader import GraphProvider, TypeGraphLoader
from .log_setup import setup_logging
from .models import GraphData, TypeNode
from .parser import DeclarationParser

console = Console()

app = typer.Typer(
    help="🌳 TypeGraph CLI — inspect and export type inheritance hierarchies.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config_app, name="config")
app.command("watch")(watch)

EXPORT_FORMATS = ("json", "dot", "html")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"TypeGraph CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """TypeGraph CLI: extract type hierarchies and export them as graphs."""
    setup_logging(is_verbose=verbose)


def _load(workspace: Path, root_suffix: Optional[str] = None) -> GraphProvider:
    """Load *workspace* into a provider, turning read failures into exit code 1."""
    provider = GraphProvider(TypeGraphLoader(root_suffix=root_suffix))
    try:
        provider.load_graph(workspace)
    except OSError as exc:
        console.print(f"[red]✗[/red] Could not read type declarations: {escape(str(exc))}")
        raise typer.Exit(1)
    return provider


def _empty_hint() -> None:
    console.print("[yellow]No types found.[/yellow]")
    console.print(
        f"[dim]Generate {config.TACTICA_DIR}/{config.TACTICA_FILE} first, e.g. run 'npx tactica'.[/dim]"
    )


def _node_label(node: TypeNode) -> str:
    location = escape(f"{node.source_file}:{node.line}")
    return f"[bold cyan]{escape(node.name)}[/bold cyan] [dim]({len(node.fields)} props) {location}[/dim]"


def _add_branch(tree: Tree, node: TypeNode, show_properties: bool, seen: Set[str]) -> None:
    if node.qualified_path in seen:
        return
    seen.add(node.qualified_path)

    branch = tree.add(_node_label(node))
    if show_properties:
        for info in node.fields.values():
            marker = "?" if info.optional else ""
            branch.add(f"[green]{escape(info.name)}{marker}[/green]: {escape(info.type)}")
    for child in node.children.values():
        _add_branch(branch, child, show_properties, seen)


def build_tree(roots: List[TypeNode], show_properties: bool = False) -> Tree:
    """Render the hierarchy under *roots* as a Rich tree."""
    tree = Tree("[bold]Type hierarchy[/bold]")
    seen: Set[str] = set()
    for root in roots:
        _add_branch(tree, root, show_properties, seen)
    return tree


@app.command("show")
def show(
    workspace: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Workspace root."),
    show_properties: bool = typer.Option(
        config.SHOW_PROPERTIES, "--props/--no-props", help="List each type's own fields."
    ),
    root_suffix: Optional[str] = typer.Option(
        None, "--root-suffix", help="Name suffix marking root types (default from config)."
    ),
):
    """Show the type hierarchy as a tree."""
    provider = _load(workspace, root_suffix)
    roots = provider.get_roots()
    if not roots:
        _empty_hint()
        raise typer.Exit(code=0)
    console.print(build_tree(roots, show_properties=show_properties))


@app.command("stats")
def stats(
    workspace: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Workspace root."),
    root_suffix: Optional[str] = typer.Option(None, "--root-suffix", help="Name suffix marking root types."),
):
    """Summarise the converted graph: counts and depth distribution."""
    provider = _load(workspace, root_suffix)
    graph = provider.get_graph_data() or GraphData()
    summary = provider.get_stats()
    if summary is None or summary.type_count == 0:
        _empty_hint()
        raise typer.Exit(code=0)

    depth_stats = GraphConverter.get_depth_stats(graph.nodes)

    table = Table(title="Type graph")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Types", str(summary.type_count))
    table.add_row("Relationships", str(summary.relationship_count))
    table.add_row("Properties", str(summary.property_count))
    table.add_row("Max depth", str(summary.max_depth))
    table.add_row("Average depth", f"{depth_stats.average_depth:.2f}")
    console.print(table)

    by_depth = Table(title="Types by depth")
    by_depth.add_column("Depth", justify="right")
    by_depth.add_column("Types", justify="right")
    for depth, count in depth_stats.type_count_by_depth.items():
        by_depth.add_row(str(depth), str(count))
    console.print(by_depth)


@app.command("parse")
def parse(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Declarations file to parse."),
):
    """Print the declaration records found in FILE as JSON."""
    try:
        declarations = DeclarationParser().parse_file(file)
    except OSError as exc:
        console.print(f"[red]✗[/red] Could not read {escape(str(file))}: {escape(str(exc))}")
        raise typer.Exit(1)

    payload: Dict[str, dict] = {
        name: {
            "parent": record.parent_name,
            "line": record.line,
            "fields": {
                field_name: {
                    "type": info.type,
                    "optional": info.optional,
                    "kind": info.kind.value,
                }
                for field_name, info in record.fields.items()
            },
        }
        for name, record in declarations.items()
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command("export")
def export_graph(
    workspace: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Workspace root."),
    fmt: str = typer.Option("json", "--format", "-f", help="Export format: json, dot or html."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path."),
    focus: str = typer.Option("", "--focus", help="Only export types matching this text and their neighbours."),
    root_suffix: Optional[str] = typer.Option(None, "--root-suffix", help="Name suffix marking root types."),
    layout: Optional[str] = typer.Option(
        None, "--layout", help="DOT layout: force, tree or cluster (default from config)."
    ),
    node_size: Optional[str] = typer.Option(
        None, "--node-size", help="Node sizing: propertyCount or uniform (default from config)."
    ),
):
    """Export the type graph to JSON (renderer format), Graphviz DOT or HTML."""
    fmt = fmt.lower()
    if fmt not in EXPORT_FORMATS:
        raise typer.BadParameter(f"Format must be one of: {', '.join(EXPORT_FORMATS)}")
    try:
        if layout is not None:
            layout = config_manager.validate_value("layout", layout)
        if node_size is not None:
            node_size = config_manager.validate_value("node_size", node_size)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))

    provider = _load(workspace, root_suffix)
    graph = provider.get_graph_data() or GraphData()
    if not graph.nodes:
        _empty_hint()

    if output is None:
        output = Path.cwd() / f"{workspace.resolve().name or 'workspace'}_types.{fmt}"

    if fmt == "dot":
        export_dot(graph, output, focus=focus, layout=layout, node_size=node_size)
    elif fmt == "html":
        export_html(graph, output, focus=focus, node_size=node_size)
    else:
        export_json(graph, output, focus=focus)
    typer.echo(f"Exported {len(graph.nodes)} types to {output}")


if __name__ == "__main__":
    app()
