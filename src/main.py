"""
1) Load family tree data from a JSON payload or a GEDCOM file.
2) Build the union-node layout graph.
3) Optionally keep only the people within N hops of a proband.
4) Lay the graph out with Graphviz dot.
5) Draw the laid-out graph to an image.
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from config import load_config
from graph import build_graph
from layout import DotLayoutEngine
from log import configure_logging
from orchestrator import LayoutOrchestrator, LayoutState
from parsing import TreeDataError, load_tree_data
from plotting import plot_graph
from validation import lint_tree_data, validate_graph

app = typer.Typer(
    name="family-tree-layout",
    help="Lay out and draw family trees",
    add_completion=False,
)
console = Console()

MAX_LISTED_WARNINGS = 10


def _load(input_path: Path):
    if not input_path.exists():
        console.print(f"[red]Error: File not found: {input_path}[/red]")
        raise typer.Exit(1)
    try:
        return load_tree_data(input_path)
    except (TreeDataError, json.JSONDecodeError, OSError) as exc:
        console.print(f"[red]Error: Could not read {input_path}: {escape(str(exc))}[/red]")
        raise typer.Exit(1)


@app.command()
def render(
    input_path: Path = typer.Argument(..., help="Tree data (.json) or GEDCOM (.ged) file"),
    output: Path = typer.Option(Path("family_tree.png"), "--output", "-o", help="Image to write"),
    proband: str = typer.Option(None, "--proband", "-p", help="Person id to measure depth from"),
    depth: int = typer.Option(None, "--depth", "-d", help="Maximum hops from the proband"),
    center: bool = typer.Option(True, "--center/--no-center", help="Center the graph on (0, 0)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="YAML config file"),
):
    """Lay out a family tree and draw it to an image."""
    config = load_config(config_path)
    configure_logging(config.log_level)

    if depth is not None and proband is None:
        console.print("[red]Error: --depth requires --proband[/red]")
        raise typer.Exit(1)

    data = _load(input_path)
    console.print(
        f"Loaded {len(data.persons)} persons, {len(data.unions)} unions "
        f"and {len(data.parent_child)} parent-child links"
    )

    orchestrator = LayoutOrchestrator(
        engine=DotLayoutEngine(prog=config.graphviz_prog),
        options=config.layout,
        timeout=config.layout_timeout,
        center=center,
    )
    asyncio.run(orchestrator.update(data, proband_id=proband, max_depth=depth))

    if orchestrator.state is LayoutState.ERROR:
        console.print(f"[red]Error: Layout failed: {escape(repr(orchestrator.error))}[/red]")
        raise typer.Exit(1)
    if not orchestrator.nodes:
        console.print("[yellow]Nothing to draw[/yellow]")
        raise typer.Exit(1)

    plot_graph(orchestrator.nodes, orchestrator.edges, output)
    console.print(
        f"[green]Graph with {len(orchestrator.nodes)} nodes and "
        f"{len(orchestrator.edges)} edges saved to {output}[/green]"
    )


@app.command()
def validate(
    input_path: Path = typer.Argument(..., help="Tree data (.json) or GEDCOM (.ged) file"),
):
    """Check tree data and the graph built from it."""
    data = _load(input_path)
    nodes, edges = build_graph(data)
    result = validate_graph(nodes, edges)
    warnings = result.errors + lint_tree_data(data)

    if warnings:
        console.print(f"Found {len(warnings)} validation warnings:")
        for w in warnings[:MAX_LISTED_WARNINGS]:
            console.print(f"  - {escape(w)}")
        if len(warnings) > MAX_LISTED_WARNINGS:
            console.print(f"  ... and {len(warnings) - MAX_LISTED_WARNINGS} more")
    else:
        console.print("[green]No validation issues found[/green]")

    if not result.valid:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
