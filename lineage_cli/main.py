"""
Lineage CLI

Command-line interface for the lineage engine. Reads job records from a
JSON file (a saved API response) and answers lineage questions about them.

Commands:
    lineage summary              Show counts and health of the lineage graph
    lineage paths <from> <to>    List every path between two nodes
    lineage deps <entity>        Show producers and consumers of an entity
    lineage jobs <entity>        List jobs reading or writing an entity
    lineage export               Write the {nodes, links} export as JSON
    lineage diagram              Print a Mermaid diagram of the graph

Usage:
    $ lineage summary -r dataflows.json
    $ lineage paths raw_orders revenue_report -r dataflows.json
    $ LINEAGE_RECORDS=dataflows.json lineage diagram --focus clean_orders --depth 2
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from lineage import __version__
from lineage.export import export_graph, render_diagram
from lineage.graph import LineageGraph, build_lineage_graph
from lineage.models import DependencySide, LineageNode
from lineage.query import dependencies_of, jobs_using, summarize_lineage, trace_paths
from lineage.records import RecordLoadError, load_records

# Initialize Typer app and Rich console
app = typer.Typer(
    name="lineage",
    help="Lineage: trace how data moves through pipeline jobs",
    add_completion=False,
)
console = Console()


# Defaults
DEFAULT_MAX_NODES = 50
DEFAULT_FOCUS_DEPTH = 2
RECORDS_ENVVAR = "LINEAGE_RECORDS"
MAX_NODES_ENVVAR = "LINEAGE_MAX_NODES"

RecordsOption = typer.Option(
    ...,
    "--records",
    "-r",
    help="JSON file holding the job records",
    envvar=RECORDS_ENVVAR,
    exists=True,
    file_okay=True,
    dir_okay=False,
    resolve_path=True,
)


def _load_graph(records_path: Path) -> LineageGraph:
    """Load records and build the graph, exiting with a message on failure."""
    try:
        records = load_records(records_path)
    except RecordLoadError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    graph = build_lineage_graph(records)
    if graph.skipped_records:
        console.print(
            f"[yellow]⚠️  Skipped {graph.skipped_records} malformed record(s)[/yellow]"
        )
    return graph


def _require_node(graph: LineageGraph, node_id: str) -> LineageNode:
    node = graph.get_node(node_id)
    if node is None:
        matches = [candidate for candidate in graph.nodes if node_id in candidate]
        if matches:
            console.print(f"[yellow]'{node_id}' not found. Did you mean:[/yellow]")
            for match in matches[:5]:
                console.print(f"   • {match}")
        else:
            console.print(f"[red]'{node_id}' not found in the lineage graph.[/red]")
        raise typer.Exit(1)
    return node


def _write_or_print_json(data: Any, output: Optional[Path]) -> None:
    if output is None:
        console.print_json(data=data)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(data, indent=2), encoding="utf-8")
    console.print(f"[green]✓[/green] Wrote {output}")


@app.command()
def summary(records: Path = RecordsOption) -> None:
    """
    Show counts and health of the lineage graph.
    """
    graph = _load_graph(records)
    stats = summarize_lineage(graph)

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Label", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Jobs", str(stats.total_jobs))
    table.add_row("Entities", str(stats.total_entities))
    table.add_row("Edges", str(stats.total_edges))
    table.add_row("Active jobs", str(stats.active_jobs))
    table.add_row("Failed jobs", str(stats.failed_jobs))
    table.add_row("Source entities", str(stats.source_entities))
    table.add_row("Sink entities", str(stats.sink_entities))
    table.add_row("Isolated jobs", str(stats.isolated_jobs))
    table.add_row("Avg inputs per job", f"{stats.avg_inputs_per_job:.2f}")
    table.add_row("Avg outputs per job", f"{stats.avg_outputs_per_job:.2f}")
    table.add_row("Acyclic", "yes" if stats.is_acyclic else "[yellow]no[/yellow]")

    panel = Panel(table, title="[bold green]Lineage Summary[/bold green]", border_style="green")
    console.print(panel)


@app.command()
def paths(
    from_id: str = typer.Argument(..., help="ID of the node paths start at"),
    to_id: str = typer.Argument(..., help="ID of the node paths end at"),
    records: Path = RecordsOption,
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        "-d",
        min=0,
        help="Ignore paths longer than this many edges",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=0,
        help="Stop after this many paths",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print paths as JSON"),
) -> None:
    """
    List every simple path between two nodes.
    """
    graph = _load_graph(records)
    _require_node(graph, from_id)
    _require_node(graph, to_id)

    found = trace_paths(graph, from_id, to_id, max_depth=max_depth, limit=limit)

    if as_json:
        console.print_json(data=[path.to_dict() for path in found])
        return

    if not found:
        console.print(f"[yellow]No path from {from_id} to {to_id}.[/yellow]")
        return

    console.print(f"\n[bold blue]Paths from {from_id} to {to_id}[/bold blue] ({len(found)})\n")
    for index, path in enumerate(found, start=1):
        chain = " → ".join(node.label for node in path.nodes)
        console.print(f"  {index}. {chain} [dim](distance {path.distance})[/dim]")


def _side_table(title: str, side: DependencySide) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Type", style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    for node in side.jobs + side.entities:
        table.add_row(node.type.value, node.id, node.label)
    return table


@app.command()
def deps(
    entity_id: str = typer.Argument(..., help="ID of the data entity"),
    records: Path = RecordsOption,
    as_json: bool = typer.Option(False, "--json", help="Print dependencies as JSON"),
) -> None:
    """
    Show the jobs producing and consuming an entity, one job deep.
    """
    graph = _load_graph(records)
    node = _require_node(graph, entity_id)

    dependencies = dependencies_of(graph, entity_id)
    if dependencies is None:
        console.print(
            f"[yellow]{node.label} is a job; dependencies are only defined for entities.[/yellow]"
        )
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=dependencies.to_dict())
        return

    console.print(f"\n[bold]Entity:[/bold] {node.label} [dim]({node.id})[/dim]\n")
    if dependencies.upstream.is_empty:
        console.print("[dim]No upstream producers.[/dim]")
    else:
        console.print(_side_table("Upstream", dependencies.upstream))
    if dependencies.downstream.is_empty:
        console.print("[dim]No downstream consumers.[/dim]")
    else:
        console.print(_side_table("Downstream", dependencies.downstream))


@app.command()
def jobs(
    entity_id: str = typer.Argument(..., help="ID of the data entity"),
    records: Path = RecordsOption,
) -> None:
    """
    List the jobs that read or write an entity.
    """
    graph = _load_graph(records)
    _require_node(graph, entity_id)

    related = jobs_using(graph, entity_id)
    if not related:
        console.print(f"[yellow]No jobs use {entity_id}.[/yellow]")
        return

    console.print(f"\n[bold]Jobs using {entity_id}[/bold] ({len(related)})")
    for job in related:
        status = job.metadata.status if job.metadata else None
        suffix = f" [dim]{status}[/dim]" if status else ""
        console.print(f"   • {job.label} [cyan]({job.id})[/cyan]{suffix}")


@app.command()
def export(
    records: Path = RecordsOption,
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write JSON here instead of printing it",
        dir_okay=False,
    ),
) -> None:
    """
    Export the graph as {nodes, links} JSON for graph-drawing tools.
    """
    graph = _load_graph(records)
    _write_or_print_json(export_graph(graph), output)


@app.command()
def diagram(
    records: Path = RecordsOption,
    max_nodes: int = typer.Option(
        DEFAULT_MAX_NODES,
        "--max-nodes",
        "-m",
        min=0,
        envvar=MAX_NODES_ENVVAR,
        help="Maximum number of node declarations",
    ),
    focus: Optional[str] = typer.Option(
        None,
        "--focus",
        "-f",
        help="Only draw the neighborhood of this node, highlighted",
    ),
    depth: int = typer.Option(
        DEFAULT_FOCUS_DEPTH,
        "--depth",
        min=0,
        help="Hops around --focus to include",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the diagram here instead of printing it",
        dir_okay=False,
    ),
) -> None:
    """
    Print a Mermaid diagram of the lineage graph.
    """
    graph = _load_graph(records)

    if focus is not None:
        _require_node(graph, focus)
        graph = graph.neighborhood(focus, depth)

    text = render_diagram(graph, max_nodes=max_nodes, highlight=focus)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {output}")
        return

    # Plain echo: Mermaid brackets would be read as Rich markup
    typer.echo(text)


# Version and logging
def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]Lineage[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log engine activity to stderr",
    ),
) -> None:
    """
    Lineage: trace how data moves through pipeline jobs.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


if __name__ == "__main__":
    app()
