"""CampaignTree CLI - typer application entry point."""

from __future__ import annotations

import atexit
import shutil
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from campaigntree.config import (
    CONFIG_FILENAME,
    CampaignConfigError,
    create_default_config,
    load_campaign_config,
    write_campaign_config,
)
from campaigntree.graph.errors import (
    BaselineLoadError,
    CodecError,
    GraphIntegrityError,
)
from campaigntree.graph.graph import load_baseline
from campaigntree.graph.models import NodeStatus
from campaigntree.observability import (
    close_file_logging,
    configure_logging,
    get_logger,
    get_logs_dir,
)
from campaigntree.persistence.store import JsonFileProgressStore
from campaigntree.session import Session
from campaigntree.visibility.types import ColorClass

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="ct",
    help="CampaignTree: track progress through a branching campaign scenario tree.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

DEFAULT_CAMPAIGN_DIR = Path()

_COLOR_STYLES: dict[ColorClass, str] = {
    ColorClass.NEUTRAL: "white",
    ColorClass.DONE: "blue",
    ColorClass.OUTLINE: "dim",
    ColorClass.SELECTED: "magenta",
    ColorClass.BLOCKED_GREY: "bright_black",
    ColorClass.BLOCKED_RED: "red",
}

# Global state for logging flags (set by callback, used by commands)
_verbose: int = 0
_log_enabled: bool = False
_campaign_dir: Path = DEFAULT_CAMPAIGN_DIR


class GraphFormat(StrEnum):
    DOT = "dot"
    MERMAID = "mermaid"


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log: Annotated[
        bool,
        typer.Option("--log", help="Enable file logging to {campaign}/logs/debug.jsonl."),
    ] = False,
    campaign: Annotated[
        Path,
        typer.Option(
            "--campaign",
            "-c",
            help="Campaign directory (default: current directory).",
            envvar="CT_CAMPAIGN_DIR",
        ),
    ] = DEFAULT_CAMPAIGN_DIR,
) -> None:
    """CampaignTree: track progress through a branching campaign scenario tree."""
    global _verbose, _log_enabled, _campaign_dir
    _verbose = verbose
    _log_enabled = log
    _campaign_dir = campaign

    configure_logging(verbosity=verbose)


def _configure_campaign_logging(campaign_path: Path) -> None:
    if _log_enabled:
        configure_logging(verbosity=_verbose, log_to_file=True, project_path=campaign_path)
        atexit.register(close_file_logging)
        logs_dir = get_logs_dir()
        if logs_dir is not None:
            log_file = logs_dir / "debug.jsonl"
            get_logger(__name__).info("file_logging_enabled", path=str(log_file))
            err_console.print(f"[dim]Logging to {escape(str(log_file))}[/dim]")


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def _open_session() -> Session:
    """Load config, baseline and saved progress for the current campaign.

    Raises:
        typer.Exit: If the campaign can't be loaded.
    """
    campaign_path = _campaign_dir
    if not (campaign_path / CONFIG_FILENAME).exists():
        raise _fail(
            f"No {CONFIG_FILENAME} found in '{campaign_path}'. "
            "Run 'ct init <name>' first or pass --campaign."
        )
    _configure_campaign_logging(campaign_path)

    try:
        config = load_campaign_config(campaign_path)
        baseline = load_baseline(config.baseline_path(campaign_path))
    except (CampaignConfigError, BaselineLoadError, GraphIntegrityError) as e:
        raise _fail(str(e)) from e

    store = JsonFileProgressStore(config.storage_path(campaign_path))
    return Session.open(
        baseline,
        store,
        key=config.storage.get_key(),
        image_template=config.image_template,
    )


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from campaigntree import __version__

    console.print(f"CampaignTree v{__version__}")


@app.command()
def init(
    name: Annotated[str, typer.Argument(help="Campaign name")],
    path: Annotated[
        Path | None,
        typer.Option("--path", "-p", help="Parent directory for the campaign (default: .)."),
    ] = None,
    baseline: Annotated[
        Path | None,
        typer.Option("--baseline", "-b", help="Baseline scenarios.json to copy into the campaign."),
    ] = None,
) -> None:
    """Create a campaign directory with campaign.yaml."""
    parent_dir = path if path is not None else Path()
    campaign_path = parent_dir / name
    if campaign_path.exists():
        raise _fail(f"Directory '{campaign_path}' already exists")

    if baseline is not None and not baseline.exists():
        raise _fail(f"Baseline dataset '{baseline}' not found")

    campaign_path.mkdir(parents=True)
    config = create_default_config(name)
    if baseline is not None:
        shutil.copyfile(baseline, campaign_path / config.baseline)
    write_campaign_config(config, campaign_path)

    console.print(f"[green]✓[/green] Created campaign: [bold]{name}[/bold]")
    console.print(f"  Location: {campaign_path.absolute()}")
    if baseline is None:
        console.print(f"  Place the baseline dataset at {campaign_path / config.baseline}")


@app.command()
def show(
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Include hidden scenarios.")
    ] = False,
    select: Annotated[
        str | None, typer.Option("--select", "-s", help="Highlight a scenario.")
    ] = None,
) -> None:
    """Show scenarios with their status and derived display state."""
    session = _open_session()
    if select is not None:
        try:
            if not session.select(select):
                console.print(
                    f"[yellow]Scenario {select} is hidden and can't be selected.[/yellow]"
                )
        except GraphIntegrityError as e:
            raise _fail(str(e)) from e

    attrs = session.render()
    table = Table(title="Scenario Tree")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Scenario")
    table.add_column("Status", style="bold")
    table.add_column("Display")
    table.add_column("Notes", style="dim")

    for node in session.graph:
        node_attrs = attrs.nodes[node.id]
        if not (node_attrs.visible or show_all):
            continue
        style = _COLOR_STYLES[node_attrs.color_class]
        display = f"[{style}]{node_attrs.color_class.value}[/{style}]"
        if not node_attrs.visible:
            display = "[dim]hidden[/dim]"
        table.add_row(node.id, node_attrs.label, node.data.status.value, display, node.data.notes)

    visible_edges = len(attrs.visible_edge_ids())
    console.print()
    console.print(table)
    console.print(f"[dim]{visible_edges} visible edge(s)[/dim]")


@app.command("set-status")
def set_status(
    node_id: Annotated[str, typer.Argument(help="Scenario id")],
    status: Annotated[NodeStatus, typer.Argument(help="New status")],
) -> None:
    """Set a scenario's status and save."""
    session = _open_session()
    try:
        session.set_status(node_id, status)
    except GraphIntegrityError as e:
        raise _fail(str(e)) from e
    console.print(f"[green]✓[/green] Scenario {node_id} is now [bold]{status.value}[/bold]")


@app.command()
def move(
    node_id: Annotated[str, typer.Argument(help="Scenario id")],
    x: Annotated[int, typer.Argument(help="X coordinate")],
    y: Annotated[int, typer.Argument(help="Y coordinate")],
) -> None:
    """Move a scenario on the tree layout and save."""
    session = _open_session()
    try:
        session.set_position(node_id, x, y)
    except GraphIntegrityError as e:
        raise _fail(str(e)) from e
    console.print(f"[green]✓[/green] Scenario {node_id} moved to ({x}, {y})")


@app.command()
def note(
    node_id: Annotated[str, typer.Argument(help="Scenario id")],
    text: Annotated[str, typer.Argument(help="Notes text (empty string clears)")],
) -> None:
    """Replace a scenario's notes and save."""
    session = _open_session()
    try:
        session.set_notes(node_id, text)
    except GraphIntegrityError as e:
        raise _fail(str(e)) from e
    console.print(f"[green]✓[/green] Notes saved for scenario {node_id}")


@app.command("export")
def export_progress(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to file instead of stdout.")
    ] = None,
) -> None:
    """Export saved progress as a version 2 document."""
    session = _open_session()
    text = session.export()
    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]✓[/green] Progress exported to {output}")


@app.command("import")
def import_progress(
    source: Annotated[Path, typer.Argument(help="Saved progress document (version 1 or 2)")],
) -> None:
    """Replace progress with an exported document."""
    if not source.exists():
        raise _fail(f"File '{source}' not found")
    session = _open_session()
    try:
        session.import_(source.read_text(encoding="utf-8"))
    except CodecError as e:
        raise _fail(str(e)) from e
    console.print(f"[green]✓[/green] Progress imported from {source}")


@app.command()
def reset(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
) -> None:
    """Discard all progress."""
    session = _open_session()
    if not yes and not typer.confirm("Discard all saved progress?", default=False):
        raise typer.Exit(0)
    session.reset()
    console.print("[green]✓[/green] Progress reset")


@app.command()
def graph(
    fmt: Annotated[
        GraphFormat, typer.Option("--format", "-f", help="Output format.")
    ] = GraphFormat.DOT,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to file instead of stdout.")
    ] = None,
) -> None:
    """Render the visible scenario tree as DOT or Mermaid markup."""
    from campaigntree.visualization import build_tree_view, render_dot, render_mermaid

    log = get_logger(__name__)
    session = _open_session()
    view = build_tree_view(session.graph, session.render())
    text = render_dot(view) if fmt is GraphFormat.DOT else render_mermaid(view)
    log.debug("graph_exported", format=fmt.value, nodes=len(view.nodes))

    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]✓[/green] Graph written to {output}")
