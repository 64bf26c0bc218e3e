"""CLI interface for reclaim."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from reclaim import __version__
from reclaim.categories import CATEGORIES, get_category
from reclaim.config import add_protection, load_config, remove_protection, save_config
from reclaim.display import (
    confirm_action,
    console,
    show_category_explanation,
    show_cleanup_result,
    show_duplicates,
    show_items,
    show_scanning_progress,
    show_summaries,
)
from reclaim.engine import ReclaimEngine
from reclaim.models import EngineState, RiskLevel, format_size

# Create Typer app
app = typer.Typer(
    name="reclaim",
    help="Find and safely remove reclaimable disk space",
    add_completion=False,
)


def setup_logging(verbose: bool) -> None:
    """Route log records through rich, on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"reclaim version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log skipped and failed items."),
) -> None:
    """reclaim - find and safely remove reclaimable disk space."""
    setup_logging(verbose)


@contextmanager
def track_progress(engine: ReclaimEngine, description: str) -> Iterator[None]:
    """Show a progress bar fed by engine state snapshots."""
    with show_scanning_progress() as progress:
        task = progress.add_task(description, total=100)

        def on_state(state: EngineState) -> None:
            progress.update(
                task,
                completed=state.progress * 100,
                description=state.current_task or description,
            )

        unsubscribe = engine.subscribe(on_state)
        try:
            yield
        finally:
            unsubscribe()


def run_scan(engine: ReclaimEngine) -> EngineState:
    """Run a full scan with a progress bar."""
    with track_progress(engine, "Scanning..."):
        return engine.scan_all().result()


def unknown_category(category: str) -> None:
    """Report an unknown category and exit."""
    console.print(f"[red]Unknown category: {category}[/red]")
    console.print("\nAvailable categories:")
    for cat in CATEGORIES.values():
        console.print(f"  • [bold]{cat.id.value}[/bold] - {cat.name}")
    raise typer.Exit(1)


@app.command()
def scan(
    items: bool = typer.Option(False, "--items", "-i", help="Also list the largest items"),
) -> None:
    """Scan every category and show what can be reclaimed."""
    console.print("[bold blue]Scanning for reclaimable space...[/bold blue]\n")

    with ReclaimEngine() as engine:
        state = run_scan(engine)

    console.print()
    show_summaries(state.summaries)
    if items:
        console.print()
        show_items(state.items)

    if state.items:
        console.print()
        console.print("[dim]Run [bold]reclaim clean[/bold] to clean safe categories[/dim]")
        console.print(
            "[dim]Run [bold]reclaim explain <category>[/bold] to learn more about a category[/dim]"
        )


@app.command()
def clean(
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="Clean one category only"
    ),
    all_categories: bool = typer.Option(
        False, "--all", "-a", help="Include categories that need review"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate without deleting"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
) -> None:
    """Scan, then move the selected items to the Trash.

    Without options only safe categories are cleaned.
    """
    cat = None
    if category:
        cat = get_category(category)
        if cat is None:
            unknown_category(category)

    with ReclaimEngine() as engine:
        state = run_scan(engine)

        if cat is not None:
            engine.deselect_all()
            engine.toggle_category(cat.id)
        elif not all_categories:
            engine.deselect_all()
            for summary in state.summaries:
                if CATEGORIES[summary.category].risk_level == RiskLevel.SAFE:
                    engine.toggle_category(summary.category)

        state = engine.state
        if state.total_cleanable_bytes == 0:
            console.print("\n[yellow]Nothing to clean.[/yellow]")
            raise typer.Exit(0)

        console.print()
        show_summaries(state.summaries)

        if not yes and not dry_run:
            console.print()
            if not confirm_action(
                f"Move {format_size(state.total_cleanable_bytes)} to the Trash?"
            ):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)

        with track_progress(engine, "Cleaning..."):
            if cat is not None:
                result = engine.clean_category(cat.id, dry_run=dry_run).result()
            else:
                result = engine.clean_selected(dry_run=dry_run).result()

    show_cleanup_result(result)


@app.command()
def duplicates(
    directories: Optional[List[Path]] = typer.Argument(
        None, help="Directories to search (default: Downloads, Documents, Desktop)"
    ),
) -> None:
    """Find files with identical content."""
    for directory in directories or []:
        if not directory.is_dir():
            console.print(f"[red]Not a directory: {directory}[/red]")
            raise typer.Exit(1)

    with ReclaimEngine() as engine:
        with console.status("Searching for duplicates...") as status:

            def on_state(state: EngineState) -> None:
                if state.duplicate_task:
                    status.update(state.duplicate_task)

            unsubscribe = engine.subscribe(on_state)
            try:
                groups = engine.scan_for_duplicates(directories).result()
            finally:
                unsubscribe()

    show_duplicates(groups)
    if groups:
        console.print()
        console.print("[dim]Run [bold]reclaim delete <path>[/bold] to trash a copy[/dim]")


@app.command()
def delete(
    path: Path = typer.Argument(..., help="File or folder to move to the Trash"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
) -> None:
    """Move a single path to the Trash."""
    if not yes and not confirm_action(f"Move {path} to the Trash?"):
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)

    with ReclaimEngine() as engine:
        removed = engine.delete_file(str(path))

    if not removed:
        console.print(f"[red]Could not remove {path}[/red]")
        console.print("[dim]It may be missing, protected or outside your home folder.[/dim]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Moved {path} to the Trash")


@app.command()
def explain(
    category: str = typer.Argument(..., help="Category to explain"),
) -> None:
    """Explain a category in detail."""
    cat = get_category(category)
    if cat is None:
        unknown_category(category)

    config = load_config()
    show_category_explanation(cat, config.min_size_for(cat.id))


@app.command(name="list")
def list_categories() -> None:
    """List all cleanup categories."""
    console.print("[bold]Available Categories[/bold]\n")

    safe = [c for c in CATEGORIES.values() if c.risk_level == RiskLevel.SAFE]
    review = [c for c in CATEGORIES.values() if c.risk_level == RiskLevel.REVIEW]

    if safe:
        console.print("[green]Safe to Clean:[/green]")
        for cat in safe:
            console.print(f"  • [bold]{cat.id.value}[/bold] - {cat.name}")
        console.print()

    if review:
        console.print("[yellow]Review Needed:[/yellow]")
        for cat in review:
            console.print(f"  • [bold]{cat.id.value}[/bold] - {cat.name}")
        console.print()

    console.print("[dim]Run [bold]reclaim explain <category>[/bold] for details[/dim]")


@app.command()
def protect(
    path: str = typer.Argument(..., help="Path that must never be cleaned"),
) -> None:
    """Protect a path from scans and deletion."""
    config = load_config()
    result = add_protection(config, path)
    if not result["success"]:
        console.print(f"[red]{result['error']}[/red]")
        raise typer.Exit(1)

    if not save_config(config):
        console.print("[red]Could not save configuration[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Protected {config.expand(path)}")


@app.command()
def unprotect(
    path: str = typer.Argument(..., help="Previously protected path"),
) -> None:
    """Remove a path from the protection list."""
    config = load_config()
    result = remove_protection(config, path)
    if not result["success"]:
        console.print(f"[red]{result['error']}[/red]")
        raise typer.Exit(1)

    if not save_config(config):
        console.print("[red]Could not save configuration[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] No longer protecting {config.expand(path)}")


@app.command()
def protections() -> None:
    """Show protected paths."""
    config = load_config()
    if not config.protected_paths:
        console.print("[dim]No protected paths.[/dim]")
        return

    console.print("[bold]Protected Paths[/bold]\n")
    for path in config.protected_paths:
        console.print(f"  • {path}")


if __name__ == "__main__":
    app()
