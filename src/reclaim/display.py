"""Rich terminal display for reclaim."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from reclaim.categories import CATEGORIES
from reclaim.models import (
    Category,
    CategorySummary,
    CleanableItem,
    CleanupResult,
    DuplicateGroup,
    RiskLevel,
    format_size,
)

console = Console()


def risk_icon(risk_level: RiskLevel) -> str:
    """Get icon for risk level."""
    icons = {
        RiskLevel.SAFE: "[green]✓[/green]",
        RiskLevel.REVIEW: "[yellow]![/yellow]",
    }
    return icons.get(risk_level, "?")


def risk_label(risk_level: RiskLevel) -> str:
    """Get styled label for risk level."""
    labels = {
        RiskLevel.SAFE: "[green]Safe[/green]",
        RiskLevel.REVIEW: "[yellow]Review[/yellow]",
    }
    return labels.get(risk_level, "Unknown")


def show_summaries(summaries: list[CategorySummary] | tuple[CategorySummary, ...]) -> None:
    """Display per-category totals."""
    if not summaries:
        console.print("[green]Nothing to clean - your disk is tidy.[/green]")
        return

    table = Table(title="Cleanable Space", show_header=True, header_style="bold")
    table.add_column("", width=3)
    table.add_column("Category")
    table.add_column("ID", style="dim")
    table.add_column("Items", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Risk")

    total = 0
    for summary in summaries:
        category = CATEGORIES[summary.category]
        mark = "[green]●[/green]" if summary.selected else "[dim]○[/dim]"
        table.add_row(
            mark,
            category.name,
            summary.category.value,
            str(summary.item_count),
            format_size(summary.total_size_bytes),
            risk_label(category.risk_level),
        )
        if summary.selected:
            total += summary.total_size_bytes

    console.print(table)
    console.print(f"[bold]Selected: {format_size(total)}[/bold]")


def show_items(items: list[CleanableItem] | tuple[CleanableItem, ...], limit: int = 25) -> None:
    """Display the largest items."""
    if not items:
        return

    table = Table(title="Largest Items", show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Category", style="dim")
    table.add_column("Size", justify="right")
    table.add_column("Path")

    for item in sorted(items, key=lambda i: i.size_bytes, reverse=True)[:limit]:
        table.add_row(
            item.display_name,
            CATEGORIES[item.category].name,
            format_size(item.size_bytes),
            item.path,
        )

    console.print(table)
    if len(items) > limit:
        console.print(f"[dim]...and {len(items) - limit} more[/dim]")


def show_cleanup_result(result: CleanupResult) -> None:
    """Display the totals of a clean."""
    console.print()
    if result.dry_run:
        console.print("[yellow]DRY RUN - nothing was moved to the Trash[/yellow]")

    verb = "Would free" if result.dry_run else "Freed"
    console.print(
        Panel(
            f"[bold]{verb}:[/bold] {format_size(result.bytes_freed)}\n"
            f"Items removed: {result.items_removed} of {result.items_requested}",
            title="Cleanup Complete",
            border_style="green",
        )
    )
    if result.items_removed < result.items_requested and not result.dry_run:
        console.print(
            "[dim]Some items were skipped (already gone, protected or not permitted).[/dim]"
        )


def show_duplicates(groups: list[DuplicateGroup], limit: int = 20) -> None:
    """Display duplicate groups, largest waste first."""
    if not groups:
        console.print("[green]No duplicate files found.[/green]")
        return

    total_wasted = sum(g.wasted_bytes for g in groups)
    console.print(
        f"[bold]{len(groups)} duplicate groups, {format_size(total_wasted)} reclaimable[/bold]\n"
    )

    for group in groups[:limit]:
        table = Table(
            title=f"{format_size(group.size_bytes)} x {len(group.members)} "
            f"(wasted {format_size(group.wasted_bytes)})",
            show_header=True,
            header_style="bold",
            title_justify="left",
        )
        table.add_column("", width=4)
        table.add_column("Path")
        table.add_column("Modified", justify="right")
        for i, member in enumerate(group.members):
            keep = "[green]keep[/green]" if i == 0 else ""
            table.add_row(keep, member.path, member.modified.strftime("%Y-%m-%d"))
        console.print(table)

    if len(groups) > limit:
        console.print(f"[dim]...and {len(groups) - limit} more groups[/dim]")


def show_category_explanation(category: Category, min_size: int) -> None:
    """Display details for one category."""
    risk_color = "green" if category.risk_level == RiskLevel.SAFE else "yellow"
    console.print(
        Panel(
            f"[bold]{category.name}[/bold]\n"
            f"Risk Level: [{risk_color}]{category.risk_level.value.upper()}[/{risk_color}]",
            border_style=risk_color,
        )
    )

    locations = [loc.path for loc in category.locations] + category.search_roots
    if locations:
        console.print("\n[bold]Paths:[/bold]")
        for path in locations:
            console.print(f"  • {path}")

    console.print(f"\n[bold]What is it?[/bold]\n{category.description}")
    if min_size:
        console.print(f"\n[bold]Reported when larger than:[/bold] {format_size(min_size)}")
    if category.max_age_days:
        console.print(
            f"[bold]Reported when older than:[/bold] {category.max_age_days} days"
        )
    console.print(f"\n[bold]What happens if deleted?[/bold]\n{category.consequences}")
    console.print(f"\n[bold]How to recover?[/bold]\n{category.recovery}")

    if category.edge_cases:
        console.print()
        console.print(Panel(f"[bold]Never touched:[/bold] {category.edge_cases}", border_style="blue"))


def show_scanning_progress() -> Progress:
    """Create progress bar for scanning and cleaning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
    )


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
