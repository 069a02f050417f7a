"""
Terminal output shared by the kcp commands: progress bars and summaries.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

console = Console()

T = TypeVar("T")


def create_progress_bar() -> Progress:
    """Transient progress bar on the shared console."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def track(items: Iterable[T], description: str, total: int | None = None) -> Iterator[T]:
    """
    Iterate over items while advancing a progress bar.

    Usage:
        for connector in track(names, "Scanning connectors"):
            scan(connector)

    Args:
        items: Items to iterate
        description: Description to show in progress bar
        total: Number of items (taken from len(items) when omitted)

    Yields:
        Each item of ``items``
    """
    if total is None and hasattr(items, "__len__"):
        total = len(items)  # type: ignore[arg-type]

    progress = create_progress_bar()
    with progress:
        task = progress.add_task(description, total=total)
        for item in items:
            yield item
            progress.update(task, advance=1)


@contextmanager
def operation_status(step: str) -> Iterator[None]:
    """Print ``step`` and whether it finished; errors are re-raised for ``handle_errors``."""
    console.print(f"[bold blue]{step}...[/bold blue]")
    try:
        yield
    except Exception as e:
        console.print(f"[red]✗ {step}: {e}[/red]")
        raise
    console.print(f"[green]✓ {step} done[/green]")


def show_summary(title: str, rows: dict[str, str | int]) -> None:
    """Render scan results as a two-column panel."""
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="cyan")
    grid.add_column()
    for label, value in rows.items():
        grid.add_row(label, str(value))
    console.print(Panel(grid, title=f"[bold]{title}[/bold]", border_style="blue", expand=False))
