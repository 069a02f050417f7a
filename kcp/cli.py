"""
CLI entry point for kcp.
"""

import logging
import subprocess
import sys
from pathlib import Path

import typer
from rich.logging import RichHandler

from kcp import __commit__, __date__, __version__
from kcp.clients.releases import ReleaseChecker, is_newer_version
from kcp.commands import convert, create_asset, handle_errors, scan
from kcp.exceptions import KcpError, WorkspaceNotWritableError
from kcp.util.files import is_writable_dir
from kcp.util.progress import console

app = typer.Typer(
    name="kcp",
    help="Migrate Amazon MSK clusters to Confluent Cloud",
    add_completion=False,
)
app.add_typer(create_asset.app, name="create-asset")
app.add_typer(scan.app, name="scan")
app.add_typer(convert.app, name="convert")

logger = logging.getLogger(__name__)

LOG_FILE = "kcp.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEV_VERSIONS = ("", "dev")
PACKAGE_NAME = "kcp"


def setup_logging(verbose: bool = False) -> None:
    """Log to kcp.log in the current directory and to the terminal."""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(PACKAGE_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(LOG_FILE)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    rich_handler = RichHandler(console=console, show_path=False, markup=False)
    rich_handler.setLevel(level)

    root.addHandler(file_handler)
    root.addHandler(rich_handler)
    root.setLevel(level)
    root.propagate = False


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", envvar="VERBOSE", help="Enable debug logging"
    ),
):
    """kcp: Amazon MSK to Confluent Cloud migration tool."""
    console.print(f"[bold blue]kcp {__version__}[/bold blue]")

    cwd = Path.cwd()
    if not is_writable_dir(cwd):
        error = WorkspaceNotWritableError(str(cwd))
        console.print(f"[red]Error:[/red] {error.message}\n\n[yellow]{error.suggestion}[/yellow]")
        raise typer.Exit(1)

    setup_logging(verbose)
    logger.debug(f"kcp {__version__} ({__commit__}, {__date__}) in {cwd}")


@app.command()
def version():
    """Show version, commit and build date."""
    console.print(f"Version: {__version__}")
    console.print(f"Commit:  {__commit__}")
    console.print(f"Date:    {__date__}")


@app.command()
@handle_errors
def update(
    force: bool = typer.Option(
        False, "--force", envvar="FORCE", help="Update without asking for confirmation"
    ),
    check_only: bool = typer.Option(
        False, "--check-only", envvar="CHECK_ONLY", help="Only check whether an update exists"
    ),
):
    """Update kcp to the latest release."""
    if __version__ in DEV_VERSIONS and not force:
        console.print(
            "[yellow]⚠ Development version detected, skipping update check. "
            "Use `--force` to install the latest version.[/yellow]"
        )
        return

    latest = ReleaseChecker().get_latest_version()
    if not is_newer_version(latest, __version__):
        console.print(
            f"[green]✓ Your installed version ({__version__}) is already the latest available[/green]"
        )
        return

    console.print(f"[bold]New version available: {latest}[/bold] (installed {__version__})")
    if check_only:
        return

    if not force and not typer.confirm("Do you want to update now?", default=False):
        console.print("[yellow]Update cancelled[/yellow]")
        return

    command = [sys.executable, "-m", "pip", "install", "--upgrade", PACKAGE_NAME]
    logger.info(f"Running {' '.join(command)}")
    result = subprocess.run(command, check=False)
    if result.returncode != 0:
        raise KcpError(
            f"update failed: pip exited with status {result.returncode}",
            f"Run the upgrade manually:\n  {' '.join(command)}",
        )

    console.print(f"[green]✓ Successfully updated to version {latest}[/green]")


if __name__ == "__main__":
    app()
