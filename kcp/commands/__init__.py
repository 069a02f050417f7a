"""
Typer sub-applications for the kcp command groups.
"""

import logging
from functools import wraps

import requests
import typer
from rich.console import Console
from rich.markup import escape

from kcp.exceptions import GenerationError, KcpError, ValidationError, format_error_for_cli
from kcp.util.progress import console

logger = logging.getLogger(__name__)
err_console = Console(stderr=True)

ISSUES_URL = "https://github.com/confluentinc/kcp/issues"


def handle_errors(func):
    """Decorator to handle exceptions in CLI commands with nice formatting."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except KcpError as e:
            logger.debug("Command failed", exc_info=True)
            err_console.print(format_error_for_cli(e))
            raise typer.Exit(1)
        except requests.RequestException as e:
            logger.debug("Command failed", exc_info=True)
            err_console.print(format_error_for_cli(KcpError(f"request failed: {e}")))
            raise typer.Exit(1)
        except OSError as e:
            logger.debug("Command failed", exc_info=True)
            err_console.print(format_error_for_cli(GenerationError(f"failed to write files: {e}")))
            raise typer.Exit(1)
        except Exception as e:
            logger.exception("Unexpected error")
            err_console.print(
                f"[red]Error:[/red] {escape(str(e))}\n\n"
                f"[yellow]This may be a bug. Please report it at:\n{ISSUES_URL}[/yellow]"
            )
            raise typer.Exit(1)

    return wrapper


def parse_bool(value: str, flag: str) -> bool:
    """Parse a ``true|false`` flag value."""
    normalized = value.strip().lower()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no", ""):
        return False
    raise ValidationError(f"invalid value for {flag}: must be 'true' or 'false', got '{value}'")


def print_written(paths, output_dir) -> None:
    console.print(f"[green]✓ Wrote {len(paths)} file(s) to {output_dir}[/green]")
    for path in paths:
        console.print(f"  [dim]{path}[/dim]")
