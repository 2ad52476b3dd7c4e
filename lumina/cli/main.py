"""
FILE: lumina/cli/main.py
PURPOSE: Typer-based CLI for folders, tasks and notes
EXPORTS:
  - app (Typer application)
  - folder_app, note_app, category_app (sub-command groups)
  - console, error_console (Rich consoles)
  - open_store() -> TaskStore
  - build_intake(store) -> TaskIntakeService
  - main() (entry point)
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - lumina.config (settings)
  - lumina.core (store, storage, logging)
  - lumina.intake (parsers, intake service)
NOTES:
  - Each command loads the store, applies one operation and exits;
    the store persists as it mutates
  - The pending undo entry is persisted too, so `lumina undo` works across runs
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
"""

import sys

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..config import get_settings
from ..core.logging import configure_logging
from ..core.storage import FileBlobStore
from ..core.store import TaskStore
from ..intake.inference import get_inference_client
from ..intake.remote_parser import RemoteParser
from ..intake.service import TaskIntakeService

# Typer app setup
app = typer.Typer(
    name="lumina",
    help="Folders of tasks and notes, with natural-language task entry",
    add_completion=False,
    no_args_is_help=True,
)

folder_app = typer.Typer(name="folder", help="Folder management commands")
note_app = typer.Typer(name="note", help="Note commands")
category_app = typer.Typer(name="category", help="Category commands")
app.add_typer(folder_app, name="folder")
app.add_typer(note_app, name="note")
app.add_typer(category_app, name="category")

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)


@app.callback()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info-level log messages"),
):
    """Configure logging before any command runs."""
    level = "INFO" if verbose else get_settings().log_level
    configure_logging(level)


def open_store() -> TaskStore:
    """Load the store from the configured data directory."""
    return TaskStore.load(FileBlobStore(get_settings().data_dir))


def build_intake(store: TaskStore) -> TaskIntakeService:
    """Wire the intake service to the configured inference client (if any)."""
    settings = get_settings()
    parser = RemoteParser(
        client=get_inference_client(settings),
        timeout=settings.inference_timeout,
    )
    return TaskIntakeService(store, parser)


def fail(message: str) -> None:
    """Print an error to stderr and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


# Import command modules to register commands with app
# Commands are decorated with @app.command() in their modules
from .commands import (  # noqa: E402,F401
    # System commands
    version,
    undo,
    # Task commands
    add,
    ls,
    show,
    done,
    status,
    edit,
    rm,
    purge,
    breakdown,
    sub,
    check,
    pomodoro,
    # Folder commands
    folder_add,
    folder_ls,
    folder_edit,
    folder_rm,
    # Note commands
    note_add,
    note_ls,
    note_show,
    note_edit,
    note_rm,
    # Category commands
    category_add,
    category_ls,
    category_rm,
)


def main():
    """Main entry point for CLI."""
    app()

