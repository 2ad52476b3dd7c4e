"""
FILE: lumina/cli/commands/system.py
PURPOSE: System commands (version, undo)
"""

from rich.markup import escape

# Import shared objects from main module
# These will be available after main.py imports this module
from ..main import app, console, open_store, __version__


@app.command()
def version():
    """Show Lumina version."""
    console.print(f"Lumina v{__version__}")


@app.command()
def undo():
    """
    Restore whatever the last delete removed.

    Only the most recent task, note or folder deletion can be undone.
    """
    store = open_store()
    item = store.undo()
    if item is None:
        console.print("[yellow]Nothing to undo[/yellow]")
        return
    console.print(f"[green]Undid:[/green] {escape(item.data.describe())}")
