"""
FILE: lumina/cli/commands/notes.py
PURPOSE: Note commands (note add, note ls, note show, note edit, note rm)
"""

from typing import Optional

import typer
from rich.markup import escape
from rich.panel import Panel

from ..main import note_app, console, error_console, open_store, fail
from ...core.exceptions import LuminaError
from ...core.filters import folder_notes
from ...formatting import note_table, short_id

FOLDER_OPTION_HELP = "Folder name or ID (or set LUMINA_FOLDER)"


@note_app.command("add")
def note_add(
    title: str = typer.Argument(..., help="Note title"),
    content: str = typer.Argument("", help="Note body"),
    folder: Optional[str] = typer.Option(None, "--folder", "-f", envvar="LUMINA_FOLDER", help=FOLDER_OPTION_HELP),
):
    """
    Add a note to a folder.

    Example:
        lumina note add "Ideas" "Try the new layout" -f Work
    """
    try:
        store = open_store()
        if not folder:
            error_console.print("[yellow]No folder selected[/yellow] - pass --folder or set LUMINA_FOLDER")
            return
        note = store.add_note(store.find_folder(folder).id, title, content)
        console.print(f"[green]Created note [bold]{short_id(note.id)}[/bold]:[/green] {escape(note.title)}")
    except LuminaError as e:
        fail(str(e))


@note_app.command("ls")
def note_ls(
    folder: Optional[str] = typer.Option(None, "--folder", "-f", envvar="LUMINA_FOLDER", help=FOLDER_OPTION_HELP),
):
    """List a folder's notes, most recently updated first."""
    try:
        store = open_store()
        if not folder:
            error_console.print("[yellow]No folder selected[/yellow] - pass --folder or set LUMINA_FOLDER")
            return
        notes = folder_notes(store.notes, store.find_folder(folder).id)
        if not notes:
            console.print("[dim]No notes found[/dim]")
            return
        console.print(note_table(notes))
    except LuminaError as e:
        fail(str(e))


@note_app.command("show")
def note_show(note_id: str = typer.Argument(..., help="Note ID (or unique prefix)")):
    """Print a note."""
    try:
        note = open_store().find_note(note_id)
        console.print(Panel(escape(note.content) or "[dim](empty)[/dim]", title=escape(note.title), expand=False))
    except LuminaError as e:
        fail(str(e))


@note_app.command("edit")
def note_edit(
    note_id: str = typer.Argument(..., help="Note ID (or unique prefix)"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    content: Optional[str] = typer.Option(None, "--content", help="Replace the body"),
    favorite: Optional[bool] = typer.Option(None, "--favorite/--no-favorite", help="Mark or unmark as favorite"),
):
    """Edit a note."""
    try:
        store = open_store()
        note = store.update_note(store.find_note(note_id).id, title=title, content=content, is_favorite=favorite)
        console.print(f"[green]Updated note:[/green] {escape(note.title)}")
    except LuminaError as e:
        fail(str(e))


@note_app.command("rm")
def note_rm(note_id: str = typer.Argument(..., help="Note ID (or unique prefix)")):
    """Delete a note (undo with `lumina undo`)."""
    try:
        store = open_store()
        note = store.find_note(note_id)
        store.delete_note(note.id)
        console.print(f"[green]Deleted note:[/green] {escape(note.title)} [dim](lumina undo to restore)[/dim]")
    except LuminaError as e:
        fail(str(e))
