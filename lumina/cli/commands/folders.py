"""
FILE: lumina/cli/commands/folders.py
PURPOSE: Folder commands (folder add, folder ls, folder edit, folder rm)
"""

from typing import Optional

import typer
from rich.markup import escape

from ..main import folder_app, console, open_store, fail
from ...core.exceptions import LuminaError
from ...core.models import FolderTheme
from ...formatting import folder_table, short_id


@folder_app.command("add")
def folder_add(name: str = typer.Argument(..., help="Folder name")):
    """
    Create a folder.

    Example:
        lumina folder add Work
    """
    try:
        store = open_store()
        folder = store.create_folder(name)
        console.print(f"[green]Created folder [bold]{short_id(folder.id)}[/bold]:[/green] {escape(folder.name)}")
    except LuminaError as e:
        fail(str(e))


@folder_app.command("ls")
def folder_ls(
    favorites: bool = typer.Option(False, "--favorites", help="Only favorite folders"),
):
    """List folders with task counts."""
    store = open_store()
    folders = [f for f in store.folders if f.is_favorite] if favorites else store.folders

    if not folders:
        console.print("[dim]No folders yet - create one with: lumina folder add <name>[/dim]")
        return
    console.print(folder_table(folders, store.tasks))


@folder_app.command("edit")
def folder_edit(
    folder: str = typer.Argument(..., help="Folder name or ID"),
    name: Optional[str] = typer.Option(None, "--name", help="Rename the folder"),
    theme: Optional[str] = typer.Option(
        None, "--theme", help=f"One of: {', '.join(t.value for t in FolderTheme)}"
    ),
    favorite: Optional[bool] = typer.Option(None, "--favorite/--no-favorite", help="Mark or unmark as favorite"),
    first: bool = typer.Option(False, "--first", help="Move the folder to the top of the list"),
):
    """
    Rename, recolor, favorite or reorder a folder.

    Example:
        lumina folder edit Work --theme red --favorite
    """
    try:
        store = open_store()
        target = store.find_folder(folder)
        store.update_folder(target.id, name=name, theme=theme, is_favorite=favorite)
        if first:
            store.reorder_folders([target.id])
        console.print(f"[green]Updated folder:[/green] {escape(target.name)}")
    except LuminaError as e:
        fail(str(e))


@folder_app.command("rm")
def folder_rm(
    folder: str = typer.Argument(..., help="Folder name or ID"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
):
    """
    Delete a folder with all of its tasks and notes (undo with `lumina undo`).

    Example:
        lumina folder rm Work --yes
    """
    try:
        store = open_store()
        target = store.find_folder(folder)

        if not yes:
            response = typer.confirm(f"Delete folder '{target.name}' and everything in it?", default=False)
            if not response:
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)

        item = store.delete_folder(target.id)
        console.print(f"[green]{escape(item.data.describe())}[/green] [dim](lumina undo to restore)[/dim]")
    except LuminaError as e:
        fail(str(e))
