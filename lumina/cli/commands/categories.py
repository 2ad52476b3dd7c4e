"""
FILE: lumina/cli/commands/categories.py
PURPOSE: Category commands (category add, category ls, category rm)
"""

import typer
from rich.markup import escape

from ..main import category_app, console, open_store, fail
from ...core.exceptions import LuminaError


@category_app.command("add")
def category_add(name: str = typer.Argument(..., help="Category name")):
    """Add a category."""
    try:
        if open_store().add_category(name):
            console.print(f"[green]Added category:[/green] {escape(name.strip())}")
        else:
            console.print(f"[yellow]Category already exists:[/yellow] {escape(name.strip())}")
    except LuminaError as e:
        fail(str(e))


@category_app.command("ls")
def category_ls():
    """List categories."""
    for name in open_store().categories:
        console.print(name, markup=False)


@category_app.command("rm")
def category_rm(name: str = typer.Argument(..., help="Category name")):
    """Remove a category. Tasks already using it keep it."""
    if not open_store().delete_category(name):
        fail(f"Category '{name}' not found")
    console.print(f"[green]Removed category:[/green] {escape(name)}")
