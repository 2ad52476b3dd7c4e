"""
FILE: lumina/cli/commands/tasks.py
PURPOSE: Task commands (add, ls, show, done, status, edit, rm, purge,
         breakdown, sub, check, pomodoro)
"""

import asyncio
import json
from typing import Optional

import typer
from rich.markup import escape
from rich.panel import Panel

from ..main import app, console, error_console, open_store, build_intake, fail
from ...core.exceptions import LuminaError
from ...core.filters import DATE_FILTERS, STATUS_FILTERS, filter_tasks, parse_due_date, split_by_completion
from ...core.models import Priority
from ...core.store import TaskStore
from ...formatting import TaskFormatter, format_due, format_duration, short_id
from ...intake.service import TaskOverrides

FOLDER_OPTION_HELP = "Folder name or ID (or set LUMINA_FOLDER)"


def _active_folder_id(store: TaskStore, folder: Optional[str]) -> Optional[str]:
    """Resolve --folder to an ID; None when no folder was given."""
    if not folder:
        return None
    return store.find_folder(folder).id


def _priority(value: Optional[str]) -> Optional[Priority]:
    if value is None:
        return None
    try:
        return Priority.coerce(value)
    except ValueError:
        fail(f"Invalid priority '{value}'. Must be one of: low, medium, high")


def _due_date(value: Optional[str]) -> Optional[str]:
    """Validate a --due value; exits with an error if it isn't a date."""
    if value is None:
        return None
    value = value.strip()
    if parse_due_date(value) is None:
        fail(f"Invalid due date '{value}'. Use YYYY-MM-DD or an ISO date-time")
    return value


@app.command()
def add(
    text: str = typer.Argument(..., help="Task in plain words, e.g. 'call dentist tomorrow urgent'"),
    folder: Optional[str] = typer.Option(None, "--folder", "-f", envvar="LUMINA_FOLDER", help=FOLDER_OPTION_HELP),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="Override parsed priority (low/medium/high)"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Override parsed category"),
    due: Optional[str] = typer.Option(None, "--due", "-d", help="Override parsed due date (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a task from free text.

    Dates ("tomorrow", "in 3 days"), priority ("urgent", "low") and
    category keywords are pulled out of the text. With the Claude CLI
    installed the text is parsed by the model instead.

    Example:
        lumina add "Buy milk tomorrow urgent" --folder Home
        lumina add "Quarterly report" -f Work --due 2026-03-31 -p high
    """
    due = _due_date(due)
    try:
        store = open_store()
        folder_id = _active_folder_id(store, folder)
        if folder_id is None:
            error_console.print("[yellow]No folder selected[/yellow] - pass --folder or set LUMINA_FOLDER")
            return

        overrides = TaskOverrides(priority=_priority(priority), category=category, due_date=due)
        task = asyncio.run(build_intake(store).create_task(text, overrides, folder_id))

        if json_output:
            console.print(task.to_json())
        else:
            due_text = f" due {escape(task.due_date)}" if task.due_date else ""
            console.print(
                f"[green]Created task [bold]{short_id(task.id)}[/bold]:[/green] {escape(task.title)} "
                f"[dim]({task.priority.value}, {escape(task.category)}{due_text})[/dim]"
            )
    except LuminaError as e:
        fail(str(e))


@app.command()
def ls(
    folder: Optional[str] = typer.Option(None, "--folder", "-f", envvar="LUMINA_FOLDER", help=FOLDER_OPTION_HELP),
    status: str = typer.Option("all", "--status", "-s", help=f"One of: {', '.join(STATUS_FILTERS)}"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="Only this priority"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only this category"),
    date: str = typer.Option("all", "--date", help=f"One of: {', '.join(DATE_FILTERS)}"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List a folder's tasks, highest priority first.

    Example:
        lumina ls -f Work
        lumina ls -f Work --status active --date overdue
    """
    try:
        store = open_store()
        folder_id = _active_folder_id(store, folder)
        if folder_id is None:
            error_console.print("[yellow]No folder selected[/yellow] - pass --folder or set LUMINA_FOLDER")
            return

        tasks = filter_tasks(
            store.tasks,
            folder_id,
            status=status,
            priority=_priority(priority),
            category=category,
            date_filter=date,
        )

        if json_output:
            console.print(TaskFormatter.to_json_array(tasks))
            return
        if raw:
            for line in TaskFormatter.to_raw_lines(tasks):
                console.print(line, markup=False)
            return
        if not tasks:
            console.print("[dim]No tasks found[/dim]")
            return

        active, completed = split_by_completion(tasks)
        console.print(TaskFormatter.create_table(active + completed, title=escape(store.get_folder(folder_id).name)))
        console.print(f"\n[dim]{len(active)} active, {len(completed)} completed[/dim]")
    except LuminaError as e:
        fail(str(e))


@app.command()
def show(task_id: str = typer.Argument(..., help="Task ID (or unique prefix)")):
    """Show everything about one task."""
    try:
        store = open_store()
        task = store.find_task(task_id)
        folder = store.get_folder(task.folder_id)

        lines = [
            f"[bold]{escape(task.title)}[/bold]",
            "",
            f"ID:        {task.id}",
            f"Folder:    {escape(folder.name) if folder else '-'}",
            f"Status:    {task.status.value}",
            f"Priority:  {task.priority.value}",
            f"Category:  {escape(task.category)}",
            f"Due:       {format_due(task.due_date)}",
            f"Created:   {task.created_at or '-'}",
            f"Focus:     {task.pomodoro_sessions} session(s), {format_duration(task.time_spent)}",
        ]
        if task.notes:
            lines += ["", escape(task.notes)]
        if task.sub_tasks:
            lines.append("")
            for st in task.sub_tasks:
                mark = "[green]x[/green]" if st.completed else " "
                lines.append(f"[{mark}] {escape(st.title)} [dim]{short_id(st.id)}[/dim]")

        console.print(Panel("\n".join(lines), title="Task", expand=False))
    except LuminaError as e:
        fail(str(e))


@app.command()
def done(task_id: str = typer.Argument(..., help="Task ID (or unique prefix)")):
    """
    Toggle a task between done and todo.

    Example:
        lumina done 3f2a
    """
    try:
        store = open_store()
        task = store.toggle_task(store.find_task(task_id).id)
        if task.completed:
            console.print(f"[green]Completed:[/green] {escape(task.title)}")
        else:
            console.print(f"[yellow]Reopened:[/yellow] {escape(task.title)}")
    except LuminaError as e:
        fail(str(e))


@app.command()
def status(
    task_id: str = typer.Argument(..., help="Task ID (or unique prefix)"),
    new_status: str = typer.Argument(..., help="todo, in_progress or done"),
):
    """Move a task to a workflow status."""
    try:
        store = open_store()
        task = store.update_task_status(store.find_task(task_id).id, new_status)
        console.print(f"[green]{escape(task.title)}[/green] is now [bold]{task.status.value}[/bold]")
    except LuminaError as e:
        fail(str(e))


@app.command()
def edit(
    task_id: str = typer.Argument(..., help="Task ID (or unique prefix)"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="low/medium/high"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="New category"),
    due: Optional[str] = typer.Option(None, "--due", "-d", help="New due date (YYYY-MM-DD, or 'none')"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Replace the task's notes"),
):
    """
    Edit task fields.

    Example:
        lumina edit 3f2a --title "Call the dentist" --due none
    """
    changes = {}
    if title is not None:
        changes["title"] = title
    if priority is not None:
        changes["priority"] = priority
    if category is not None:
        changes["category"] = category
    if due is not None:
        changes["due_date"] = None if due.lower() == "none" else _due_date(due)
    if notes is not None:
        changes["notes"] = notes

    if not changes:
        fail("Nothing to change (see lumina edit --help)")

    try:
        store = open_store()
        task = store.update_task(store.find_task(task_id).id, **changes)
        console.print(f"[green]Updated:[/green] {escape(task.title)}")
    except LuminaError as e:
        fail(str(e))


@app.command()
def rm(task_id: str = typer.Argument(..., help="Task ID (or unique prefix)")):
    """
    Delete a task (undo with `lumina undo`).

    Example:
        lumina rm 3f2a
    """
    try:
        store = open_store()
        task = store.find_task(task_id)
        store.delete_task(task.id)
        console.print(f"[green]Deleted:[/green] {escape(task.title)} [dim](lumina undo to restore)[/dim]")
    except LuminaError as e:
        fail(str(e))


@app.command()
def purge(
    folder: Optional[str] = typer.Option(None, "--folder", "-f", envvar="LUMINA_FOLDER", help=FOLDER_OPTION_HELP),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
):
    """Permanently delete a folder's completed tasks. Cannot be undone."""
    try:
        store = open_store()
        folder_id = _active_folder_id(store, folder)
        if folder_id is None:
            error_console.print("[yellow]No folder selected[/yellow] - pass --folder or set LUMINA_FOLDER")
            return

        if not yes:
            response = typer.confirm("Delete all completed tasks in this folder? This cannot be undone", default=False)
            if not response:
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)

        removed = store.clear_completed(folder_id)
        console.print(f"[green]Purged {removed} completed task(s)[/green]")
    except LuminaError as e:
        fail(str(e))


@app.command()
def breakdown(
    task_id: str = typer.Argument(..., help="Task ID (or unique prefix)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Replace a task's subtasks with suggested steps."""
    try:
        store = open_store()
        task = asyncio.run(build_intake(store).breakdown(store.find_task(task_id).id))

        if json_output:
            console.print(json.dumps([st.to_dict() for st in task.sub_tasks], indent=2))
            return
        console.print(f"[bold]{escape(task.title)}[/bold]")
        for st in task.sub_tasks:
            console.print(f"  [ ] {escape(st.title)} [dim]{short_id(st.id)}[/dim]", highlight=False)
    except LuminaError as e:
        fail(str(e))


@app.command()
def sub(
    task_id: str = typer.Argument(..., help="Task ID (or unique prefix)"),
    title: str = typer.Argument(..., help="Subtask title"),
):
    """Add a subtask."""
    try:
        store = open_store()
        sub_task = store.add_subtask(store.find_task(task_id).id, title)
        console.print(f"[green]Added subtask {short_id(sub_task.id)}:[/green] {escape(sub_task.title)}")
    except LuminaError as e:
        fail(str(e))


@app.command()
def check(
    task_id: str = typer.Argument(..., help="Task ID (or unique prefix)"),
    subtask_id: str = typer.Argument(..., help="Subtask ID (or unique prefix)"),
):
    """Toggle a subtask."""
    try:
        store = open_store()
        task = store.find_task(task_id)
        matches = [st for st in task.sub_tasks if st.id.startswith(subtask_id)]
        if len(matches) != 1:
            fail(f"Subtask {subtask_id} not found" if not matches else f"Subtask prefix '{subtask_id}' is ambiguous")

        sub_task = store.toggle_subtask(task.id, matches[0].id)
        mark = "[green]x[/green]" if sub_task.completed else " "
        console.print(f"[{mark}] {escape(sub_task.title)}", highlight=False)
    except LuminaError as e:
        fail(str(e))


@app.command()
def pomodoro(task_id: str = typer.Argument(..., help="Task ID (or unique prefix)")):
    """Log one finished 25-minute focus session against a task."""
    try:
        store = open_store()
        task = store.record_pomodoro(store.find_task(task_id).id)
        console.print(
            f"[green]Session logged:[/green] {escape(task.title)} "
            f"[dim]({task.pomodoro_sessions} session(s), {format_duration(task.time_spent)})[/dim]"
        )
    except LuminaError as e:
        fail(str(e))
