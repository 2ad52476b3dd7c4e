"""
FILE: lumina/formatting.py
PURPOSE: Shared formatting utilities for CLI output
EXPORTS:
  - TaskFormatter: Class for formatting tasks
  - folder_table(folders, tasks) -> Table
  - note_table(notes) -> Table
  - short_id(entity_id) -> str
DEPENDENCIES:
  - rich (for table formatting)
  - json (for JSON serialization)
  - lumina.core.models, lumina.core.filters
NOTES:
  - IDs are shown as 8-character prefixes; the CLI accepts prefixes back
"""

import json
from datetime import date
from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from .core.filters import days_until, folder_stats
from .core.models import Folder, Note, Priority, Task, TaskStatus

SHORT_ID_LENGTH = 8

PRIORITY_STYLES = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}

STATUS_STYLES = {
    TaskStatus.TODO: "white",
    TaskStatus.IN_PROGRESS: "cyan",
    TaskStatus.DONE: "green",
}

THEME_STYLES = {
    "blue": "blue",
    "red": "red",
    "amber": "yellow",
    "green": "green",
    "purple": "magenta",
}


def short_id(entity_id: str) -> str:
    return entity_id[:SHORT_ID_LENGTH]


def format_due(due_date: Optional[str], today: Optional[date] = None) -> str:
    """Render a due date with a relative hint ("today", "2d overdue")."""
    if not due_date:
        return "-"
    delta = days_until(due_date, today)
    due_date = escape(due_date)
    if delta is None:
        return due_date
    if delta < 0:
        return f"[red]{due_date} ({-delta}d overdue)[/red]"
    if delta == 0:
        return f"[bright_magenta]{due_date} (today)[/bright_magenta]"
    if delta == 1:
        return f"{due_date} (tomorrow)"
    return due_date


def format_duration(seconds: int) -> str:
    minutes = seconds // 60
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h{minutes:02d}m" if hours else f"{minutes}m"


class TaskFormatter:
    """Centralized task display formatting."""

    @staticmethod
    def create_table(tasks: List[Task], title: str = "Tasks") -> Table:
        """
        Create Rich table for tasks.

        Args:
            tasks: List of tasks to display, already filtered and sorted
            title: Table title

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", width=SHORT_ID_LENGTH, no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Status", width=11)
        table.add_column("Priority", width=8)
        table.add_column("Category", style="magenta")
        table.add_column("Due")
        table.add_column("Steps", justify="right")

        for task in tasks:
            status_style = STATUS_STYLES[task.status]
            priority_style = PRIORITY_STYLES[task.priority]
            title_text = f"[strike dim]{escape(task.title)}[/strike dim]" if task.completed else escape(task.title)
            done_steps = sum(1 for st in task.sub_tasks if st.completed)
            steps = f"{done_steps}/{len(task.sub_tasks)}" if task.sub_tasks else "-"

            table.add_row(
                short_id(task.id),
                title_text,
                f"[{status_style}]{task.status.value}[/{status_style}]",
                f"[{priority_style}]{task.priority.value}[/{priority_style}]",
                escape(task.category),
                format_due(task.due_date),
                steps,
            )

        return table

    @staticmethod
    def to_json_array(tasks: List[Task]) -> str:
        return json.dumps([t.to_dict() for t in tasks], indent=2)

    @staticmethod
    def to_raw_lines(tasks: List[Task]) -> List[str]:
        """
        Convert task list to plain text lines.

        Returns:
            List of formatted strings, one per task
        """
        lines = []
        for task in tasks:
            status_marker = "x" if task.completed else " "
            lines.append(f"{short_id(task.id)}: [{status_marker}] {task.title}")
        return lines


def folder_table(folders: List[Folder], tasks: List[Task]) -> Table:
    table = Table(title="Folders", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", width=SHORT_ID_LENGTH, no_wrap=True)
    table.add_column("Name")
    table.add_column("Tasks", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Fav", justify="center")

    for folder in folders:
        stats = folder_stats(tasks, folder.id)
        style = THEME_STYLES.get(folder.theme.value, "white")
        table.add_row(
            short_id(folder.id),
            f"[{style}]{escape(folder.name)}[/{style}]",
            str(stats["total"]),
            str(stats["completed"]),
            "*" if folder.is_favorite else "",
        )
    return table


def note_table(notes: List[Note]) -> Table:
    table = Table(title="Notes", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", width=SHORT_ID_LENGTH, no_wrap=True)
    table.add_column("Title")
    table.add_column("Preview", style="dim")
    table.add_column("Updated", style="dim")

    for note in notes:
        preview = note.content.replace("\n", " ")
        if len(preview) > 40:
            preview = preview[:37] + "..."
        updated = (note.updated_at or "")[:16].replace("T", " ")
        title = escape(f"* {note.title}" if note.is_favorite else note.title)
        table.add_row(short_id(note.id), title, escape(preview), updated)
    return table
