"""
FILE: lumina/core/filters.py
PURPOSE: Folder-scoped task and note views
EXPORTS:
  - STATUS_FILTERS, DATE_FILTERS
  - parse_due_date(value) -> date | None
  - days_until(due_date, today) -> int | None
  - filter_tasks(tasks, folder_id, ...) -> List[Task]
  - split_by_completion(tasks) -> (active, completed)
  - folder_notes(notes, folder_id) -> List[Note]
  - folder_stats(tasks, folder_id) -> Dict[str, int]
DEPENDENCIES:
  - datetime (stdlib)
  - lumina.core.models (Task, Note, Priority)
NOTES:
  - Pure functions over lists; nothing here mutates the store
  - Due dates may be plain YYYY-MM-DD or full ISO date-times
  - Date buckets compare whole calendar days
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import InvalidInputError
from .models import Note, Priority, Task

STATUS_FILTERS = ("all", "active", "completed")
DATE_FILTERS = ("all", "overdue", "today", "tomorrow", "upcoming")

PRIORITY_WEIGHT = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def parse_due_date(value: Optional[str]) -> Optional[date]:
    """Return the calendar day of a due date, or None if absent or unparsable."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone()
        except (OverflowError, ValueError):
            # Shifting to local time would leave the calendar's range
            return None
    return parsed.date()


def days_until(due_date: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Whole days from today to the due date (negative when overdue)."""
    due = parse_due_date(due_date)
    if due is None:
        return None
    today = today or date.today()
    return (due - today).days


def _matches_date(task: Task, date_filter: str, today: date) -> bool:
    delta = days_until(task.due_date, today)
    if delta is None:
        return False
    if date_filter == "overdue":
        return delta < 0
    if date_filter == "today":
        return delta == 0
    if date_filter == "tomorrow":
        return delta == 1
    return delta > 1


def filter_tasks(
    tasks: Iterable[Task],
    folder_id: Optional[str],
    status: str = "all",
    priority: Optional[Priority] = None,
    category: Optional[str] = None,
    date_filter: str = "all",
    today: Optional[date] = None,
) -> List[Task]:
    """
    Filter a folder's tasks and sort them for display.

    Args:
        tasks: All tasks in the store
        folder_id: Folder to scope to
        status: 'all', 'active' or 'completed'
        priority: Keep only this priority (None = any)
        category: Keep only this category (None = any)
        date_filter: 'all', 'overdue', 'today', 'tomorrow' or 'upcoming'
        today: Reference day for date buckets (defaults to today)

    Returns:
        Matching tasks, highest priority first, then newest first

    Raises:
        InvalidInputError: If status or date_filter is unknown
    """
    if status not in STATUS_FILTERS:
        raise InvalidInputError(f"Invalid status filter '{status}'. Must be one of: {', '.join(STATUS_FILTERS)}")
    if date_filter not in DATE_FILTERS:
        raise InvalidInputError(f"Invalid date filter '{date_filter}'. Must be one of: {', '.join(DATE_FILTERS)}")
    today = today or date.today()

    result = []
    for task in tasks:
        if task.folder_id != folder_id:
            continue
        if status == "active" and task.completed:
            continue
        if status == "completed" and not task.completed:
            continue
        if priority is not None and task.priority != priority:
            continue
        if category is not None and task.category != category:
            continue
        if date_filter != "all" and not _matches_date(task, date_filter, today):
            continue
        result.append(task)

    # Two stable passes: newest first, then by priority weight
    result.sort(key=lambda t: t.created_at or "", reverse=True)
    result.sort(key=lambda t: PRIORITY_WEIGHT[t.priority], reverse=True)
    return result


def split_by_completion(tasks: Iterable[Task]) -> Tuple[List[Task], List[Task]]:
    active, completed = [], []
    for task in tasks:
        (completed if task.completed else active).append(task)
    return active, completed


def folder_notes(notes: Iterable[Note], folder_id: Optional[str]) -> List[Note]:
    """A folder's notes, most recently updated first."""
    scoped = [n for n in notes if n.folder_id == folder_id]
    return sorted(scoped, key=lambda n: n.updated_at or "", reverse=True)


def folder_stats(tasks: Iterable[Task], folder_id: str) -> Dict[str, int]:
    scoped = [t for t in tasks if t.folder_id == folder_id]
    completed = sum(1 for t in scoped if t.completed)
    return {"total": len(scoped), "completed": completed, "active": len(scoped) - completed}
