"""
FILE: lumina/intake/service.py
PURPOSE: Turn free-text input into new tasks
EXPORTS:
  - TaskOverrides (dataclass)
  - TaskIntakeService
    - create_task(raw_input, overrides, folder_id) -> Task | None (async)
    - breakdown(task_id) -> Task | None (async)
DEPENDENCIES:
  - dataclasses (stdlib)
  - lumina.core.store (TaskStore)
  - lumina.intake.remote_parser (RemoteParser)
NOTES:
  - No active folder means nothing happens (returns None)
  - Parsing never fails, so once a folder is active intake always succeeds
  - Concurrent intakes are not serialized; each task is inserted at the
    head when its own parse resolves
"""

from dataclasses import dataclass
from typing import Optional

from ..core.models import Priority, Task, TaskStatus, now_iso
from ..core.store import TaskStore, new_id
from .remote_parser import RemoteParser


@dataclass
class TaskOverrides:
    """Fields the user set explicitly; they beat whatever the parser found."""

    priority: Optional[Priority] = None
    category: Optional[str] = None
    due_date: Optional[str] = None


class TaskIntakeService:
    def __init__(self, store: TaskStore, parser: RemoteParser):
        self.store = store
        self.parser = parser

    async def create_task(
        self,
        raw_input: str,
        overrides: Optional[TaskOverrides] = None,
        folder_id: Optional[str] = None,
    ) -> Optional[Task]:
        """
        Parse raw input and add the resulting task to a folder.

        Args:
            raw_input: Text as typed by the user
            overrides: Explicit priority/category/due date (empty values are ignored)
            folder_id: Active folder; None makes this a no-op

        Returns:
            The new task (already at the head of the store's task list),
            or None when no folder is active
        """
        if not folder_id:
            return None
        overrides = overrides or TaskOverrides()

        parsed = await self.parser.parse(raw_input)

        task = Task(
            id=new_id(),
            folder_id=folder_id,
            title=parsed.title,
            priority=overrides.priority or parsed.priority,
            category=overrides.category or parsed.category,
            due_date=overrides.due_date or parsed.due_date,
            notes=parsed.notes or "",
            completed=False,
            status=TaskStatus.TODO,
            created_at=now_iso(),
            sub_tasks=[],
            pomodoro_sessions=0,
            time_spent=0,
        )
        return self.store.insert_task(task)

    async def breakdown(self, task_id: str) -> Optional[Task]:
        """Replace a task's subtasks with model-suggested steps."""
        task = self.store.get_task(task_id)
        if task is None:
            return None

        steps = await self.parser.breakdown(task.title)
        return self.store.replace_subtasks(task_id, steps)
