"""
FILE: lumina/core/models.py
PURPOSE: Domain models for folders, tasks, notes and parsed task input
EXPORTS:
  - Priority, TaskStatus, FolderTheme (string enums)
  - SubTask, Task, Folder, Note (dataclasses)
  - ParsedTaskData (dataclass)
DEPENDENCIES:
  - dataclasses (stdlib)
  - enum (stdlib)
  - json (stdlib)
NOTES:
  - All persisted models have from_dict() for JSON blob conversion
  - All models have to_dict() / to_json() for serialization
  - Keys are camelCase on the wire so existing blobs load unchanged
  - Timestamps stored as ISO-8601 strings; legacy epoch-millisecond values
    are converted on load
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Dict, List, Optional
import json


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def coerce(cls, value: Any) -> "Priority":
        """
        Map a loosely-typed priority onto the enum.

        Accepts member names and values in any case ("high", "HIGH", "High").

        Raises:
            ValueError: If the value names no priority
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.name.lower(), member.value.lower()):
                return member
        raise ValueError(f"Unknown priority: {value!r}")


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class FolderTheme(StrEnum):
    BLUE = "blue"
    RED = "red"
    AMBER = "amber"
    GREEN = "green"
    PURPLE = "purple"


def now_iso() -> str:
    return datetime.now().isoformat()


def coerce_timestamp(value: Any) -> Optional[str]:
    """
    Normalize a stored timestamp to an ISO-8601 string.

    Older blobs hold epoch milliseconds; those are converted to local time.
    Numbers outside the calendar's range become None.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000).isoformat()
        except (OverflowError, OSError, ValueError):
            return None
    return str(value)


@dataclass
class SubTask:
    """A checklist step inside a task."""

    id: str
    title: str
    completed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubTask":
        return cls(
            id=data["id"],
            title=data["title"],
            completed=bool(data.get("completed", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "completed": self.completed}


@dataclass
class Task:
    """
    A task living in a folder.

    `completed` and `status` are redundant; `completed` must always equal
    `status == done`. Use set_status() rather than assigning either field.
    """

    id: str
    folder_id: Optional[str]
    title: str
    priority: Priority = Priority.MEDIUM
    category: str = "Other"
    due_date: Optional[str] = None
    notes: str = ""
    completed: bool = False
    status: TaskStatus = TaskStatus.TODO
    created_at: Optional[str] = None
    sub_tasks: List[SubTask] = field(default_factory=list)
    pomodoro_sessions: int = 0
    time_spent: int = 0
    description: Optional[str] = None

    def set_status(self, status: TaskStatus) -> None:
        """Set status and keep the completed flag in step with it."""
        self.status = TaskStatus(status)
        self.completed = self.status == TaskStatus.DONE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """
        Convert a stored JSON object to a Task.

        Handles blobs written before the status field existed by deriving
        status from `completed`. A missing folderId is kept as None so the
        store can repair it.
        """
        completed = bool(data.get("completed", False))
        raw_status = data.get("status")
        if raw_status:
            status = TaskStatus(raw_status)
        else:
            status = TaskStatus.DONE if completed else TaskStatus.TODO

        return cls(
            id=data["id"],
            folder_id=data.get("folderId") or None,
            title=data["title"],
            priority=Priority.coerce(data.get("priority", Priority.MEDIUM)),
            category=data.get("category") or "Other",
            due_date=data.get("dueDate"),
            notes=data.get("notes") or "",
            completed=status == TaskStatus.DONE,
            status=status,
            created_at=coerce_timestamp(data.get("createdAt")),
            sub_tasks=[SubTask.from_dict(st) for st in data.get("subTasks", [])],
            pomodoro_sessions=int(data.get("pomodoroSessions", 0)),
            time_spent=int(data.get("timeSpent", 0)),
            description=data.get("description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "folderId": self.folder_id,
            "title": self.title,
            "notes": self.notes,
            "completed": self.completed,
            "status": self.status.value,
            "priority": self.priority.value,
            "category": self.category,
            "dueDate": self.due_date,
            "createdAt": self.created_at,
            "subTasks": [st.to_dict() for st in self.sub_tasks],
            "pomodoroSessions": self.pomodoro_sessions,
            "timeSpent": self.time_spent,
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    def to_json(self) -> str:
        """Serialize task to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class Folder:
    """Top-level container scoping a set of tasks and notes."""

    id: str
    name: str
    created_at: Optional[str] = None
    theme: FolderTheme = FolderTheme.BLUE
    is_favorite: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Folder":
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=coerce_timestamp(data.get("createdAt")),
            theme=FolderTheme(data.get("theme") or FolderTheme.BLUE),
            is_favorite=bool(data.get("isFavorite", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "theme": self.theme.value,
            "isFavorite": self.is_favorite,
        }

    def to_json(self) -> str:
        """Serialize folder to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class Note:
    """A free-form note attached to a folder."""

    id: str
    folder_id: str
    title: str
    content: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_favorite: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=data["id"],
            folder_id=data["folderId"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            created_at=coerce_timestamp(data.get("createdAt")),
            updated_at=coerce_timestamp(data.get("updatedAt")),
            is_favorite=bool(data.get("isFavorite", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "folderId": self.folder_id,
            "title": self.title,
            "content": self.content,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isFavorite": self.is_favorite,
        }

    def to_json(self) -> str:
        """Serialize note to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class ParsedTaskData:
    """
    Structured fields extracted from free-text task input.

    Transient: it only feeds Task construction and is never persisted.
    """

    title: str
    priority: Priority = Priority.MEDIUM
    category: str = "Other"
    due_date: Optional[str] = None
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "priority": self.priority.value,
            "category": self.category,
            "dueDate": self.due_date,
            "notes": self.notes,
        }
