"""
FILE: lumina/core/history.py
PURPOSE: Single-slot undo history for destructive operations
EXPORTS:
  - ActionType (enum)
  - DeleteTaskSnapshot, DeleteNoteSnapshot, DeleteFolderSnapshot (dataclasses)
  - HistoryItem (dataclass)
  - HistoryLedger (class)
DEPENDENCIES:
  - copy, dataclasses, datetime, enum (stdlib)
  - lumina.core.models (Task, Note, Folder)
NOTES:
  - Only the last destructive operation is kept; recording a new one
    discards the previous entry for good
  - An entry is consumed exactly once by undo()
  - Restored items are appended to their collections; original positions
    are not tracked
  - Supports: delete task, delete note, delete folder (with cascade)
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Union

from .models import Folder, Note, Task

logger = logging.getLogger(__name__)


class ActionType(StrEnum):
    DELETE_TASK = "DELETE_TASK"
    DELETE_NOTE = "DELETE_NOTE"
    DELETE_FOLDER = "DELETE_FOLDER"


class Collections(Protocol):
    """Anything exposing the three mutable entity lists undo writes into."""

    folders: List[Folder]
    tasks: List[Task]
    notes: List[Note]


@dataclass
class DeleteTaskSnapshot:
    type: ClassVar[ActionType] = ActionType.DELETE_TASK
    task: Task

    def restore(self, target: Collections) -> None:
        target.tasks.append(self.task)

    def to_dict(self) -> Dict[str, Any]:
        return self.task.to_dict()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeleteTaskSnapshot":
        return cls(task=Task.from_dict(data))

    def describe(self) -> str:
        return f"Deleted task '{self.task.title}'"


@dataclass
class DeleteNoteSnapshot:
    type: ClassVar[ActionType] = ActionType.DELETE_NOTE
    note: Note

    def restore(self, target: Collections) -> None:
        target.notes.append(self.note)

    def to_dict(self) -> Dict[str, Any]:
        return self.note.to_dict()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeleteNoteSnapshot":
        return cls(note=Note.from_dict(data))

    def describe(self) -> str:
        return f"Deleted note '{self.note.title}'"


@dataclass
class DeleteFolderSnapshot:
    """The folder plus everything the cascade removed with it."""

    type: ClassVar[ActionType] = ActionType.DELETE_FOLDER
    folder: Folder
    tasks: List[Task] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)

    def restore(self, target: Collections) -> None:
        target.folders.append(self.folder)
        target.tasks.extend(self.tasks)
        target.notes.extend(self.notes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folder": self.folder.to_dict(),
            "tasks": [t.to_dict() for t in self.tasks],
            "notes": [n.to_dict() for n in self.notes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeleteFolderSnapshot":
        return cls(
            folder=Folder.from_dict(data["folder"]),
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
            notes=[Note.from_dict(n) for n in data.get("notes", [])],
        )

    def describe(self) -> str:
        return (
            f"Deleted folder '{self.folder.name}' "
            f"({len(self.tasks)} tasks, {len(self.notes)} notes)"
        )


Snapshot = Union[DeleteTaskSnapshot, DeleteNoteSnapshot, DeleteFolderSnapshot]

_SNAPSHOT_TYPES = {
    ActionType.DELETE_TASK: DeleteTaskSnapshot,
    ActionType.DELETE_NOTE: DeleteNoteSnapshot,
    ActionType.DELETE_FOLDER: DeleteFolderSnapshot,
}


@dataclass
class HistoryItem:
    """
    A recorded destructive operation.

    Attributes:
        data: Snapshot taken before the operation; its class is the tag
        timestamp: When the operation occurred (ISO-8601)
    """

    data: Snapshot
    timestamp: str

    @property
    def type(self) -> ActionType:
        return self.data.type

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "data": self.data.to_dict(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        snapshot_cls = _SNAPSHOT_TYPES[ActionType(data["type"])]
        return cls(
            data=snapshot_cls.from_dict(data["data"]),
            timestamp=data["timestamp"],
        )


class HistoryLedger:
    """
    Holds at most one pending destructive operation.

    The store records into the ledger right before it removes anything and
    asks it to replay the snapshot on undo.
    """

    def __init__(self):
        self._pending: Optional[HistoryItem] = None

    def record(self, snapshot: Snapshot) -> HistoryItem:
        """
        Record a destructive operation, replacing any pending one.

        The snapshot is deep-copied so later edits to live objects cannot
        leak into it.
        """
        self._pending = HistoryItem(
            data=copy.deepcopy(snapshot),
            timestamp=datetime.now().isoformat(),
        )
        return self._pending

    @property
    def pending(self) -> Optional[HistoryItem]:
        return self._pending

    def can_undo(self) -> bool:
        """Check if there's an operation to undo."""
        return self._pending is not None

    def undo(self, target: Collections) -> Optional[HistoryItem]:
        """
        Replay the pending snapshot into target and clear the slot.

        Returns:
            The item that was undone, or None if nothing was pending
        """
        item = self._pending
        if item is None:
            return None

        item.data.restore(target)
        self._pending = None
        logger.info("Undid %s", item.type.value)
        return item

    def clear(self) -> None:
        """Clear undo history."""
        self._pending = None

    def load(self, item: Optional[HistoryItem]) -> None:
        """Install a previously persisted pending entry."""
        self._pending = item
