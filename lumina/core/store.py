"""
FILE: lumina/core/store.py
PURPOSE: The store owning folders, categories, tasks and notes
EXPORTS:
  - TaskStore (class)
    - load(blobs) -> TaskStore
    - create_folder / update_folder / reorder_folders / delete_folder
    - insert_task / toggle_task / update_task_status / update_task /
      update_task_notes / delete_task / clear_completed
    - add_subtask / toggle_subtask / replace_subtasks / record_pomodoro
    - add_note / update_note / delete_note
    - add_category / delete_category
    - undo() -> HistoryItem | None
    - get_* / find_* lookups
DEPENDENCIES:
  - lumina.core.models, storage, history, exceptions, constants
  - json, uuid, logging (stdlib)
NOTES:
  - The store's methods are the only write surface for the collections
  - Every mutation that changes a collection persists that collection
  - Mutations on unknown IDs are no-ops returning None
  - Deletes record a snapshot in the history ledger before removing anything
  - Folder deletion removes the folder and its tasks and notes in one step
  - On load, tasks without status get one from `completed`, and tasks with
    no (or an unknown) folder are adopted by the default folder
"""

import json
import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from .constants import (
    DEFAULT_CATEGORIES,
    DEFAULT_FOLDER_NAME,
    KEY_CATEGORIES,
    KEY_FOLDERS,
    KEY_HISTORY,
    KEY_NOTES,
    KEY_TASKS,
    POMODORO_SECONDS,
)
from .exceptions import (
    FolderNotFoundError,
    InvalidInputError,
    NoteNotFoundError,
    StorageLoadError,
    TaskNotFoundError,
)
from .history import (
    DeleteFolderSnapshot,
    DeleteNoteSnapshot,
    DeleteTaskSnapshot,
    HistoryItem,
    HistoryLedger,
)
from .models import (
    Folder,
    FolderTheme,
    Note,
    Priority,
    SubTask,
    Task,
    TaskStatus,
    now_iso,
)
from .storage import BlobStore, decode_list

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Task fields update_task() accepts
_EDITABLE_TASK_FIELDS = ("title", "priority", "category", "due_date", "notes", "description")


def new_id() -> str:
    return str(uuid.uuid4())


def _find(items: Iterable[T], item_id: str) -> Optional[T]:
    return next((item for item in items if item.id == item_id), None)


def _resolve(items: Iterable[T], id_or_prefix: str, not_found: Callable[[str], Exception]) -> T:
    """
    Find an item by full ID or unique ID prefix.

    Raises:
        not_found(id_or_prefix): If nothing matches
        InvalidInputError: If the prefix matches more than one item
    """
    items = list(items)
    exact = _find(items, id_or_prefix)
    if exact is not None:
        return exact

    matches = [item for item in items if item.id.startswith(id_or_prefix)]
    if not matches or not id_or_prefix:
        raise not_found(id_or_prefix)
    if len(matches) > 1:
        raise InvalidInputError(
            f"ID prefix '{id_or_prefix}' is ambiguous ({len(matches)} matches)"
        )
    return matches[0]


class TaskStore:
    """
    In-memory collections backed by a blob store.

    Pass blobs=None for a store that never persists.
    """

    def __init__(self, blobs: Optional[BlobStore] = None, history: Optional[HistoryLedger] = None):
        self.blobs = blobs
        self.history = history or HistoryLedger()
        self.folders: List[Folder] = []
        self.categories: List[str] = list(DEFAULT_CATEGORIES)
        self.tasks: List[Task] = []
        self.notes: List[Note] = []

    # --- Loading & persistence ---

    @classmethod
    def load(cls, blobs: BlobStore) -> "TaskStore":
        """
        Build a store from persisted blobs.

        A malformed blob resets only its own collection to the default and
        is logged; loading itself never fails.
        """
        store = cls(blobs)
        store.folders = store._load_collection(KEY_FOLDERS, Folder.from_dict)
        store.tasks = store._load_collection(KEY_TASKS, Task.from_dict)
        store.notes = store._load_collection(KEY_NOTES, Note.from_dict)
        store.categories = store._load_categories()
        store._load_history()
        store._adopt_orphan_tasks()
        return store

    def _load_collection(self, key: str, from_dict: Callable[[Dict[str, Any]], T]) -> List[T]:
        text = self.blobs.read(key)
        if text is None:
            return []
        try:
            return _decode_entities(key, text, from_dict)
        except StorageLoadError as e:
            logger.warning("%s; resetting to empty", e)
            return []

    def _load_categories(self) -> List[str]:
        text = self.blobs.read(KEY_CATEGORIES)
        if text is None:
            return list(DEFAULT_CATEGORIES)
        try:
            entries = decode_list(KEY_CATEGORIES, text)
            if not all(isinstance(c, str) for c in entries):
                raise StorageLoadError(KEY_CATEGORIES, "categories must be strings")
        except StorageLoadError as e:
            logger.warning("%s; resetting to defaults", e)
            return list(DEFAULT_CATEGORIES)
        # Drop duplicates, keep first occurrence
        return list(dict.fromkeys(entries))

    def _load_history(self) -> None:
        text = self.blobs.read(KEY_HISTORY)
        if not text:
            return
        try:
            data = json.loads(text)
            self.history.load(HistoryItem.from_dict(data) if data else None)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Could not load '%s': %r; discarding pending undo", KEY_HISTORY, e)
            self.history.clear()

    def _adopt_orphan_tasks(self) -> None:
        """Assign tasks with a missing or unknown folder to the default folder."""
        folder_ids = {f.id for f in self.folders}
        orphans = [t for t in self.tasks if t.folder_id not in folder_ids]
        if not orphans:
            return

        default = next((f for f in self.folders if f.name == DEFAULT_FOLDER_NAME), None)
        if default is None:
            default = Folder(id=new_id(), name=DEFAULT_FOLDER_NAME, created_at=now_iso())
            self.folders.insert(0, default)
            self._persist(KEY_FOLDERS)

        for task in orphans:
            task.folder_id = default.id
        self._persist(KEY_TASKS)
        logger.info("Moved %d orphaned task(s) into '%s'", len(orphans), DEFAULT_FOLDER_NAME)

    def _persist(self, *keys: str) -> None:
        if self.blobs is None:
            return
        for key in keys:
            if key == KEY_HISTORY:
                item = self.history.pending
                text = json.dumps(item.to_dict() if item else None)
            elif key == KEY_CATEGORIES:
                text = json.dumps(self.categories)
            else:
                items = {KEY_FOLDERS: self.folders, KEY_TASKS: self.tasks, KEY_NOTES: self.notes}[key]
                text = json.dumps([item.to_dict() for item in items], indent=2)
            self.blobs.write(key, text)

    def save(self) -> None:
        """Persist every collection and the pending history entry."""
        self._persist(KEY_FOLDERS, KEY_CATEGORIES, KEY_TASKS, KEY_NOTES, KEY_HISTORY)

    # --- Lookups ---

    def get_folder(self, folder_id: str) -> Optional[Folder]:
        return _find(self.folders, folder_id)

    def get_task(self, task_id: str) -> Optional[Task]:
        return _find(self.tasks, task_id)

    def get_note(self, note_id: str) -> Optional[Note]:
        return _find(self.notes, note_id)

    def find_folder(self, name_or_id: str) -> Folder:
        """
        Find folder by case-insensitive name, full ID, or ID prefix.

        Raises:
            FolderNotFoundError: If nothing matches
        """
        lowered = name_or_id.strip().lower()
        by_name = next((f for f in self.folders if f.name.lower() == lowered), None)
        if by_name is not None:
            return by_name
        return _resolve(self.folders, name_or_id.strip(), FolderNotFoundError)

    def find_task(self, id_or_prefix: str) -> Task:
        return _resolve(self.tasks, id_or_prefix.strip(), TaskNotFoundError)

    def find_note(self, id_or_prefix: str) -> Note:
        return _resolve(self.notes, id_or_prefix.strip(), NoteNotFoundError)

    # --- Folders ---

    def create_folder(self, name: str) -> Folder:
        """
        Create a folder at the head of the folder list.

        Raises:
            InvalidInputError: If name is empty or whitespace-only
        """
        name = name.strip()
        if not name:
            raise InvalidInputError("Folder name cannot be empty")

        folder = Folder(id=new_id(), name=name, created_at=now_iso())
        self.folders.insert(0, folder)
        self._persist(KEY_FOLDERS)
        return folder

    def update_folder(
        self,
        folder_id: str,
        name: Optional[str] = None,
        theme: Optional[str] = None,
        is_favorite: Optional[bool] = None,
    ) -> Optional[Folder]:
        folder = self.get_folder(folder_id)
        if folder is None:
            return None

        if name is not None:
            name = name.strip()
            if not name:
                raise InvalidInputError("Folder name cannot be empty")
            folder.name = name
        if theme is not None:
            try:
                folder.theme = FolderTheme(theme)
            except ValueError:
                valid = ", ".join(t.value for t in FolderTheme)
                raise InvalidInputError(f"Invalid theme '{theme}'. Must be one of: {valid}")
        if is_favorite is not None:
            folder.is_favorite = is_favorite

        self._persist(KEY_FOLDERS)
        return folder

    def reorder_folders(self, folder_ids: List[str]) -> None:
        """Put the given folders first, in order; unlisted folders keep their order after them."""
        position = {fid: i for i, fid in enumerate(folder_ids)}
        self.folders = sorted(self.folders, key=lambda f: position.get(f.id, len(position)))
        self._persist(KEY_FOLDERS)

    def delete_folder(self, folder_id: str) -> Optional[HistoryItem]:
        """
        Delete a folder together with its tasks and notes.

        Returns:
            The recorded history item, or None if the folder doesn't exist
        """
        folder = self.get_folder(folder_id)
        if folder is None:
            return None

        folder_tasks = [t for t in self.tasks if t.folder_id == folder_id]
        folder_notes = [n for n in self.notes if n.folder_id == folder_id]
        item = self.history.record(
            DeleteFolderSnapshot(folder=folder, tasks=folder_tasks, notes=folder_notes)
        )

        # Compute all three results first so the swap happens together
        folders = [f for f in self.folders if f.id != folder_id]
        tasks = [t for t in self.tasks if t.folder_id != folder_id]
        notes = [n for n in self.notes if n.folder_id != folder_id]
        self.folders, self.tasks, self.notes = folders, tasks, notes

        self._persist(KEY_FOLDERS, KEY_TASKS, KEY_NOTES, KEY_HISTORY)
        return item

    # --- Tasks ---

    def insert_task(self, task: Task) -> Task:
        """Put a new task at the head of the task list."""
        self.tasks.insert(0, task)
        self._persist(KEY_TASKS)
        return task

    def toggle_task(self, task_id: str) -> Optional[Task]:
        task = self.get_task(task_id)
        if task is None:
            return None
        task.set_status(TaskStatus.TODO if task.completed else TaskStatus.DONE)
        self._persist(KEY_TASKS)
        return task

    def update_task_status(self, task_id: str, status: str) -> Optional[Task]:
        """
        Move a task to a workflow status; `completed` follows.

        Raises:
            InvalidInputError: If status is not todo, in_progress or done
        """
        status = _coerce_status(status)
        task = self.get_task(task_id)
        if task is None:
            return None
        task.set_status(status)
        self._persist(KEY_TASKS)
        return task

    def update_task(self, task_id: str, **changes: Any) -> Optional[Task]:
        """
        Apply edits to a task.

        Accepts title, priority, category, due_date, notes, description,
        status and completed. Status and completed are reconciled through
        Task.set_status so they never diverge.
        """
        task = self.get_task(task_id)
        if task is None:
            return None

        unknown = set(changes) - set(_EDITABLE_TASK_FIELDS) - {"status", "completed"}
        if unknown:
            raise InvalidInputError(f"Cannot edit task field(s): {', '.join(sorted(unknown))}")

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise InvalidInputError("Task title cannot be empty")
            changes["title"] = title
        if "priority" in changes:
            try:
                changes["priority"] = Priority.coerce(changes["priority"])
            except ValueError as e:
                raise InvalidInputError(str(e))

        for name in _EDITABLE_TASK_FIELDS:
            if name in changes:
                setattr(task, name, changes[name])

        if "status" in changes:
            task.set_status(_coerce_status(changes["status"]))
        elif "completed" in changes:
            task.set_status(TaskStatus.DONE if changes["completed"] else TaskStatus.TODO)

        self._persist(KEY_TASKS)
        return task

    def update_task_notes(self, task_id: str, notes: str) -> Optional[Task]:
        return self.update_task(task_id, notes=notes)

    def delete_task(self, task_id: str) -> Optional[HistoryItem]:
        task = self.get_task(task_id)
        if task is None:
            return None

        item = self.history.record(DeleteTaskSnapshot(task=task))
        self.tasks = [t for t in self.tasks if t.id != task_id]
        self._persist(KEY_TASKS, KEY_HISTORY)
        return item

    def clear_completed(self, folder_id: str) -> int:
        """
        Purge completed tasks from one folder.

        Bulk purge is not recorded in history and cannot be undone.

        Returns:
            Number of tasks removed
        """
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if not (t.folder_id == folder_id and t.completed)]
        removed = before - len(self.tasks)
        if removed:
            self._persist(KEY_TASKS)
        return removed

    def add_subtask(self, task_id: str, title: str) -> Optional[SubTask]:
        title = title.strip()
        if not title:
            raise InvalidInputError("Subtask title cannot be empty")
        task = self.get_task(task_id)
        if task is None:
            return None

        sub_task = SubTask(id=new_id(), title=title)
        task.sub_tasks.append(sub_task)
        self._persist(KEY_TASKS)
        return sub_task

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Optional[SubTask]:
        task = self.get_task(task_id)
        if task is None:
            return None
        sub_task = _find(task.sub_tasks, subtask_id)
        if sub_task is None:
            return None
        sub_task.completed = not sub_task.completed
        self._persist(KEY_TASKS)
        return sub_task

    def replace_subtasks(self, task_id: str, titles: List[str]) -> Optional[Task]:
        """Swap the task's checklist for fresh, incomplete steps."""
        task = self.get_task(task_id)
        if task is None:
            return None
        task.sub_tasks = [SubTask(id=new_id(), title=t) for t in titles]
        self._persist(KEY_TASKS)
        return task

    def record_pomodoro(self, task_id: str) -> Optional[Task]:
        """Count one finished focus session against the task."""
        task = self.get_task(task_id)
        if task is None:
            return None
        task.pomodoro_sessions += 1
        task.time_spent += POMODORO_SECONDS
        self._persist(KEY_TASKS)
        return task

    # --- Notes ---

    def add_note(self, folder_id: Optional[str], title: str, content: str = "") -> Optional[Note]:
        """Create a note at the head of the list; no-op without a folder."""
        if not folder_id:
            return None
        now = now_iso()
        note = Note(
            id=new_id(),
            folder_id=folder_id,
            title=title.strip(),
            content=content,
            created_at=now,
            updated_at=now,
        )
        self.notes.insert(0, note)
        self._persist(KEY_NOTES)
        return note

    def update_note(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        is_favorite: Optional[bool] = None,
    ) -> Optional[Note]:
        note = self.get_note(note_id)
        if note is None:
            return None

        if title is not None:
            note.title = title.strip()
        if content is not None:
            note.content = content
        if is_favorite is not None:
            note.is_favorite = is_favorite
        note.updated_at = now_iso()

        self._persist(KEY_NOTES)
        return note

    def delete_note(self, note_id: str) -> Optional[HistoryItem]:
        note = self.get_note(note_id)
        if note is None:
            return None

        item = self.history.record(DeleteNoteSnapshot(note=note))
        self.notes = [n for n in self.notes if n.id != note_id]
        self._persist(KEY_NOTES, KEY_HISTORY)
        return item

    # --- Categories ---

    def add_category(self, name: str) -> bool:
        """Add a category; returns False if it already exists."""
        name = name.strip()
        if not name:
            raise InvalidInputError("Category name cannot be empty")
        if name in self.categories:
            return False
        self.categories.append(name)
        self._persist(KEY_CATEGORIES)
        return True

    def delete_category(self, name: str) -> bool:
        """Remove a category; tasks keep whatever category string they had."""
        if name not in self.categories:
            return False
        self.categories = [c for c in self.categories if c != name]
        self._persist(KEY_CATEGORIES)
        return True

    # --- Undo ---

    def undo(self) -> Optional[HistoryItem]:
        """
        Restore what the last delete removed.

        Returns:
            The undone history item, or None if nothing was pending
        """
        item = self.history.undo(self)
        if item is None:
            return None
        self._persist(KEY_FOLDERS, KEY_TASKS, KEY_NOTES, KEY_HISTORY)
        return item


def _decode_entities(key: str, text: str, from_dict: Callable[[Dict[str, Any]], T]) -> List[T]:
    entries = decode_list(key, text)
    try:
        return [from_dict(entry) for entry in entries]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StorageLoadError(key, f"malformed entry ({e!r})") from e


def _coerce_status(status: Any) -> TaskStatus:
    try:
        return TaskStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in TaskStatus)
        raise InvalidInputError(f"Invalid status '{status}'. Must be one of: {valid}")
