"""
Tests for single-slot undo.

Covers task, note and folder (cascade) deletes, single consumption and
the rule that a newer delete replaces the pending one.
"""

import copy
import json

from lumina.core.constants import KEY_HISTORY
from lumina.core.history import (
    ActionType,
    DeleteFolderSnapshot,
    DeleteTaskSnapshot,
    HistoryItem,
    HistoryLedger,
)
from lumina.core.models import Task, TaskStatus
from lumina.core.store import TaskStore


def make_task(store, folder, title):
    task = Task(id=f"task-{title}", folder_id=folder.id, title=title, created_at="2026-03-01T10:00:00")
    return store.insert_task(task)


def ids(items):
    return sorted(item.id for item in items)


# --- Ledger ---

def test_ledger_starts_empty():
    ledger = HistoryLedger()

    assert not ledger.can_undo()
    assert ledger.pending is None


def test_ledger_undo_with_nothing_pending_is_noop(store):
    assert store.undo() is None
    assert store.tasks == [] and store.notes == [] and store.folders == []


def test_ledger_snapshot_is_a_deep_copy(store, folder):
    task = make_task(store, folder, "a")
    ledger = HistoryLedger()

    ledger.record(DeleteTaskSnapshot(task=task))
    task.title = "changed later"

    assert ledger.pending.data.task.title == "a"


def test_history_item_tag_follows_snapshot_type(store, folder):
    item = HistoryLedger().record(DeleteFolderSnapshot(folder=folder))

    assert item.type is ActionType.DELETE_FOLDER


# --- Task delete / undo ---

def test_delete_then_undo_restores_task_collection(store, folder):
    make_task(store, folder, "a")
    make_task(store, folder, "b")
    before = copy.deepcopy(store.tasks)

    store.delete_task("task-a")
    assert ids(store.tasks) == ["task-b"]

    item = store.undo()

    assert item.type is ActionType.DELETE_TASK
    assert sorted(store.tasks, key=lambda t: t.id) == sorted(before, key=lambda t: t.id)


def test_delete_unknown_task_records_nothing(store, folder):
    make_task(store, folder, "a")
    store.delete_task("task-a")

    assert store.delete_task("missing") is None
    # The earlier entry is still the pending one
    assert store.history.pending.data.task.id == "task-a"


def test_undo_is_consumed_once(store, folder):
    make_task(store, folder, "a")
    store.delete_task("task-a")

    assert store.undo() is not None
    assert store.undo() is None
    assert ids(store.tasks) == ["task-a"]


def test_single_slot_only_latest_delete_is_restored(store, folder):
    make_task(store, folder, "a")
    make_task(store, folder, "b")

    store.delete_task("task-a")
    store.delete_task("task-b")
    store.undo()

    assert ids(store.tasks) == ["task-b"]
    assert store.undo() is None


def test_note_delete_supersedes_task_delete(store, folder):
    make_task(store, folder, "a")
    note = store.add_note(folder.id, "Ideas", "...")

    store.delete_task("task-a")
    store.delete_note(note.id)
    item = store.undo()

    assert item.type is ActionType.DELETE_NOTE
    assert ids(store.notes) == [note.id]
    assert store.tasks == []


def test_restored_task_keeps_its_state(store, folder):
    task = make_task(store, folder, "a")
    store.update_task_status(task.id, "in_progress")
    store.add_subtask(task.id, "step one")
    store.record_pomodoro(task.id)

    store.delete_task(task.id)
    store.undo()

    restored = store.get_task(task.id)
    assert restored.status is TaskStatus.IN_PROGRESS
    assert not restored.completed
    assert [st.title for st in restored.sub_tasks] == ["step one"]
    assert restored.pomodoro_sessions == 1


# --- Folder cascade ---

def test_folder_delete_cascades_and_undo_restores_everything(store, folder):
    other = store.create_folder("Home")
    make_task(store, folder, "t1")
    make_task(store, folder, "t2")
    make_task(store, other, "elsewhere")
    n1 = store.add_note(folder.id, "N1", "")
    n_other = store.add_note(other.id, "Other note", "")

    item = store.delete_folder(folder.id)

    assert item.type is ActionType.DELETE_FOLDER
    assert ids(store.folders) == [other.id]
    assert ids(store.tasks) == ["task-elsewhere"]
    assert ids(store.notes) == [n_other.id]
    assert ids(item.data.tasks) == ["task-t1", "task-t2"]
    assert ids(item.data.notes) == [n1.id]

    store.undo()

    assert ids(store.folders) == sorted([folder.id, other.id])
    assert ids(store.tasks) == ["task-elsewhere", "task-t1", "task-t2"]
    assert ids(store.notes) == sorted([n1.id, n_other.id])


def test_folder_delete_counts_round_trip(store, folder):
    for i in range(4):
        make_task(store, folder, str(i))
    for i in range(3):
        store.add_note(folder.id, f"note {i}", "")
    counts = (len(store.folders), len(store.tasks), len(store.notes))

    store.delete_folder(folder.id)
    assert (len(store.folders), len(store.tasks), len(store.notes)) == (0, 0, 0)

    store.undo()
    assert (len(store.folders), len(store.tasks), len(store.notes)) == counts


def test_delete_missing_folder_is_noop(store, folder):
    make_task(store, folder, "a")

    assert store.delete_folder("nope") is None
    assert len(store.tasks) == 1
    assert store.history.pending is None


def test_empty_folder_delete_and_undo(store, folder):
    store.delete_folder(folder.id)
    store.undo()

    assert ids(store.folders) == [folder.id]


# --- Persistence of the pending entry ---

def test_pending_entry_survives_reload(blobs, store, folder):
    make_task(store, folder, "a")
    store.add_note(folder.id, "N", "")
    store.delete_folder(folder.id)

    reloaded = TaskStore.load(blobs)
    item = reloaded.undo()

    assert item.type is ActionType.DELETE_FOLDER
    assert ids(reloaded.folders) == [folder.id]
    assert ids(reloaded.tasks) == ["task-a"]
    assert len(reloaded.notes) == 1


def test_undo_clears_persisted_entry(blobs, store, folder):
    make_task(store, folder, "a")
    store.delete_task("task-a")
    store.undo()

    assert json.loads(blobs.read(KEY_HISTORY)) is None
    assert TaskStore.load(blobs).undo() is None


def test_history_item_round_trips_through_dict(store, folder):
    task = make_task(store, folder, "a")
    item = HistoryLedger().record(DeleteTaskSnapshot(task=task))

    restored = HistoryItem.from_dict(json.loads(json.dumps(item.to_dict())))

    assert restored.type is ActionType.DELETE_TASK
    assert restored.data.task == task
    assert restored.timestamp == item.timestamp


def test_corrupt_history_blob_is_discarded(blobs, store, folder):
    blobs.write(KEY_HISTORY, '{"type": "DELETE_EVERYTHING"}')

    reloaded = TaskStore.load(blobs)

    assert reloaded.history.pending is None
    assert [f.id for f in reloaded.folders] == [folder.id]
