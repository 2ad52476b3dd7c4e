"""Tests for turning free text into stored tasks."""

import asyncio
from datetime import datetime

import pytest

from lumina.core.constants import BREAKDOWN_OFFLINE_STEPS
from lumina.core.models import Priority, TaskStatus
from lumina.intake.remote_parser import RemoteParser
from lumina.intake.service import TaskIntakeService, TaskOverrides

from conftest import FakeInferenceClient

NOW = datetime(2026, 3, 1, 9, 0)


@pytest.fixture
def intake(store):
    return TaskIntakeService(store, RemoteParser(client=None, clock=lambda: NOW))


@pytest.mark.asyncio
async def test_create_task_from_local_parse(intake, store, folder):
    task = await intake.create_task("Buy milk tomorrow urgent", folder_id=folder.id)

    assert store.tasks[0] is task
    assert task.folder_id == folder.id
    assert task.title == "Buy milk"
    assert task.priority is Priority.HIGH
    assert task.category == "Other"
    assert task.due_date == "2026-03-02"
    assert task.status is TaskStatus.TODO
    assert task.completed is False
    assert task.sub_tasks == []
    assert task.pomodoro_sessions == 0 and task.time_spent == 0
    assert task.notes == ""
    assert task.created_at


@pytest.mark.asyncio
async def test_no_folder_is_a_noop(intake, store):
    assert await intake.create_task("anything", folder_id=None) is None
    assert store.tasks == []


@pytest.mark.asyncio
async def test_overrides_win_over_parse(intake, folder):
    overrides = TaskOverrides(priority=Priority.LOW, category="Errands", due_date="2026-05-01")

    task = await intake.create_task("Buy milk tomorrow urgent", overrides, folder.id)

    assert task.title == "Buy milk"
    assert task.priority is Priority.LOW
    assert task.category == "Errands"
    assert task.due_date == "2026-05-01"


@pytest.mark.asyncio
async def test_empty_overrides_are_ignored(intake, folder):
    task = await intake.create_task("gym today", TaskOverrides(category="", due_date=""), folder.id)

    assert task.category == "Health"
    assert task.due_date == "2026-03-01"


@pytest.mark.asyncio
async def test_model_notes_are_kept(store, folder):
    client = FakeInferenceClient(reply={
        "title": "Email Dana", "priority": "Medium", "category": "Work", "notes": "about the Q3 budget",
    })
    intake = TaskIntakeService(store, RemoteParser(client=client, clock=lambda: NOW))

    task = await intake.create_task("email dana re q3 budget", folder_id=folder.id)

    assert task.title == "Email Dana"
    assert task.notes == "about the Q3 budget"


@pytest.mark.asyncio
async def test_each_task_gets_a_unique_id(intake, folder):
    first = await intake.create_task("one", folder_id=folder.id)
    second = await intake.create_task("two", folder_id=folder.id)

    assert first.id != second.id


class GatedClient:
    """Replies only when its gate for that prompt is opened."""

    def __init__(self):
        self.gates = {}

    async def infer(self, prompt, schema):
        title = "first" if "first" in prompt else "second"
        gate = self.gates.setdefault(title, asyncio.Event())
        await gate.wait()
        return f'{{"title": "{title}", "priority": "Low", "category": "Other"}}'


@pytest.mark.asyncio
async def test_concurrent_intake_inserts_in_resolution_order(store, folder):
    client = GatedClient()
    intake = TaskIntakeService(store, RemoteParser(client=client, clock=lambda: NOW))

    first = asyncio.create_task(intake.create_task("first", folder_id=folder.id))
    second = asyncio.create_task(intake.create_task("second", folder_id=folder.id))
    await asyncio.sleep(0)
    client.gates.setdefault("second", asyncio.Event()).set()
    await second
    client.gates.setdefault("first", asyncio.Event()).set()
    await first

    # Last resolved ends up at the head
    assert [t.title for t in store.tasks] == ["first", "second"]


@pytest.mark.asyncio
async def test_breakdown_replaces_subtasks(intake, store, folder):
    task = await intake.create_task("Plan trip", folder_id=folder.id)
    store.add_subtask(task.id, "old step")

    updated = await intake.breakdown(task.id)

    assert [st.title for st in updated.sub_tasks] == list(BREAKDOWN_OFFLINE_STEPS)


@pytest.mark.asyncio
async def test_breakdown_unknown_task(intake):
    assert await intake.breakdown("missing") is None
