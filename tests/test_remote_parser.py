"""
Tests for the model-backed parser and its local fallback.

The adapter must always hand back well-formed ParsedTaskData, whatever
the inference client does.
"""

import asyncio
import sys
from datetime import datetime

import pytest

from lumina.core.constants import BREAKDOWN_FAILURE_STEPS, BREAKDOWN_OFFLINE_STEPS
from lumina.core.exceptions import InferenceError
from lumina.core.models import ParsedTaskData, Priority
from lumina.intake.inference import ClaudeCliClient, extract_json_object
from lumina.intake.remote_parser import TASK_SCHEMA, RemoteParser

from conftest import FakeInferenceClient

NOW = datetime(2026, 3, 1, 9, 30)

LOCAL_RESULT = ParsedTaskData(
    title="Buy milk",
    priority=Priority.HIGH,
    category="Other",
    due_date="2026-03-02",
    notes="",
)


def make_parser(client, timeout=1.0):
    return RemoteParser(client=client, timeout=timeout, clock=lambda: NOW)


class SlowClient:
    async def infer(self, prompt, schema):
        await asyncio.sleep(5)
        return "{}"


# --- Fallback scenarios ---

@pytest.mark.asyncio
async def test_no_client_uses_local_parser():
    result = await make_parser(None).parse("Buy milk tomorrow urgent")

    assert result == LOCAL_RESULT


@pytest.mark.asyncio
async def test_client_error_falls_back():
    client = FakeInferenceClient(error=InferenceError("network down"))

    result = await make_parser(client).parse("Buy milk tomorrow urgent")

    assert result == LOCAL_RESULT
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_unexpected_exception_falls_back():
    client = FakeInferenceClient(error=RuntimeError("boom"))

    result = await make_parser(client).parse("Buy milk tomorrow urgent")

    assert result == LOCAL_RESULT


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["not json at all", "", "   ", "[1, 2, 3]", None])
async def test_malformed_reply_falls_back(reply):
    result = await make_parser(FakeInferenceClient(reply=reply)).parse("Buy milk tomorrow urgent")

    assert result == LOCAL_RESULT


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        {"priority": "High", "category": "Work"},  # missing title
        {"title": "x", "priority": "Critical", "category": "Work"},  # bad enum
        {"title": "   ", "priority": "Low", "category": "Work"},  # blank title
        {"title": "x", "priority": "Low", "category": "Work", "dueDate": "next week"},  # bad date
        {"title": "x", "priority": "Low", "category": "Work", "dueDate": "0001-01-01T00:00:00+14:00"},  # below range
        {"title": "x", "priority": "Low", "category": "Work", "dueDate": "9999-12-31T23:59:59-14:00"},  # above range
    ],
)
async def test_schema_violation_falls_back(reply):
    result = await make_parser(FakeInferenceClient(reply=reply)).parse("Buy milk tomorrow urgent")

    assert result == LOCAL_RESULT


@pytest.mark.asyncio
async def test_timeout_falls_back():
    result = await make_parser(SlowClient(), timeout=0.05).parse("Buy milk tomorrow urgent")

    assert result == LOCAL_RESULT


# --- Success path ---

@pytest.mark.asyncio
async def test_valid_reply_is_used():
    client = FakeInferenceClient(reply={
        "title": "Buy oat milk",
        "priority": "High",
        "category": "Groceries",
        "dueDate": "2026-03-02T18:00:00",
        "notes": "the barista kind",
    })

    result = await make_parser(client).parse("oat milk (barista kind) tmrw evening asap")

    assert result == ParsedTaskData(
        title="Buy oat milk",
        priority=Priority.HIGH,
        category="Groceries",
        due_date="2026-03-02T18:00:00",
        notes="the barista kind",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_priority", ["high", "HIGH", "High"])
async def test_priority_is_coerced_to_enum(raw_priority):
    client = FakeInferenceClient(reply={"title": "Ship it", "priority": raw_priority, "category": "Work"})

    result = await make_parser(client).parse("ship it")

    assert result.priority is Priority.HIGH


@pytest.mark.asyncio
async def test_absent_optional_fields_get_defaults():
    client = FakeInferenceClient(reply={"title": "Stretch", "priority": "Low", "category": ""})

    result = await make_parser(client).parse("stretch")

    assert result.due_date is None
    assert result.notes == ""
    assert result.category == "Other"


@pytest.mark.asyncio
async def test_null_fields_get_defaults():
    client = FakeInferenceClient(reply={
        "title": "Stretch", "priority": "Medium", "category": "Health", "dueDate": None, "notes": None,
    })

    result = await make_parser(client).parse("stretch")

    assert result.due_date is None
    assert result.notes == ""


@pytest.mark.asyncio
async def test_prompt_carries_current_date_and_schema():
    client = FakeInferenceClient(reply={"title": "x", "priority": "Low", "category": "Other"})

    await make_parser(client).parse("remember the thing")

    prompt, schema = client.calls[0]
    assert NOW.isoformat() in prompt
    assert '"remember the thing"' in prompt
    assert schema == TASK_SCHEMA
    assert set(schema["required"]) == {"title", "priority", "category"}
    assert "dueDate" in schema["properties"]


# --- Breakdown ---

@pytest.mark.asyncio
async def test_breakdown_without_client_returns_offline_steps():
    steps = await make_parser(None).breakdown("Write thesis")

    assert steps == list(BREAKDOWN_OFFLINE_STEPS)


@pytest.mark.asyncio
async def test_breakdown_failure_returns_failure_steps():
    steps = await make_parser(FakeInferenceClient(error=InferenceError("nope"))).breakdown("Write thesis")

    assert steps == list(BREAKDOWN_FAILURE_STEPS)


@pytest.mark.asyncio
async def test_breakdown_success_is_cleaned_and_capped():
    client = FakeInferenceClient(reply={"steps": ["Outline", " ", "Draft", "Edit", "Cite", "Format", "Submit"]})

    steps = await make_parser(client).breakdown("Write thesis")

    assert steps == ["Outline", "Draft", "Edit", "Cite", "Format"]


@pytest.mark.asyncio
async def test_breakdown_empty_steps_counts_as_failure():
    steps = await make_parser(FakeInferenceClient(reply={"steps": []})).breakdown("Write thesis")

    assert steps == list(BREAKDOWN_FAILURE_STEPS)


# --- JSON extraction from CLI replies ---

def test_extract_plain_object():
    assert extract_json_object('{"title": "a"}') == '{"title": "a"}'


def test_extract_fenced_object():
    text = 'Here you go:\n```json\n{"title": "a"}\n```'

    assert extract_json_object(text) == '{"title": "a"}'


def test_extract_object_embedded_in_prose():
    text = 'Sure! {"title": "a", "meta": {"x": 1}} hope that helps'

    assert extract_json_object(text) == '{"title": "a", "meta": {"x": 1}}'


def test_extract_skips_unbalanced_garbage():
    text = '{ not json } then {"title": "b"}'

    assert extract_json_object(text) == '{"title": "b"}'


@pytest.mark.parametrize("text", ["", "no braces here", "[1, 2]"])
def test_extract_raises_when_nothing_found(text):
    with pytest.raises(InferenceError):
        extract_json_object(text)


def test_extract_ignores_braces_inside_strings():
    text = 'Result: {"title": "close the } bracket"} done'

    assert extract_json_object(text) == '{"title": "close the } bracket"}'


# --- Claude CLI client ---

def write_script(tmp_path, body):
    script = tmp_path / "fake-claude"
    script.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    script.chmod(0o755)
    return str(script)


@pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script")
@pytest.mark.asyncio
async def test_cli_client_reads_json_from_stdout(tmp_path):
    script = write_script(tmp_path, "cat > /dev/null\necho 'Here: {\"title\": \"a\"}'")

    reply = await ClaudeCliClient(script).infer("prompt", TASK_SCHEMA)

    assert reply == '{"title": "a"}'


@pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script")
@pytest.mark.asyncio
async def test_cli_client_nonzero_exit_raises(tmp_path):
    script = write_script(tmp_path, "echo boom >&2\nexit 3")

    with pytest.raises(InferenceError, match="exited with 3"):
        await ClaudeCliClient(script).infer("prompt", TASK_SCHEMA)


@pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script")
@pytest.mark.asyncio
async def test_cli_client_reaps_process_on_timeout(tmp_path, monkeypatch):
    script = write_script(tmp_path, "exec sleep 30")
    spawned = []
    real_exec = asyncio.create_subprocess_exec

    async def recording_exec(*args, **kwargs):
        process = await real_exec(*args, **kwargs)
        spawned.append(process)
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", recording_exec)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(ClaudeCliClient(script).infer("prompt", TASK_SCHEMA), timeout=0.2)

    assert len(spawned) == 1
    assert spawned[0].returncode is not None
