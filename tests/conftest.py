"""Shared pytest configuration and fixtures for tests."""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lumina.config import get_settings
from lumina.core.storage import MemoryBlobStore
from lumina.core.store import TaskStore


class FakeInferenceClient:
    """Inference client returning canned replies and recording prompts."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def infer(self, prompt, schema):
        self.calls.append((prompt, schema))
        if self.error is not None:
            raise self.error
        if isinstance(self.reply, dict):
            return json.dumps(self.reply)
        return self.reply


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def store(blobs):
    """Empty store persisting into an in-memory blob store."""
    return TaskStore(blobs)


@pytest.fixture
def folder(store):
    return store.create_folder("Work")


@pytest.fixture
def data_dir(monkeypatch, tmp_path):
    """Point settings at a temporary data directory with inference off."""
    monkeypatch.setenv("LUMINA_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LUMINA_INFERENCE_ENABLED", "false")
    monkeypatch.delenv("LUMINA_FOLDER", raising=False)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
