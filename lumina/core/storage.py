"""
FILE: lumina/core/storage.py
PURPOSE: Key-value blob storage for persisted collections
EXPORTS:
  - BlobStore (protocol)
  - FileBlobStore - one <key>.json file per key
  - MemoryBlobStore - dict-backed, for tests and ephemeral sessions
  - decode_list(key, text) -> list
DEPENDENCIES:
  - json (stdlib)
  - pathlib (stdlib)
  - lumina.core.exceptions (StorageLoadError)
NOTES:
  - Default location is ~/.lumina (overridable via LUMINA_DATA_DIR)
  - Auto-creates the directory on first write
  - Stores opaque text; decoding to entities is the store's job
  - Writes go through a temp file and rename so a crash never leaves half a blob
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .exceptions import StorageLoadError


class BlobStore(Protocol):
    def read(self, key: str) -> Optional[str]:
        """Return the stored text for key, or None if nothing was saved."""
        ...

    def write(self, key: str, text: str) -> None:
        ...


class FileBlobStore:
    """
    File-backed blob store.

    Each key maps to <data_dir>/<key>.json.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir).expanduser()

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        # Ensure directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, path)


class MemoryBlobStore:
    """Blob store kept in a dict. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write(self, key: str, text: str) -> None:
        self.blobs[key] = text


def decode_list(key: str, text: str) -> List[Any]:
    """
    Decode a blob that must hold a JSON array.

    Raises:
        StorageLoadError: If the text is not JSON or not an array
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StorageLoadError(key, f"invalid JSON ({e.msg})") from e

    if not isinstance(data, list):
        raise StorageLoadError(key, f"expected a JSON array, got {type(data).__name__}")

    return data
