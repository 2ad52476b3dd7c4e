"""
FILE: lumina/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - LuminaError (base exception)
  - TaskNotFoundError
  - FolderNotFoundError
  - NoteNotFoundError
  - InvalidInputError
  - StorageLoadError
  - InferenceError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from LuminaError for easy catching
  - StorageLoadError and InferenceError never leave the core; the store and
    the remote parser recover from them
"""


class LuminaError(Exception):
    """Base exception for all Lumina errors."""
    pass


class TaskNotFoundError(LuminaError):
    """Task with given ID doesn't exist."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class FolderNotFoundError(LuminaError):
    """Folder with given ID or name doesn't exist."""

    def __init__(self, folder_id: str):
        self.folder_id = folder_id
        super().__init__(f"Folder {folder_id} not found")


class NoteNotFoundError(LuminaError):
    """Note with given ID doesn't exist."""

    def __init__(self, note_id: str):
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found")


class InvalidInputError(LuminaError):
    """Input validation failed."""

    def __init__(self, message: str):
        super().__init__(message)


class StorageLoadError(LuminaError):
    """A persisted blob could not be decoded."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Could not load '{key}': {reason}")


class InferenceError(LuminaError):
    """The inference capability failed or returned something unusable."""
    pass
