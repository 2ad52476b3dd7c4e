"""
FILE: lumina/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all command handlers for easy importing
from .tasks import (
    add,
    ls,
    show,
    done,
    status,
    edit,
    rm,
    purge,
    breakdown,
    sub,
    check,
    pomodoro,
)
from .folders import (
    folder_add,
    folder_ls,
    folder_edit,
    folder_rm,
)
from .notes import (
    note_add,
    note_ls,
    note_show,
    note_edit,
    note_rm,
)
from .categories import (
    category_add,
    category_ls,
    category_rm,
)
from .system import (
    version,
    undo,
)

__all__ = [
    "add",
    "ls",
    "show",
    "done",
    "status",
    "edit",
    "rm",
    "purge",
    "breakdown",
    "sub",
    "check",
    "pomodoro",
    "folder_add",
    "folder_ls",
    "folder_edit",
    "folder_rm",
    "note_add",
    "note_ls",
    "note_show",
    "note_edit",
    "note_rm",
    "category_add",
    "category_ls",
    "category_rm",
    "version",
    "undo",
]
