"""Lumina - folders of tasks and notes with natural-language task intake."""

__version__ = "0.1.0"
