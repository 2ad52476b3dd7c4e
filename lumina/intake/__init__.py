"""
Natural-language task intake.

The local parser is always available; the remote parser wraps an
inference client and falls back to it on any failure.
"""

from .local_parser import parse as parse_locally
from .remote_parser import RemoteParser
from .service import TaskIntakeService, TaskOverrides

__all__ = ["parse_locally", "RemoteParser", "TaskIntakeService", "TaskOverrides"]
