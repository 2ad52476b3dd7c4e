"""Logging configuration.

Modules log through the standard library (``logging.getLogger(__name__)``);
this module only decides where records go. Output is rendered with Rich on
stderr so it never mixes with command output on stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING") -> None:
    """Install a Rich handler on the root logger.

    Safe to call more than once; earlier handlers are replaced.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
