"""Allow `python -m lumina`."""

from .cli.main import main

main()
