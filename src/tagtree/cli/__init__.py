"""Command-line interface for tagtree.

Provides the ``tagtree`` command with parse, validate and trace subcommands.
"""

from .main import main

__all__ = ["main"]
