"""Command-line interface for fontgardener.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Commands:
- new: Create an empty fontgarden
- import: Import glyphs from UFO sources into a set
- export: Write sets or glyphs back out as UFOs
- remove-set: Drop a set and its glyphs
"""

from fontgardener.cli.app import app, cli, main

__all__ = ["app", "cli", "main"]
