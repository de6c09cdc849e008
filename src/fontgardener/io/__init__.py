"""Source I/O layer for fontgardener.

This module handles reading and writing UFO font sources using ufoLib2.
It provides a clean abstraction layer between ufoLib2 and the domain models.

Key responsibilities:
- Load UFO sources into SourceGlyphSets (all layers, glyph records)
- Write SourceGlyphSets back to UFOs, replacing existing ones atomically
- Read glyph name list files

Key functions:
- parse_source: Load a UFO
- write_source: Save a UFO
- parse_name_list: Read a glyph name list
"""

from fontgardener.io.names import parse_name_list
from fontgardener.io.reader import parse_source
from fontgardener.io.writer import build_font, write_source

__all__ = [
    "build_font",
    "parse_name_list",
    "parse_source",
    "write_source",
]
