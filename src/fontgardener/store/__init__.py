"""Fontgarden storage layer.

Key classes:
- ContentStore: Deduplicating fingerprint -> glyph data table
- SetRegistry: Exclusive glyph -> set assignment with glyph records
- GlyphIndex: (glyph, source, layer) -> glyph entry records
- Fontgarden: A project directory and its transactional persistence
"""

from fontgardener.store.content import ContentStore
from fontgardener.store.index import GlyphIndex
from fontgardener.store.project import (
    Fontgarden,
    ProjectState,
    new_project,
    open_project,
    project_lock,
    validate_set_name,
    validate_source_name,
)
from fontgardener.store.sets import SetRegistry

__all__ = [
    "ContentStore",
    "Fontgarden",
    "GlyphIndex",
    "ProjectState",
    "SetRegistry",
    "new_project",
    "open_project",
    "project_lock",
    "validate_set_name",
    "validate_source_name",
]
