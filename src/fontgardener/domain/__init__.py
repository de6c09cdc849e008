"""Domain models for fontgardener.

This module contains the value types the store and the engines exchange.
All glyph data types are frozen dataclasses, so equal content compares equal
and can be deduplicated by fingerprint.

Key classes:
- GlyphData: The deduplicable glyph payload (outlines, metrics, anchors...)
- GlyphEntry: (glyph, source, layer) -> fingerprint indirection record
- GlyphRecord: Per-glyph metadata kept in the owning set
- SourceGlyphSet: One font source as read or written by the codec
"""

from fontgardener.domain.canonical import canon, fingerprint, from_canon
from fontgardener.domain.glyph import (
    IDENTITY,
    Anchor,
    Component,
    Contour,
    GlyphData,
    Guideline,
    Image,
    Point,
    PointType,
    normalize_number,
)
from fontgardener.domain.source import (
    DEFAULT_LAYER,
    GlyphEntry,
    GlyphRecord,
    SourceGlyphSet,
    SourceLayer,
)

__all__: list[str] = [
    "DEFAULT_LAYER",
    "IDENTITY",
    # Glyph data
    "Anchor",
    "Component",
    "Contour",
    "GlyphData",
    "Guideline",
    "Image",
    "Point",
    "PointType",
    # Records
    "GlyphEntry",
    "GlyphRecord",
    "SourceGlyphSet",
    "SourceLayer",
    # Canonical form
    "canon",
    "fingerprint",
    "from_canon",
    "normalize_number",
]
