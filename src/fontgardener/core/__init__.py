"""Core engines for fontgardener.

Key components:
- GlyphImporter: Imports named glyphs from sources into a set
- GlyphExporter: Writes a selection back out as one UFO per source
- follow_components: Component closure of a glyph selection
"""

from fontgardener.core.closure import follow_components
from fontgardener.core.exporter import ExportReport, GlyphExporter, export_glyphs
from fontgardener.core.importer import GlyphImporter, ImportReport, import_glyphs

__all__ = [
    "ExportReport",
    "GlyphExporter",
    "GlyphImporter",
    "ImportReport",
    "export_glyphs",
    "follow_components",
    "import_glyphs",
]
