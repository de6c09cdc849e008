"""Source reader for loading UFO font sources.

This module provides ``parse_source`` which loads a UFO with ufoLib2 and
extracts every layer's glyph data plus per-glyph records into a
SourceGlyphSet.
"""

from pathlib import Path

from ufoLib2 import Font

from fontgardener.domain.source import GlyphRecord, SourceGlyphSet, SourceLayer
from fontgardener.exceptions import CodecError
from fontgardener.io.converter import MARK_COLOR_KEY, ufo_glyph_to_domain

POSTSCRIPT_NAMES_KEY = "public.postscriptNames"
OPENTYPE_CATEGORIES_KEY = "public.openTypeCategories"
SKIP_EXPORT_KEY = "public.skipExportGlyphs"


def parse_source(path: Path, source_name: str | None = None) -> SourceGlyphSet:
    """Load a UFO source.

    Args:
        path: Path to the UFO
        source_name: Source name to use; inferred from the UFO's style name
            if None

    Returns:
        The source's glyph data, layers and glyph records

    Raises:
        CodecError: If the UFO cannot be loaded or has no usable source name
    """
    if not path.exists():
        raise CodecError(str(path), "file not found")

    try:
        font = Font.open(path, lazy=False)
    except Exception as e:
        raise CodecError(str(path), str(e)) from e

    if source_name is None:
        source_name = font.info.styleName
        if not source_name:
            raise CodecError(
                str(path), "UFO has no styleName, a source name must be given explicitly"
            )

    glyph_set = SourceGlyphSet(
        name=source_name,
        default_layer_name=font.layers.defaultLayer.name,
    )

    try:
        for ufo_layer in font.layers:
            layer = SourceLayer(ufo_layer.name)
            for glyph in ufo_layer:
                layer.glyphs[glyph.name] = ufo_glyph_to_domain(glyph)
                color = glyph.lib.get(MARK_COLOR_KEY)
                if color:
                    layer.color_marks[glyph.name] = str(color)
            glyph_set.layers[layer.name] = layer
    except (TypeError, ValueError) as e:
        raise CodecError(str(path), f"invalid glyph data: {e}") from e

    glyph_set.records = _extract_records(font, glyph_set.glyph_names())
    return glyph_set


def _extract_records(font: Font, glyph_names: set[str]) -> dict[str, GlyphRecord]:
    """Extract glyph records from the font lib.

    Args:
        font: The ufoLib2 font
        glyph_names: Glyphs to build records for

    Returns:
        Glyph name to record, for every given glyph
    """
    postscript_names = font.lib.get(POSTSCRIPT_NAMES_KEY, {})
    categories = font.lib.get(OPENTYPE_CATEGORIES_KEY, {})
    skip_export = set(font.lib.get(SKIP_EXPORT_KEY, []))

    return {
        name: GlyphRecord(
            postscript_name=postscript_names.get(name),
            opentype_category=categories.get(name),
            export=name not in skip_export,
        )
        for name in sorted(glyph_names)
    }
