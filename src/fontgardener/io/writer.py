"""Source writer for saving UFO font sources.

This module provides ``write_source`` which turns a SourceGlyphSet back into
a UFO. The UFO is first saved next to its destination and then moved into
place, so an existing UFO is only replaced by a complete one.
"""

import os
import shutil
import tempfile
from pathlib import Path

from ufoLib2 import Font

from fontgardener.domain.source import UFO_DEFAULT_LAYER_NAME, SourceGlyphSet
from fontgardener.exceptions import CodecError
from fontgardener.io.converter import MARK_COLOR_KEY, domain_glyph_to_ufo
from fontgardener.io.reader import (
    OPENTYPE_CATEGORIES_KEY,
    POSTSCRIPT_NAMES_KEY,
    SKIP_EXPORT_KEY,
)

GLYPH_ORDER_KEY = "public.glyphOrder"


def build_font(glyph_set: SourceGlyphSet) -> Font:
    """Build a ufoLib2 font from a source glyph set.

    The default layer comes first, other layers follow in the glyph set's
    order. Glyphs are added in sorted name order.

    Args:
        glyph_set: Source glyph set to convert

    Returns:
        New ufoLib2 Font
    """
    font = Font()
    font.info.styleName = glyph_set.name

    default_name = glyph_set.default_layer_name
    if default_name != UFO_DEFAULT_LAYER_NAME:
        font.layers.renameLayer(UFO_DEFAULT_LAYER_NAME, default_name)

    for layer_name, layer in glyph_set.layers.items():
        if layer_name == default_name:
            ufo_layer = font.layers.defaultLayer
        else:
            ufo_layer = font.newLayer(layer_name)
        for glyph_name in sorted(layer.glyphs):
            glyph = ufo_layer.newGlyph(glyph_name)
            domain_glyph_to_ufo(layer.glyphs[glyph_name], glyph)
            color = layer.color_marks.get(glyph_name)
            if color is not None:
                glyph.lib[MARK_COLOR_KEY] = color

    default_glyphs = sorted(font.layers.defaultLayer.keys())
    if default_glyphs:
        font.lib[GLYPH_ORDER_KEY] = default_glyphs

    postscript_names = {}
    categories = {}
    skip_export = []
    for glyph_name, record in sorted(glyph_set.records.items()):
        if record.postscript_name is not None:
            postscript_names[glyph_name] = record.postscript_name
        if record.opentype_category is not None:
            categories[glyph_name] = record.opentype_category
        if not record.export:
            skip_export.append(glyph_name)
    if postscript_names:
        font.lib[POSTSCRIPT_NAMES_KEY] = postscript_names
    if categories:
        font.lib[OPENTYPE_CATEGORIES_KEY] = categories
    if skip_export:
        font.lib[SKIP_EXPORT_KEY] = skip_export

    return font


def write_source(path: Path, glyph_set: SourceGlyphSet, overwrite: bool = True) -> None:
    """Write a source glyph set as a UFO.

    Args:
        path: Destination UFO path
        glyph_set: Source glyph set to write
        overwrite: Replace an existing UFO at ``path``

    Raises:
        CodecError: If the UFO cannot be built or written, or exists and
            ``overwrite`` is False
    """
    if path.exists() and not overwrite:
        raise CodecError(str(path), "destination exists")

    try:
        font = build_font(glyph_set)
    except (KeyError, TypeError, ValueError) as e:
        raise CodecError(str(path), f"invalid glyph data: {e}") from e

    path.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f".{path.name}.", dir=path.parent))
    try:
        staged = staging / path.name
        font.save(staged)
        if path.exists():
            previous = staging / "previous"
            os.replace(path, previous)
            try:
                os.replace(staged, path)
            except OSError:
                os.replace(previous, path)
                raise
        else:
            os.replace(staged, path)
    except Exception as e:
        raise CodecError(str(path), str(e)) from e
    finally:
        shutil.rmtree(staging, ignore_errors=True)
