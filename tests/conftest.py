"""Shared fixtures: UFO sources built on the fly with ufoLib2."""

from pathlib import Path

import pytest
from ufoLib2 import Font

from fontgardener.domain import (
    Component,
    Contour,
    GlyphData,
    Point,
    PointType,
    SourceGlyphSet,
    SourceLayer,
)


def box_glyph(width: int = 500, size: int = 400, unicodes: tuple[int, ...] = ()) -> GlyphData:
    """Glyph data with a single closed square contour."""
    points = (
        Point(0, 0, PointType.LINE),
        Point(size, 0, PointType.LINE),
        Point(size, size, PointType.LINE),
        Point(0, size, PointType.LINE),
    )
    return GlyphData(width=width, unicodes=unicodes, contours=(Contour(points),))


def composite_glyph(*base_glyphs: str, width: int = 500) -> GlyphData:
    """Glyph data made only of components."""
    return GlyphData(
        width=width,
        components=tuple(Component(base) for base in base_glyphs),
    )


def source(
    name: str, glyphs: dict[str, GlyphData], **layers: dict[str, GlyphData]
) -> SourceGlyphSet:
    """Build an in-memory source with a default layer and optional extra layers."""
    glyph_set = SourceGlyphSet(name=name)
    glyph_set.default_layer.glyphs.update(glyphs)
    for layer_name, layer_glyphs in layers.items():
        glyph_set.layers[layer_name] = SourceLayer(layer_name, dict(layer_glyphs))
    return glyph_set


def _draw(glyph, spec: dict) -> None:
    glyph.width = spec.get("width", 500)
    glyph.unicodes = list(spec.get("unicodes", []))
    size = spec.get("size")
    if size is not None:
        pen = glyph.getPointPen()
        pen.beginPath()
        for x, y in ((0, 0), (size, 0), (size, size), (0, size)):
            pen.addPoint((x, y), segmentType="line")
        pen.endPath()
    for base in spec.get("components", []):
        glyph.getPointPen().addComponent(base, (1, 0, 0, 1, 0, 0))
    if "mark" in spec:
        glyph.lib["public.markColor"] = spec["mark"]


@pytest.fixture
def make_ufo(tmp_path: Path):
    """Factory writing a UFO into ``tmp_path``.

    Glyphs are given as name -> spec dicts with optional keys ``width``,
    ``size`` (square contour), ``components``, ``unicodes`` and ``mark``.
    """

    def factory(
        file_name: str,
        style_name: str | None = "Regular",
        glyphs: dict[str, dict] | None = None,
        layers: dict[str, dict[str, dict]] | None = None,
        lib: dict | None = None,
    ) -> Path:
        font = Font()
        if style_name is not None:
            font.info.styleName = style_name
        for name, spec in (glyphs or {}).items():
            _draw(font.newGlyph(name), spec)
        for layer_name, layer_glyphs in (layers or {}).items():
            layer = font.newLayer(layer_name)
            for name, spec in layer_glyphs.items():
                _draw(layer.newGlyph(name), spec)
        if lib:
            font.lib.update(lib)
        path = tmp_path / file_name
        font.save(path)
        return path

    return factory
