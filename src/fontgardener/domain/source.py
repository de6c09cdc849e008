"""Source-level containers exchanged with the source codec.

A SourceGlyphSet is what one font source (master) contributes to, or gets
back from, a Fontgarden: glyph data per layer plus the per-glyph metadata
that lives outside the glyph outlines.
"""

from dataclasses import dataclass, field

from fontgardener.domain.glyph import GlyphData, blank_to_none

DEFAULT_LAYER = ""
"""LayerName under which a source's default layer is stored."""

UFO_DEFAULT_LAYER_NAME = "public.default"


@dataclass(frozen=True, slots=True)
class GlyphRecord:
    """Per-glyph metadata shared by all sources.

    Attributes:
        postscript_name: Production name, if different from the glyph name
        opentype_category: OpenType category (base, mark, ligature, component)
        export: False if the glyph is excluded from compiled fonts
    """

    postscript_name: str | None = None
    opentype_category: str | None = None
    export: bool = True

    def __post_init__(self) -> None:
        blank_to_none(self, "postscript_name", "opentype_category")


@dataclass(frozen=True, slots=True)
class GlyphEntry:
    """Indirection from a (glyph, source, layer) triple to a stored payload.

    Attributes:
        fingerprint: Key of the GlyphData payload in the content store
        color_mark: UFO mark color, kept outside the payload
    """

    fingerprint: str
    color_mark: str | None = None

    def __post_init__(self) -> None:
        blank_to_none(self, "color_mark")


@dataclass
class SourceLayer:
    """Glyphs of one layer in a source.

    Attributes:
        name: Layer name as found in the source
        glyphs: Glyph name to glyph data
        color_marks: Glyph name to mark color string
    """

    name: str
    glyphs: dict[str, GlyphData] = field(default_factory=dict)
    color_marks: dict[str, str] = field(default_factory=dict)

    def __contains__(self, glyph_name: object) -> bool:
        return glyph_name in self.glyphs


@dataclass
class SourceGlyphSet:
    """Everything the core reads from or writes to one font source.

    Attributes:
        name: Source name (e.g. "Regular"); None if the source declares none
        default_layer_name: Name of the layer holding the main outlines
        layers: Layer name to layer, in source layer order
        records: Glyph name to glyph record
    """

    name: str | None = None
    default_layer_name: str = UFO_DEFAULT_LAYER_NAME
    layers: dict[str, SourceLayer] = field(default_factory=dict)
    records: dict[str, GlyphRecord] = field(default_factory=dict)

    @property
    def default_layer(self) -> SourceLayer:
        """Get the default layer, creating it if missing."""
        layer = self.layers.get(self.default_layer_name)
        if layer is None:
            layer = SourceLayer(self.default_layer_name)
            self.layers[self.default_layer_name] = layer
        return layer

    def glyph_names(self) -> set[str]:
        """Names of glyphs defined in any layer of the source."""
        names: set[str] = set()
        for layer in self.layers.values():
            names.update(layer.glyphs)
        return names

    def has_glyph(self, glyph_name: str) -> bool:
        return any(glyph_name in layer for layer in self.layers.values())

    def iter_glyph_layers(self, glyph_name: str):
        """Yield (layer_name, layer) for every layer defining the glyph.

        The default layer is reported under ``DEFAULT_LAYER``.
        """
        for layer_name, layer in self.layers.items():
            if glyph_name in layer:
                if layer_name == self.default_layer_name:
                    yield DEFAULT_LAYER, layer
                else:
                    yield layer_name, layer
