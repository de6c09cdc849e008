"""Fontgardener - Keep a font family's glyphs in a deduplicated, set-partitioned store.

A fontgarden holds the glyphs of several font sources (masters). Glyph data
that is identical across sources is stored once, and every glyph belongs to
exactly one set, so separate scripts can be worked on without touching each
other's files.

Example:
    $ fontgardener new MyFamily.fontgarden
    $ fontgardener import MyFamily.fontgarden latin.txt Regular.ufo Bold.ufo --set-name Latin
    $ fontgardener export MyFamily.fontgarden --set-name Latin -o build
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
